from __future__ import annotations

import logging
from typing import Any

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class RelayError(Exception):
    """Failure that is reported to the relay's caller as an error envelope."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Failed to search places"

    def __init__(self, message: str | None = None, *, details: Any | None = None) -> None:
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class InvalidQueryError(RelayError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Query parameter is required"


class PlacesServiceNotConfigured(RelayError):
    """Raised when the provider credential is missing."""

    default_message = "Places search is not configured"


class PlacesProviderError(RelayError):
    """The provider answered the text search with a non-success status."""

    def __init__(self, provider_status: str, error_message: str | None = None) -> None:
        self.provider_status = provider_status
        details: dict[str, Any] = {"status": provider_status}
        if error_message:
            details["error_message"] = error_message
        super().__init__(f"Places search failed: {provider_status}", details=details)


class ErrorEnvelope(JSONResponse):
    def __init__(
        self,
        *,
        status_code: int,
        message: str,
        details: Any | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        payload: dict[str, Any] = {"error": message}
        if details is not None:
            payload["details"] = details
        super().__init__(payload, status_code=status_code, headers=headers)


async def relay_error_handler(request: Request, exc: RelayError):
    log = logger.warning if exc.status_code < 500 else logger.error
    log(
        "relay.error",
        extra={"extra_data": {"path": request.url.path, "status": exc.status_code, "error": exc.message}},
    )
    return ErrorEnvelope(status_code=exc.status_code, message=exc.message, details=exc.details)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    detail = exc.detail
    message = detail if isinstance(detail, str) else "Error"
    details = detail if isinstance(detail, dict) else None
    return ErrorEnvelope(status_code=exc.status_code, message=message, details=details, headers=exc.headers)



async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return ErrorEnvelope(
        status_code=422,
        message="Validation failed",
        details={"errors": jsonable_encoder(exc.errors())},
    )
