from __future__ import annotations

import logging
import time
from contextvars import ContextVar
from uuid import uuid4

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

request_id_ctx_var: ContextVar[str | None] = ContextVar("request_id", default=None)
# Search text of the request being served, so enrichment logs can be tied to it.
search_query_ctx_var: ContextVar[str | None] = ContextVar("search_query", default=None)
logger = logging.getLogger("placefinder.request")


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Tag every relay request with a correlation id and its search query."""

    def __init__(self, app, header_name: str = "X-Request-ID") -> None:  # type: ignore[override]
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get(self.header_name) or str(uuid4())
        query = request.query_params.get("query") if request.url.path.startswith("/api/") else None
        id_token = request_id_ctx_var.set(request_id)
        query_token = search_query_ctx_var.set(query)
        request.state.request_id = request_id
        start = time.perf_counter()
        try:
            response = await call_next(request)
            elapsed_ms = round((time.perf_counter() - start) * 1000, 2)
            response.headers[self.header_name] = request_id
            response.headers.setdefault("X-Response-Time", f"{elapsed_ms:.2f}ms")
            summary = {
                "method": request.method,
                "path": request.url.path,
                "status": response.status_code,
                "duration_ms": elapsed_ms,
            }
            if query is not None:
                summary["query"] = query
            logger.info("relay.request.completed", extra={"extra_data": summary})
        finally:
            search_query_ctx_var.reset(query_token)
            request_id_ctx_var.reset(id_token)
        return response
