"""Application factory and top-level wiring for the PlaceFinder relay.

This module brings together configuration, middleware, routers and error
handling so a reader gets a bird's-eye view of what the relay is made of.
"""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.config import settings
from .core.errors import (
    RelayError,
    http_exception_handler,
    relay_error_handler,
    validation_exception_handler,
)
from .middlewares import RequestIdMiddleware
from .routers import search as search_router

# ---------- App init ----------
app = FastAPI(title=settings.APP_NAME)

# ---------- Middleware ----------
# The relay is called straight from the browser, so cross-origin requests must
# be allowed for the configured origins (every origin when none are set).
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET"],
    allow_headers=["*"],
)
app.add_middleware(RequestIdMiddleware)

# ---------- Routers ----------
app.include_router(search_router.router)

# ---------- Exception handling ----------
app.add_exception_handler(RelayError, relay_error_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)


@app.get("/health")
async def health() -> dict[str, bool]:
    return {"ok": True}


__all__ = ["app"]
