from __future__ import annotations

from typing import AsyncIterator

import httpx

from ..core.config import settings


async def get_places_http_client() -> AsyncIterator[httpx.AsyncClient]:
    """Yield one provider HTTP client per relay request."""

    timeout = httpx.Timeout(settings.PLACES_HTTP_TIMEOUT)
    async with httpx.AsyncClient(timeout=timeout) as client:
        yield client
