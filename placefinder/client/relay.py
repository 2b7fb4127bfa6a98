from __future__ import annotations

import logging
from typing import List, Optional

import httpx

from ..schemas.place import SearchResponse, SearchResult

logger = logging.getLogger(__name__)


class RelayClientError(Exception):
    """The relay could not be reached or did not answer with results."""


def _error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return "Search failed"
    message = data.get("error") if isinstance(data, dict) else None
    return message if isinstance(message, str) and message else "Search failed"


class RelayClient:
    """Thin async wrapper around the relay's ``GET /api/search``."""

    def __init__(self, base_url: str, *, client: Optional[httpx.AsyncClient] = None) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=httpx.Timeout(None))
        self._owns_client = client is None

    async def search(self, query: str) -> List[SearchResult]:
        url = f"{self.base_url}/api/search"
        logger.debug("Searching for %r via %s", query, url)
        try:
            response = await self._client.get(url, params={"query": query})
        except httpx.HTTPError as exc:
            logger.error("Relay request failed: %s", exc)
            raise RelayClientError("Could not reach the search service") from exc

        if not response.is_success:
            message = _error_message(response)
            logger.warning("Relay answered %s: %s", response.status_code, message)
            raise RelayClientError(message)

        try:
            payload = SearchResponse.model_validate(response.json())
        except ValueError as exc:
            logger.error("Relay returned an unexpected payload: %s", exc)
            raise RelayClientError("Malformed response from the search service") from exc
        return payload.results

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "RelayClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
