from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence

import httpx

from ..core.config import settings
from ..core.errors import PlacesProviderError, PlacesServiceNotConfigured
from ..schemas.place import AddressComponent, CandidatePlace, SearchResult

logger = logging.getLogger(__name__)

POSTAL_CODE_TYPES = frozenset({"postal_code", "postal_code_prefix", "postal_code_suffix"})


def _ensure_configured() -> None:
    if not settings.GOOGLE_MAPS_API_KEY:
        raise PlacesServiceNotConfigured()


def extract_postal_code(components: Iterable[AddressComponent]) -> str:
    """Return the long name of the first postal-type component, or ""."""

    for component in components:
        if POSTAL_CODE_TYPES.intersection(component.types):
            return component.long_name
    return ""


def _unique_candidates(records: Sequence[Dict[str, Any]], limit: int) -> List[CandidatePlace]:
    candidates: List[CandidatePlace] = []
    seen: set[str] = set()
    for record in records:
        candidate = CandidatePlace.model_validate(record)
        if candidate.place_id in seen:
            continue
        seen.add(candidate.place_id)
        candidates.append(candidate)
        if len(candidates) >= limit:
            break
    return candidates


async def text_search(client: httpx.AsyncClient, query: str) -> List[Dict[str, Any]]:
    """Run the provider's text search and return its ranked place records."""

    params = {"query": query, "key": settings.GOOGLE_MAPS_API_KEY}
    response = await client.get(settings.GOOGLE_PLACES_TEXT_SEARCH_URL, params=params)
    if response.status_code >= 400:
        logger.error("Google text search HTTP error %s", response.status_code)
        raise PlacesProviderError(f"HTTP {response.status_code}")

    data = response.json()
    status = data.get("status")
    if status == "ZERO_RESULTS":
        return []
    if status != "OK":
        logger.warning("Google text search error: %s (%s)", status, data.get("error_message"))
        raise PlacesProviderError(str(status), data.get("error_message"))

    return data.get("results") or []


async def fetch_postal_code(client: httpx.AsyncClient, place_id: str) -> str:
    params = {
        "place_id": place_id,
        "fields": "address_component",
        "key": settings.GOOGLE_MAPS_API_KEY,
    }
    response = await client.get(settings.GOOGLE_PLACES_DETAILS_URL, params=params)
    response.raise_for_status()

    data = response.json()
    status = data.get("status")
    if status != "OK":
        logger.warning(
            "Google place details error for %s: %s (%s)",
            place_id,
            status,
            data.get("error_message"),
        )
        return ""

    result = data.get("result") or {}
    components = [
        AddressComponent.model_validate(item) for item in result.get("address_components") or []
    ]
    return extract_postal_code(components)


async def search_places(
    query: str,
    *,
    client: httpx.AsyncClient,
    limit: Optional[int] = None,
) -> List[SearchResult]:
    """Search for ``query`` and enrich the top hits with their postal codes.

    The detail lookups run concurrently and are joined with a settle-all
    barrier: a lookup that fails leaves its result's ``postal_code`` empty
    and never fails the batch.
    """

    _ensure_configured()
    limit = limit or settings.PLACES_RESULT_LIMIT

    logger.info("Searching places", extra={"extra_data": {"query": query}})
    records = await text_search(client, query)
    candidates = _unique_candidates(records, limit)

    lookups = [fetch_postal_code(client, candidate.place_id) for candidate in candidates]
    outcomes = await asyncio.gather(*lookups, return_exceptions=True)

    results: List[SearchResult] = []
    for candidate, outcome in zip(candidates, outcomes):
        postal_code = ""
        if isinstance(outcome, Exception):
            logger.warning("Postal code lookup failed for %s: %r", candidate.place_id, outcome)
        elif isinstance(outcome, BaseException):
            raise outcome
        else:
            postal_code = outcome
        results.append(SearchResult.from_candidate(candidate, postal_code))

    logger.info(
        "Places search completed",
        extra={"extra_data": {"query": query, "candidates": len(records), "returned": len(results)}},
    )
    return results
