"""Beginner-friendly overview for this module.

WHAT: The relay's search endpoint, ``GET /api/search?query=<text>``.
WHEN: Called by the search UI every time the user submits a query.
HOW: Validate the query, hand it to the places service, wrap the results.

File: placefinder/routers/search.py
"""


from __future__ import annotations

import logging

import httpx
from fastapi import APIRouter, Depends, Request

from ..core.errors import InvalidQueryError, RelayError
from ..deps import get_places_http_client
from ..schemas.place import ErrorResponse, SearchResponse
from ..services.places import search_places

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api",
    tags=["search"],
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)


def _single_query(request: Request) -> str:
    # Repeated ``query`` parameters arrive as a list, which is not a usable query.
    values = request.query_params.getlist("query")
    if len(values) != 1 or not values[0].strip():
        raise InvalidQueryError()
    return values[0]


@router.get("/search", response_model=SearchResponse)
async def search(
    request: Request,
    client: httpx.AsyncClient = Depends(get_places_http_client),
) -> SearchResponse:
    query = _single_query(request)
    try:
        results = await search_places(query, client=client)
    except RelayError:
        raise
    except Exception as exc:
        logger.exception("Error searching places")
        raise RelayError() from exc
    return SearchResponse(results=results)
