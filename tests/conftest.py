import os
import sys
from pathlib import Path
from typing import Any, Dict, List

import httpx
import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("GOOGLE_MAPS_API_KEY", "test-key")

TEXT_SEARCH_PATH = "/maps/api/place/textsearch/json"
DETAILS_PATH = "/maps/api/place/details/json"


def place_record(place_id: str, name: str, lat: float, lng: float, address: str = "") -> Dict[str, Any]:
    return {
        "place_id": place_id,
        "name": name,
        "formatted_address": address or f"{name} address",
        "geometry": {"location": {"lat": lat, "lng": lng}, "viewport": {}},
        "types": ["point_of_interest"],
    }


def details_with_postal(code: str, types: List[str] | None = None) -> Dict[str, Any]:
    return {
        "status": "OK",
        "result": {
            "address_components": [
                {"long_name": "Paris", "short_name": "Paris", "types": ["locality", "political"]},
                {"long_name": code, "short_name": code, "types": types or ["postal_code"]},
            ]
        },
    }


class FakePlacesProvider:
    """Stands in for the Google Places web service behind ``httpx.MockTransport``.

    ``details`` maps a place id to a JSON payload, an ``httpx.Response`` or an
    exception to raise from the transport.
    """

    def __init__(self, search: Dict[str, Any], details: Dict[str, Any] | None = None) -> None:
        self.search = search
        self.details = details or {}
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path == TEXT_SEARCH_PATH:
            if isinstance(self.search, Exception):
                raise self.search
            if isinstance(self.search, httpx.Response):
                return self.search
            return httpx.Response(200, json=self.search)
        assert request.url.path == DETAILS_PATH
        outcome = self.details.get(request.url.params["place_id"], {"status": "NOT_FOUND"})
        if isinstance(outcome, Exception):
            raise outcome
        if isinstance(outcome, httpx.Response):
            return outcome
        return httpx.Response(200, json=outcome)

    @property
    def detail_requests(self) -> List[httpx.Request]:
        return [request for request in self.requests if request.url.path == DETAILS_PATH]

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


@pytest.fixture()
def three_places() -> List[Dict[str, Any]]:
    return [
        place_record("p1", "First", 1.0, 10.0),
        place_record("p2", "Second", 2.0, 20.0),
        place_record("p3", "Third", 3.0, 30.0),
        place_record("p4", "Fourth", 4.0, 40.0),
        place_record("p5", "Fifth", 5.0, 50.0),
    ]
