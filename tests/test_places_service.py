"""Tests for the search + postal code enrichment flow of the relay."""

import asyncio

import httpx
import pytest

from conftest import FakePlacesProvider, details_with_postal, place_record
from placefinder.core.config import settings
from placefinder.core.errors import PlacesProviderError, PlacesServiceNotConfigured
from placefinder.schemas.place import AddressComponent
from placefinder.services import places


def _run(provider: FakePlacesProvider, query: str = "coffee", **kwargs):
    async def go():
        async with provider.client() as client:
            return await places.search_places(query, client=client, **kwargs)

    return asyncio.run(go())


def test_extract_postal_code_takes_first_postal_type():
    components = [
        AddressComponent(long_name="Paris", short_name="Paris", types=["locality"]),
        AddressComponent(long_name="1234", short_name="1234", types=["postal_code_suffix"]),
        AddressComponent(long_name="75007", short_name="75007", types=["postal_code"]),
    ]
    assert places.extract_postal_code(components) == "1234"


def test_extract_postal_code_prefix_and_missing():
    prefix = [AddressComponent(long_name="SW1A", short_name="SW1A", types=["postal_code_prefix"])]
    assert places.extract_postal_code(prefix) == "SW1A"
    assert places.extract_postal_code([AddressComponent(long_name="France", types=["country"])]) == ""
    assert places.extract_postal_code([]) == ""


def test_eiffel_tower_scenario():
    provider = FakePlacesProvider(
        search={
            "status": "OK",
            "results": [
                place_record(
                    "ChIJLU7jZClu5kcR4PcOOO6p3I0",
                    "Eiffel Tower",
                    48.8584,
                    2.2945,
                    "Champ de Mars, 5 Av. Anatole France, 75007 Paris, France",
                )
            ],
        },
        details={"ChIJLU7jZClu5kcR4PcOOO6p3I0": details_with_postal("75007")},
    )

    results = _run(provider, "Eiffel Tower")

    assert [result.model_dump() for result in results] == [
        {
            "place_id": "ChIJLU7jZClu5kcR4PcOOO6p3I0",
            "name": "Eiffel Tower",
            "formatted_address": "Champ de Mars, 5 Av. Anatole France, 75007 Paris, France",
            "latitude": 48.8584,
            "longitude": 2.2945,
            "postal_code": "75007",
        }
    ]
    search_request = provider.requests[0]
    assert search_request.url.params["query"] == "Eiffel Tower"
    assert search_request.url.params["key"] == settings.GOOGLE_MAPS_API_KEY
    detail_request = provider.detail_requests[0]
    assert detail_request.url.params["fields"] == "address_component"


def test_results_capped_at_three_in_provider_order(three_places):
    provider = FakePlacesProvider(
        search={"status": "OK", "results": three_places},
        details={record["place_id"]: details_with_postal(f"0000{i}") for i, record in enumerate(three_places)},
    )

    results = _run(provider)

    assert [result.place_id for result in results] == ["p1", "p2", "p3"]
    assert [result.postal_code for result in results] == ["00000", "00001", "00002"]
    assert [(result.latitude, result.longitude) for result in results] == [(1.0, 10.0), (2.0, 20.0), (3.0, 30.0)]
    # Only the kept candidates are enriched.
    assert sorted(r.url.params["place_id"] for r in provider.detail_requests) == ["p1", "p2", "p3"]


def test_fewer_candidates_than_limit(three_places):
    provider = FakePlacesProvider(search={"status": "OK", "results": three_places[:2]})
    results = _run(provider)
    assert [result.place_id for result in results] == ["p1", "p2"]


def test_duplicate_candidates_are_skipped(three_places):
    records = [three_places[0], three_places[0], three_places[1], three_places[2]]
    provider = FakePlacesProvider(search={"status": "OK", "results": records})
    results = _run(provider)
    assert [result.place_id for result in results] == ["p1", "p2", "p3"]


def test_one_failed_detail_lookup_leaves_only_that_postal_code_empty(three_places, caplog):
    provider = FakePlacesProvider(
        search={"status": "OK", "results": three_places},
        details={
            "p1": details_with_postal("11111"),
            "p2": httpx.ConnectError("connection reset"),
            "p3": details_with_postal("33333"),
        },
    )

    with caplog.at_level("WARNING", logger="placefinder.services.places"):
        results = _run(provider)

    assert [result.place_id for result in results] == ["p1", "p2", "p3"]
    assert [result.postal_code for result in results] == ["11111", "", "33333"]
    failures = [record.getMessage() for record in caplog.records if record.levelname == "WARNING"]
    assert len(failures) == 1
    assert failures[0].startswith("Postal code lookup failed for p2")


@pytest.mark.parametrize(
    "outcome",
    [
        httpx.Response(500, text="upstream exploded"),
        httpx.Response(200, text="not json"),
        {"status": "INVALID_REQUEST", "error_message": "bad place id"},
        {"status": "OK", "result": {}},
    ],
)
def test_detail_failures_are_absorbed(three_places, outcome, caplog):
    provider = FakePlacesProvider(
        search={"status": "OK", "results": three_places[:2]},
        details={"p1": outcome, "p2": details_with_postal("22222")},
    )
    with caplog.at_level("WARNING", logger="placefinder.services.places"):
        results = _run(provider)
    assert [result.postal_code for result in results] == ["", "22222"]
    if outcome != {"status": "OK", "result": {}}:
        assert any("p1" in record.getMessage() for record in caplog.records)


def test_detail_lookups_run_concurrently(three_places):
    async def go():
        started = 0
        all_started = asyncio.Event()

        async def handler(request: httpx.Request) -> httpx.Response:
            nonlocal started
            if request.url.path.endswith("/textsearch/json"):
                return httpx.Response(200, json={"status": "OK", "results": three_places})
            started += 1
            if started == 3:
                all_started.set()
            # Sequential lookups would never see all three in flight.
            await asyncio.wait_for(all_started.wait(), timeout=2)
            return httpx.Response(200, json=details_with_postal("99999"))

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await places.search_places("coffee", client=client)

    results = asyncio.run(go())
    assert [result.postal_code for result in results] == ["99999"] * 3


def test_zero_results_returns_empty_list():
    provider = FakePlacesProvider(search={"status": "ZERO_RESULTS", "results": []})
    assert _run(provider) == []
    assert provider.detail_requests == []


def test_provider_status_error_is_raised():
    provider = FakePlacesProvider(
        search={"status": "REQUEST_DENIED", "error_message": "The provided API key is invalid.", "results": []}
    )

    with pytest.raises(PlacesProviderError) as excinfo:
        _run(provider)

    assert excinfo.value.provider_status == "REQUEST_DENIED"
    assert "REQUEST_DENIED" in excinfo.value.message
    assert excinfo.value.details == {
        "status": "REQUEST_DENIED",
        "error_message": "The provided API key is invalid.",
    }
    assert provider.detail_requests == []


def test_provider_http_error_is_raised():
    provider = FakePlacesProvider(search=httpx.Response(503, text="unavailable"))
    with pytest.raises(PlacesProviderError) as excinfo:
        _run(provider)
    assert excinfo.value.provider_status == "HTTP 503"


def test_missing_credential_fails_before_any_call(monkeypatch):
    monkeypatch.setattr(settings, "GOOGLE_MAPS_API_KEY", "")
    provider = FakePlacesProvider(search={"status": "OK", "results": []})
    with pytest.raises(PlacesServiceNotConfigured):
        _run(provider)
    assert provider.requests == []
