"""Beginner-friendly overview for this module.

WHAT: Pydantic models for provider place records and relay search results.
WHEN: Used by the relay to parse Google Places payloads and build responses,
and by the client to validate what the relay sends back.
HOW: Provider models ignore unknown keys; client-facing models mirror the JSON
shape returned by ``GET /api/search``.

File: placefinder/schemas/place.py
"""


from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator


class LatLng(BaseModel):
    """Latitude/longitude pair as Google reports it in ``geometry.location``."""

    lat: float = Field(..., description="Latitude in decimal degrees")
    lng: float = Field(..., description="Longitude in decimal degrees")


class Geometry(BaseModel):
    model_config = ConfigDict(extra="ignore")

    location: LatLng


class AddressComponent(BaseModel):
    """One typed piece of a place's address (street, locality, postal code...)."""

    model_config = ConfigDict(extra="ignore")

    long_name: str = ""
    short_name: str = ""
    types: List[str] = Field(default_factory=list)


class CandidatePlace(BaseModel):
    """A text-search hit before normalisation."""

    model_config = ConfigDict(extra="ignore")

    place_id: str
    name: str = ""
    formatted_address: str = ""
    geometry: Geometry
    address_components: List[AddressComponent] = Field(default_factory=list)


class SearchResult(BaseModel):
    """Normalised place returned to the search UI."""

    place_id: str
    name: str
    formatted_address: str
    latitude: float
    longitude: float
    postal_code: str = Field("", description="Empty when the detail lookup had none")

    @classmethod
    def from_candidate(cls, candidate: CandidatePlace, postal_code: str = "") -> "SearchResult":
        location = candidate.geometry.location
        return cls(
            place_id=candidate.place_id,
            name=candidate.name,
            formatted_address=candidate.formatted_address,
            latitude=location.lat,
            longitude=location.lng,
            postal_code=postal_code,
        )


class SearchResponse(BaseModel):
    results: List[SearchResult] = Field(default_factory=list)

    @field_validator("results")
    def _unique_place_ids(cls, value: List[SearchResult]) -> List[SearchResult]:
        seen: set[str] = set()
        for result in value:
            if result.place_id in seen:
                raise ValueError(f"duplicate place_id {result.place_id!r}")
            seen.add(result.place_id)
        return value


class ErrorResponse(BaseModel):
    error: str
