"""Human-friendly configuration loader.

The ``AppSettings`` class centralises every environment variable the relay and
the client rely on.

*What:* Which settings exist and what do they control?
*When:* They are read once, the first time ``get_settings`` is called.
*How:* pydantic-settings reads the process environment plus optional
``.env``/``.env.local`` files and coerces every value to its declared type.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated, Any, Iterable

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class AppSettings(BaseSettings):
    """Environment-driven application configuration."""

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    APP_NAME: str = "PlaceFinder"
    LOG_LEVEL: str = "INFO"

    # Relay binding
    HOST: str = "0.0.0.0"
    PORT: int = 3001
    # Empty means every origin may call the relay.
    ALLOWED_ORIGINS: Annotated[list[str], NoDecode] = Field(default_factory=list)

    # Google Places (legacy web service endpoints)
    GOOGLE_MAPS_API_KEY: str = ""
    GOOGLE_PLACES_TEXT_SEARCH_URL: str = "https://maps.googleapis.com/maps/api/place/textsearch/json"
    GOOGLE_PLACES_DETAILS_URL: str = "https://maps.googleapis.com/maps/api/place/details/json"
    PLACES_RESULT_LIMIT: int = Field(default=3, ge=1)
    # None disables the timeout on outbound provider calls.
    PLACES_HTTP_TIMEOUT: float | None = None

    # Client side: where the search UI finds the relay.
    API_BASE_URL: str = "http://localhost:3001"

    @property
    def cors_origins(self) -> list[str]:
        return self.ALLOWED_ORIGINS or ["*"]

    @field_validator("ALLOWED_ORIGINS", mode="before")
    @classmethod
    def parse_allowed_origins(cls, value: Any) -> list[str]:
        if value in (None, "", []):
            return []
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        if isinstance(value, Iterable):
            return [str(item).strip() for item in value if str(item).strip()]
        raise TypeError("ALLOWED_ORIGINS must be a comma separated string or list")


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    return AppSettings()


# Importing ``settings`` anywhere gives access to the configured values without
# rebuilding the object each time.
settings = get_settings()
