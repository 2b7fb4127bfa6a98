from __future__ import annotations

from .http import get_places_http_client

__all__ = ["get_places_http_client"]
