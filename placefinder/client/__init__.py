from __future__ import annotations

from .controller import SearchController
from .map_widget import Bounds, MapLoader, MapWidget
from .relay import RelayClient, RelayClientError
from .state import Displayed, Empty, Errored, Idle, Searching, SearchState

__all__ = [
    "Bounds",
    "Displayed",
    "Empty",
    "Errored",
    "Idle",
    "MapLoader",
    "MapWidget",
    "RelayClient",
    "RelayClientError",
    "SearchController",
    "SearchState",
    "Searching",
]
