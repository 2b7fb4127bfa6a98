"""Search UI states.

Exactly one of these describes the UI at any moment, so combinations such as
"loading while showing an error" cannot be represented.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple, Union

from ..schemas.place import SearchResult


@dataclass(frozen=True)
class Idle:
    """No query has been issued yet."""


@dataclass(frozen=True)
class Searching:
    query: str


@dataclass(frozen=True)
class Displayed:
    query: str
    results: Tuple[SearchResult, ...]
    selected_id: Optional[str] = None

    @property
    def selected(self) -> Optional[SearchResult]:
        return self.find(self.selected_id) if self.selected_id else None

    def find(self, place_id: str) -> Optional[SearchResult]:
        for result in self.results:
            if result.place_id == place_id:
                return result
        return None


@dataclass(frozen=True)
class Empty:
    query: str
    message: str = "No results found"


@dataclass(frozen=True)
class Errored:
    query: str
    message: str


SearchState = Union[Idle, Searching, Displayed, Empty, Errored]
