"""Search and map controller for the PlaceFinder UI.

The controller owns the query text, the current :mod:`state <placefinder.client.state>`,
the map widget and the markers placed on it. Views subscribe to state changes
and forward user actions (typing, submitting, clicking a result) back here.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Protocol, Sequence

from ..schemas.place import LatLng, SearchResult
from .map_widget import DEFAULT_CENTER, DEFAULT_ZOOM, SELECTED_ZOOM, Bounds, MapLoader, MapWidget
from .relay import RelayClientError
from .state import Displayed, Empty, Errored, Idle, Searching, SearchState

logger = logging.getLogger(__name__)

Listener = Callable[[SearchState], None]


class SearchBackend(Protocol):
    async def search(self, query: str) -> List[SearchResult]: ...


def _position(result: SearchResult) -> LatLng:
    return LatLng(lat=result.latitude, lng=result.longitude)


class SearchController:
    def __init__(
        self,
        backend: SearchBackend,
        map_loader: Optional[MapLoader] = None,
        *,
        default_center: LatLng = DEFAULT_CENTER,
        default_zoom: int = DEFAULT_ZOOM,
        selected_zoom: int = SELECTED_ZOOM,
    ) -> None:
        self.backend = backend
        self.map_loader = map_loader
        self.default_center = default_center
        self.default_zoom = default_zoom
        self.selected_zoom = selected_zoom

        self.query = ""
        self.map: Optional[MapWidget] = None
        self._state: SearchState = Idle()
        self._markers: Dict[str, Any] = {}
        self._listeners: List[Listener] = []
        self._mounted = False
        # Bumped on every submit; a response is only applied while its
        # generation is still the latest one.
        self._generation = 0

    @property
    def state(self) -> SearchState:
        return self._state

    @property
    def markers(self) -> Dict[str, Any]:
        return dict(self._markers)

    @property
    def selected(self) -> Optional[SearchResult]:
        return self._state.selected if isinstance(self._state, Displayed) else None

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set_state(self, state: SearchState) -> None:
        self._state = state
        for listener in list(self._listeners):
            listener(state)

    async def mount(self) -> None:
        """Create the map once; later calls do nothing."""

        if self._mounted:
            return
        self._mounted = True
        if self.map_loader is None:
            logger.info("No map available; results will be listed only")
            return
        try:
            self.map = await self.map_loader(self.default_center, self.default_zoom)
        except Exception:
            logger.exception("Error loading map")
            self.map = None

    def set_query(self, text: str) -> None:
        self.query = text

    async def handle_key(self, key: str) -> None:
        if key == "Enter":
            await self.submit()

    async def submit(self, query: Optional[str] = None) -> None:
        if query is not None:
            self.query = query
        text = self.query.strip()

        self._generation += 1
        generation = self._generation
        self._clear_markers()

        if not text:
            self._set_state(Errored(query=self.query, message="Please enter a search query"))
            return

        self._set_state(Searching(query=text))
        logger.info("Searching for %r", text)
        try:
            results = await self.backend.search(text)
        except RelayClientError as exc:
            outcome: SearchState = Errored(query=text, message=str(exc))
        except Exception as exc:
            logger.exception("Search error")
            outcome = Errored(query=text, message=str(exc) or "An error occurred")
        else:
            if results:
                outcome = Displayed(query=text, results=tuple(results))
            else:
                outcome = Empty(query=text)

        if generation != self._generation:
            logger.info("Dropping stale response for %r", text)
            return

        # Markers are in place before listeners see the new results.
        if isinstance(outcome, Displayed):
            self._place_markers(outcome.results)
        self._set_state(outcome)
        logger.info("Search for %r finished as %s", text, type(outcome).__name__)

    def select(self, place_id: str) -> None:
        state = self._state
        result = state.find(place_id) if isinstance(state, Displayed) else None
        if result is None:
            logger.warning("Ignoring selection of %r; it is not in the current results", place_id)
            return

        if state.selected_id != place_id:
            self._set_state(Displayed(query=state.query, results=state.results, selected_id=place_id))
        if self.map is not None:
            self.map.set_center(_position(result))
            self.map.set_zoom(self.selected_zoom)

    def _clear_markers(self) -> None:
        if self.map is not None:
            for marker in self._markers.values():
                self.map.remove_marker(marker)
        self._markers = {}

    def _place_markers(self, results: Sequence[SearchResult]) -> None:
        self._clear_markers()
        if self.map is None:
            return
        for rank, result in enumerate(results, start=1):
            self._markers[result.place_id] = self.map.place_marker(
                _position(result),
                label=str(rank),
                title=result.name,
                on_click=lambda place_id=result.place_id: self.select(place_id),
            )
        self.map.fit_bounds(Bounds.around(_position(result) for result in results))
