from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterable, Protocol

from ..schemas.place import LatLng

DEFAULT_CENTER = LatLng(lat=40.7128, lng=-74.0060)
DEFAULT_ZOOM = 10
SELECTED_ZOOM = 15


@dataclass(frozen=True)
class Bounds:
    south: float
    west: float
    north: float
    east: float

    @classmethod
    def around(cls, points: Iterable[LatLng]) -> "Bounds":
        points = list(points)
        if not points:
            raise ValueError("Bounds need at least one point")
        lats = [point.lat for point in points]
        lngs = [point.lng for point in points]
        return cls(south=min(lats), west=min(lngs), north=max(lats), east=max(lngs))


class MapWidget(Protocol):
    """What the search controller needs from an interactive map."""

    def place_marker(
        self,
        position: LatLng,
        *,
        label: str,
        title: str,
        on_click: Callable[[], None],
    ) -> Any:
        """Show a marker and return a handle accepted by ``remove_marker``."""

    def remove_marker(self, marker: Any) -> None: ...

    def fit_bounds(self, bounds: Bounds) -> None: ...

    def set_center(self, position: LatLng) -> None: ...

    def set_zoom(self, zoom: int) -> None: ...


# Builds a map bound to its display surface, centred on ``center`` at ``zoom``.
MapLoader = Callable[[LatLng, int], Awaitable[MapWidget]]
