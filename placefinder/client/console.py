#!/usr/bin/env python3
"""
placefinder-console

Purpose:
  Search for places from a terminal through a running PlaceFinder relay.
  - Type an address or place name and press Enter to search.
  - Results are listed with their rank, address, postal code and coordinates.
  - Map activity (markers, viewport changes) is printed as it happens.

Commands:
  :select N   select result N (recentres and zooms the map on it)
  :quit       exit

Relay precedence:
  1) --base-url <url> (CLI)
  2) env API_BASE_URL
  3) http://localhost:3001

Examples:
  placefinder-console
  placefinder-console --base-url http://localhost:3001 "Eiffel Tower"
  placefinder-console --no-map
"""

from __future__ import annotations

import argparse
import asyncio
import itertools
import sys
from typing import Callable, Dict, Optional, TextIO

from ..core.config import settings
from ..core.logging import configure_logging
from ..schemas.place import LatLng, SearchResult
from .controller import SearchController
from .map_widget import Bounds, MapWidget
from .relay import RelayClient
from .state import Displayed, Empty, Errored, Idle, Searching, SearchState


class TextMapWidget:
    """Map widget that narrates what a graphical map would display."""

    def __init__(self, center: LatLng, zoom: int, out: Optional[TextIO] = None) -> None:
        self.center = center
        self.zoom = zoom
        self.out = out
        self.markers: Dict[int, Callable[[], None]] = {}
        self._ids = itertools.count(1)
        self._say(f"map ready at {center.lat:.4f}, {center.lng:.4f} (zoom {zoom})")

    def _say(self, text: str) -> None:
        print(f"  [map] {text}", file=self.out)

    def place_marker(self, position: LatLng, *, label: str, title: str, on_click: Callable[[], None]) -> int:
        marker_id = next(self._ids)
        self.markers[marker_id] = on_click
        self._say(f"marker {label} '{title}' at {position.lat:.6f}, {position.lng:.6f}")
        return marker_id

    def remove_marker(self, marker: int) -> None:
        self.markers.pop(marker, None)

    def fit_bounds(self, bounds: Bounds) -> None:
        self._say(
            f"viewport fitted to ({bounds.south:.4f}, {bounds.west:.4f}) - ({bounds.north:.4f}, {bounds.east:.4f})"
        )

    def set_center(self, position: LatLng) -> None:
        self.center = position
        self._say(f"centred on {position.lat:.6f}, {position.lng:.6f}")

    def set_zoom(self, zoom: int) -> None:
        self.zoom = zoom
        self._say(f"zoom {zoom}")


def format_result(rank: int, result: SearchResult, selected: bool = False) -> str:
    marker = ">" if selected else " "
    lines = [f"{marker} {rank}. {result.name}", f"     {result.formatted_address}"]
    if result.postal_code:
        lines.append(f"     Zip/Postal Code: {result.postal_code}")
    lines.append(f"     {result.latitude:.6f}, {result.longitude:.6f}")
    return "\n".join(lines)


def render_state(state: SearchState, out: Optional[TextIO] = None) -> None:
    if isinstance(state, Idle):
        return
    if isinstance(state, Searching):
        print("Searching...", file=out)
    elif isinstance(state, Empty):
        print(state.message, file=out)
    elif isinstance(state, Errored):
        print(f"Error: {state.message}", file=out)
    elif isinstance(state, Displayed):
        for rank, result in enumerate(state.results, start=1):
            print(format_result(rank, result, result.place_id == state.selected_id), file=out)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Search places through a PlaceFinder relay.")
    parser.add_argument("query", nargs="?", help="Run this search first, then keep prompting")
    parser.add_argument("--base-url", default=settings.API_BASE_URL, help="Relay base URL")
    parser.add_argument(
        "--no-map",
        action="store_true",
        help="Pretend the map cannot be loaded (results are still listed)",
    )
    parser.add_argument("--log-level", default="WARNING", help="Log level for diagnostics on stderr")
    return parser


async def _load_text_map(center: LatLng, zoom: int) -> MapWidget:
    return TextMapWidget(center, zoom)


async def _unavailable_map(center: LatLng, zoom: int) -> MapWidget:
    raise RuntimeError("map display is unavailable")


async def handle_line(controller: SearchController, line: str) -> bool:
    """Apply one line of user input. Returns False when the user quits."""

    line = line.strip()
    if line == ":quit":
        return False
    if line.startswith(":select"):
        state = controller.state
        parts = line.split()
        if not isinstance(state, Displayed) or len(parts) != 2 or not parts[1].isdigit():
            print("Usage: :select N (after a search with results)")
            return True
        rank = int(parts[1])
        if not 1 <= rank <= len(state.results):
            print(f"Pick a result between 1 and {len(state.results)}")
            return True
        controller.select(state.results[rank - 1].place_id)
        return True
    controller.set_query(line)
    await controller.handle_key("Enter")
    return True


def run_console(base_url: str, initial_query: Optional[str] = None, *, with_map: bool = True) -> None:
    """Prompt for searches until :quit or end of input.

    Input is read on the calling thread; every line is handled on one event
    loop kept for the whole session.
    """

    loop = asyncio.new_event_loop()
    relay = RelayClient(base_url)
    try:
        controller = SearchController(relay, _load_text_map if with_map else _unavailable_map)
        controller.subscribe(render_state)
        loop.run_until_complete(controller.mount())

        if initial_query:
            loop.run_until_complete(handle_line(controller, initial_query))
        while True:
            try:
                line = input("search> ")
            except EOFError:
                break
            if not loop.run_until_complete(handle_line(controller, line)):
                break
    finally:
        loop.run_until_complete(relay.aclose())
        loop.close()


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    try:
        run_console(args.base_url, args.query, with_map=not args.no_map)
    except KeyboardInterrupt:
        return 130
    return 0


if __name__ == "__main__":
    sys.exit(main())
