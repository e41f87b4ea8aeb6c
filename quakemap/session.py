"""
One load cycle of map data.

A :class:`MapSession` owns the earthquake and city marker collections, the
cached ranking and the selection controller.  ``load`` builds markers from
parsed records, classifies quakes as land / ocean, ranks them and resets
the interaction state.  Calling ``load`` again is a full reload.

Records with missing or malformed values are skipped one by one; a bad
record never fails the whole load.
"""
from __future__ import annotations

import logging
from typing import Callable, Iterable, List, Optional, Sequence, TypeVar

from .geo.classifier import CountryBoundary, classify
from .geo.markers import (
    CityMarker,
    EarthquakeMarker,
    InvalidRecordError,
    make_city,
    make_earthquake,
)
from .geo.projection import ScreenProjector, Viewport
from .gui.selection import ClickEvent, SelectionController, SelectionState
from .ranking import QuakeRanker

log = logging.getLogger(__name__)

R = TypeVar("R")
M = TypeVar("M")


def build_markers(records: Iterable[R], factory: Callable[[R], M], what: str) -> List[M]:
    markers: List[M] = []
    skipped = 0
    for rec in records:
        try:
            markers.append(factory(rec))
        except InvalidRecordError as exc:
            skipped += 1
            label = getattr(rec, "event_id", "") or getattr(rec, "name", "") or "?"
            log.warning("Skipping %s record %s: %s", what, label, exc)
    if skipped:
        log.info("Built %d %s markers (%d records skipped)", len(markers), what, skipped)
    return markers


class MapSession:
    """Marker collections, ranking and selection for one viewer."""

    def __init__(
        self,
        projector: ScreenProjector,
        viewport: Viewport,
        top_n: int = 20,
    ):
        self.projector = projector
        self.viewport = viewport
        self.top_n = top_n
        self.earthquakes: List[EarthquakeMarker] = []
        self.cities: List[CityMarker] = []
        self.ranker = QuakeRanker()
        self.controller = self._new_controller()

    def _new_controller(self) -> SelectionController:
        return SelectionController(
            self.earthquakes, self.cities, self.ranker,
            self.projector, self.viewport, panel_rows=self.top_n,
        )

    def load(
        self,
        quake_records: Iterable,
        city_records: Iterable,
        countries: Sequence[CountryBoundary],
    ) -> None:
        """Discard current markers and rebuild everything from records."""
        self.earthquakes = build_markers(quake_records, make_earthquake, "earthquake")
        self.cities = build_markers(city_records, make_city, "city")
        classify(self.earthquakes, countries)
        self.ranker.rebuild(self.earthquakes)
        self.controller = self._new_controller()
        log.info("Session loaded: %d earthquakes, %d cities",
                 len(self.earthquakes), len(self.cities))

    # ── Event forwarding ──

    def pointer_moved(
        self, x: float, y: float, inside_map: Optional[bool] = None,
    ) -> SelectionState:
        return self.controller.pointer_moved(x, y, inside_map)

    def clicked(self, event: ClickEvent) -> SelectionState:
        return self.controller.clicked(event)

    def top_quakes(self) -> List[EarthquakeMarker]:
        return self.ranker.top_n(self.top_n)
