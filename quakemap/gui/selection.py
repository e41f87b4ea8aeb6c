"""
Hover / click selection state machine.

The controller owns the interaction state and mutates marker view flags;
the renderer only reads those flags.  It has no Qt dependency so it can be
driven directly from tests.

States
------
  Idle                       nothing highlighted, everything visible
  Hovering(marker)           pointer over a marker; marker.selected is set
  ClickFocused(marker)       one marker isolated with what it threatens /
                             what threatens it
  FilteredByCategory(cat)    legend filter active

Hover highlighting only happens from Idle / Hovering.  Every click first
ends a hover, and every focus or filter transition clears the previous one
before applying the new one, so at most one marker is ``selected`` and at
most one is ``clicked_owner`` at any time.

Events arrive strictly serially from the GUI event loop.
"""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Union

from ..geo.markers import (
    Category,
    CityMarker,
    EarthquakeMarker,
    Marker,
    hit_radius,
    matches_category,
)
from ..geo.projection import ScreenProjector, Viewport
from ..geo.threat import threatens
from ..ranking import QuakeRanker

log = logging.getLogger(__name__)


# ── States ────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Hovering:
    marker: Marker


@dataclass(frozen=True)
class ClickFocused:
    marker: Marker


@dataclass(frozen=True)
class FilteredByCategory:
    category: Category


SelectionState = Union[Idle, Hovering, ClickFocused, FilteredByCategory]

IDLE = Idle()


# ── Click events ──────────────────────────────────────────────────────

class Region(enum.Enum):
    MAP = "map"
    RANKING_PANEL = "ranking_panel"
    LEGEND = "legend"
    OTHER = "other"


@dataclass(frozen=True)
class ClickEvent:
    """A click, tagged with the UI region it landed in.

    ``row`` is set for ranking-panel rows, ``category`` for legend
    controls.  A legend or panel click without them hit the blank space
    between controls.
    """
    x: float
    y: float
    region: Region = Region.MAP
    row: Optional[int] = None
    category: Optional[Category] = None

    @classmethod
    def on_map(cls, x: float, y: float) -> "ClickEvent":
        return cls(x, y, Region.MAP)

    @classmethod
    def on_ranking_row(cls, row: Optional[int], x: float = 0.0, y: float = 0.0) -> "ClickEvent":
        return cls(x, y, Region.RANKING_PANEL, row=row)

    @classmethod
    def on_legend(cls, category: Optional[Category], x: float = 0.0, y: float = 0.0) -> "ClickEvent":
        return cls(x, y, Region.LEGEND, category=category)

    @classmethod
    def elsewhere(cls, x: float = 0.0, y: float = 0.0) -> "ClickEvent":
        return cls(x, y, Region.OTHER)


# ── Controller ────────────────────────────────────────────────────────

class SelectionController:
    """Applies pointer and click events to the two marker collections."""

    def __init__(
        self,
        earthquakes: Sequence[EarthquakeMarker],
        cities: Sequence[CityMarker],
        ranker: QuakeRanker,
        projector: ScreenProjector,
        viewport: Viewport,
        panel_rows: int = 20,
    ):
        self._quakes = list(earthquakes)
        self._cities = list(cities)
        self._ranker = ranker
        self._projector = projector
        self._viewport = viewport
        self._panel_rows = panel_rows
        self._state: SelectionState = IDLE

    @property
    def state(self) -> SelectionState:
        return self._state

    @property
    def hovered(self) -> Optional[Marker]:
        if isinstance(self._state, Hovering):
            return self._state.marker
        return None

    def _markers(self) -> Iterable[Marker]:
        yield from self._quakes
        yield from self._cities

    # ── Hit-testing ──

    def _hits(self, marker: Marker, x: float, y: float) -> bool:
        mx, my = self._projector.to_screen(marker.location)
        r = hit_radius(marker)
        return (mx - x) ** 2 + (my - y) ** 2 <= r * r

    def _on_screen(self, marker: Marker) -> bool:
        mx, my = self._projector.to_screen(marker.location)
        return self._viewport.contains(mx, my)

    def _first_hit(self, markers: Iterable[Marker], x: float, y: float) -> Optional[Marker]:
        for m in markers:
            if not m.hidden and self._hits(m, x, y):
                return m
        return None

    # ── Pointer ──

    def pointer_moved(
        self, x: float, y: float, inside_map: Optional[bool] = None,
    ) -> SelectionState:
        """Per-frame pointer update.  Returns the resulting state."""
        if isinstance(self._state, (ClickFocused, FilteredByCategory)):
            return self._state
        self._end_hover()

        if inside_map is None:
            inside_map = self._viewport.contains(x, y)
        if not inside_map:
            return self._state

        target = self._first_hit(self._markers(), x, y)
        if target is not None and self._on_screen(target):
            target.selected = True
            self._state = Hovering(target)
        return self._state

    def _end_hover(self) -> None:
        if isinstance(self._state, Hovering):
            self._state.marker.selected = False
            self._state = IDLE

    # ── Clicks ──

    def clicked(self, event: ClickEvent) -> SelectionState:
        """Handle one click event.  Returns the resulting state."""
        self._end_hover()

        if event.region is Region.RANKING_PANEL:
            self._click_ranking_row(event.row)
        elif event.region is Region.LEGEND:
            self._click_legend(event.category)
        elif event.region is Region.MAP:
            self._click_map(event.x, event.y)
        else:
            self.clear()
        return self._state

    def _click_map(self, x: float, y: float) -> None:
        if self._state != IDLE:
            self.clear()
            return
        if not self._viewport.contains(x, y):
            return

        quake = self._first_hit(self._quakes, x, y)
        if quake is not None:
            self.focus_earthquake(quake)
            return
        city = self._first_hit(self._cities, x, y)
        if city is not None:
            self.focus_city(city)

    def _click_ranking_row(self, row: Optional[int]) -> None:
        quake = None
        if row is not None and row < self._panel_rows:
            quake = self._ranker.row(row)
        if quake is None:
            self.clear()
            return
        self.clear()
        for m in self._markers():
            m.set_hidden(True)
        quake.set_hidden(False)
        quake.selected = True
        quake.clicked_owner = True
        self._state = ClickFocused(quake)
        log.debug("Focused ranked quake at row %d: %s", row, quake.name)

    def _click_legend(self, category: Optional[Category]) -> None:
        if category is None or self._state == FilteredByCategory(category):
            self.clear()
            return
        self.apply_filter(category)

    # ── Transitions ──

    def focus_earthquake(self, quake: EarthquakeMarker) -> None:
        """Isolate *quake* and the cities inside its threat circle."""
        self.clear()
        for q in self._quakes:
            if q is not quake:
                q.set_hidden(True)
        for c in self._cities:
            if not threatens(quake, c.location):
                c.set_hidden(True)
        quake.clicked_owner = True
        self._state = ClickFocused(quake)
        log.debug("Focused quake %s (threat radius %.0f km)",
                  quake.name, quake.threat_radius_km)

    def focus_city(self, city: CityMarker) -> None:
        """Isolate *city* and the earthquakes that threaten it."""
        self.clear()
        for c in self._cities:
            if c is not city:
                c.set_hidden(True)
        for q in self._quakes:
            if not threatens(q, city.location):
                q.set_hidden(True)
        city.clicked_owner = True
        self._state = ClickFocused(city)
        log.debug("Focused city %s", city.name)

    def apply_filter(self, category: Category) -> None:
        self.clear()
        for m in self._markers():
            m.set_hidden(not matches_category(m, category))
        self._state = FilteredByCategory(category)
        log.debug("Legend filter %s", category.value)

    def clear(self) -> None:
        """Drop any focus / filter / hover and unhide every marker."""
        if self._state == IDLE:
            return
        for m in self._markers():
            m.set_hidden(False)
        self._state = IDLE

    # ── Introspection ──

    def visible(self) -> List[Marker]:
        return [m for m in self._markers() if not m.hidden]
