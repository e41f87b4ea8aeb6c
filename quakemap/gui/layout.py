"""
Window layout: where the legend, the map viewport and the ranking panel sit,
and which symbolic click region a pixel belongs to.

    ┌────────┐ ┌──────────────────────┐ ┌───────────────────┐
    │ legend │ │      map viewport    │ │  ranking panel    │
    │        │ │                      │ │  row 0            │
    └────────┘ │                      │ │  row 1 ...        │
               └──────────────────────┘ └───────────────────┘

The legend rows and ranking rows are laid out on a fixed pitch; a click
between rows, or anywhere outside the three areas, is a blank-area click.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from ..geo.markers import Category
from ..geo.projection import Viewport
from .selection import ClickEvent

LEGEND_LEFT = 25.0
LEGEND_WIDTH = 150.0
LEGEND_HEIGHT = 250.0
LEGEND_ROW_HALF_H = 8.0

# (category, label, y offset from legend top)
LEGEND_ROWS: List[Tuple[Category, str, float]] = [
    (Category.CITY_ONLY, "City Marker", 50.0),
    (Category.LAND_QUAKE_ONLY, "Land Quake", 70.0),
    (Category.OCEAN_QUAKE_ONLY, "Ocean Quake", 90.0),
    (Category.SHALLOW, "Shallow", 140.0),
    (Category.INTERMEDIATE, "Intermediate", 160.0),
    (Category.DEEP, "Deep", 180.0),
    (Category.RECENT_ONLY, "Past day", 200.0),
]

PANEL_GAP = 20.0
PANEL_WIDTH = 350.0
PANEL_FIRST_ROW = 60.0    # y offset of row 0 from the panel top
PANEL_ROW_PITCH = 27.0
PANEL_ROW_HEIGHT = 18.0   # clickable height of each row


@dataclass(frozen=True)
class Rect:
    left: float
    top: float
    width: float
    height: float

    def contains(self, x: float, y: float) -> bool:
        return (self.left <= x <= self.left + self.width
                and self.top <= y <= self.top + self.height)


@dataclass
class WindowLayout:
    viewport: Viewport
    top_n: int = 20
    legend: Rect = field(init=False)
    panel: Rect = field(init=False)

    def __post_init__(self):
        vp = self.viewport
        self.legend = Rect(LEGEND_LEFT, vp.top, LEGEND_WIDTH, LEGEND_HEIGHT)
        self.panel = Rect(vp.right + PANEL_GAP, vp.top, PANEL_WIDTH, vp.height)

    def legend_row_y(self, category: Category) -> float:
        for cat, _label, dy in LEGEND_ROWS:
            if cat is category:
                return self.legend.top + dy
        raise KeyError(category)

    def legend_category_at(self, x: float, y: float) -> Optional[Category]:
        if not self.legend.contains(x, y):
            return None
        for cat, _label, dy in LEGEND_ROWS:
            if abs(y - (self.legend.top + dy)) <= LEGEND_ROW_HALF_H:
                return cat
        return None

    def panel_row_y(self, row: int) -> float:
        return self.panel.top + PANEL_FIRST_ROW + row * PANEL_ROW_PITCH

    def panel_row_at(self, x: float, y: float) -> Optional[int]:
        if not self.panel.contains(x, y):
            return None
        first = self.panel.top + PANEL_FIRST_ROW - PANEL_ROW_HEIGHT / 2.0
        if y < first:
            return None
        row, offset = divmod(y - first, PANEL_ROW_PITCH)
        if offset > PANEL_ROW_HEIGHT or row >= self.top_n:
            return None
        return int(row)

    def event_at(self, x: float, y: float) -> ClickEvent:
        """Translate a click pixel into a symbolic :class:`ClickEvent`."""
        if self.viewport.contains(x, y):
            return ClickEvent.on_map(x, y)
        if self.panel.contains(x, y):
            return ClickEvent.on_ranking_row(self.panel_row_at(x, y), x, y)
        if self.legend.contains(x, y):
            return ClickEvent.on_legend(self.legend_category_at(x, y), x, y)
        return ClickEvent.elsewhere(x, y)
