"""
Screen projection for the map viewport.

Markers are placed on screen through a Web-Mercator projection
(EPSG:4326 → EPSG:3857) scaled and shifted into the map viewport
rectangle.  The selection logic only needs the :class:`ScreenProjector`
protocol, so tests can substitute a plain linear mapping.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Protocol, Tuple

import pyproj

from .markers import Location

WGS84 = pyproj.CRS("EPSG:4326")
WEB_MERCATOR = pyproj.CRS("EPSG:3857")

_to_merc = pyproj.Transformer.from_crs(WGS84, WEB_MERCATOR, always_xy=True).transform
_to_lonlat = pyproj.Transformer.from_crs(WEB_MERCATOR, WGS84, always_xy=True).transform

# Web Mercator is undefined at the poles
MAX_LAT = 85.05112878
# Half the width of the world in EPSG:3857 metres
HALF_WORLD_M = 20037508.342789244


class ScreenProjector(Protocol):
    def to_screen(self, location: Location) -> Tuple[float, float]: ...


@dataclass(frozen=True)
class Viewport:
    """Map viewport rectangle in widget pixels."""
    left: float
    top: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height

    def center(self) -> Tuple[float, float]:
        return (self.left + self.width / 2.0, self.top + self.height / 2.0)

    def contains(self, x: float, y: float) -> bool:
        return self.left <= x <= self.right and self.top <= y <= self.bottom


class MercatorProjector:
    """Web-Mercator projection centred on a lon/lat inside a viewport.

    ``zoom`` follows the slippy-map convention: at zoom 0 the whole world
    is 256 px wide.
    """

    TILE_PX = 256.0

    def __init__(
        self,
        viewport: Viewport,
        center: Location = Location(20.0, 0.0),
        zoom: float = 2.0,
        min_zoom: float = 1.0,
        max_zoom: float = 12.0,
    ):
        self.viewport = viewport
        self.min_zoom = min_zoom
        self.max_zoom = max_zoom
        self._zoom = min(max(zoom, min_zoom), max_zoom)
        self._cx, self._cy = self.to_mercator(center)

    @staticmethod
    def to_mercator(location: Location) -> Tuple[float, float]:
        lat = max(-MAX_LAT, min(MAX_LAT, location.lat))
        return _to_merc(location.lon, lat)

    @property
    def zoom(self) -> float:
        return self._zoom

    @property
    def px_per_m(self) -> float:
        world_px = self.TILE_PX * 2.0 ** self._zoom
        return world_px / (2.0 * HALF_WORLD_M)

    @property
    def center(self) -> Location:
        lon, lat = _to_lonlat(self._cx, self._cy)
        return Location(lat, lon)

    def to_screen(self, location: Location) -> Tuple[float, float]:
        return self.mercator_to_screen(*self.to_mercator(location))

    def mercator_to_screen(self, mx: float, my: float) -> Tuple[float, float]:
        sx, sy = self.viewport.center()
        s = self.px_per_m
        return (sx + (mx - self._cx) * s, sy - (my - self._cy) * s)

    def to_location(self, x: float, y: float) -> Location:
        sx, sy = self.viewport.center()
        s = self.px_per_m
        mx = self._cx + (x - sx) / s
        my = self._cy - (y - sy) / s
        lon, lat = _to_lonlat(mx, my)
        return Location(lat, lon)

    def pan(self, dx_px: float, dy_px: float) -> None:
        """Move the map content by a pixel offset (drag)."""
        s = self.px_per_m
        self._cx = max(-HALF_WORLD_M, min(HALF_WORLD_M, self._cx - dx_px / s))
        self._cy = max(-HALF_WORLD_M, min(HALF_WORLD_M, self._cy + dy_px / s))

    def zoom_by(
        self, steps: float, anchor: Optional[Tuple[float, float]] = None,
    ) -> None:
        """Zoom in (positive) or out keeping *anchor* fixed on screen."""
        new_zoom = min(max(self._zoom + steps, self.min_zoom), self.max_zoom)
        if math.isclose(new_zoom, self._zoom):
            return
        if anchor is None:
            anchor = self.viewport.center()
        ax, ay = anchor
        sx, sy = self.viewport.center()
        s_old = self.px_per_m
        # Mercator metres under the anchor before zooming
        mx = self._cx + (ax - sx) / s_old
        my = self._cy - (ay - sy) / s_old
        self._zoom = new_zoom
        s_new = self.px_per_m
        self._cx = mx - (ax - sx) / s_new
        self._cy = my + (ay - sy) / s_new
