"""Test helpers: a linear screen projector and marker factories."""
from __future__ import annotations

import math

from quakemap.geo.markers import AgeBucket, CityMarker, EarthquakeMarker, Location
from quakemap.geo.projection import Viewport
from quakemap.geo.threat import EARTH_RADIUS_KM

VIEWPORT = Viewport(200.0, 50.0, 650.0, 600.0)
PX_PER_DEG = 5.0


class LinearProjector:
    """Plate carrée at a fixed scale, (0, 0) at the viewport centre."""

    def __init__(self, viewport=VIEWPORT, px_per_deg=PX_PER_DEG):
        self.viewport = viewport
        self.px_per_deg = px_per_deg

    def to_screen(self, location):
        cx, cy = self.viewport.center()
        return (cx + location.lon * self.px_per_deg, cy - location.lat * self.px_per_deg)


def lon_at_distance_km(km: float) -> float:
    """Longitude on the equator that lies *km* east of (0, 0)."""
    return math.degrees(km / EARTH_RADIUS_KM)


def make_quake(lat=0.0, lon=0.0, mag=5.0, depth=10.0,
               age=AgeBucket.PAST_WEEK, name="", land=None):
    q = EarthquakeMarker(Location(lat, lon), name=name, magnitude=mag,
                         depth_km=depth, age_bucket=age)
    if land is not None:
        q.set_classification(land or None)
    return q


def make_city(lat=0.0, lon=0.0, name="City", population=1.0, country="Nowhere"):
    return CityMarker(Location(lat, lon), name=name, population=population, country=country)
