"""
Land / ocean classification of earthquakes.

Runs once per load cycle.  Each earthquake epicentre is tested against every
country boundary (Shapely Polygon or MultiPolygon in lon/lat).  The first
boundary that contains the point wins and its name is attached to the
marker; if none does, the quake is an ocean quake.

Degenerate boundaries (empty, zero-area, or geometry GEOS refuses to
evaluate) contain no points.

Usage
-----
    countries = load_countries("data/countries.geo.json")
    classify(quake_markers, countries)
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from shapely.errors import GEOSException
from shapely.geometry import MultiPolygon, Point, Polygon
from shapely.geometry.base import BaseGeometry

from .markers import EarthquakeMarker, Location

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class CountryBoundary:
    """One country outline (lon/lat, WGS84)."""
    name: str
    geometry: BaseGeometry

    def polygons(self) -> List[Polygon]:
        """Constituent polygons; a plain Polygon yields itself."""
        geom = self.geometry
        if isinstance(geom, Polygon):
            return [geom]
        if isinstance(geom, MultiPolygon):
            return list(geom.geoms)
        return []


def _polygon_contains(poly: Polygon, pt: Point) -> bool:
    if poly.is_empty or poly.area <= 0.0:
        return False
    try:
        return bool(poly.contains(pt))
    except GEOSException as exc:
        log.debug("Boundary polygon not evaluable, treating as empty: %s", exc)
        return False


def contains(boundary: CountryBoundary, location: Location) -> bool:
    """Point-in-polygon test; a multipolygon contains the point if any part does."""
    pt = Point(location.lon, location.lat)
    return any(_polygon_contains(p, pt) for p in boundary.polygons())


def find_country(
    location: Location, countries: Sequence[CountryBoundary],
) -> Optional[str]:
    """Name of the first boundary containing *location*, or None (ocean)."""
    for country in countries:
        if contains(country, location):
            return country.name
    return None


def classify(
    earthquakes: Iterable[EarthquakeMarker],
    countries: Sequence[CountryBoundary],
) -> None:
    """Tag each earthquake as land (with its country) or ocean."""
    n_land = n_ocean = 0
    for quake in earthquakes:
        name = find_country(quake.location, countries)
        quake.set_classification(name)
        if name is None:
            n_ocean += 1
        else:
            n_land += 1
    log.info(
        "Classified %d earthquakes against %d boundaries: %d land, %d ocean",
        n_land + n_ocean, len(countries), n_land, n_ocean,
    )
