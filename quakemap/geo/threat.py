"""
Threat-circle geometry.

Every earthquake has a threat circle centred on its epicentre.  A city is
*threatened* by an earthquake when its great-circle distance to the
epicentre is no larger than the earthquake's threat radius.

The radius grows multiplicatively with magnitude: each additional magnitude
unit multiplies the radius by 1.8² ≈ 3.24.  The curve is a fixed
calibration:

    miles = 20 · 1.8^(2·M − 5),   km = miles · 1.6

Usage
-----
    from quakemap.geo.threat import threatened_cities
    for city in threatened_cities(quake, cities):
        print(city.name)
"""
from __future__ import annotations

import math
from typing import Iterable, List, TYPE_CHECKING

if TYPE_CHECKING:
    from .markers import CityMarker, EarthquakeMarker, Location

EARTH_RADIUS_KM = 6371.0

KM_PER_MILE = 1.6
_THREAT_BASE_MILES = 20.0
_THREAT_GROWTH = 1.8


def distance_km(a: "Location", b: "Location") -> float:
    """Great-circle (haversine) distance between two locations in km."""
    lat1, lat2 = math.radians(a.lat), math.radians(b.lat)
    dlat = lat2 - lat1
    dlon = math.radians(b.lon - a.lon)
    h = (
        math.sin(dlat / 2.0) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2.0) ** 2
    )
    # Rounding can push h a hair above 1 for antipodal points
    h = min(1.0, h)
    return 2.0 * EARTH_RADIUS_KM * math.asin(math.sqrt(h))


def threat_radius_km(magnitude: float) -> float:
    """Radius of the threat circle for a quake of the given magnitude."""
    miles = _THREAT_BASE_MILES * _THREAT_GROWTH ** (2.0 * magnitude - 5.0)
    return miles * KM_PER_MILE


def threatens(quake: "EarthquakeMarker", target: "Location") -> bool:
    """True when *target* lies inside the quake's threat circle."""
    return distance_km(quake.location, target) <= threat_radius_km(quake.magnitude)


def threatened_cities(
    quake: "EarthquakeMarker", cities: Iterable["CityMarker"],
) -> List["CityMarker"]:
    """Cities inside the quake's threat circle, in load order."""
    return [c for c in cities if threatens(quake, c.location)]


def threatening_quakes(
    city: "CityMarker", quakes: Iterable["EarthquakeMarker"],
) -> List["EarthquakeMarker"]:
    """Earthquakes whose threat circle contains the city, in load order."""
    return [q for q in quakes if threatens(q, city.location)]
