"""
Marker data model.

Two ordered collections of markers live for the whole session: earthquakes
and cities.  Markers are never created or destroyed mid-session; only their
three view flags change:

  - ``hidden``         excluded from drawing and hit-testing
  - ``selected``       hover highlight (at most one marker)
  - ``clicked_owner``  owner of the active click focus (at most one marker)

Per-variant rules (land / ocean / city, depth band, recency, legend
categories) are plain functions over the marker's ``kind`` tag and data, so
no caller needs ``isinstance`` checks.

Example
-------
    quake = EarthquakeMarker(Location(38.3, 142.4), magnitude=7.1,
                             depth_km=24.0, age_bucket=AgeBucket.PAST_DAY)
    depth_band(quake.depth_km)      # DepthBand.SHALLOW
    quake.threat_radius_km          # ≈ 8 200 km
"""
from __future__ import annotations

import abc
import enum
import logging
import math
from dataclasses import dataclass, field
from typing import Any, Optional

from .threat import threat_radius_km

log = logging.getLogger(__name__)

# Render radius per magnitude unit (pixels)
RADIUS_PER_MAGNITUDE = 1.75
# Half-size of the city triangle; also its hit radius
CITY_TRI_SIZE = 5.0

SHALLOW_MAX_KM = 70.0
INTERMEDIATE_MAX_KM = 300.0
# Largest magnitude accepted from a record; above this the value is malformed
MAX_MAGNITUDE = 12.0
# Events slightly above the reference datum report small negative depths
MIN_DEPTH_KM = -10.0


class InvalidRecordError(ValueError):
    """A feed or data-file record cannot be turned into a marker."""


class MarkerKind(enum.Enum):
    LAND_QUAKE = "land_quake"
    OCEAN_QUAKE = "ocean_quake"
    CITY = "city"


class AgeBucket(enum.Enum):
    """Recency bucket of an earthquake, labelled like the USGS feed."""
    PAST_HOUR = "Past Hour"
    PAST_DAY = "Past Day"
    PAST_WEEK = "Past Week"
    OLDER = "Older"


class DepthBand(enum.Enum):
    SHALLOW = "shallow"
    INTERMEDIATE = "intermediate"
    DEEP = "deep"


class Category(enum.Enum):
    """Symbolic legend controls."""
    CITY_ONLY = "city_only"
    LAND_QUAKE_ONLY = "land_quake_only"
    OCEAN_QUAKE_ONLY = "ocean_quake_only"
    SHALLOW = "shallow"
    INTERMEDIATE = "intermediate"
    DEEP = "deep"
    RECENT_ONLY = "recent_only"


@dataclass(frozen=True)
class Location:
    lat: float
    lon: float


@dataclass(eq=False)
class Marker(abc.ABC):
    """Common base for every map marker.

    Markers compare by identity: two quakes at the same place with the same
    magnitude are still two markers.
    """

    location: Location
    name: str = ""
    hidden: bool = False
    selected: bool = False
    clicked_owner: bool = False

    @property
    @abc.abstractmethod
    def kind(self) -> MarkerKind:
        ...

    @property
    def is_quake(self) -> bool:
        return self.kind is not MarkerKind.CITY

    def set_hidden(self, hidden: bool) -> None:
        """Change visibility.  Always resets the selection flags."""
        self.hidden = hidden
        self.selected = False
        self.clicked_owner = False


@dataclass(eq=False)
class EarthquakeMarker(Marker):
    magnitude: float = 0.0
    depth_km: float = 0.0
    age_bucket: AgeBucket = AgeBucket.OLDER
    event_id: str = ""
    is_on_land: bool = False
    country: Optional[str] = None
    _classified: bool = field(default=False, init=False, repr=False)

    @property
    def kind(self) -> MarkerKind:
        return MarkerKind.LAND_QUAKE if self.is_on_land else MarkerKind.OCEAN_QUAKE

    @property
    def classified(self) -> bool:
        return self._classified

    @property
    def radius(self) -> float:
        return RADIUS_PER_MAGNITUDE * self.magnitude

    @property
    def threat_radius_km(self) -> float:
        return threat_radius_km(self.magnitude)

    @property
    def depth_band(self) -> DepthBand:
        return depth_band(self.depth_km)

    def set_classification(self, country: Optional[str]) -> None:
        """Record the land / ocean result.  Write-once.

        ``country=None`` means ocean.  Re-applying the same result is
        allowed so classification can be rerun safely.
        """
        if self._classified:
            if country != self.country:
                raise RuntimeError(
                    f"quake {self.event_id or self.name!r} already classified "
                    f"as {self.country!r}, refusing {country!r}"
                )
            return
        self.is_on_land = country is not None
        self.country = country
        self._classified = True


@dataclass(eq=False)
class CityMarker(Marker):
    population: float = 0.0   # millions
    country: str = ""

    @property
    def kind(self) -> MarkerKind:
        return MarkerKind.CITY


# ── Plain predicates over marker data ─────────────────────────────────

def depth_band(depth_km: float) -> DepthBand:
    if depth_km < SHALLOW_MAX_KM:
        return DepthBand.SHALLOW
    if depth_km <= INTERMEDIATE_MAX_KM:
        return DepthBand.INTERMEDIATE
    return DepthBand.DEEP


def is_recent(age: AgeBucket) -> bool:
    """Past hour or past day."""
    return age in (AgeBucket.PAST_HOUR, AgeBucket.PAST_DAY)


_DEPTH_CATEGORIES = {
    Category.SHALLOW: DepthBand.SHALLOW,
    Category.INTERMEDIATE: DepthBand.INTERMEDIATE,
    Category.DEEP: DepthBand.DEEP,
}


def matches_category(marker: Marker, category: Category) -> bool:
    """Whether *marker* stays visible under the legend filter *category*."""
    kind = marker.kind
    if kind is MarkerKind.CITY:
        return category is Category.CITY_ONLY
    if category is Category.CITY_ONLY:
        return False
    if category is Category.LAND_QUAKE_ONLY:
        return kind is MarkerKind.LAND_QUAKE
    if category is Category.OCEAN_QUAKE_ONLY:
        return kind is MarkerKind.OCEAN_QUAKE
    if category is Category.RECENT_ONLY:
        return is_recent(marker.age_bucket)
    return depth_band(marker.depth_km) is _DEPTH_CATEGORIES[category]


def hit_radius(marker: Marker) -> float:
    """Screen-space radius (pixels) of the marker's clickable region."""
    if marker.kind is MarkerKind.CITY:
        return CITY_TRI_SIZE
    return max(marker.radius, 1.0)


def describe(marker: Marker) -> str:
    """Title shown next to the pointer while hovering."""
    if marker.kind is MarkerKind.CITY:
        return f"{marker.name}, {marker.country}  Pop: {marker.population:g} Million"
    if marker.name:
        return marker.name
    return f"M {marker.magnitude:.1f}"


# ── Record → marker construction ─────────────────────────────────────

def _number(
    value: Any, what: str,
    minimum: Optional[float] = None, maximum: Optional[float] = None,
) -> float:
    if value is None or isinstance(value, bool):
        raise InvalidRecordError(f"missing {what}")
    try:
        num = float(value)
    except (TypeError, ValueError):
        raise InvalidRecordError(f"non-numeric {what}: {value!r}") from None
    if math.isnan(num) or math.isinf(num):
        raise InvalidRecordError(f"non-finite {what}: {value!r}")
    if minimum is not None and num < minimum:
        raise InvalidRecordError(f"{what} below {minimum}: {num}")
    if maximum is not None and num > maximum:
        raise InvalidRecordError(f"{what} above {maximum}: {num}")
    return num


def _location(lat: Any, lon: Any) -> Location:
    la = _number(lat, "latitude")
    lo = _number(lon, "longitude")
    if not (-90.0 <= la <= 90.0 and -180.0 <= lo <= 180.0):
        raise InvalidRecordError(f"coordinates out of range: ({la}, {lo})")
    return Location(la, lo)


def make_earthquake(record) -> EarthquakeMarker:
    """Build an :class:`EarthquakeMarker` from a parsed feed record.

    Raises :class:`InvalidRecordError` for missing or malformed magnitude,
    depth or coordinates.  Small negative depths (events above the
    reference datum) are drawn at the surface.
    """
    depth = _number(record.depth_km, "depth", minimum=MIN_DEPTH_KM)
    if depth < 0.0:
        log.debug("Clamping depth %.2f km of %s to 0", depth, record.event_id or "?")
        depth = 0.0
    return EarthquakeMarker(
        location=_location(record.lat, record.lon),
        name=record.title or "",
        magnitude=_number(record.mag, "magnitude", minimum=0.0, maximum=MAX_MAGNITUDE),
        depth_km=depth,
        age_bucket=record.age_bucket,
        event_id=record.event_id or "",
    )


def make_city(record) -> CityMarker:
    """Build a :class:`CityMarker` from a parsed city record."""
    return CityMarker(
        location=_location(record.lat, record.lon),
        name=record.name or "",
        population=_number(record.population, "population", minimum=0.0),
        country=record.country or "",
    )
