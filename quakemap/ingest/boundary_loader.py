"""
Country boundary and city data loaders.

Both files are GeoJSON FeatureCollections:

  - countries: Polygon / MultiPolygon features with a ``name`` property
    (the widely used ``countries.geo.json`` world file).  It is not shipped
    with the package; :func:`ensure_countries_file` downloads it once and
    caches it under ``data/``.
  - cities: Point features with ``name``, ``country`` and ``population``
    (millions) properties.

Usage
-----
    path = ensure_countries_file(Path("data/countries.geo.json"), url)
    countries = load_countries(path)
    cities = load_cities(Path("data/city-data.json"))
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional, Union

import requests
from shapely.errors import GEOSException
from shapely.geometry import shape

from ..geo.classifier import CountryBoundary
from . import fetch_with_retry

log = logging.getLogger(__name__)

PathLike = Union[str, Path]


@dataclass
class CityRecord:
    name: str
    country: str
    lat: Any
    lon: Any
    population: Any


def _load_features(path: PathLike) -> List[dict]:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(p)
    with p.open("r", encoding="utf-8") as f:
        data = json.load(f)
    return data.get("features", [])


def load_countries(path: PathLike) -> List[CountryBoundary]:
    """Read country outlines; features with unusable geometry are skipped."""
    countries: List[CountryBoundary] = []
    for i, feat in enumerate(_load_features(path)):
        props = feat.get("properties") or {}
        name = props.get("name") or feat.get("id") or f"feature_{i}"
        try:
            geom = shape(feat["geometry"])
        except (KeyError, TypeError, ValueError, AttributeError, GEOSException) as exc:
            log.warning("Skipping boundary %s: bad geometry (%s)", name, exc)
            continue
        if geom.geom_type not in ("Polygon", "MultiPolygon"):
            log.warning("Skipping boundary %s: %s is not a polygon", name, geom.geom_type)
            continue
        countries.append(CountryBoundary(name=str(name), geometry=geom))
    log.info("Loaded %d country boundaries from %s", len(countries), path)
    return countries


def load_cities(path: PathLike) -> List[CityRecord]:
    """Read city points.  Values are validated later, at marker build time."""
    cities: List[CityRecord] = []
    for feat in _load_features(path):
        props = feat.get("properties") or {}
        try:
            coords = feat["geometry"]["coordinates"]
            lon, lat = coords[0], coords[1]
        except (KeyError, IndexError, TypeError) as exc:
            log.warning("Skipping city %s: no point geometry (%s)",
                        props.get("name", "?"), exc)
            continue
        cities.append(CityRecord(
            name=props.get("name", "") or "",
            country=props.get("country", "") or "",
            lat=lat,
            lon=lon,
            population=props.get("population"),
        ))
    log.info("Loaded %d cities from %s", len(cities), path)
    return cities


def ensure_countries_file(
    path: PathLike, url: Optional[str], timeout: float = 30.0,
) -> Path:
    """Return *path*, downloading the boundary file first if it is missing.

    Raises ``FileNotFoundError`` when the file is absent and cannot be
    downloaded (no URL, or the download failed).
    """
    p = Path(path)
    if p.exists():
        return p
    if not url:
        raise FileNotFoundError(p)
    log.info("Downloading country boundaries from %s", url)
    try:
        resp = fetch_with_retry(url, timeout=timeout)
    except requests.RequestException as exc:
        log.warning("Country boundary download failed: %s", exc)
        raise FileNotFoundError(p) from exc
    p.parent.mkdir(parents=True, exist_ok=True)
    tmp = p.with_suffix(p.suffix + ".part")
    tmp.write_bytes(resp.content)
    tmp.replace(p)
    log.info("Cached country boundaries at %s (%d bytes)", p, len(resp.content))
    return p
