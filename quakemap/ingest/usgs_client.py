"""
USGS earthquake summary feed client.

Fetches one of the pre-built GeoJSON summary feeds and turns each feature
into an :class:`EarthquakeRecord`.  The default matches the classic
"magnitude 2.5+, past week" feed.
https://earthquake.usgs.gov/earthquakes/feed/v1.0/geojson.php

Records keep missing magnitude / depth as ``None``; rejecting them is the
load cycle's job (see :mod:`quakemap.session`).

Usage
-----
    from quakemap.ingest.usgs_client import fetch_recent_earthquakes
    records = fetch_recent_earthquakes(period="week", min_mag=2.5)
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import List, Optional

from ..geo.markers import AgeBucket
from . import fetch_json

log = logging.getLogger(__name__)

_FEED_BASE = "https://earthquake.usgs.gov/earthquakes/feed/v1.0/summary"

PERIODS = ("hour", "day", "week", "month")
# USGS publishes pre-filtered feeds for these magnitude floors
_FEED_LEVELS = ((4.5, "4.5"), (2.5, "2.5"), (1.0, "1.0"), (0.0, "all"))

_HOUR_MS = 3_600_000
_DAY_MS = 24 * _HOUR_MS
_WEEK_MS = 7 * _DAY_MS


@dataclass
class EarthquakeRecord:
    """One earthquake as delivered by the feed."""
    event_id: str
    lat: float
    lon: float
    depth_km: Optional[float]
    mag: Optional[float]
    time_ms: int
    age_bucket: AgeBucket
    title: str = ""


def feed_url(period: str = "week", min_mag: float = 2.5) -> str:
    """Summary feed URL for *period* with the tightest level ≤ *min_mag*."""
    if period not in PERIODS:
        raise ValueError(f"Unknown feed period {period!r}, expected one of {PERIODS}")
    level = next(name for floor, name in _FEED_LEVELS if min_mag >= floor)
    return f"{_FEED_BASE}/{level}_{period}.geojson"


def age_bucket(time_ms: int, now_ms: Optional[int] = None) -> AgeBucket:
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    age = now_ms - time_ms
    if age < _HOUR_MS:
        return AgeBucket.PAST_HOUR
    if age < _DAY_MS:
        return AgeBucket.PAST_DAY
    if age < _WEEK_MS:
        return AgeBucket.PAST_WEEK
    return AgeBucket.OLDER


def parse_feature(feat: dict, now_ms: Optional[int] = None) -> Optional[EarthquakeRecord]:
    """Parse one GeoJSON feature; None when it has no usable geometry."""
    try:
        props = feat.get("properties") or {}
        coords = feat["geometry"]["coordinates"]
        time_ms = int(props.get("time") or 0)
        return EarthquakeRecord(
            event_id=feat.get("id", "") or "",
            lon=coords[0],
            lat=coords[1],
            depth_km=coords[2] if len(coords) > 2 else None,
            mag=props.get("mag"),
            time_ms=time_ms,
            age_bucket=age_bucket(time_ms, now_ms),
            title=props.get("title", "") or "",
        )
    except (KeyError, IndexError, TypeError, ValueError) as exc:
        log.debug("Failed to parse earthquake feature: %s", exc)
        return None


def parse_feed(data: dict, now_ms: Optional[int] = None) -> List[EarthquakeRecord]:
    records: List[EarthquakeRecord] = []
    for feat in data.get("features", []):
        rec = parse_feature(feat, now_ms)
        if rec is not None:
            records.append(rec)
    return records


def fetch_recent_earthquakes(
    period: str = "week",
    min_mag: float = 2.5,
    timeout: float = 15.0,
) -> List[EarthquakeRecord]:
    """Fetch the USGS summary feed; an empty list if the fetch fails."""
    url = feed_url(period, min_mag)
    try:
        data = fetch_json(url, timeout=timeout, retries=2)
    except Exception as exc:
        log.warning("USGS feed fetch failed: %s", exc)
        return []

    # Records with unusable magnitudes pass through and are rejected at load
    records = [
        r for r in parse_feed(data)
        if not isinstance(r.mag, (int, float)) or r.mag >= min_mag
    ]
    log.info("USGS %s feed: %d earthquakes (min_mag=%.1f)",
             period, len(records), min_mag)
    return records
