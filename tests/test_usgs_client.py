"""Tests for the USGS feed client."""

import pytest
import requests

from quakemap.geo.markers import AgeBucket
from quakemap.ingest import usgs_client
from quakemap.ingest.usgs_client import age_bucket, feed_url, parse_feature, parse_feed

NOW = 1_700_000_000_000
HOUR = 3_600_000


def _feature(fid="us7000abcd", mag=5.4, coords=(142.37, 38.30, 24.0), time_ms=NOW - 2 * HOUR,
             title="M 5.4 - near the east coast of Honshu, Japan"):
    return {
        "type": "Feature",
        "id": fid,
        "properties": {"mag": mag, "time": time_ms, "title": title},
        "geometry": {"type": "Point", "coordinates": list(coords)},
    }


class TestFeedUrl:
    def test_default(self):
        assert feed_url().endswith("/summary/2.5_week.geojson")

    @pytest.mark.parametrize("mag, level", [(6.0, "4.5"), (4.5, "4.5"), (3.0, "2.5"),
                                            (1.2, "1.0"), (0.0, "all")])
    def test_levels(self, mag, level):
        assert feed_url("day", mag).endswith(f"/{level}_day.geojson")

    def test_unknown_period(self):
        with pytest.raises(ValueError):
            feed_url("year")


class TestAgeBucket:
    @pytest.mark.parametrize("age_ms, bucket", [
        (0, AgeBucket.PAST_HOUR),
        (HOUR - 1, AgeBucket.PAST_HOUR),
        (HOUR, AgeBucket.PAST_DAY),
        (23 * HOUR, AgeBucket.PAST_DAY),
        (24 * HOUR, AgeBucket.PAST_WEEK),
        (7 * 24 * HOUR, AgeBucket.OLDER),
    ])
    def test_buckets(self, age_ms, bucket):
        assert age_bucket(NOW - age_ms, NOW) is bucket


class TestParse:
    def test_feature(self):
        rec = parse_feature(_feature(), NOW)
        assert rec.event_id == "us7000abcd"
        assert (rec.lat, rec.lon, rec.depth_km) == (38.30, 142.37, 24.0)
        assert rec.mag == 5.4
        assert rec.age_bucket is AgeBucket.PAST_DAY
        assert rec.title.startswith("M 5.4")

    def test_missing_values_kept_as_none(self):
        rec = parse_feature(_feature(mag=None, coords=(10.0, 20.0)), NOW)
        assert rec.mag is None
        assert rec.depth_km is None

    @pytest.mark.parametrize("feat", [
        {"id": "x", "properties": {}},
        {"id": "x", "properties": {}, "geometry": None},
        {"id": "x", "properties": {}, "geometry": {"coordinates": [1.0]}},
        {"id": "x", "properties": {"time": "soon"}, "geometry": {"coordinates": [1.0, 2.0, 3.0]}},
    ])
    def test_unusable_feature(self, feat):
        assert parse_feature(feat, NOW) is None

    def test_feed_skips_bad_features(self):
        data = {"features": [_feature(fid="a"), {"id": "bad"}, _feature(fid="b")]}
        assert [r.event_id for r in parse_feed(data, NOW)] == ["a", "b"]
        assert parse_feed({}, NOW) == []


class TestFetch:
    def test_filters_by_magnitude(self, monkeypatch):
        payload = {"features": [_feature(fid="big", mag=6.1), _feature(fid="small", mag=2.7),
                                _feature(fid="nomag", mag=None)]}
        calls = []

        def fake_fetch(url, **kw):
            calls.append(url)
            return payload

        monkeypatch.setattr(usgs_client, "fetch_json", fake_fetch)
        records = usgs_client.fetch_recent_earthquakes("week", min_mag=4.5)
        assert calls == [feed_url("week", 4.5)]
        assert [r.event_id for r in records] == ["big", "nomag"]

    def test_failure_returns_empty(self, monkeypatch):
        def broken(url, **kw):
            raise requests.ConnectionError("offline")

        monkeypatch.setattr(usgs_client, "fetch_json", broken)
        assert usgs_client.fetch_recent_earthquakes() == []
