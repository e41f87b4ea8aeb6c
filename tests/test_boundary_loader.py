"""Tests for the country and city loaders."""

import json

import pytest
import requests

from quakemap.ingest import boundary_loader
from quakemap.ingest.boundary_loader import ensure_countries_file, load_cities, load_countries

SQUARE = [[[0, 0], [10, 0], [10, 10], [0, 10], [0, 0]]]


def _write(path, features):
    path.write_text(json.dumps({"type": "FeatureCollection", "features": features}),
                    encoding="utf-8")
    return path


class TestCountries:
    def test_polygons_and_multipolygons(self, tmp_path):
        path = _write(tmp_path / "countries.geo.json", [
            {"id": "SQL", "properties": {"name": "Squareland"},
             "geometry": {"type": "Polygon", "coordinates": SQUARE}},
            {"id": "ARC", "properties": {},
             "geometry": {"type": "MultiPolygon",
                          "coordinates": [SQUARE, [[[20, 20], [22, 20], [22, 22], [20, 20]]]]}},
        ])
        countries = load_countries(path)
        assert [c.name for c in countries] == ["Squareland", "ARC"]
        assert len(countries[1].polygons()) == 2

    def test_bad_geometry_skipped(self, tmp_path):
        path = _write(tmp_path / "countries.geo.json", [
            {"properties": {"name": "NoGeom"}},
            {"properties": {"name": "Dot"},
             "geometry": {"type": "Point", "coordinates": [1, 2]}},
            {"properties": {"name": "Garbled"},
             "geometry": {"type": "Polygon", "coordinates": "nope"}},
            {"properties": {"name": "Fine"},
             "geometry": {"type": "Polygon", "coordinates": SQUARE}},
        ])
        assert [c.name for c in load_countries(path)] == ["Fine"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_countries(tmp_path / "absent.json")


class TestCities:
    def test_load(self, tmp_path):
        path = _write(tmp_path / "cities.json", [
            {"properties": {"name": "Lima", "country": "Peru", "population": "10.7"},
             "geometry": {"type": "Point", "coordinates": [-77.04, -12.05]}},
            {"properties": {"name": "Nowhere"}},
        ])
        cities = load_cities(path)
        assert len(cities) == 1
        lima = cities[0]
        assert (lima.name, lima.country, lima.population) == ("Lima", "Peru", "10.7")
        assert (lima.lat, lima.lon) == (-12.05, -77.04)

    def test_shipped_city_file(self):
        from quakemap.config import DATA_DIR
        cities = load_cities(DATA_DIR / "city-data.json")
        assert len(cities) > 10
        assert all(c.name for c in cities)


class TestEnsureCountriesFile:
    def test_existing_file_not_downloaded(self, tmp_path, monkeypatch):
        path = _write(tmp_path / "countries.geo.json", [])

        def no_fetch(*a, **kw):
            raise AssertionError("should not download")

        monkeypatch.setattr(boundary_loader, "fetch_with_retry", no_fetch)
        assert ensure_countries_file(path, "http://example.invalid/c.json") == path

    def test_download(self, tmp_path, monkeypatch):
        body = json.dumps({"features": []}).encode()

        class Resp:
            content = body

        monkeypatch.setattr(boundary_loader, "fetch_with_retry", lambda url, **kw: Resp())
        path = tmp_path / "sub" / "countries.geo.json"
        assert ensure_countries_file(path, "http://example.invalid/c.json") == path
        assert path.read_bytes() == body
        assert not path.with_suffix(".json.part").exists()

    def test_missing_without_url(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ensure_countries_file(tmp_path / "countries.geo.json", None)

    def test_offline_download_is_missing_file(self, tmp_path, monkeypatch):
        def offline(url, **kw):
            raise requests.ConnectionError("offline")

        monkeypatch.setattr(boundary_loader, "fetch_with_retry", offline)
        path = tmp_path / "countries.geo.json"
        with pytest.raises(FileNotFoundError):
            ensure_countries_file(path, "http://example.invalid/c.json")
        assert not path.exists()
