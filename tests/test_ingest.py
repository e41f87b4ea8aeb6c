"""Tests for the shared HTTP helpers."""

import pytest
import requests

from quakemap import ingest


class _Resp:
    def __init__(self, status, payload=None):
        self.status_code = status
        self._payload = payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"HTTP {self.status_code}")

    def json(self):
        if self._payload is None:
            raise ValueError("not json")
        return self._payload


class _Session:
    """Replays a scripted list of responses / exceptions."""

    def __init__(self, script):
        self.script = list(script)
        self.calls = 0

    def get(self, url, params=None, timeout=None):
        self.calls += 1
        step = self.script.pop(0)
        if isinstance(step, Exception):
            raise step
        return step


@pytest.fixture
def fake_session(monkeypatch):
    def install(script):
        sess = _Session(script)
        monkeypatch.setattr(ingest, "http_session", lambda: sess)
        monkeypatch.setattr(ingest.time, "sleep", lambda s: None)
        return sess
    return install


class TestFetchWithRetry:
    def test_retries_transient_errors(self, fake_session):
        sess = fake_session([requests.ConnectionError("down"), _Resp(503), _Resp(200, {"ok": 1})])
        resp = ingest.fetch_with_retry("http://example.invalid", retries=2)
        assert resp.status_code == 200
        assert sess.calls == 3

    def test_gives_up_with_last_error(self, fake_session):
        sess = fake_session([requests.Timeout("slow"), _Resp(502)])
        with pytest.raises(requests.HTTPError):
            ingest.fetch_with_retry("http://example.invalid", retries=1)
        assert sess.calls == 2

    def test_client_error_not_retried(self, fake_session):
        sess = fake_session([_Resp(404), _Resp(200, {})])
        with pytest.raises(requests.HTTPError):
            ingest.fetch_with_retry("http://example.invalid", retries=3)
        assert sess.calls == 1


class TestFetchJson:
    def test_decodes(self, fake_session):
        fake_session([_Resp(200, {"features": []})])
        assert ingest.fetch_json("http://example.invalid") == {"features": []}

    def test_bad_body(self, fake_session):
        fake_session([_Resp(200, None)])
        with pytest.raises(requests.RequestException):
            ingest.fetch_json("http://example.invalid")

    def test_session_sends_user_agent(self):
        assert ingest.http_session().headers["User-Agent"].startswith("quakemap/")
