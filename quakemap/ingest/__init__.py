"""Earthquake feed and boundary data ingestion.

All HTTP goes through one shared ``requests.Session`` so the feed and the
boundary download reuse connections and send the same User-Agent.
"""
from __future__ import annotations

import logging
import time
from typing import Any, Optional

import requests

from .. import __version__

log = logging.getLogger(__name__)

USER_AGENT = f"quakemap/{__version__}"
_DEFAULT_TIMEOUT = 20  # seconds

_session: Optional[requests.Session] = None


def http_session() -> requests.Session:
    global _session
    if _session is None:
        _session = requests.Session()
        _session.headers["User-Agent"] = USER_AGENT
    return _session


def fetch_with_retry(
    url: str,
    *,
    params: Optional[dict] = None,
    timeout: float = _DEFAULT_TIMEOUT,
    retries: int = 2,
    backoff: float = 2.0,
) -> requests.Response:
    """GET *url*, retrying connection errors, timeouts and 5xx responses.

    A 4xx response raises ``requests.HTTPError`` on the first attempt.
    After the last failed attempt the most recent error is raised.
    """
    attempts = retries + 1
    last_exc: Exception = requests.ConnectionError(f"no attempt made for {url}")
    for attempt in range(1, attempts + 1):
        try:
            resp = http_session().get(url, params=params, timeout=timeout)
        except (requests.ConnectionError, requests.Timeout) as exc:
            last_exc = exc
            log.warning("Network error on %s (attempt %d/%d): %s",
                        url[:80], attempt, attempts, exc)
        else:
            if resp.status_code < 500:
                resp.raise_for_status()
                return resp
            last_exc = requests.HTTPError(f"HTTP {resp.status_code}", response=resp)
            log.warning("HTTP %d from %s (attempt %d/%d)",
                        resp.status_code, url[:80], attempt, attempts)

        if attempt < attempts:
            time.sleep(backoff * attempt)

    raise last_exc


def fetch_json(url: str, **kwargs: Any) -> Any:
    """:func:`fetch_with_retry` and decode the body as JSON."""
    resp = fetch_with_retry(url, **kwargs)
    try:
        return resp.json()
    except ValueError as exc:
        raise requests.RequestException(f"invalid JSON from {url[:80]}: {exc}") from exc
