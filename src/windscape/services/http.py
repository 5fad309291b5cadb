"""
Shared HTTP client with automatic retry and backoff.

Provides a pre-configured ``requests.Session`` that retries on transient
network errors (timeouts, connection resets, 429/502/503/504) with exponential
backoff. Boundary downloads and any future HTTP datasource use this instead of
bare ``requests.get``.

Usage::

    from windscape.services.http import get_json

    payload = get_json("https://www.geoboundaries.org/api/current/gbOpen/SDN/ADM0/")
"""

from __future__ import annotations

from typing import Any

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from windscape.errors import ExternalServiceError

#: Default retry strategy for idempotent reads.
DEFAULT_RETRY = Retry(
    total=4,
    backoff_factor=2,  # 0s, 2s, 4s, 8s between retries
    status_forcelist=[429, 502, 503, 504],
    allowed_methods=["GET", "HEAD", "OPTIONS"],
    raise_on_status=False,  # let resp.raise_for_status() handle it
)

DEFAULT_TIMEOUT = 60  # seconds; boundary GeoJSON files can be several MB

USER_AGENT = "windscape/0.1"


def create_session(
    retry: Retry | None = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> requests.Session:
    """
    Build a ``requests.Session`` with retry adapter mounted.

    Args:
        retry: Custom retry strategy (defaults to ``DEFAULT_RETRY``).
        timeout: Default timeout applied to every request.
    """
    s = requests.Session()
    adapter = HTTPAdapter(max_retries=retry or DEFAULT_RETRY)
    s.mount("https://", adapter)
    s.mount("http://", adapter)
    s.headers["User-Agent"] = USER_AGENT

    _original_send = s.send

    def _send_with_timeout(
        prepared: requests.PreparedRequest, **kwargs: object
    ) -> requests.Response:
        kwargs.setdefault("timeout", timeout)
        return _original_send(prepared, **kwargs)  # type: ignore[arg-type]

    s.send = _send_with_timeout  # type: ignore[method-assign]
    return s


#: Module-level session - import and use directly.
session: requests.Session = create_session()


def get_json(url: str, params: dict[str, Any] | None = None) -> Any:
    """GET ``url`` and decode JSON, mapping failures to ``ExternalServiceError``."""
    try:
        resp = session.get(url, params=params)
        resp.raise_for_status()
        return resp.json()
    except requests.RequestException as exc:
        raise ExternalServiceError(f"GET {url} failed: {exc}", service="http") from exc
