"""Shared HTTP session for the directions endpoint.

Transport-level retries only cover gateway and server failures on the
read-only directions ``GET``. Rate limits (429 and ``OVER_QUERY_LIMIT``) are
left to :func:`get_directions_with_retry`, whose backoff goes through the
shared :class:`RateLimiter`, so the two layers never stack their waits.
"""

from __future__ import annotations

import threading

import requests
from requests import Session
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .. import __version__
from ..config import (
    DIRECTIONS_BACKOFF_BASE_SECONDS,
    DIRECTIONS_MAX_RETRIES,
    HTTP_POOL_CONNECTIONS,
    HTTP_POOL_MAXSIZE,
)

__all__ = ["create_default_session", "get_default_session", "reset_default_session"]

SERVER_ERROR_STATUSES = (500, 502, 503, 504)


def _build_retry() -> Retry:
    return Retry(
        total=DIRECTIONS_MAX_RETRIES,
        backoff_factor=DIRECTIONS_BACKOFF_BASE_SECONDS,
        status_forcelist=SERVER_ERROR_STATUSES,
        allowed_methods=["GET"],
        respect_retry_after_header=False,
        raise_on_status=False,
    )


def create_default_session() -> Session:
    """Session with pooled HTTPS connections and server-error retries."""

    session = requests.Session()
    adapter = HTTPAdapter(
        pool_connections=HTTP_POOL_CONNECTIONS,
        pool_maxsize=HTTP_POOL_MAXSIZE,
        max_retries=_build_retry(),
    )
    session.mount("https://", adapter)
    session.headers.update(
        {
            "Accept-Encoding": "gzip, deflate",
            "Accept": "application/json",
            "User-Agent": f"route-painter/{__version__}",
        }
    )
    return session


_DEFAULT_SESSION: Session | None = None
_DEFAULT_SESSION_LOCK = threading.Lock()


def get_default_session() -> Session:
    """Return the process-wide directions session, creating it on first use."""

    global _DEFAULT_SESSION
    with _DEFAULT_SESSION_LOCK:
        if _DEFAULT_SESSION is None:
            _DEFAULT_SESSION = create_default_session()
        return _DEFAULT_SESSION


def reset_default_session() -> None:
    """Close and forget the shared session; the next call builds a new one."""

    global _DEFAULT_SESSION
    with _DEFAULT_SESSION_LOCK:
        if _DEFAULT_SESSION is not None:
            _DEFAULT_SESSION.close()
        _DEFAULT_SESSION = None
