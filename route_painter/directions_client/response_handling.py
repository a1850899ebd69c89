"""Shared HTTP response helpers for directions API interactions."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests

from ..errors import (
    DirectionsAPIError,
    DirectionsNoRouteError,
    DirectionsRateLimitError,
    DirectionsResponseError,
)

__all__ = [
    "RATE_LIMIT_STATUSES",
    "NO_ROUTE_STATUSES",
    "classify_http_status",
    "classify_directions_status",
    "extract_error",
]

RATE_LIMIT_STATUSES = frozenset({"OVER_QUERY_LIMIT"})
NO_ROUTE_STATUSES = frozenset({"ZERO_RESULTS", "NOT_FOUND"})


def classify_http_status(
    response: requests.Response, context: str
) -> Optional[DirectionsAPIError]:
    """Return the error for a non-success HTTP status, or ``None`` when OK."""

    status = response.status_code
    if status < 400:
        return None
    detail = extract_error(response)

    def with_detail(message: str) -> str:
        return f"{message} | {detail}" if detail else message

    if status == 429:
        message = with_detail(f"{context} rate limited (429)")
        logging.warning(message)
        return DirectionsRateLimitError(message, status="HTTP_429")
    if status in (401, 403):
        message = with_detail(f"{context} forbidden (status {status})")
        logging.warning(message)
        return DirectionsAPIError(message, status=f"HTTP_{status}")
    message = with_detail(f"{context} request failed (status {status})")
    logging.error(message)
    return DirectionsAPIError(message, status=f"HTTP_{status}")


def classify_directions_status(
    payload: Dict[str, Any], context: str
) -> Optional[DirectionsAPIError]:
    """Map the provider's ``status`` field to a typed error (``None`` for OK)."""

    status = str(payload.get("status", "")).upper()
    if status == "OK":
        return None
    detail = payload.get("error_message")
    message = f"{context} failed: {status or 'missing status'}"
    if detail:
        message = f"{message} | {detail}"
    if status in RATE_LIMIT_STATUSES:
        logging.warning(message)
        return DirectionsRateLimitError(message, status=status)
    if status in NO_ROUTE_STATUSES:
        logging.info(message)
        return DirectionsNoRouteError(message, status=status)
    if not status:
        return DirectionsResponseError(message, status=None)
    logging.error(message)
    return DirectionsAPIError(message, status=status)


def extract_error(resp: Optional[requests.Response]) -> Optional[str]:
    """Return compact error info (status + message) if present."""

    if resp is None:
        return None
    try:
        data = resp.json()
    except ValueError as exc:  # pragma: no cover - logging path
        logging.debug(
            "Failed to decode JSON from %s: %s", getattr(resp, "url", "?"), exc
        )
        return _extract_error_text(resp)
    if not isinstance(data, dict):
        return None
    parts = [
        str(data[key]) for key in ("status", "error_message") if data.get(key)
    ]
    error = data.get("error")
    if isinstance(error, dict) and error.get("message"):
        parts.append(str(error["message"]))
    return " | ".join(parts) if parts else None


def _extract_error_text(resp: requests.Response) -> Optional[str]:
    """Best-effort plain-text extraction when JSON parsing fails."""

    text = getattr(resp, "text", "")
    if not isinstance(text, str):
        return None
    trimmed = text.strip()
    if not trimmed:
        return None
    return (trimmed[:297] + "...") if len(trimmed) > 300 else trimmed
