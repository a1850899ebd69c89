"""Directions provider contract and the Google Directions web-service client.

Public surface:
- DirectionsRequest / DirectionsResult value types
- DirectionsProvider protocol implemented by every provider
- GoogleDirectionsClient.route(request)
- get_directions_with_retry(provider, request)
- get_default_provider() / set_default_provider(provider)
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Sequence

import requests
from polyline import decode as polyline_decode

from ..cancellation import CancellationToken, sleep_or_cancel
from ..config import (
    DEFAULT_TRAVEL_MODE,
    DIRECTIONS_BACKOFF_BASE_SECONDS,
    DIRECTIONS_BACKOFF_MAX_SECONDS,
    DIRECTIONS_BASE_URL,
    DIRECTIONS_MAX_RETRIES,
    GOOGLE_MAPS_API_KEY,
    REQUEST_TIMEOUT,
)
from ..errors import (
    DirectionsAPIError,
    DirectionsRateLimitError,
    DirectionsResponseError,
)
from ..geo import is_valid_latlng
from ..models import LatLng, TravelMode
from .rate_limiter import RateLimiter
from .response_handling import classify_directions_status, classify_http_status
from .session import get_default_session

LOGGER = logging.getLogger(__name__)

__all__ = [
    "DirectionsRequest",
    "DirectionsResult",
    "DirectionsProvider",
    "GoogleDirectionsClient",
    "parse_directions_payload",
    "get_directions_with_retry",
    "get_default_provider",
    "set_default_provider",
]


@dataclass(frozen=True, slots=True)
class DirectionsRequest:
    """One routing request; waypoints are visited in the given order."""

    origin: LatLng
    destination: LatLng
    waypoints: Sequence[LatLng] = field(default_factory=tuple)
    travel_mode: TravelMode = DEFAULT_TRAVEL_MODE  # type: ignore[assignment]
    optimize_waypoints: bool = False


@dataclass(slots=True)
class DirectionsResult:
    path: List[LatLng]
    distance_m: float
    duration_s: float


class DirectionsProvider(Protocol):
    def route(
        self,
        request: DirectionsRequest,
        *,
        cancel_token: Optional[CancellationToken] = None,
    ) -> DirectionsResult: ...


def _format_latlng(point: LatLng) -> str:
    return f"{point[0]:.6f},{point[1]:.6f}"


def _mask(secret: str) -> str:
    return f"****{secret[-4:]}" if secret else "<unset>"


class GoogleDirectionsClient:
    """Directions provider backed by the Google Directions web service.

    Every request passes through the shared :class:`RateLimiter`, which
    replaces ad-hoc sleeps between chunks with one pacing schedule for all
    callers of the client.
    """

    def __init__(
        self,
        api_key: str | None = None,
        *,
        base_url: str = DIRECTIONS_BASE_URL,
        session: requests.Session | None = None,
        limiter: RateLimiter | None = None,
        timeout: float = REQUEST_TIMEOUT,
        max_network_retries: int = DIRECTIONS_MAX_RETRIES,
    ) -> None:
        self._api_key = api_key if api_key is not None else GOOGLE_MAPS_API_KEY
        self._base_url = base_url
        self._session = session or get_default_session()
        self._limiter = limiter or RateLimiter()
        self._timeout = timeout
        self._max_network_retries = max(1, max_network_retries)

    @property
    def limiter(self) -> RateLimiter:
        return self._limiter

    def build_params(self, request: DirectionsRequest) -> Dict[str, Any]:
        for point in (request.origin, request.destination, *request.waypoints):
            if not is_valid_latlng(point):
                raise ValueError(f"Invalid coordinate in directions request: {point}")
        params: Dict[str, Any] = {
            "origin": _format_latlng(request.origin),
            "destination": _format_latlng(request.destination),
            "mode": str(request.travel_mode).lower(),
            "key": self._api_key,
        }
        if request.waypoints:
            # "via:" waypoints shape the route without creating stopover legs.
            entries = [f"via:{_format_latlng(p)}" for p in request.waypoints]
            if request.optimize_waypoints:
                entries.insert(0, "optimize:true")
            params["waypoints"] = "|".join(entries)
        return params

    def route(
        self,
        request: DirectionsRequest,
        *,
        cancel_token: Optional[CancellationToken] = None,
    ) -> DirectionsResult:
        """Issue one directions request and decode the route polyline."""

        if not self._api_key:
            raise DirectionsAPIError(
                "GOOGLE_MAPS_API_KEY is not configured", status="REQUEST_DENIED"
            )
        params = self.build_params(request)
        context = f"Directions ({len(request.waypoints)} waypoints)"
        attempts = 0
        backoff = DIRECTIONS_BACKOFF_BASE_SECONDS
        while True:
            attempts += 1
            if cancel_token is not None:
                cancel_token.raise_if_cancelled()
            self._limiter.before_request(cancel_token)
            try:
                LOGGER.debug(
                    "GET %s origin=%s destination=%s waypoints=%d key=%s",
                    self._base_url,
                    params["origin"],
                    params["destination"],
                    len(request.waypoints),
                    _mask(self._api_key),
                )
                resp = self._session.get(
                    self._base_url, params=params, timeout=self._timeout
                )
            except requests.RequestException as exc:
                self._limiter.after_response(None)
                if attempts < self._max_network_retries:
                    LOGGER.warning(
                        "%s network error attempt=%s err=%s; backoff %.1fs",
                        context,
                        attempts,
                        exc.__class__.__name__,
                        backoff,
                    )
                    sleep_or_cancel(backoff, cancel_token)
                    backoff = min(backoff * 2, DIRECTIONS_BACKOFF_MAX_SECONDS)
                    continue
                LOGGER.error(
                    "%s network error (giving up) attempts=%s err=%s",
                    context,
                    attempts,
                    exc,
                )
                raise DirectionsAPIError(
                    f"{context} network error: {exc}", status="NETWORK_ERROR"
                ) from exc
            break

        http_error = classify_http_status(resp, context)
        if http_error is not None:
            self._limiter.after_response(
                resp.status_code,
                rate_limited=isinstance(http_error, DirectionsRateLimitError),
            )
            raise http_error
        try:
            payload = resp.json()
        except ValueError as exc:
            self._limiter.after_response(resp.status_code)
            raise DirectionsResponseError(
                f"{context} returned a non-JSON body", status="INVALID_RESPONSE"
            ) from exc
        if not isinstance(payload, dict):
            self._limiter.after_response(resp.status_code)
            raise DirectionsResponseError(
                f"{context} returned unexpected JSON ({type(payload).__name__})",
                status="INVALID_RESPONSE",
            )
        status_error = classify_directions_status(payload, context)
        self._limiter.after_response(
            resp.status_code,
            rate_limited=isinstance(status_error, DirectionsRateLimitError),
        )
        if status_error is not None:
            raise status_error
        return parse_directions_payload(payload)


def parse_directions_payload(payload: Dict[str, Any]) -> DirectionsResult:
    """Flatten the first route's step polylines and sum its legs."""

    routes = payload.get("routes")
    if not isinstance(routes, list) or not routes:
        raise DirectionsResponseError("Directions payload has no routes")
    legs = routes[0].get("legs") if isinstance(routes[0], dict) else None
    if not isinstance(legs, list):
        raise DirectionsResponseError("Directions route has no legs")

    path: List[LatLng] = []
    total_distance = 0.0
    total_duration = 0.0
    try:
        for leg in legs:
            total_distance += float((leg.get("distance") or {}).get("value", 0))
            total_duration += float((leg.get("duration") or {}).get("value", 0))
            for step in leg.get("steps", []):
                encoded = (step.get("polyline") or {}).get("points")
                if not encoded:
                    continue
                for lat, lng in polyline_decode(encoded):
                    point = LatLng(float(lat), float(lng))
                    # Consecutive steps repeat their shared endpoint.
                    if path and path[-1] == point:
                        continue
                    path.append(point)
    except (AttributeError, TypeError, ValueError, IndexError) as exc:
        raise DirectionsResponseError(
            f"Failed to parse directions result: {exc}"
        ) from exc
    if not path:
        raise DirectionsResponseError("Directions route contains no geometry")
    return DirectionsResult(
        path=path, distance_m=total_distance, duration_s=total_duration
    )


def get_directions_with_retry(
    provider: DirectionsProvider,
    request: DirectionsRequest,
    *,
    max_retries: int = DIRECTIONS_MAX_RETRIES,
    backoff_base: float = DIRECTIONS_BACKOFF_BASE_SECONDS,
    cancel_token: Optional[CancellationToken] = None,
) -> DirectionsResult:
    """Call ``provider`` retrying only rate-limit failures with exponential backoff.

    Waits are ``backoff_base * 2**attempt`` (1s, 2s, 4s, ... by default). Any
    other :class:`DirectionsAPIError` propagates on the first occurrence.
    """

    attempts = max(1, max_retries)
    last_error: DirectionsRateLimitError | None = None
    for attempt in range(attempts):
        if cancel_token is not None:
            cancel_token.raise_if_cancelled()
        try:
            return provider.route(request, cancel_token=cancel_token)
        except DirectionsRateLimitError as exc:
            last_error = exc
            if attempt + 1 >= attempts:
                break
            wait = min(backoff_base * (2**attempt), DIRECTIONS_BACKOFF_MAX_SECONDS)
            LOGGER.warning(
                "Directions rate limited (attempt %s/%s), retrying in %.1fs",
                attempt + 1,
                attempts,
                wait,
            )
            sleep_or_cancel(wait, cancel_token)
    LOGGER.error("Directions still rate limited after %s attempts", attempts)
    if last_error is None:  # pragma: no cover - loop always records an error
        raise DirectionsAPIError("Max retries exceeded")
    raise last_error


_default_provider: DirectionsProvider | None = None
_default_provider_lock = threading.Lock()


def get_default_provider() -> DirectionsProvider:
    """Return the process-wide Google client (created on first use)."""

    global _default_provider
    with _default_provider_lock:
        if _default_provider is None:
            _default_provider = GoogleDirectionsClient()
        return _default_provider


def set_default_provider(provider: DirectionsProvider | None) -> None:
    """Replace the process-wide provider (``None`` resets to lazy creation)."""

    global _default_provider
    with _default_provider_lock:
        _default_provider = provider
