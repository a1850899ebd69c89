"""Route center resolution and the geolocation source contract."""

from __future__ import annotations

import logging
from typing import Optional, Protocol

from .config import GEOLOCATION_TIMEOUT_SECONDS
from .errors import (
    GeolocationError,
    GeolocationPermissionError,
    GeolocationTimeoutError,
    GeolocationUnavailableError,
)
from .geo import is_valid_latlng
from .models import LatLng

LOGGER = logging.getLogger(__name__)

__all__ = [
    "GeolocationSource",
    "StaticLocationSource",
    "resolve_route_center",
    "locate",
    "describe_geolocation_error",
]


class GeolocationSource(Protocol):
    """Anything able to produce the device position.

    Implementations raise :class:`GeolocationPermissionError`,
    :class:`GeolocationUnavailableError` or :class:`GeolocationTimeoutError`.
    """

    def current_position(self, timeout: float = GEOLOCATION_TIMEOUT_SECONDS) -> LatLng: ...


class StaticLocationSource:
    """Fixed position, e.g. coordinates given on the command line."""

    def __init__(self, position: Optional[LatLng]) -> None:
        self._position = position

    def current_position(self, timeout: float = GEOLOCATION_TIMEOUT_SECONDS) -> LatLng:
        if self._position is None:
            raise GeolocationUnavailableError("No position configured")
        if not is_valid_latlng(self._position):
            raise GeolocationUnavailableError(f"Invalid position {self._position!r}")
        return LatLng(float(self._position[0]), float(self._position[1]))


def resolve_route_center(
    selected_center: Optional[LatLng], user_location: Optional[LatLng]
) -> Optional[LatLng]:
    """A manually selected center wins over the device location."""

    if selected_center is not None and is_valid_latlng(selected_center):
        return LatLng(float(selected_center[0]), float(selected_center[1]))
    if user_location is not None and is_valid_latlng(user_location):
        return LatLng(float(user_location[0]), float(user_location[1]))
    return None


def describe_geolocation_error(exc: GeolocationError) -> str:
    if isinstance(exc, GeolocationPermissionError):
        return "Location permission denied. Please enable location access to use this app."
    if isinstance(exc, GeolocationUnavailableError):
        return "Location information is unavailable."
    if isinstance(exc, GeolocationTimeoutError):
        return "Location request timed out."
    return "Unable to get your location"


def locate(
    source: GeolocationSource, timeout: float = GEOLOCATION_TIMEOUT_SECONDS
) -> tuple[Optional[LatLng], Optional[str]]:
    """Return ``(position, None)`` or ``(None, user-facing error message)``."""

    try:
        return source.current_position(timeout), None
    except GeolocationError as exc:
        LOGGER.warning("Geolocation failed: %s", exc)
        return None, describe_geolocation_error(exc)
