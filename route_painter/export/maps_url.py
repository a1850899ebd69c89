"""Google Maps links for generated routes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from ..config import MAPS_URL_MAX_LENGTH, MAPS_URL_MAX_WAYPOINTS
from ..errors import InputValidationError
from ..models import LatLng
from ..routing.segmentation import sample_points_by_distance

MAPS_DIRECTIONS_URL = "https://www.google.com/maps/dir/?api=1"

__all__ = [
    "UrlValidation",
    "generate_google_maps_url",
    "generate_google_maps_search_url",
    "estimate_url_length",
    "validate_route_for_url",
]


@dataclass(frozen=True, slots=True)
class UrlValidation:
    valid: bool
    error: Optional[str] = None
    warning: Optional[str] = None


def _format(point: LatLng) -> str:
    return f"{point[0]:.6f},{point[1]:.6f}"


def generate_google_maps_url(
    route: Sequence[LatLng],
    travel_mode: str = "walking",
    max_points: int = MAPS_URL_MAX_WAYPOINTS,
) -> str:
    """Directions URL through at most ``max_points`` distance-sampled points."""

    if not route:
        raise InputValidationError("Route is empty")
    points = (
        sample_points_by_distance(route, max_points) if len(route) > max_points else list(route)
    )
    url = (
        f"{MAPS_DIRECTIONS_URL}&origin={_format(points[0])}"
        f"&destination={_format(points[-1])}&travelmode={travel_mode.lower()}"
    )
    if len(points) > 2:
        url += "&waypoints=" + "|".join(_format(p) for p in points[1:-1])
    return url


def generate_google_maps_search_url(center: LatLng, zoom: int = 14) -> str:
    return f"https://www.google.com/maps/@{center[0]},{center[1]},{zoom}z"


def estimate_url_length(route: Sequence[LatLng]) -> int:
    return len(generate_google_maps_url(route))


def validate_route_for_url(route: Optional[Sequence[LatLng]]) -> UrlValidation:
    if not route:
        return UrlValidation(False, error="No route to export")
    if len(route) < 2:
        return UrlValidation(False, error="Route must have at least 2 points")
    if estimate_url_length(route) > MAPS_URL_MAX_LENGTH:
        return UrlValidation(
            True, warning="Route is complex and will be simplified for URL export"
        )
    return UrlValidation(True)
