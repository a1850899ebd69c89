"""Snap an ideal geographic path onto the road network chunk by chunk."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from ..cancellation import CancellationToken
from ..config import (
    DEFAULT_MAX_WAYPOINTS_PER_SEGMENT,
    DEFAULT_NUM_SEGMENTS,
    DEFAULT_TRAVEL_MODE,
    DIRECTIONS_MAX_RETRIES,
)
from ..directions_client import (
    DirectionsProvider,
    DirectionsRequest,
    get_default_provider,
    get_directions_with_retry,
)
from ..errors import DirectionsAPIError, InputValidationError
from ..geo import calculate_destination, calculate_path_distance, format_distance
from ..models import LatLng, TravelMode
from .progress import ProgressReporter
from .segmentation import (
    divide_into_segments,
    extract_key_points,
    merge_segments,
    sample_points_by_distance,
)

LOGGER = logging.getLogger(__name__)

FallbackCallback = Callable[[int, Exception], None]

__all__ = [
    "SnapOptions",
    "snap_to_roads",
    "snap_segment",
    "select_waypoints",
    "snap_simple",
    "is_location_routable",
]


@dataclass(frozen=True, slots=True)
class SnapOptions:
    num_segments: int = DEFAULT_NUM_SEGMENTS
    max_waypoints_per_segment: int = DEFAULT_MAX_WAYPOINTS_PER_SEGMENT
    travel_mode: TravelMode = DEFAULT_TRAVEL_MODE  # type: ignore[assignment]
    max_retries: int = DIRECTIONS_MAX_RETRIES
    provider: Optional[DirectionsProvider] = None
    progress: Optional[ProgressReporter] = None
    cancel_token: Optional[CancellationToken] = None
    on_fallback: Optional[FallbackCallback] = None


def select_waypoints(segment: Sequence[LatLng], max_waypoints: int) -> List[LatLng]:
    """Key points of ``segment``, distance-resampled if still over the cap."""

    key_points = extract_key_points(segment, max_waypoints)
    if len(key_points) > max_waypoints:
        return sample_points_by_distance(key_points, max_waypoints)
    return key_points


def snap_segment(
    segment: Sequence[LatLng],
    provider: DirectionsProvider,
    *,
    max_waypoints: int,
    travel_mode: TravelMode,
    max_retries: int = DIRECTIONS_MAX_RETRIES,
    cancel_token: Optional[CancellationToken] = None,
) -> List[LatLng]:
    """Route one chunk through the provider; provider errors propagate."""

    if len(segment) < 2:
        return list(segment)
    waypoints = select_waypoints(segment, max_waypoints)
    if len(waypoints) < 2:
        return list(segment)
    request = DirectionsRequest(
        origin=waypoints[0],
        destination=waypoints[-1],
        waypoints=tuple(waypoints[1:-1]),
        travel_mode=travel_mode,
        optimize_waypoints=False,
    )
    result = get_directions_with_retry(
        provider, request, max_retries=max_retries, cancel_token=cancel_token
    )
    return list(result.path)


def snap_to_roads(ideal_path: Sequence[LatLng], options: SnapOptions | None = None) -> List[LatLng]:
    """Snap ``ideal_path`` to roads, one directions request per chunk.

    A chunk whose request fails keeps its original points; the failure is
    logged and passed to ``options.on_fallback`` instead of aborting the run.
    Requests run sequentially and are paced by the provider's rate limiter.
    """

    opts = options or SnapOptions()
    if len(ideal_path) < 2:
        raise InputValidationError("Path must have at least 2 points")
    provider = opts.provider or get_default_provider()
    progress = opts.progress or ProgressReporter()
    token = opts.cancel_token

    progress.report(10, "Dividing path into segments...")
    segments = divide_into_segments(ideal_path, opts.num_segments)
    progress.report(20, f"Processing {len(segments)} segments...")

    snapped_segments: List[List[LatLng]] = []
    for index, segment in enumerate(segments):
        if token is not None:
            token.raise_if_cancelled()
        progress.report(
            20 + index / len(segments) * 60,
            f"Snapping segment {index + 1}/{len(segments)} to roads...",
        )
        try:
            snapped = snap_segment(
                segment,
                provider,
                max_waypoints=opts.max_waypoints_per_segment,
                travel_mode=opts.travel_mode,
                max_retries=opts.max_retries,
                cancel_token=token,
            )
        except (DirectionsAPIError, ValueError) as exc:
            LOGGER.warning(
                "Failed to snap segment %d/%d, using unsnapped points: %s",
                index + 1,
                len(segments),
                exc,
            )
            if opts.on_fallback is not None:
                opts.on_fallback(index, exc)
            snapped = list(segment)
        snapped_segments.append(snapped)

    progress.report(85, "Merging segments...")
    route = merge_segments(snapped_segments)
    LOGGER.info(
        "Route snapped to roads: %d segments, %d points, %s",
        len(segments),
        len(route),
        format_distance(calculate_path_distance(route)),
    )
    progress.report(100, "Route snapping complete!")
    return route


def snap_simple(
    start: LatLng,
    end: LatLng,
    travel_mode: TravelMode = DEFAULT_TRAVEL_MODE,  # type: ignore[assignment]
    *,
    provider: Optional[DirectionsProvider] = None,
    cancel_token: Optional[CancellationToken] = None,
) -> List[LatLng]:
    """Direct start-to-end route, or the straight pair when routing fails."""

    request = DirectionsRequest(origin=start, destination=end, travel_mode=travel_mode)
    try:
        result = get_directions_with_retry(
            provider or get_default_provider(), request, cancel_token=cancel_token
        )
    except (DirectionsAPIError, ValueError) as exc:
        LOGGER.warning("Simple snap failed: %s", exc)
        return [start, end]
    return list(result.path)


def is_location_routable(
    location: LatLng,
    test_distance_m: float = 100.0,
    *,
    provider: Optional[DirectionsProvider] = None,
) -> bool:
    """True when the provider can route from ``location`` to a point due north."""

    target = calculate_destination(LatLng(*location), test_distance_m, 0.0)
    request = DirectionsRequest(origin=LatLng(*location), destination=target, travel_mode="WALKING")
    try:
        get_directions_with_retry(provider or get_default_provider(), request)
    except (DirectionsAPIError, ValueError) as exc:
        LOGGER.info("Location %s is not routable: %s", location, exc)
        return False
    return True
