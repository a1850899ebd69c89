"""Bring a snapped route closer to its target distance by adding loop detours."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable, List, Optional

from ..cancellation import CancellationToken
from ..config import (
    DEFAULT_DISTANCE_TOLERANCE,
    DEFAULT_MAX_LOOPS,
    DEFAULT_TRAVEL_MODE,
    DIRECTIONS_MAX_RETRIES,
    LOOP_DISTANCE_M,
    MIN_POINTS_FOR_LOOPS,
)
from ..directions_client import (
    DirectionsProvider,
    DirectionsRequest,
    get_default_provider,
    get_directions_with_retry,
)
from ..errors import DirectionsAPIError
from ..geo import calculate_destination, calculate_path_distance
from ..models import LatLng, TravelMode
from .progress import ProgressReporter

LOGGER = logging.getLogger(__name__)

LOOP_BEARINGS = (45.0, 135.0, 225.0, 315.0)

__all__ = [
    "OptimizeOptions",
    "optimize_distance",
    "find_loop_locations",
    "loop_corners",
    "generate_loop",
    "calculate_required_loops",
    "estimate_final_distance",
]


@dataclass(frozen=True, slots=True)
class OptimizeOptions:
    tolerance: float = DEFAULT_DISTANCE_TOLERANCE
    max_loops: int = DEFAULT_MAX_LOOPS
    travel_mode: TravelMode = DEFAULT_TRAVEL_MODE  # type: ignore[assignment]
    max_retries: int = DIRECTIONS_MAX_RETRIES
    provider: Optional[DirectionsProvider] = None
    progress: Optional[ProgressReporter] = None
    cancel_token: Optional[CancellationToken] = None
    on_fallback: Optional[Callable[[int, Exception], None]] = None


def find_loop_locations(route_length: int, num_loops: int) -> List[int]:
    """Distinct anchor indices spread evenly over the middle 60% of the route.

    When the interior is too short to space ``num_loops`` anchors apart, every
    interior index is used once, so fewer anchors than requested come back.
    """

    valid_start = math.ceil(route_length * 0.2)
    valid_end = math.floor(route_length * 0.8)
    valid_length = valid_end - valid_start
    if num_loops <= 0 or valid_length <= 0:
        return []
    interval = valid_length // (num_loops + 1)
    if interval == 0:
        return list(range(valid_start, valid_end))[:num_loops]
    return [valid_start + i * interval for i in range(1, num_loops + 1)]


def loop_corners(anchor: LatLng, loop_distance: float) -> List[LatLng]:
    """Four corners of a square detour of roughly ``loop_distance`` metres."""

    half_side = loop_distance / 4.0 / 2.0
    return [calculate_destination(anchor, half_side, bearing) for bearing in LOOP_BEARINGS]


def generate_loop(
    anchor: LatLng,
    loop_distance: float,
    provider: DirectionsProvider,
    *,
    travel_mode: TravelMode = DEFAULT_TRAVEL_MODE,  # type: ignore[assignment]
    max_retries: int = DIRECTIONS_MAX_RETRIES,
    cancel_token: Optional[CancellationToken] = None,
) -> List[LatLng]:
    """Snapped loop from ``anchor`` through the four corners back to ``anchor``."""

    corners = loop_corners(anchor, loop_distance)
    request = DirectionsRequest(
        origin=anchor,
        destination=anchor,
        waypoints=tuple(corners),
        travel_mode=travel_mode,
    )
    result = get_directions_with_retry(
        provider, request, max_retries=max_retries, cancel_token=cancel_token
    )
    return list(result.path)


def optimize_distance(
    route: List[LatLng],
    target_distance: float,
    options: OptimizeOptions | None = None,
) -> List[LatLng]:
    """Return ``route`` itself when within tolerance or too long, else a longer copy.

    A short route gets up to ``max_loops`` loops, one per ``LOOP_DISTANCE_M``
    of deficit, each sized to an equal share of the deficit. A loop whose
    directions request fails is replaced by its raw corners.
    """

    opts = options or OptimizeOptions()
    progress = opts.progress or ProgressReporter()
    current = calculate_path_distance(route)
    ratio = current / target_distance if target_distance > 0 else 1.0

    progress.report(0, "Checking distance...")
    if 1 - opts.tolerance <= ratio <= 1 + opts.tolerance:
        progress.report(100, "Distance is within tolerance")
        return route
    if ratio > 1 + opts.tolerance:
        # Shortening would distort the shape; the route is kept as measured.
        LOGGER.info("Route is %.0f%% too long; keeping it", (ratio - 1) * 100)
        progress.report(100, "Distance optimization complete")
        return route

    deficit = target_distance - current
    progress.report(20, f"Route is {round((1 - ratio) * 100)}% too short, adding loops...")
    if len(route) < MIN_POINTS_FOR_LOOPS or opts.max_loops <= 0:
        LOGGER.info("Route too short for loops (%d points)", len(route))
        return route

    loops = min(opts.max_loops, math.ceil(deficit / LOOP_DISTANCE_M))
    locations = find_loop_locations(len(route), loops)
    if not locations:
        return route
    per_loop = deficit / len(locations)
    provider = opts.provider or get_default_provider()
    modified = list(route)
    for index in range(len(locations)):
        location = locations[index]
        if opts.cancel_token is not None:
            opts.cancel_token.raise_if_cancelled()
        progress.report(
            20 + index / len(locations) * 70, f"Adding loop {index + 1}/{len(locations)}..."
        )
        anchor = modified[location]
        try:
            loop = generate_loop(
                anchor,
                per_loop,
                provider,
                travel_mode=opts.travel_mode,
                max_retries=opts.max_retries,
                cancel_token=opts.cancel_token,
            )
        except (DirectionsAPIError, ValueError) as exc:
            LOGGER.warning("Failed to snap loop %d, using raw corners: %s", index + 1, exc)
            if opts.on_fallback is not None:
                opts.on_fallback(index, exc)
            loop = loop_corners(anchor, per_loop)
        if not loop:
            continue
        modified[location + 1 : location + 1] = loop
        # Later anchors shift by the inserted length.
        locations[index + 1 :] = [later + len(loop) for later in locations[index + 1 :]]

    LOGGER.info(
        "Added %d loops: %.0fm -> %.0fm (target %.0fm)",
        len(locations),
        current,
        calculate_path_distance(modified),
        target_distance,
    )
    progress.report(100, "Loops added successfully")
    return modified


def calculate_required_loops(
    current_distance: float, target_distance: float, loop_distance: float = LOOP_DISTANCE_M
) -> int:
    deficit = target_distance - current_distance
    if deficit <= 0:
        return 0
    return math.ceil(deficit / loop_distance)


def estimate_final_distance(
    current_distance: float,
    target_distance: float,
    tolerance: float = DEFAULT_DISTANCE_TOLERANCE,
) -> float:
    """Expected distance after optimization (target when loops will be added)."""

    ratio = current_distance / target_distance
    if ratio < 1 - tolerance:
        return target_distance
    return current_distance
