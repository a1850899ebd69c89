"""Route generation orchestrator.

Pipeline for one run:

1. project the normalized shape onto the map (0-10 %)
2. snap the projected path to roads chunk by chunk (10-80 %)
3. add loop detours when the snapped route is short (80-95 %, optional)
4. measure the result (95-100 %)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional, Sequence

from ..cancellation import CancellationToken
from ..config import (
    DEFAULT_BLOCK_SIZE_M,
    DEFAULT_DISTANCE_TOLERANCE,
    DEFAULT_MAX_LOOPS,
    DEFAULT_MAX_WAYPOINTS_PER_SEGMENT,
    DEFAULT_NUM_SEGMENTS,
    DEFAULT_TARGET_DISTANCE_M,
    DEFAULT_TRAVEL_MODE,
    MAX_TARGET_DISTANCE_M,
    MIN_TARGET_DISTANCE_M,
)
from ..directions_client import DirectionsProvider
from ..errors import (
    GenerationCancelledError,
    InputValidationError,
    RouteGenerationError,
    RoutePainterError,
)
from ..geo import calculate_path_distance, format_distance, is_valid_latlng
from ..models import GeneratedRoute, LatLng, Point2D, TravelMode, ValidationResult
from .distance_optimizer import OptimizeOptions, optimize_distance
from .progress import ProgressCallback, ProgressReporter
from .projection import ProjectionOptions, path_to_geo
from .snapper import SnapOptions, snap_to_roads

LOGGER = logging.getLogger(__name__)

__all__ = [
    "RouteGenerationOptions",
    "generate_route",
    "validate_route_inputs",
    "estimate_generation_time",
]


@dataclass(frozen=True, slots=True)
class RouteGenerationOptions:
    """Immutable configuration of one generation run.

    ``target_distance`` left as ``None`` means the caller's own setting, or
    ``DEFAULT_TARGET_DISTANCE_M`` when there is none.
    """

    target_distance: Optional[float] = None
    num_segments: int = DEFAULT_NUM_SEGMENTS
    max_waypoints_per_segment: int = DEFAULT_MAX_WAYPOINTS_PER_SEGMENT
    optimize_distance: bool = True
    distance_tolerance: float = DEFAULT_DISTANCE_TOLERANCE
    max_loops: int = DEFAULT_MAX_LOOPS
    grid_mode: bool = False
    block_size: float = DEFAULT_BLOCK_SIZE_M
    snap_to_blocks: bool = False
    rotation: float = 0.0
    travel_mode: TravelMode = DEFAULT_TRAVEL_MODE  # type: ignore[assignment]
    provider: Optional[DirectionsProvider] = None
    on_progress: Optional[ProgressCallback] = None
    cancel_token: Optional[CancellationToken] = None


def validate_route_inputs(
    normalized_path: Optional[Sequence[Point2D]],
    route_center: Optional[LatLng],
    target_distance: float,
) -> ValidationResult:
    """Check generation inputs; problems are returned, never raised."""

    if not normalized_path:
        return ValidationResult(False, "No path data. Please enter text or select a shape.")
    if len(normalized_path) < 2:
        return ValidationResult(False, "Path must have at least 2 points.")
    if route_center is None:
        return ValidationResult(
            False,
            "Location not available. Please select a location on the map or enable GPS.",
        )
    if not is_valid_latlng(route_center):
        return ValidationResult(False, f"Location {tuple(route_center)} is not a valid coordinate.")
    if target_distance < MIN_TARGET_DISTANCE_M:
        return ValidationResult(False, "Target distance must be at least 500 meters (0.5 km).")
    if target_distance > MAX_TARGET_DISTANCE_M:
        return ValidationResult(False, "Target distance must be less than 100 km.")
    return ValidationResult(True)


def estimate_generation_time(path_points: int, target_distance: float) -> float:
    """Rough wall-clock estimate in seconds: 5 s + 1 s per 10 points + 2 s per 10 km."""

    return 5.0 + path_points / 10.0 + target_distance / 10_000.0 * 2.0


def generate_route(
    normalized_path: Sequence[Point2D],
    route_center: LatLng,
    options: RouteGenerationOptions | None = None,
) -> GeneratedRoute:
    """Run the full pipeline and return the generated route.

    Raises :class:`InputValidationError` for invalid inputs,
    :class:`RouteGenerationError` when the projection is degenerate and
    :class:`GenerationCancelledError` when the token is cancelled. Chunk and
    loop fallbacks are recorded in ``diagnostics`` instead of failing.
    """

    opts = options or RouteGenerationOptions()
    if opts.target_distance is None:
        opts = replace(opts, target_distance=DEFAULT_TARGET_DISTANCE_M)
    validation = validate_route_inputs(normalized_path, route_center, opts.target_distance)
    if not validation.valid:
        raise InputValidationError(validation.error or "Invalid route inputs")

    token = opts.cancel_token
    progress = ProgressReporter(opts.on_progress)
    center = LatLng(float(route_center[0]), float(route_center[1]))
    diagnostics: Dict[str, Any] = {
        "failed_chunks": [],
        "failed_loops": [],
        "optimized": False,
    }

    def checkpoint() -> None:
        if token is not None:
            token.raise_if_cancelled()

    checkpoint()
    progress.report(5, "Converting to geographic coordinates...")
    geo_path = path_to_geo(
        normalized_path,
        center,
        ProjectionOptions(
            target_distance=opts.target_distance,
            rotation=opts.rotation,
            grid_mode=opts.grid_mode,
            block_size=opts.block_size,
            snap_to_blocks=opts.snap_to_blocks,
        ),
    )
    if len(geo_path) < 2:
        raise RouteGenerationError(
            f"Projection produced {len(geo_path)} point(s); the shape has no extent"
        )
    LOGGER.info(
        "Geographic path generated: %d points, target %s",
        len(geo_path),
        format_distance(opts.target_distance),
    )

    checkpoint()
    progress.report(10, "Snapping to real roads...")
    snapped = snap_to_roads(
        geo_path,
        SnapOptions(
            num_segments=opts.num_segments,
            max_waypoints_per_segment=opts.max_waypoints_per_segment,
            travel_mode=opts.travel_mode,
            provider=opts.provider,
            progress=progress.child(10, 80),
            cancel_token=token,
            on_fallback=lambda index, exc: diagnostics["failed_chunks"].append(
                {"index": index, "error": str(exc)}
            ),
        ),
    )

    final_route: List[LatLng] = snapped
    if opts.optimize_distance:
        checkpoint()
        progress.report(85, "Optimizing distance...")
        try:
            final_route = optimize_distance(
                snapped,
                opts.target_distance,
                OptimizeOptions(
                    tolerance=opts.distance_tolerance,
                    max_loops=opts.max_loops,
                    travel_mode=opts.travel_mode,
                    provider=opts.provider,
                    progress=progress.child(85, 95),
                    cancel_token=token,
                    on_fallback=lambda index, exc: diagnostics["failed_loops"].append(
                        {"index": index, "error": str(exc)}
                    ),
                ),
            )
            diagnostics["optimized"] = final_route is not snapped
        except GenerationCancelledError:
            raise
        except (RoutePainterError, ValueError) as exc:
            LOGGER.warning("Distance optimization failed, keeping snapped route: %s", exc)
            diagnostics["optimization_error"] = str(exc)
            final_route = snapped

    checkpoint()
    progress.report(98, "Calculating route metrics...")
    distance = calculate_path_distance(final_route)
    accuracy = distance / opts.target_distance * 100.0
    progress.report(100, "Route generation complete!")
    LOGGER.info(
        "Route generation complete: ideal=%d geo=%d snapped=%d final=%d points, "
        "%s of %s (%.1f%%)",
        len(normalized_path),
        len(geo_path),
        len(snapped),
        len(final_route),
        format_distance(distance),
        format_distance(opts.target_distance),
        accuracy,
    )
    if diagnostics["failed_chunks"]:
        LOGGER.warning(
            "%d chunk(s) fell back to unsnapped geometry", len(diagnostics["failed_chunks"])
        )
    return GeneratedRoute(
        ideal_path=list(normalized_path),
        geo_path=geo_path,
        snapped_route=final_route,
        distance=distance,
        target_distance=opts.target_distance,
        accuracy=accuracy,
        diagnostics=diagnostics,
    )
