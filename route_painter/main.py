"""Command line entry point: paint a shape or text as a running route.

Examples:
    python -m route_painter --text 2026 --lat 25.0330 --lng 121.5654 --distance 10000
    python -m route_painter --shape heart --lat 51.5 --lng -0.12 --grid --gpx out/
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from .config import (
    DEFAULT_BLOCK_SIZE_M,
    DEFAULT_MAX_WAYPOINTS_PER_SEGMENT,
    DEFAULT_NUM_SEGMENTS,
    DEFAULT_TARGET_DISTANCE_M,
    DEFAULT_TRAVEL_MODE,
)
from .errors import InputValidationError, RoutePainterError
from .export import (
    create_route_map,
    export_gpx,
    generate_google_maps_url,
    generate_route_description,
    validate_route_for_url,
)
from .geo import format_distance
from .location import StaticLocationSource
from .models import TRAVEL_MODES, GeneratedRoute, Point2D
from .routing import RouteGenerationOptions, estimate_generation_time, generate_route
from .session import RouteSession
from .shapes import AVAILABLE_SHAPES

LOGGER = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INVALID_INPUT = 2


def _setup_logging(level: str = "INFO") -> None:
    if not logging.getLogger().hasHandlers():
        logging.basicConfig(
            level=getattr(logging, level),
            format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        )
    else:
        logging.getLogger().setLevel(getattr(logging, level))


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Turn text or a shape into a road-following running route"
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--text", help="Text to draw (up to 10 characters)")
    source.add_argument(
        "--shape",
        choices=[shape.id for shape in AVAILABLE_SHAPES],
        help="Predefined shape to draw",
    )
    parser.add_argument(
        "--analog",
        action="store_true",
        help="Draw digits with the built-in clock-style outlines instead of a font",
    )
    parser.add_argument("--lat", type=float, required=True, help="Route center latitude")
    parser.add_argument("--lng", type=float, required=True, help="Route center longitude")
    parser.add_argument(
        "--distance",
        type=float,
        default=DEFAULT_TARGET_DISTANCE_M,
        help="Target distance in metres (500-100000)",
    )
    parser.add_argument("--grid", action="store_true", help="Grid (Manhattan) mode")
    parser.add_argument(
        "--block-size",
        type=float,
        default=DEFAULT_BLOCK_SIZE_M,
        help="City block size in metres for grid mode",
    )
    parser.add_argument(
        "--snap-blocks",
        action="store_true",
        help="Snap grid corners to the block lattice",
    )
    parser.add_argument("--rotation", type=float, default=0.0, help="Rotation in degrees")
    parser.add_argument(
        "--segments",
        type=int,
        default=DEFAULT_NUM_SEGMENTS,
        help="Number of chunks snapped separately",
    )
    parser.add_argument(
        "--max-waypoints",
        type=int,
        default=DEFAULT_MAX_WAYPOINTS_PER_SEGMENT,
        help="Waypoint ceiling per directions request",
    )
    parser.add_argument(
        "--no-optimize",
        action="store_true",
        help="Skip adding loops when the route is short",
    )
    parser.add_argument(
        "--travel-mode",
        choices=TRAVEL_MODES,
        type=str.upper,
        default=DEFAULT_TRAVEL_MODE,
        help="Directions travel mode",
    )
    parser.add_argument("--gpx", help="Directory to write the GPX file to")
    parser.add_argument("--html", help="Path of an HTML map preview to write")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Python logging level",
    )
    return parser


def _label(args: argparse.Namespace) -> str:
    return args.shape or args.text


def _progress(percent: float, step: str) -> None:
    LOGGER.info("[%3.0f%%] %s", percent, step)


def _print_summary(route: GeneratedRoute, url: str) -> None:
    print(f"Distance: {format_distance(route.distance)} "
          f"(target {format_distance(route.target_distance)}, {route.accuracy:.1f}%)")
    print(f"Points:   {len(route.snapped_route)}")
    failed = route.diagnostics.get("failed_chunks") or []
    if failed:
        print(f"Warning:  {len(failed)} segment(s) could not be snapped to roads")
    print(f"Maps URL: {url}")


def _write_outputs(args: argparse.Namespace, route: GeneratedRoute) -> None:
    label = _label(args)
    if args.gpx:
        path = export_gpx(
            route.snapped_route,
            f"Route {label}",
            generate_route_description(route.distance, label),
            output_dir=args.gpx,
        )
        print(f"GPX:      {path}")
    if args.html:
        create_route_map(route, title=label, output_html_path=Path(args.html))
        print(f"Preview:  {args.html}")


def run(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.log_level)

    session = RouteSession()
    if args.shape:
        session.set_input("shape", args.shape)
    else:
        session.set_input("analog" if args.analog else "text", args.text)
    session.set_distance(args.distance)
    if not session.update_location_from(StaticLocationSource((args.lat, args.lng))):
        LOGGER.error("%s", session.state.error)
        return EXIT_INVALID_INPUT

    try:
        ideal_path: List[Point2D] = session.build_ideal_path()
    except InputValidationError as exc:
        LOGGER.error("Invalid input: %s", exc)
        return EXIT_INVALID_INPUT
    except RoutePainterError as exc:
        LOGGER.error("Could not build the shape: %s", exc)
        return EXIT_FAILURE
    LOGGER.info(
        "Estimated generation time for %d points: ~%.0fs",
        len(ideal_path),
        estimate_generation_time(len(ideal_path), args.distance),
    )

    options = RouteGenerationOptions(
        target_distance=args.distance,
        num_segments=args.segments,
        max_waypoints_per_segment=args.max_waypoints,
        optimize_distance=not args.no_optimize,
        grid_mode=args.grid,
        block_size=args.block_size,
        snap_to_blocks=args.snap_blocks,
        rotation=args.rotation,
        travel_mode=args.travel_mode,
        on_progress=_progress,
    )
    try:
        route = generate_route(ideal_path, session.route_center, options)
    except InputValidationError as exc:
        LOGGER.error("Invalid input: %s", exc)
        return EXIT_INVALID_INPUT
    except RoutePainterError as exc:
        LOGGER.error("Route generation failed: %s", exc)
        return EXIT_FAILURE

    url_check = validate_route_for_url(route.snapped_route)
    if url_check.warning:
        LOGGER.warning("%s", url_check.warning)
    url = generate_google_maps_url(route.snapped_route, travel_mode=args.travel_mode)
    _print_summary(route, url)
    _write_outputs(args, route)
    return EXIT_OK


def main() -> None:
    sys.exit(run())


if __name__ == "__main__":
    main()
