"""Geo projection, road snapping, distance optimization and orchestration."""

from .distance_optimizer import (  # noqa: F401
    OptimizeOptions,
    calculate_required_loops,
    estimate_final_distance,
    optimize_distance,
)
from .generator import (  # noqa: F401
    RouteGenerationOptions,
    estimate_generation_time,
    generate_route,
    validate_route_inputs,
)
from .grid import generate_grid_art_path  # noqa: F401
from .progress import ProgressReporter  # noqa: F401
from .projection import ProjectionOptions, path_to_geo  # noqa: F401
from .snapper import SnapOptions, is_location_routable, snap_simple, snap_to_roads  # noqa: F401
