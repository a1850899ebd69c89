"""Project normalized shape paths onto the globe around a route center."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence

from ..config import (
    DEFAULT_BLOCK_SIZE_M,
    DEFAULT_TARGET_DISTANCE_M,
    GRID_MIN_INFLATION_RATIO,
)
from ..geo import add_offset, meters_to_latlng_offset
from ..models import LatLng, Point2D
from ..shapes.normalizer import calculate_path_length, get_bounds
from .grid import generate_grid_art_path

LOGGER = logging.getLogger(__name__)

__all__ = [
    "ProjectionOptions",
    "path_to_geo",
    "calculate_scale_factor",
    "get_recommended_rotation",
    "effective_target_distance",
]


@dataclass(frozen=True, slots=True)
class ProjectionOptions:
    """How a normalized path is laid onto the map.

    ``scale`` (metres per normalized unit) overrides the value derived from
    ``target_distance`` when given.
    """

    target_distance: float = DEFAULT_TARGET_DISTANCE_M
    rotation: float = 0.0
    scale: Optional[float] = None
    grid_mode: bool = False
    block_size: float = DEFAULT_BLOCK_SIZE_M
    snap_to_blocks: bool = False


def effective_target_distance(
    original_length: float, grid_length: float, target_distance: float
) -> float:
    """Shrink the target when the grid transform lengthened the path.

    The divisor is the inflation ratio but never less than
    ``GRID_MIN_INFLATION_RATIO`` once any inflation happened.
    """

    if original_length <= 0:
        return target_distance
    inflation = grid_length / original_length
    if inflation > 1.0:
        return target_distance / max(inflation, GRID_MIN_INFLATION_RATIO)
    return target_distance


def path_to_geo(
    normalized_path: Sequence[Point2D],
    center: LatLng,
    options: ProjectionOptions | None = None,
) -> List[LatLng]:
    """Map a normalized path to lat/lng around ``center``.

    The planar length of the (possibly grid-transformed) path is scaled to
    ``options.target_distance`` metres. Points are re-centred on the path's
    bounding-box centre, Y is flipped so the drawing's top faces north, and
    the optional rotation is applied clockwise-positive in degrees before
    converting metre offsets to degrees.
    """

    opts = options or ProjectionOptions()
    if not normalized_path:
        return []
    center = LatLng(float(center[0]), float(center[1]))

    path: Sequence[Point2D] = normalized_path
    target = opts.target_distance
    if opts.grid_mode:
        original_length = calculate_path_length(normalized_path)
        path = generate_grid_art_path(
            normalized_path, opts.block_size, snap_to_blocks=opts.snap_to_blocks
        )
        target = effective_target_distance(
            original_length, calculate_path_length(path), target
        )
        LOGGER.debug(
            "Grid mode: %d -> %d points, target %.0fm -> %.0fm",
            len(normalized_path),
            len(path),
            opts.target_distance,
            target,
        )

    length = calculate_path_length(path)
    if length == 0:
        return [center]
    scale = opts.scale if opts.scale is not None else target / length

    bounds = get_bounds(path)
    radians = math.radians(opts.rotation)
    cos_r, sin_r = math.cos(radians), math.sin(radians)
    geo_path: List[LatLng] = []
    for x, y in path:
        east = x - bounds.center_x
        north = -(y - bounds.center_y)
        if opts.rotation:
            east, north = east * cos_r + north * sin_r, -east * sin_r + north * cos_r
        offset = meters_to_latlng_offset(center, Point2D(east * scale, north * scale))
        geo_path.append(add_offset(center, offset))
    return geo_path


def calculate_scale_factor(normalized_path: Sequence[Point2D], target_distance: float) -> float:
    """Metres per normalized unit needed for the path to measure ``target_distance``."""

    length = calculate_path_length(normalized_path)
    if length == 0:
        return target_distance
    return target_distance / length


def get_recommended_rotation(normalized_path: Sequence[Point2D]) -> float:
    """Suggest 90 degrees for paths much wider than tall (looks better on maps)."""

    if len(normalized_path) < 2:
        return 0.0
    bounds = get_bounds(normalized_path)
    if bounds.width > bounds.height * 1.5:
        return 90.0
    return 0.0
