"""Manhattan (grid-aligned) path generation for block-structured cities.

Smooth shapes become step-wise paths made only of horizontal and vertical
moves, optionally snapped to a block lattice, so that the route can follow a
street grid instead of cutting across blocks.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import List, Sequence

from ..config import DEFAULT_BLOCK_SIZE_M
from ..geo import calculate_bearing, segment_distances
from ..models import LatLng, Point2D

LOGGER = logging.getLogger(__name__)

GRID_EPSILON = 0.001

__all__ = [
    "GRID_EPSILON",
    "convert_to_grid_path",
    "snap_to_block_grid",
    "simplify_grid_path",
    "generate_grid_art_path",
    "detect_grid_orientation",
    "estimate_block_size",
]


def convert_to_grid_path(path: Sequence[Point2D]) -> List[Point2D]:
    """Replace every segment with a horizontal move followed by a vertical one.

    Moves shorter than ``GRID_EPSILON`` on an axis are skipped.
    """

    if len(path) < 2:
        return list(path)
    current = path[0]
    grid_path: List[Point2D] = [current]
    for target in path[1:]:
        dx = target[0] - current[0]
        dy = target[1] - current[1]
        if abs(dx) > GRID_EPSILON:
            current = Point2D(target[0], current[1])
            grid_path.append(current)
        if abs(dy) > GRID_EPSILON:
            current = Point2D(target[0], target[1])
            grid_path.append(current)
    return grid_path


def snap_to_block_grid(
    path: Sequence[Point2D], block_size: float = DEFAULT_BLOCK_SIZE_M
) -> List[Point2D]:
    """Round coordinates to the block lattice (one normalized unit = 1 km)."""

    step = block_size / 1000.0
    return [Point2D(round(x / step) * step, round(y / step) * step) for x, y in path]


def simplify_grid_path(path: Sequence[Point2D]) -> List[Point2D]:
    """Keep only turning points and the endpoints.

    A point is dropped when it repeats the last kept point or when the moves
    into and out of it point the same way.
    """

    if len(path) < 3:
        return list(path)
    simplified: List[Point2D] = [path[0]]
    for index in range(1, len(path) - 1):
        prev = simplified[-1]
        curr = path[index]
        nxt = path[index + 1]
        dx1, dy1 = curr[0] - prev[0], curr[1] - prev[1]
        dx2, dy2 = nxt[0] - curr[0], nxt[1] - curr[1]
        if abs(dx1) <= GRID_EPSILON and abs(dy1) <= GRID_EPSILON:
            continue
        cross = dx1 * dy2 - dy1 * dx2
        dot = dx1 * dx2 + dy1 * dy2
        if abs(cross) <= GRID_EPSILON and dot > 0:
            continue
        simplified.append(curr)
    simplified.append(path[-1])
    return simplified


def generate_grid_art_path(
    path: Sequence[Point2D],
    block_size: float = DEFAULT_BLOCK_SIZE_M,
    *,
    snap_to_blocks: bool = False,
) -> List[Point2D]:
    """Manhattan conversion, optional block snapping, then corner-only simplification."""

    grid_path = convert_to_grid_path(path)
    if snap_to_blocks:
        grid_path = snap_to_block_grid(grid_path, block_size)
    grid_path = simplify_grid_path(grid_path)
    LOGGER.debug(
        "Grid path generated: %d -> %d points (block=%.0fm snap=%s)",
        len(path),
        len(grid_path),
        block_size,
        snap_to_blocks,
    )
    return grid_path


def detect_grid_orientation(sample_points: Sequence[LatLng]) -> float:
    """Dominant street bearing (rounded to 45 degrees) folded into [0, 90)."""

    if len(sample_points) < 2:
        return 0.0
    rounded = [
        round(calculate_bearing(a, b) / 45.0) * 45
        for a, b in zip(sample_points, sample_points[1:])
    ]
    primary, _count = Counter(rounded).most_common(1)[0]
    return float(primary % 90)


def estimate_block_size(sample_points: Sequence[LatLng]) -> float:
    """Median spacing of consecutive samples rounded to 50 m (100 m default)."""

    if len(sample_points) < 10:
        return DEFAULT_BLOCK_SIZE_M
    distances = sorted(float(d) for d in segment_distances(sample_points))
    # Upper median for even counts.
    middle = distances[len(distances) // 2]
    return float(round(middle / 50.0) * 50)
