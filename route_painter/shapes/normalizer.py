"""Canonicalize 2-D point sequences into the unit square."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Sequence

import numpy as np

from ..models import Point2D


@dataclass(frozen=True, slots=True)
class Bounds:
    min_x: float
    max_x: float
    min_y: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def center_x(self) -> float:
        return (self.min_x + self.max_x) / 2.0

    @property
    def center_y(self) -> float:
        return (self.min_y + self.max_y) / 2.0


def get_bounds(points: Sequence[Point2D]) -> Bounds:
    """Axis-aligned bounding box (all zeros for an empty path)."""

    if not points:
        return Bounds(0.0, 0.0, 0.0, 0.0)
    array = np.asarray(points, dtype=float)
    min_x, min_y = array.min(axis=0)
    max_x, max_y = array.max(axis=0)
    return Bounds(float(min_x), float(max_x), float(min_y), float(max_y))


def normalize_path(points: Sequence[Point2D]) -> List[Point2D]:
    """Translate to the origin and scale so the longer axis spans [0, 1].

    Aspect ratio and point order are preserved. When either dimension is
    zero every point collapses to the centre ``(0.5, 0.5)``.
    """

    if not points:
        return []
    bounds = get_bounds(points)
    if bounds.width == 0 or bounds.height == 0:
        return [Point2D(0.5, 0.5) for _ in points]
    scale = 1.0 / max(bounds.width, bounds.height)
    return [
        Point2D((p[0] - bounds.min_x) * scale, (p[1] - bounds.min_y) * scale)
        for p in points
    ]


def scale_normalized_path(
    points: Sequence[Point2D], target_width: float, target_height: float
) -> List[Point2D]:
    return [Point2D(p[0] * target_width, p[1] * target_height) for p in points]


def calculate_path_length(points: Sequence[Point2D]) -> float:
    """Planar polyline length (sum of segment lengths)."""

    if len(points) < 2:
        return 0.0
    array = np.asarray(points, dtype=float)
    return float(np.sum(np.linalg.norm(np.diff(array, axis=0), axis=1)))


def rotate_path(points: Sequence[Point2D], angle_radians: float) -> List[Point2D]:
    """Rotate about the bounding-box centre."""

    bounds = get_bounds(points)
    cx, cy = bounds.center_x, bounds.center_y
    cos_a = math.cos(angle_radians)
    sin_a = math.sin(angle_radians)
    rotated: List[Point2D] = []
    for x, y in points:
        dx, dy = x - cx, y - cy
        rotated.append(Point2D(dx * cos_a - dy * sin_a + cx, dx * sin_a + dy * cos_a + cy))
    return rotated


def polygon_area(points: Sequence[Point2D]) -> float:
    """Unsigned shoelace area of the closed polygon through ``points``."""

    if len(points) < 3:
        return 0.0
    array = np.asarray(points, dtype=float)
    xs, ys = array[:, 0], array[:, 1]
    return float(abs(np.dot(xs, np.roll(ys, -1)) - np.dot(np.roll(xs, -1), ys)) / 2.0)


def is_path_closed(points: Sequence[Point2D], tolerance: float = 0.001) -> bool:
    if len(points) < 2:
        return False
    return math.dist(points[0], points[-1]) < tolerance


__all__ = [
    "Bounds",
    "get_bounds",
    "normalize_path",
    "scale_normalized_path",
    "calculate_path_length",
    "rotate_path",
    "polygon_area",
    "is_path_closed",
]
