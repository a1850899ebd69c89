"""Douglas-Peucker simplification and resampling of planar paths."""

from __future__ import annotations

import math
from typing import List, Sequence

import numpy as np

from ..models import Point2D

__all__ = [
    "perpendicular_distance",
    "simplify_path",
    "simplify_to_point_count",
    "uniform_sample",
    "remove_duplicates",
]


def perpendicular_distance(point: Point2D, start: Point2D, end: Point2D) -> float:
    """Distance from ``point`` to the infinite line through ``start``/``end``."""

    dx = end[0] - start[0]
    dy = end[1] - start[1]
    if dx == 0 and dy == 0:
        return math.hypot(point[0] - start[0], point[1] - start[1])
    numerator = abs(dy * point[0] - dx * point[1] + end[0] * start[1] - end[1] * start[0])
    return numerator / math.hypot(dx, dy)


def _chord_distances(array: np.ndarray, first: int, last: int) -> np.ndarray:
    start = array[first]
    end = array[last]
    interior = array[first + 1 : last]
    dx, dy = end - start
    if dx == 0 and dy == 0:
        return np.hypot(interior[:, 0] - start[0], interior[:, 1] - start[1])
    numerator = np.abs(
        dy * interior[:, 0] - dx * interior[:, 1] + end[0] * start[1] - end[1] * start[0]
    )
    return numerator / math.hypot(dx, dy)


def simplify_path(points: Sequence[Point2D], tolerance: float = 0.01) -> List[Point2D]:
    """Reduce ``points`` while keeping every removed point within ``tolerance``.

    The result is a subsequence of the input that always keeps the first and
    last point. A point survives only when its distance to the current chord is
    strictly greater than ``tolerance``, so ``tolerance=0`` drops nothing but
    exactly collinear points.

    Ranges are processed with an explicit stack so long glyph outlines do not
    hit the interpreter's recursion limit.
    """

    if len(points) <= 2:
        return list(points)
    array = np.asarray(points, dtype=float)
    keep = np.zeros(len(points), dtype=bool)
    keep[0] = keep[-1] = True
    stack = [(0, len(points) - 1)]
    while stack:
        first, last = stack.pop()
        if last - first < 2:
            continue
        distances = _chord_distances(array, first, last)
        offset = int(np.argmax(distances))
        if distances[offset] > tolerance:
            split = first + 1 + offset
            keep[split] = True
            stack.append((first, split))
            stack.append((split, last))
    return [points[i] for i in np.flatnonzero(keep)]


def simplify_to_point_count(
    points: Sequence[Point2D], target_count: int, max_iterations: int = 10
) -> List[Point2D]:
    """Bisect the tolerance until the simplified path has ``target_count`` points.

    Returns the exact hit when found, otherwise the last attempted result.
    """

    if len(points) <= target_count:
        return list(points)
    low, high = 0.0001, 1.0
    best: List[Point2D] = list(points)
    for _ in range(max_iterations):
        tolerance = (low + high) / 2.0
        simplified = simplify_path(points, tolerance)
        if len(simplified) == target_count:
            return simplified
        best = simplified
        if len(simplified) > target_count:
            low = tolerance
        else:
            high = tolerance
    return best


def uniform_sample(points: Sequence[Point2D], num_samples: int) -> List[Point2D]:
    """Resample to ``num_samples`` points equally spaced along the polyline."""

    if len(points) <= num_samples:
        return list(points)
    if num_samples < 2:
        return [points[0]]
    array = np.asarray(points, dtype=float)
    lengths = np.linalg.norm(np.diff(array, axis=0), axis=1)
    cumulative = np.concatenate(([0.0], np.cumsum(lengths)))
    total = cumulative[-1]
    if total == 0:
        return [points[0]] * (num_samples - 1) + [points[-1]]
    targets = np.linspace(0.0, total, num_samples)[1:-1]
    xs = np.interp(targets, cumulative, array[:, 0])
    ys = np.interp(targets, cumulative, array[:, 1])
    sampled = [Point2D(float(x), float(y)) for x, y in zip(xs, ys)]
    return [points[0], *sampled, points[-1]]


def remove_duplicates(points: Sequence[Point2D], threshold: float = 0.0001) -> List[Point2D]:
    """Drop points within ``threshold`` of the previously kept point."""

    if len(points) <= 1:
        return list(points)
    result: List[Point2D] = [points[0]]
    for point in points[1:]:
        prev = result[-1]
        if math.hypot(point[0] - prev[0], point[1] - prev[1]) > threshold:
            result.append(point)
    return result
