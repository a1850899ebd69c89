"""Chunking and waypoint selection for geographic paths."""

from __future__ import annotations

import math
from typing import List, Optional, Sequence

import numpy as np

from ..config import (
    KEY_POINT_MIN_ANGLE_CHANGE,
    KEY_POINT_SPACING_M,
    MERGE_DUPLICATE_THRESHOLD_M,
)
from ..geo import (
    bearing_difference,
    calculate_bearing,
    cumulative_distances,
    haversine_distance,
)
from ..models import LatLng

__all__ = [
    "divide_into_segments",
    "extract_key_points",
    "sample_points_by_distance",
    "simplify_geo_path",
    "paths_are_similar",
    "merge_segments",
]


def divide_into_segments(path: Sequence[LatLng], num_segments: int) -> List[List[LatLng]]:
    """Split into ``ceil(len / n)``-point chunks that share boundary points.

    Each chunk is extended by the first point of the next one, so merging the
    chunks (dropping shared boundaries) reproduces ``path``.
    """

    if not path:
        return []
    if num_segments <= 1:
        return [list(path)]
    per_segment = math.ceil(len(path) / num_segments)
    segments: List[List[LatLng]] = []
    for index in range(num_segments):
        start = index * per_segment
        if start >= len(path):
            break
        end = min((index + 1) * per_segment + 1, len(path))
        segments.append(list(path[start:end]))
    return segments


def extract_key_points(
    path: Sequence[LatLng],
    max_points: int = 10,
    min_angle_change: float = KEY_POINT_MIN_ANGLE_CHANGE,
) -> List[LatLng]:
    """Pick corners first, then regularly spaced points, up to ``max_points``.

    Paths already within the limit are returned as they are. The first and
    last point are always kept.
    """

    if len(path) <= max_points:
        return list(path)
    key_points: List[LatLng] = [path[0]]
    last_bearing: Optional[float] = None
    for index in range(1, len(path) - 1):
        previous = key_points[-1]
        current = path[index]
        bearing = calculate_bearing(previous, current)
        under_cap = len(key_points) < max_points - 1
        if last_bearing is None:
            last_bearing = bearing
        elif bearing_difference(bearing, last_bearing) >= min_angle_change and under_cap:
            key_points.append(current)
            last_bearing = bearing
            continue
        if under_cap and haversine_distance(previous, current) > KEY_POINT_SPACING_M:
            key_points.append(current)
            last_bearing = bearing
    key_points.append(path[-1])
    return key_points


def sample_points_by_distance(path: Sequence[LatLng], num_points: int) -> List[LatLng]:
    """Existing points nearest to ``num_points`` equally spaced path distances."""

    if len(path) <= num_points:
        return list(path)
    if num_points < 2:
        return [path[0], path[-1]]
    distances = cumulative_distances(path)
    interval = distances[-1] / (num_points - 1)
    sampled: List[LatLng] = [path[0]]
    for step in range(1, num_points - 1):
        target = interval * step
        index = int(np.searchsorted(distances, target, side="left"))
        if index >= len(path):
            break
        index = max(index, 1)
        before = abs(distances[index - 1] - target)
        after = abs(distances[index] - target)
        sampled.append(path[index - 1] if before < after else path[index])
    sampled.append(path[-1])
    return sampled


def simplify_geo_path(path: Sequence[LatLng], tolerance_m: float = 50.0) -> List[LatLng]:
    """Keep points at least ``tolerance_m`` from the previously kept one."""

    if len(path) <= 2:
        return list(path)
    result: List[LatLng] = [path[0]]
    last_kept = path[0]
    for point in path[1:-1]:
        if haversine_distance(last_kept, point) >= tolerance_m:
            result.append(point)
            last_kept = point
    result.append(path[-1])
    return result


def paths_are_similar(
    first: Sequence[LatLng], second: Sequence[LatLng], threshold_m: float = 100.0
) -> bool:
    if len(first) != len(second):
        return False
    return all(haversine_distance(a, b) <= threshold_m for a, b in zip(first, second))


def merge_segments(
    segments: Sequence[Sequence[LatLng]],
    duplicate_threshold_m: float = MERGE_DUPLICATE_THRESHOLD_M,
) -> List[LatLng]:
    """Concatenate chunks, dropping a chunk's first point when it repeats the tail."""

    merged: List[LatLng] = []
    for segment in segments:
        if not segment:
            continue
        start = 0
        if merged and haversine_distance(merged[-1], segment[0]) < duplicate_threshold_m:
            start = 1
        merged.extend(segment[start:])
    return merged
