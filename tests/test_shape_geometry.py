"""Normalization and simplification of planar paths."""

from __future__ import annotations

import math

import pytest

from route_painter.models import Point2D
from route_painter.shapes.normalizer import (
    calculate_path_length,
    get_bounds,
    is_path_closed,
    normalize_path,
    polygon_area,
    rotate_path,
    scale_normalized_path,
)
from route_painter.shapes.simplifier import (
    perpendicular_distance,
    remove_duplicates,
    simplify_path,
    simplify_to_point_count,
    uniform_sample,
)


def test_normalize_preserves_aspect_ratio():
    path = [Point2D(10, 20), Point2D(30, 20), Point2D(30, 30)]
    normalized = normalize_path(path)
    assert normalized == [Point2D(0.0, 0.0), Point2D(1.0, 0.0), Point2D(1.0, 0.5)]


def test_normalize_degenerate_dimension_collapses_to_center():
    path = [Point2D(0, 5), Point2D(10, 5), Point2D(20, 5)]
    assert normalize_path(path) == [Point2D(0.5, 0.5)] * 3
    assert normalize_path([]) == []


def test_normalize_bounds_within_unit_square():
    path = [Point2D(-3.5, 8), Point2D(2, -1), Point2D(7, 4), Point2D(0, 0)]
    bounds = get_bounds(normalize_path(path))
    assert bounds.min_x == pytest.approx(0.0)
    assert bounds.min_y == pytest.approx(0.0)
    assert max(bounds.max_x, bounds.max_y) == pytest.approx(1.0)


def test_path_length_area_and_closure(square_path):
    assert calculate_path_length(square_path) == pytest.approx(4.0)
    assert polygon_area(square_path) == pytest.approx(1.0)
    assert is_path_closed(square_path)
    assert not is_path_closed(square_path[:-1])
    assert calculate_path_length([Point2D(0, 0)]) == 0.0


def test_rotate_about_bounds_center(square_path):
    rotated = rotate_path(square_path, math.pi / 2)
    # A square rotated by 90 degrees about its centre maps onto itself.
    for point in rotated:
        assert min(abs(point.x), abs(point.x - 1)) == pytest.approx(0.0, abs=1e-9)
        assert min(abs(point.y), abs(point.y - 1)) == pytest.approx(0.0, abs=1e-9)


def test_scale_normalized_path():
    scaled = scale_normalized_path([Point2D(0.5, 1.0)], 200, 100)
    assert scaled == [Point2D(100.0, 100.0)]


def test_perpendicular_distance_and_degenerate_chord():
    assert perpendicular_distance(Point2D(1, 1), Point2D(0, 0), Point2D(2, 0)) == pytest.approx(1.0)
    assert perpendicular_distance(Point2D(3, 4), Point2D(0, 0), Point2D(0, 0)) == pytest.approx(5.0)


def test_simplify_keeps_endpoints_and_corners():
    path = [Point2D(0, 0), Point2D(1, 0.001), Point2D(2, 0), Point2D(2, 1), Point2D(2, 2)]
    simplified = simplify_path(path, tolerance=0.01)
    assert simplified == [Point2D(0, 0), Point2D(2, 0), Point2D(2, 2)]


def test_simplify_point_at_tolerance_is_dropped():
    path = [Point2D(0, 0), Point2D(1, 0.5), Point2D(2, 0)]
    assert simplify_path(path, tolerance=0.5) == [Point2D(0, 0), Point2D(2, 0)]
    assert simplify_path(path, tolerance=0.49) == path


def test_simplify_handles_long_paths_without_recursion():
    path = [Point2D(i, math.sin(i / 10.0)) for i in range(20000)]
    simplified = simplify_path(path, tolerance=0.001)
    assert simplified[0] == path[0]
    assert simplified[-1] == path[-1]
    assert len(simplified) < len(path)


def test_simplify_to_point_count_returns_short_paths_unchanged(square_path):
    assert simplify_to_point_count(square_path, 10) == square_path
    circle = [Point2D(math.cos(t / 50.0 * 2 * math.pi), math.sin(t / 50.0 * 2 * math.pi)) for t in range(51)]
    reduced = simplify_to_point_count(circle, 8)
    assert 2 <= len(reduced) < len(circle)


def test_uniform_sample_spacing():
    path = [Point2D(0, 0), Point2D(10, 0)]
    assert uniform_sample(path, 5) == path
    dense = [Point2D(0, 0), Point2D(4, 0), Point2D(6, 0), Point2D(10, 0)]
    sampled = uniform_sample(dense, 3)
    assert sampled == [Point2D(0, 0), Point2D(5.0, 0.0), Point2D(10, 0)]


def test_remove_duplicates_threshold():
    path = [Point2D(0, 0), Point2D(0.00005, 0), Point2D(1, 0), Point2D(1, 0)]
    assert remove_duplicates(path) == [Point2D(0, 0), Point2D(1, 0)]
    assert remove_duplicates(path, threshold=2.0) == [Point2D(0, 0)]


def test_zero_tolerance_keeps_non_collinear_points():
    path = [Point2D(math.cos(t / 5.0), math.sin(t / 5.0)) for t in range(20)]
    assert simplify_path(path, tolerance=0) == path


def test_larger_tolerance_never_keeps_more_points():
    path = [Point2D(i / 100.0, math.sin(i / 7.0) * 0.3) for i in range(200)]
    counts = [len(simplify_path(path, tol)) for tol in (0.0001, 0.001, 0.01, 0.05, 0.2)]
    assert counts == sorted(counts, reverse=True)
    simplified = simplify_path(path, 0.01)
    # Result is a subsequence of the input.
    positions = [path.index(point) for point in simplified]
    assert positions == sorted(positions)
