from __future__ import annotations

import pytest

from route_painter.models import Point2D, Stroke
from route_painter.shapes.strokes import (
    commands_to_strokes,
    filter_largest_strokes,
    merge_strokes,
    optimize_stroke_order,
    stroke_area,
)


def square(x: float, y: float, size: float, stroke_id: str) -> Stroke:
    return Stroke(
        id=stroke_id,
        points=[
            Point2D(x, y),
            Point2D(x + size, y),
            Point2D(x + size, y + size),
            Point2D(x, y + size),
            Point2D(x, y),
        ],
    )


def test_commands_split_into_strokes_per_move():
    commands = [
        ("moveTo", ((0, 0),)),
        ("lineTo", ((10, 0),)),
        ("lineTo", ((10, 10),)),
        ("closePath", ()),
        ("moveTo", ((20, 20),)),
        ("lineTo", ((30, 20),)),
        ("endPath", ()),
        ("moveTo", ((50, 50),)),
    ]
    strokes = commands_to_strokes(commands, id_prefix="A")
    assert [s.id for s in strokes] == ["A-0", "A-1"]
    assert strokes[0].points == [Point2D(0, 0), Point2D(10, 0), Point2D(10, 10), Point2D(0, 0)]
    assert strokes[1].points == [Point2D(20, 20), Point2D(30, 20)]


def test_cubic_curve_is_flattened():
    commands = [
        ("moveTo", ((0, 0),)),
        ("curveTo", ((0, 10), (10, 10), (10, 0))),
        ("endPath", ()),
    ]
    (stroke,) = commands_to_strokes(commands, samples=4)
    assert len(stroke.points) == 5
    assert stroke.points[-1] == pytest.approx(Point2D(10, 0))
    # Midpoint of the symmetric curve sits at 7.5 height.
    assert stroke.points[2] == pytest.approx(Point2D(5.0, 7.5))


def test_off_curve_only_quadratic_contour_closes():
    commands = [
        ("qCurveTo", ((0, 0), (10, 0), (10, 10), (0, 10), None)),
        ("closePath", ()),
    ]
    (stroke,) = commands_to_strokes(commands, samples=5)
    assert stroke.points[0] == Point2D(0.0, 5.0)
    assert stroke.points[-1] == stroke.points[0]
    assert len(stroke.points) == 1 + 4 * 5 + 1


def test_filter_largest_drops_counters():
    outer = square(0, 0, 10, "outer")
    inner = square(3, 3, 4, "inner")
    assert stroke_area(outer) == pytest.approx(100.0)
    assert filter_largest_strokes([inner, outer]) == [outer]
    twin = square(20, 0, 10, "twin")
    assert filter_largest_strokes([outer, twin]) == [outer, twin]


def test_optimize_order_picks_nearest_and_reverses():
    first = Stroke("a", [Point2D(0, 0), Point2D(1, 0)])
    far = Stroke("far", [Point2D(50, 0), Point2D(60, 0)])
    near_reversed = Stroke("near", [Point2D(5, 0), Point2D(1.5, 0)])
    ordered = optimize_stroke_order([first, far, near_reversed])
    assert [s.id for s in ordered] == ["a", "near", "far"]
    assert ordered[1].points == [Point2D(1.5, 0), Point2D(5, 0)]


def test_merge_with_grid_connectors_inserts_elbow():
    a = Stroke("a", [Point2D(0, 0), Point2D(1, 0)])
    b = Stroke("b", [Point2D(3, 2), Point2D(4, 2)])
    assert merge_strokes([a, b]) == [
        Point2D(0, 0),
        Point2D(1, 0),
        Point2D(3, 0),
        Point2D(3, 2),
        Point2D(4, 2),
    ]
    assert merge_strokes([a, b], grid_connectors=False) == [*a.points, *b.points]


def test_merge_skips_elbow_for_axis_aligned_gap():
    a = Stroke("a", [Point2D(0, 0), Point2D(1, 0)])
    b = Stroke("b", [Point2D(1, 5), Point2D(2, 5)])
    assert merge_strokes([a, b]) == [*a.points, *b.points]
