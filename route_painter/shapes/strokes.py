"""Split pen commands into strokes, order them and merge into one path.

Pen commands use the ``fontTools`` recording format: a sequence of
``(operator, points)`` tuples with operators ``moveTo``, ``lineTo``,
``curveTo``, ``qCurveTo``, ``closePath`` and ``endPath``.
"""

from __future__ import annotations

import math
from typing import Iterable, List, Optional, Sequence, Tuple

from fontTools.pens.basePen import (
    decomposeQuadraticSegment,
    decomposeSuperBezierSegment,
)

from ..config import CURVE_SAMPLES
from ..models import Point2D, Stroke
from .normalizer import polygon_area

PenCommand = Tuple[str, Sequence[Optional[Tuple[float, float]]]]

__all__ = [
    "PenCommand",
    "commands_to_strokes",
    "stroke_area",
    "filter_largest_strokes",
    "optimize_stroke_order",
    "merge_strokes",
    "GRID_CONNECTOR_EPSILON",
]

GRID_CONNECTOR_EPSILON = 0.001


def _cubic(p0, p1, p2, p3, t: float) -> Point2D:
    mt = 1.0 - t
    a, b, c, d = mt**3, 3 * mt * mt * t, 3 * mt * t * t, t**3
    return Point2D(
        a * p0[0] + b * p1[0] + c * p2[0] + d * p3[0],
        a * p0[1] + b * p1[1] + c * p2[1] + d * p3[1],
    )


def _quadratic(p0, p1, p2, t: float) -> Point2D:
    mt = 1.0 - t
    a, b, c = mt * mt, 2 * mt * t, t * t
    return Point2D(
        a * p0[0] + b * p1[0] + c * p2[0],
        a * p0[1] + b * p1[1] + c * p2[1],
    )


def _flatten_cubic(start, controls, samples: int) -> List[Point2D]:
    points: List[Point2D] = []
    current = start
    controls = list(controls)
    if len(controls) == 1:
        return [Point2D(*controls[0])]
    if len(controls) == 2:
        return _flatten_quadratic(start, controls, samples)
    if len(controls) == 3:
        segments = [tuple(controls)]
    else:
        segments = decomposeSuperBezierSegment(controls)
    for c1, c2, end in segments:
        points.extend(
            _cubic(current, c1, c2, end, step / samples) for step in range(1, samples + 1)
        )
        current = end
    return points


def _flatten_quadratic(start, controls, samples: int) -> List[Point2D]:
    points: List[Point2D] = []
    current = start
    controls = list(controls)
    if len(controls) == 1:
        return [Point2D(*controls[0])]
    for control, end in decomposeQuadraticSegment(controls):
        points.extend(
            _quadratic(current, control, end, step / samples)
            for step in range(1, samples + 1)
        )
        current = end
    return points


def commands_to_strokes(
    commands: Iterable[PenCommand],
    *,
    id_prefix: str = "stroke",
    samples: int = CURVE_SAMPLES,
) -> List[Stroke]:
    """Convert recorded pen commands into strokes, one per ``moveTo``.

    Curves are flattened with ``samples`` points per segment and
    ``closePath`` appends the stroke's first point.
    """

    strokes: List[Stroke] = []
    current: List[Point2D] = []

    def finish() -> None:
        if len(current) >= 2:
            strokes.append(Stroke(id=f"{id_prefix}-{len(strokes)}", points=list(current)))
        current.clear()

    for operator, args in commands:
        if operator == "moveTo":
            finish()
            current.append(Point2D(*args[0]))
        elif operator == "lineTo":
            current.append(Point2D(*args[0]))
        elif operator == "curveTo":
            start = current[-1] if current else Point2D(0.0, 0.0)
            current.extend(_flatten_cubic(start, args, samples))
        elif operator == "qCurveTo":
            controls = list(args)
            if controls[-1] is None:
                # Contour made only of off-curve points: the implied on-curve
                # point between the last and first control closes the loop.
                controls = controls[:-1]
                first, last = controls[0], controls[-1]
                implied = Point2D((first[0] + last[0]) / 2.0, (first[1] + last[1]) / 2.0)
                if not current:
                    current.append(implied)
                controls.append(implied)
            start = current[-1] if current else Point2D(0.0, 0.0)
            current.extend(_flatten_quadratic(start, controls, samples))
        elif operator == "closePath":
            if current:
                current.append(current[0])
            finish()
        elif operator == "endPath":
            finish()
    finish()
    return strokes


def stroke_area(stroke: Stroke) -> float:
    return polygon_area(stroke.points)


def filter_largest_strokes(strokes: Sequence[Stroke]) -> List[Stroke]:
    """Keep only the stroke(s) with the maximum enclosed area.

    Drops counters (the holes of "0", "8", "A") at the cost of also dropping
    any secondary contour such as the dot of "i".
    """

    if len(strokes) <= 1:
        return list(strokes)
    areas = [stroke_area(stroke) for stroke in strokes]
    largest = max(areas)
    return [stroke for stroke, area in zip(strokes, areas) if area == largest]


def optimize_stroke_order(strokes: Sequence[Stroke]) -> List[Stroke]:
    """Greedy nearest-neighbour ordering starting from the first stroke.

    Each step measures from the current tail to every unvisited stroke's start
    and end; a stroke is reversed when its end is strictly nearer.
    """

    if len(strokes) <= 1:
        return list(strokes)
    remaining = list(strokes[1:])
    ordered = [strokes[0]]
    while remaining:
        tail = ordered[-1].points[-1]
        best_index = 0
        best_distance = math.inf
        reverse = False
        for index, stroke in enumerate(remaining):
            to_start = math.dist(tail, stroke.points[0])
            to_end = math.dist(tail, stroke.points[-1])
            if to_start < best_distance:
                best_distance, best_index, reverse = to_start, index, False
            if to_end < best_distance:
                best_distance, best_index, reverse = to_end, index, True
        chosen = remaining.pop(best_index)
        ordered.append(chosen.reversed() if reverse else chosen)
    return ordered


def _connector(start: Point2D, end: Point2D) -> List[Point2D]:
    elbow = Point2D(end[0], start[1])
    if (
        abs(elbow[0] - start[0]) > GRID_CONNECTOR_EPSILON
        and abs(elbow[1] - end[1]) > GRID_CONNECTOR_EPSILON
    ):
        return [elbow]
    return []


def merge_strokes(strokes: Sequence[Stroke], *, grid_connectors: bool = True) -> List[Point2D]:
    """Concatenate strokes into one path.

    With ``grid_connectors`` each gap gets a horizontal-then-vertical elbow
    point; otherwise strokes are joined by a straight segment.
    """

    merged: List[Point2D] = []
    for index, stroke in enumerate(strokes):
        merged.extend(stroke.points)
        if grid_connectors and index < len(strokes) - 1:
            merged.extend(_connector(stroke.points[-1], strokes[index + 1].points[0]))
    return merged
