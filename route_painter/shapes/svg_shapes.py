"""Predefined shape library and SVG-to-path conversion."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path as FilePath
from typing import Iterable, List, Optional, Sequence, Tuple

from cachetools import LRUCache, cached
from svgpathtools import Path, parse_path, svg2paths2

from ..config import SHAPE_SAMPLES_PER_PATH
from ..errors import InputValidationError, ShapeNotFoundError
from ..models import Point2D, Stroke
from .normalizer import normalize_path
from .strokes import merge_strokes, optimize_stroke_order

LOGGER = logging.getLogger(__name__)

__all__ = [
    "ShapeDefinition",
    "AVAILABLE_SHAPES",
    "get_shape_by_id",
    "load_shape",
    "svg_paths_to_path",
    "svg_file_to_path",
    "circle_path_data",
]


def circle_path_data(cx: float, cy: float, r: float) -> str:
    """Two half arcs tracing a full circle."""

    return (
        f"M {cx - r},{cy} A {r},{r} 0 1,0 {cx + r},{cy} "
        f"A {r},{r} 0 1,0 {cx - r},{cy}"
    )


@dataclass(frozen=True, slots=True)
class ShapeDefinition:
    id: str
    name: str
    path_data: Tuple[str, ...]


AVAILABLE_SHAPES: Tuple[ShapeDefinition, ...] = (
    ShapeDefinition(
        "heart",
        "Heart",
        (
            "M 50,90 C 20,70 0,50 0,30 C 0,10 20,0 35,0 C 45,0 50,10 50,15 "
            "C 50,10 55,0 65,0 C 80,0 100,10 100,30 C 100,50 80,70 50,90 Z",
        ),
    ),
    ShapeDefinition(
        "star",
        "Star",
        (
            "M 50,0 L 61,35 L 98,35 L 68,57 L 79,91 L 50,70 L 21,91 L 32,57 "
            "L 2,35 L 39,35 Z",
        ),
    ),
    ShapeDefinition(
        "smiley",
        "Smiley",
        (
            circle_path_data(50, 50, 45),
            circle_path_data(35, 38, 5),
            circle_path_data(65, 38, 5),
            "M 30,62 Q 50,82 70,62",
        ),
    ),
    ShapeDefinition("circle", "Circle", (circle_path_data(50, 50, 45),)),
    ShapeDefinition("triangle", "Triangle", ("M 50,5 L 95,90 L 5,90 Z",)),
)


def get_shape_by_id(shape_id: str) -> Optional[ShapeDefinition]:
    for shape in AVAILABLE_SHAPES:
        if shape.id == shape_id:
            return shape
    return None


def _sample_path(path: Path, samples: int) -> List[Point2D]:
    # Path.point spreads T across segments in proportion to their lengths.
    points: List[Point2D] = []
    for i in range(samples + 1):
        value = path.point(i / samples)
        points.append(Point2D(float(value.real), float(value.imag)))
    return points


def svg_paths_to_path(
    paths: Iterable[Path], samples: int = SHAPE_SAMPLES_PER_PATH
) -> List[Point2D]:
    """Sample each SVG path, chain them nearest-first and normalize."""

    strokes = [
        Stroke(id=f"path-{index}", points=_sample_path(path, samples))
        for index, path in enumerate(paths)
        if len(path) > 0
    ]
    if not strokes:
        raise InputValidationError("No paths found in SVG")
    ordered = optimize_stroke_order(strokes)
    return normalize_path(merge_strokes(ordered, grid_connectors=False))


@cached(cache=LRUCache(maxsize=32))
def _load_shape_points(shape_id: str) -> Tuple[Point2D, ...]:
    shape = get_shape_by_id(shape_id)
    if shape is None:
        raise ShapeNotFoundError(f"Shape not found: {shape_id}")
    points = svg_paths_to_path(parse_path(d) for d in shape.path_data)
    LOGGER.debug("Loaded shape %s with %d points", shape_id, len(points))
    return tuple(points)


def load_shape(shape_id: str) -> List[Point2D]:
    """Normalized path of the predefined shape ``shape_id``."""

    return list(_load_shape_points(shape_id))


def svg_file_to_path(
    svg_file: str | FilePath, samples: int = SHAPE_SAMPLES_PER_PATH
) -> List[Point2D]:
    """Convert every path (and circle/ellipse) element of an SVG file."""

    paths: Sequence[Path]
    paths, _attributes, _svg_attributes = svg2paths2(str(svg_file))
    return svg_paths_to_path(paths, samples)
