from __future__ import annotations

import pytest

from route_painter.errors import InputValidationError, ShapeNotFoundError
from route_painter.shapes.normalizer import get_bounds
from route_painter.shapes.svg_shapes import (
    AVAILABLE_SHAPES,
    get_shape_by_id,
    load_shape,
    svg_file_to_path,
)


@pytest.mark.parametrize("shape_id", [shape.id for shape in AVAILABLE_SHAPES])
def test_every_shape_loads_into_unit_square(shape_id):
    path = load_shape(shape_id)
    assert len(path) >= 31
    bounds = get_bounds(path)
    assert bounds.min_x == pytest.approx(0.0, abs=1e-9)
    assert bounds.min_y == pytest.approx(0.0, abs=1e-9)
    assert max(bounds.max_x, bounds.max_y) == pytest.approx(1.0)


def test_smiley_chains_all_sub_paths():
    # Face, two eyes and the mouth, 31 samples each.
    assert len(load_shape("smiley")) == 4 * 31


def test_load_shape_returns_fresh_list():
    first = load_shape("heart")
    first.clear()
    assert load_shape("heart")


def test_unknown_shape():
    assert get_shape_by_id("dragon") is None
    with pytest.raises(ShapeNotFoundError, match="Shape not found: dragon"):
        load_shape("dragon")


def test_svg_file_conversion(tmp_path):
    svg = tmp_path / "banner.svg"
    svg.write_text(
        '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 20 10">'
        '<path d="M 0,0 L 10,0 L 10,5 L 0,5 Z"/></svg>',
        encoding="utf-8",
    )
    path = svg_file_to_path(svg, samples=20)
    assert len(path) == 21
    bounds = get_bounds(path)
    assert bounds.width == pytest.approx(1.0)
    assert bounds.height == pytest.approx(0.5)


def test_svg_file_without_paths(tmp_path):
    svg = tmp_path / "empty.svg"
    svg.write_text('<svg xmlns="http://www.w3.org/2000/svg"></svg>', encoding="utf-8")
    with pytest.raises(InputValidationError, match="No paths found in SVG"):
        svg_file_to_path(svg)
