from __future__ import annotations

import math

import pytest

from route_painter.geo import (
    bearing_difference,
    calculate_bearing,
    calculate_destination,
    calculate_geo_centroid,
    calculate_path_area,
    calculate_path_distance,
    cumulative_distances,
    format_distance,
    get_geo_bounds,
    haversine_distance,
    is_valid_latlng,
    latlng_offset_to_meters,
    meters_to_latlng_offset,
    normalize_longitude,
)
from route_painter.models import LatLng, Point2D


def test_haversine_one_degree_latitude():
    assert haversine_distance(LatLng(0, 0), LatLng(1, 0)) == pytest.approx(111_195, rel=1e-3)
    assert haversine_distance(LatLng(10, 10), LatLng(10, 10)) == 0.0


def test_path_distance_matches_sum_of_segments():
    path = [LatLng(51.5, -0.12), LatLng(51.501, -0.12), LatLng(51.501, -0.118)]
    expected = haversine_distance(path[0], path[1]) + haversine_distance(path[1], path[2])
    assert calculate_path_distance(path) == pytest.approx(expected)
    assert list(cumulative_distances(path))[-1] == pytest.approx(expected)
    assert calculate_path_distance(path[:1]) == 0.0


def test_bearings():
    origin = LatLng(0, 0)
    assert calculate_bearing(origin, LatLng(1, 0)) == pytest.approx(0.0)
    assert calculate_bearing(origin, LatLng(0, 1)) == pytest.approx(90.0)
    assert calculate_bearing(origin, LatLng(-1, 0)) == pytest.approx(180.0)
    assert bearing_difference(350, 10) == pytest.approx(20.0)
    assert bearing_difference(0, 180) == pytest.approx(180.0)


def test_destination_round_trip():
    start = LatLng(25.0330, 121.5654)
    target = calculate_destination(start, 1000, 45)
    assert haversine_distance(start, target) == pytest.approx(1000, rel=1e-6)
    assert calculate_bearing(start, target) == pytest.approx(45, abs=0.01)


def test_metre_offsets_round_trip():
    center = LatLng(60.0, 10.0)
    offset = meters_to_latlng_offset(center, Point2D(1000.0, 2000.0))
    # One degree of longitude is half as long at 60 degrees north.
    assert offset.x == pytest.approx(1000.0 / (111_320.0 * 0.5))
    back = latlng_offset_to_meters(center, offset)
    assert back == pytest.approx(Point2D(1000.0, 2000.0))


def test_coordinate_validation():
    assert is_valid_latlng(LatLng(90, 180))
    assert is_valid_latlng((10.0, 20.0))
    assert not is_valid_latlng(None)
    assert not is_valid_latlng((91.0, 0.0))
    assert not is_valid_latlng((0.0, -181.0))
    assert not is_valid_latlng((math.nan, 0.0))
    assert normalize_longitude(190.0) == pytest.approx(-170.0)


def test_bounds_centroid_and_area():
    square = [LatLng(0, 0), LatLng(0, 0.01), LatLng(0.01, 0.01), LatLng(0.01, 0)]
    assert get_geo_bounds(square) == (0.0, 0.0, 0.01, 0.01)
    assert calculate_geo_centroid(square) == pytest.approx(LatLng(0.005, 0.005))
    side = 0.01 * 111_320.0
    assert calculate_path_area(square, LatLng(0, 0)) == pytest.approx(side * side, rel=1e-6)


def test_format_distance():
    assert format_distance(1500) == "1.5 km"
    assert format_distance(450.4) == "450 m"
    assert format_distance(1000) == "1.0 km"
