"""Spherical geometry helpers for lat/lng paths."""

from __future__ import annotations

import math
from typing import Iterable, Sequence, Tuple

import numpy as np
from numpy.typing import NDArray

from .config import METERS_PER_DEGREE_LAT
from .models import LatLng, Point2D

EARTH_RADIUS_M = 6_371_000.0


def haversine_distance(first: LatLng, second: LatLng) -> float:
    """Great-circle distance in metres between two points."""

    lat1, lon1 = first
    lat2, lon2 = second
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    delta_lat = lat2_rad - lat1_rad
    delta_lon = math.radians(lon2 - lon1)
    sin_half_lat = math.sin(delta_lat / 2.0)
    sin_half_lon = math.sin(delta_lon / 2.0)
    a = sin_half_lat**2 + math.cos(lat1_rad) * math.cos(lat2_rad) * sin_half_lon**2
    c = 2.0 * math.atan2(math.sqrt(a), math.sqrt(1.0 - a))
    return EARTH_RADIUS_M * c


def segment_distances(points: Sequence[LatLng]) -> NDArray[np.float64]:
    """Return the haversine length of each consecutive pair (len - 1 values)."""

    if len(points) < 2:
        return np.zeros(0, dtype=float)
    coords = np.radians(np.asarray(points, dtype=float))
    lat = coords[:, 0]
    lon = coords[:, 1]
    delta_lat = np.diff(lat)
    delta_lon = np.diff(lon)
    a = (
        np.sin(delta_lat / 2.0) ** 2
        + np.cos(lat[:-1]) * np.cos(lat[1:]) * np.sin(delta_lon / 2.0) ** 2
    )
    a = np.clip(a, 0.0, 1.0)
    return EARTH_RADIUS_M * 2.0 * np.arctan2(np.sqrt(a), np.sqrt(1.0 - a))


def cumulative_distances(points: Sequence[LatLng]) -> NDArray[np.float64]:
    """Cumulative along-path distance for every point, starting at 0."""

    if not points:
        return np.zeros(0, dtype=float)
    return np.concatenate(([0.0], np.cumsum(segment_distances(points))))


def calculate_path_distance(points: Sequence[LatLng]) -> float:
    """Total haversine length of a path in metres."""

    if len(points) < 2:
        return 0.0
    return float(np.sum(segment_distances(points)))


def calculate_bearing(start: LatLng, end: LatLng) -> float:
    """Initial bearing in degrees [0, 360), 0 being north."""

    lat1 = math.radians(start[0])
    lat2 = math.radians(end[0])
    delta_lng = math.radians(end[1] - start[1])
    y = math.sin(delta_lng) * math.cos(lat2)
    x = math.cos(lat1) * math.sin(lat2) - math.sin(lat1) * math.cos(lat2) * math.cos(
        delta_lng
    )
    return (math.degrees(math.atan2(y, x)) + 360.0) % 360.0


def bearing_difference(first: float, second: float) -> float:
    """Smallest absolute angle between two bearings, in [0, 180]."""

    diff = abs(first - second) % 360.0
    return 360.0 - diff if diff > 180.0 else diff


def calculate_destination(start: LatLng, distance_m: float, bearing: float) -> LatLng:
    """Point reached travelling ``distance_m`` from ``start`` along ``bearing``."""

    bearing_rad = math.radians(bearing)
    lat1 = math.radians(start[0])
    lng1 = math.radians(start[1])
    angular = distance_m / EARTH_RADIUS_M
    lat2 = math.asin(
        math.sin(lat1) * math.cos(angular)
        + math.cos(lat1) * math.sin(angular) * math.cos(bearing_rad)
    )
    lng2 = lng1 + math.atan2(
        math.sin(bearing_rad) * math.sin(angular) * math.cos(lat1),
        math.cos(angular) - math.sin(lat1) * math.sin(lat2),
    )
    return LatLng(math.degrees(lat2), normalize_longitude(math.degrees(lng2)))


def meters_per_degree_lat() -> float:
    return METERS_PER_DEGREE_LAT


def meters_per_degree_lng(latitude: float) -> float:
    return METERS_PER_DEGREE_LAT * math.cos(math.radians(latitude))


def meters_to_latlng_offset(center: LatLng, offset_m: Point2D) -> Point2D:
    """Convert an east/north metre offset to a (lng, lat) degree offset."""

    return Point2D(
        offset_m[0] / meters_per_degree_lng(center[0]),
        offset_m[1] / meters_per_degree_lat(),
    )


def latlng_offset_to_meters(center: LatLng, offset_deg: Point2D) -> Point2D:
    """Inverse of :func:`meters_to_latlng_offset`."""

    return Point2D(
        offset_deg[0] * meters_per_degree_lng(center[0]),
        offset_deg[1] * meters_per_degree_lat(),
    )


def add_offset(point: LatLng, offset_deg: Point2D) -> LatLng:
    return LatLng(point[0] + offset_deg[1], point[1] + offset_deg[0])


def clamp_latitude(lat: float) -> float:
    return max(-90.0, min(90.0, lat))


def normalize_longitude(lng: float) -> float:
    """Wrap a longitude into [-180, 180]."""

    if -180.0 <= lng <= 180.0:
        return lng
    wrapped = (lng + 180.0) % 360.0 - 180.0
    return 180.0 if wrapped == -180.0 and lng > 0 else wrapped


def is_valid_latlng(point: LatLng | None) -> bool:
    if point is None:
        return False
    try:
        lat, lng = float(point[0]), float(point[1])
    except (TypeError, ValueError, IndexError):
        return False
    if math.isnan(lat) or math.isnan(lng):
        return False
    return -90.0 <= lat <= 90.0 and -180.0 <= lng <= 180.0


def to_latlng(value: Iterable[float]) -> LatLng:
    """Coerce a ``(lat, lng)`` pair (list, tuple, LatLng) into :class:`LatLng`."""

    lat, lng = value
    return LatLng(float(lat), float(lng))


def get_geo_bounds(points: Sequence[LatLng]) -> Tuple[float, float, float, float]:
    """Return ``(south, west, north, east)`` for a non-empty path."""

    if not points:
        return (0.0, 0.0, 0.0, 0.0)
    array = np.asarray(points, dtype=float)
    south, west = array.min(axis=0)
    north, east = array.max(axis=0)
    return float(south), float(west), float(north), float(east)


def calculate_geo_centroid(points: Sequence[LatLng]) -> LatLng:
    if not points:
        return LatLng(0.0, 0.0)
    lat, lng = np.asarray(points, dtype=float).mean(axis=0)
    return LatLng(float(lat), float(lng))


def calculate_path_area(geo_path: Sequence[LatLng], center: LatLng) -> float:
    """Approximate enclosed area (m^2) using the shoelace formula around ``center``."""

    if len(geo_path) < 3:
        return 0.0
    array = np.asarray(geo_path, dtype=float)
    xs = (array[:, 1] - center[1]) * meters_per_degree_lng(center[0])
    ys = (array[:, 0] - center[0]) * meters_per_degree_lat()
    area = np.dot(xs, np.roll(ys, -1)) - np.dot(np.roll(xs, -1), ys)
    return float(abs(area) / 2.0)


def format_distance(meters: float) -> str:
    """Format a distance as ``"1.5 km"`` or ``"450 m"``."""

    if meters >= 1000:
        return f"{meters / 1000:.1f} km"
    return f"{round(meters)} m"


__all__ = [
    "EARTH_RADIUS_M",
    "haversine_distance",
    "segment_distances",
    "cumulative_distances",
    "calculate_path_distance",
    "calculate_bearing",
    "bearing_difference",
    "calculate_destination",
    "meters_per_degree_lat",
    "meters_per_degree_lng",
    "meters_to_latlng_offset",
    "latlng_offset_to_meters",
    "add_offset",
    "clamp_latitude",
    "normalize_longitude",
    "is_valid_latlng",
    "to_latlng",
    "get_geo_bounds",
    "calculate_geo_centroid",
    "calculate_path_area",
    "format_distance",
]
