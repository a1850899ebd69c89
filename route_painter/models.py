"""Core value types shared by the shape and routing pipelines."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, NamedTuple, Optional


class Point2D(NamedTuple):
    """Plane coordinate, either raw glyph units or the normalized unit square."""

    x: float
    y: float


class LatLng(NamedTuple):
    """WGS-84 coordinate in degrees."""

    lat: float
    lng: float


TravelMode = Literal["WALKING", "BICYCLING"]
TRAVEL_MODES: tuple[str, ...] = ("WALKING", "BICYCLING")


@dataclass(slots=True)
class Stroke:
    """One continuous pen-down contour of a glyph or shape."""

    id: str
    points: List[Point2D]

    def reversed(self) -> "Stroke":
        return Stroke(id=self.id, points=list(reversed(self.points)))


@dataclass(frozen=True, slots=True)
class ValidationResult:
    valid: bool
    error: Optional[str] = None


@dataclass(slots=True)
class GeneratedRoute:
    """Artifact of one generation run.

    ``distance`` is measured along ``snapped_route`` (haversine), and
    ``accuracy`` is ``distance / target_distance * 100``. ``diagnostics``
    records partial degradations such as chunks that fell back to the
    unsnapped geometry.
    """

    ideal_path: List[Point2D]
    geo_path: List[LatLng]
    snapped_route: List[LatLng]
    distance: float
    target_distance: float
    accuracy: float
    diagnostics: Dict[str, Any] = field(default_factory=dict)


__all__ = [
    "Point2D",
    "LatLng",
    "TravelMode",
    "TRAVEL_MODES",
    "Stroke",
    "ValidationResult",
    "GeneratedRoute",
]
