"""Running Route Painter package."""

__version__ = "0.1.0"

from .errors import (
    DirectionsAPIError,
    GenerationCancelledError,
    InputValidationError,
    RouteGenerationError,
    RoutePainterError,
)
from .main import main
from .models import GeneratedRoute, LatLng, Point2D
from .routing import RouteGenerationOptions, generate_route, validate_route_inputs
from .session import RouteSession

__all__ = [
    "main",
    "generate_route",
    "validate_route_inputs",
    "RouteGenerationOptions",
    "RouteSession",
    "GeneratedRoute",
    "LatLng",
    "Point2D",
    "RoutePainterError",
    "InputValidationError",
    "DirectionsAPIError",
    "RouteGenerationError",
    "GenerationCancelledError",
]
