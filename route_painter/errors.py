"""Central error types used across the application."""

from __future__ import annotations


class RoutePainterError(RuntimeError):
    """Base error for route painter failures."""


class InputValidationError(RoutePainterError, ValueError):
    """Raised when user input (text, shape, distance, center) is unusable."""


class UnsupportedCharacterError(InputValidationError):
    """Raised when a glyph source cannot render a requested character."""


class ShapeNotFoundError(InputValidationError):
    """Raised when a predefined shape identifier is unknown."""


class GlyphSourceError(RoutePainterError):
    """Raised when no glyph source (font file) could be loaded."""


class DirectionsAPIError(RoutePainterError):
    """Base error for directions provider failures."""

    def __init__(self, message: str, status: str | None = None) -> None:
        super().__init__(message)
        self.status = status


class DirectionsRateLimitError(DirectionsAPIError):
    """Raised when the provider reports OVER_QUERY_LIMIT or HTTP 429."""


class DirectionsNoRouteError(DirectionsAPIError):
    """Raised when the provider finds no route between the given points."""


class DirectionsResponseError(DirectionsAPIError):
    """Raised when a provider payload cannot be parsed into a route."""


class GeolocationError(RoutePainterError):
    """Base error for geolocation source failures."""


class GeolocationPermissionError(GeolocationError):
    """Raised when the user denied access to their position."""


class GeolocationUnavailableError(GeolocationError):
    """Raised when no position fix is available."""


class GeolocationTimeoutError(GeolocationError):
    """Raised when a position fix did not arrive in time."""


class RouteGenerationError(RoutePainterError):
    """Raised when a run cannot produce any usable geometry."""


class GenerationCancelledError(RoutePainterError):
    """Raised when a run is cancelled at a suspension point."""


__all__ = [
    "RoutePainterError",
    "InputValidationError",
    "UnsupportedCharacterError",
    "ShapeNotFoundError",
    "GlyphSourceError",
    "DirectionsAPIError",
    "DirectionsRateLimitError",
    "DirectionsNoRouteError",
    "DirectionsResponseError",
    "GeolocationError",
    "GeolocationPermissionError",
    "GeolocationUnavailableError",
    "GeolocationTimeoutError",
    "RouteGenerationError",
    "GenerationCancelledError",
]
