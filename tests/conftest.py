"""Global pytest fixtures & helpers.

Adds project root to path and provides fake directions providers plus sample
paths shared by the shape, routing and session tests.
"""
from __future__ import annotations

import os
import sys
from typing import List, Optional

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from route_painter.directions_client import (
    DirectionsRequest,
    DirectionsResult,
    set_default_provider,
)
from route_painter.errors import DirectionsAPIError, DirectionsNoRouteError
from route_painter.geo import calculate_path_distance
from route_painter.models import LatLng, Point2D
from route_painter.shapes.glyphs import AnalogDigitGlyphSource, GlyphCache


# --- Fake providers --------------------------------------------------
class EchoProvider:
    """Routes straight through the requested points, like a perfect road grid."""

    def __init__(self) -> None:
        self.requests: List[DirectionsRequest] = []

    def route(self, request: DirectionsRequest, *, cancel_token=None) -> DirectionsResult:
        if cancel_token is not None:
            cancel_token.raise_if_cancelled()
        self.requests.append(request)
        path = [LatLng(*request.origin), *(LatLng(*p) for p in request.waypoints)]
        path.append(LatLng(*request.destination))
        return DirectionsResult(
            path=path, distance_m=calculate_path_distance(path), duration_s=0.0
        )


class FailingProvider:
    """Fails every request (or only the listed call numbers) with ``error``."""

    def __init__(
        self,
        error: Optional[Exception] = None,
        fail_calls: Optional[set] = None,
    ) -> None:
        self.error = error or DirectionsNoRouteError("no route", status="ZERO_RESULTS")
        self.fail_calls = fail_calls
        self.calls = 0
        self._echo = EchoProvider()

    def route(self, request: DirectionsRequest, *, cancel_token=None) -> DirectionsResult:
        self.calls += 1
        if self.fail_calls is None or self.calls in self.fail_calls:
            raise self.error
        return self._echo.route(request, cancel_token=cancel_token)


# --- Factory helpers -------------------------------------------------
def make_square_path() -> List[Point2D]:
    return [
        Point2D(0.0, 0.0),
        Point2D(1.0, 0.0),
        Point2D(1.0, 1.0),
        Point2D(0.0, 1.0),
        Point2D(0.0, 0.0),
    ]


# --- Fixtures --------------------------------------------------------
@pytest.fixture
def echo_provider() -> EchoProvider:
    return EchoProvider()


@pytest.fixture
def failing_provider():
    """Factory for providers failing all (or selected) calls."""

    return FailingProvider


@pytest.fixture
def square_path() -> List[Point2D]:
    return make_square_path()


@pytest.fixture
def taipei() -> LatLng:
    return LatLng(25.0330, 121.5654)


@pytest.fixture
def analog_cache() -> GlyphCache:
    return GlyphCache(AnalogDigitGlyphSource)


@pytest.fixture(autouse=True)
def reset_default_provider():
    """Never let a test reach the real directions service."""

    set_default_provider(FailingProvider(DirectionsAPIError("network disabled in tests")))
    yield
    set_default_provider(None)
