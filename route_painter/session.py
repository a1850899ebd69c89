"""Caller-owned route state shared between input handling and generation."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, replace
from typing import List, Literal, Optional

from .cancellation import CancellationToken
from .config import DEFAULT_TARGET_DISTANCE_M
from .errors import GenerationCancelledError, InputValidationError, RoutePainterError
from .location import GeolocationSource, locate, resolve_route_center
from .models import GeneratedRoute, LatLng, Point2D
from .routing.generator import RouteGenerationOptions, generate_route
from .shapes.glyphs import GlyphCache, text_to_analog_path, text_to_path
from .shapes.svg_shapes import load_shape

LOGGER = logging.getLogger(__name__)

InputType = Literal["text", "analog", "shape"]

__all__ = ["InputType", "SessionState", "RouteSession"]


@dataclass(frozen=True, slots=True)
class SessionState:
    """Immutable snapshot of a :class:`RouteSession`."""

    input_type: InputType
    input_value: str
    target_distance: float
    user_location: Optional[LatLng]
    selected_center: Optional[LatLng]
    is_generating: bool
    progress: float
    current_step: str
    result: Optional[GeneratedRoute]
    error: Optional[str]


class RouteSession:
    """Holds inputs, progress and the latest generated route.

    Starting a run cancels the run in flight; only the newest run may publish
    its result, and a finished result replaces the previous one in one step.
    """

    def __init__(
        self,
        *,
        glyph_cache: Optional[GlyphCache] = None,
        analog_cache: Optional[GlyphCache] = None,
    ) -> None:
        self._lock = threading.RLock()
        self._glyph_cache = glyph_cache
        self._analog_cache = analog_cache
        self._active_token: Optional[CancellationToken] = None
        self._state = SessionState(
            input_type="text",
            input_value="",
            target_distance=DEFAULT_TARGET_DISTANCE_M,
            user_location=None,
            selected_center=None,
            is_generating=False,
            progress=0.0,
            current_step="",
            result=None,
            error=None,
        )

    # ------------------------------------------------------------------
    # State access
    # ------------------------------------------------------------------
    @property
    def state(self) -> SessionState:
        with self._lock:
            return self._state

    def _update(self, **changes) -> None:
        with self._lock:
            self._state = replace(self._state, **changes)

    @property
    def route_center(self) -> Optional[LatLng]:
        state = self.state
        return resolve_route_center(state.selected_center, state.user_location)

    def set_input(self, input_type: InputType, value: str) -> None:
        self._update(input_type=input_type, input_value=value, error=None)

    def set_distance(self, meters: float) -> None:
        self._update(target_distance=float(meters))

    def set_user_location(self, location: Optional[LatLng]) -> None:
        self._update(user_location=location)

    def set_selected_center(self, center: Optional[LatLng]) -> None:
        self._update(selected_center=center)

    def update_location_from(self, source: GeolocationSource) -> bool:
        """Refresh the device location; failures land in ``state.error``."""

        position, error = locate(source)
        if position is None:
            self._update(error=error)
            return False
        self._update(user_location=position, error=None)
        return True

    def reset_route(self) -> None:
        self.cancel()
        self._update(result=None, progress=0.0, current_step="", error=None)

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------
    def build_ideal_path(self) -> List[Point2D]:
        state = self.state
        if state.input_type == "shape":
            return load_shape(state.input_value)
        if state.input_type == "analog":
            return text_to_analog_path(state.input_value, self._analog_cache)
        return text_to_path(state.input_value, self._glyph_cache)

    def cancel(self, reason: str = "cancelled") -> None:
        with self._lock:
            token = self._active_token
            self._active_token = None
            if token is not None:
                self._state = replace(self._state, is_generating=False)
        if token is not None:
            token.cancel(reason)

    def _on_progress(self, token: CancellationToken):
        def report(percent: float, step: str) -> None:
            with self._lock:
                if self._active_token is token:
                    self._state = replace(self._state, progress=percent, current_step=step)

        return report

    def generate(self, options: Optional[RouteGenerationOptions] = None) -> Optional[GeneratedRoute]:
        """Run generation synchronously and publish the result.

        The session's target distance applies unless ``options`` sets one.
        Returns the new route, or ``None`` when inputs were invalid, the run
        failed (see ``state.error``) or a newer run superseded this one.
        """

        token = CancellationToken()
        with self._lock:
            previous = self._active_token
            self._active_token = token
            self._state = replace(
                self._state, is_generating=True, progress=0.0, current_step="", error=None
            )
        if previous is not None:
            previous.cancel("superseded by a newer run")

        base = options or RouteGenerationOptions()
        if base.target_distance is None:
            base = replace(base, target_distance=self.state.target_distance)
        run_options = replace(
            base,
            on_progress=self._on_progress(token),
            cancel_token=token,
        )
        try:
            ideal_path = self.build_ideal_path()
            center = self.route_center
            if center is None:
                raise InputValidationError(
                    "Location not available. Please select a location on the map or enable GPS."
                )
            route = generate_route(ideal_path, center, run_options)
        except GenerationCancelledError as exc:
            LOGGER.info("Route generation stopped: %s", exc)
            self._finish(token, error=None)
            return None
        except (RoutePainterError, ValueError) as exc:
            LOGGER.error("Route generation failed: %s", exc)
            self._finish(token, error=str(exc))
            return None
        if not self._finish(token, result=route):
            return None
        return route

    def _finish(
        self,
        token: CancellationToken,
        *,
        result: Optional[GeneratedRoute] = None,
        error: Optional[str] = None,
    ) -> bool:
        with self._lock:
            if self._active_token is not token:
                return False
            self._active_token = None
            changes = {"is_generating": False, "error": error}
            if result is not None:
                changes["result"] = result
            self._state = replace(self._state, **changes)
            return True
