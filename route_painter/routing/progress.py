"""Monotonic progress reporting for route generation."""

from __future__ import annotations

import logging
from typing import Callable, Optional

LOGGER = logging.getLogger(__name__)

ProgressCallback = Callable[[float, str], None]

__all__ = ["ProgressCallback", "ProgressReporter"]


class ProgressReporter:
    """Wrap a ``(percent, step)`` callback so reported values never decrease.

    ``child(start, end)`` returns a reporter that maps its own 0-100 range into
    ``[start, end]`` of the parent, which lets each stage report locally.
    """

    def __init__(
        self,
        callback: Optional[ProgressCallback] = None,
        *,
        start: float = 0.0,
        end: float = 100.0,
        parent: Optional["ProgressReporter"] = None,
    ) -> None:
        self._callback = callback
        self._start = start
        self._end = end
        self._parent = parent
        self._last = 0.0
        self._step = ""

    @property
    def last(self) -> float:
        return self._parent.last if self._parent is not None else self._last

    @property
    def step(self) -> str:
        return self._parent.step if self._parent is not None else self._step

    def child(self, start: float, end: float) -> "ProgressReporter":
        return ProgressReporter(start=start, end=end, parent=self)

    def report(self, percent: float, step: str) -> None:
        local = min(100.0, max(0.0, float(percent)))
        value = self._start + (self._end - self._start) * local / 100.0
        if self._parent is not None:
            self._parent.report(value, step)
            return
        value = max(self._last, value)
        self._last = value
        self._step = step
        LOGGER.debug("Progress %.0f%%: %s", value, step)
        if self._callback is not None:
            self._callback(value, step)
