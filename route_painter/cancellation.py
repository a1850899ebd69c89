"""Cooperative cancellation for route generation runs."""

from __future__ import annotations

import threading
import time
from typing import Optional

from .errors import GenerationCancelledError

__all__ = ["CancellationToken", "sleep_or_cancel"]


class CancellationToken:
    """Flag checked at every provider call and pacing wait of a run.

    An optional ``timeout`` turns the token into a deadline: once it passes
    the token reports itself cancelled.
    """

    def __init__(self, timeout: Optional[float] = None) -> None:
        self._event = threading.Event()
        self._deadline = time.monotonic() + timeout if timeout is not None else None
        self._reason = "cancelled"

    def cancel(self, reason: str = "cancelled") -> None:
        self._reason = reason
        self._event.set()

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        if self._deadline is not None and time.monotonic() >= self._deadline:
            self._reason = "timed out"
            self._event.set()
            return True
        return False

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise GenerationCancelledError(f"Route generation {self._reason}")

    def wait(self, seconds: float) -> None:
        """Sleep for ``seconds`` unless cancelled first; raise when cancelled."""

        self.raise_if_cancelled()
        if seconds <= 0:
            return
        timeout = seconds
        if self._deadline is not None:
            timeout = min(timeout, max(0.0, self._deadline - time.monotonic()))
        self._event.wait(timeout)
        self.raise_if_cancelled()


def sleep_or_cancel(seconds: float, token: Optional[CancellationToken]) -> None:
    """Pause helper used at pacing points that may or may not carry a token."""

    if token is None:
        if seconds > 0:
            time.sleep(seconds)
        return
    token.wait(seconds)
