"""Rate limiting shared by every directions request in the process."""

from __future__ import annotations

import logging
import random
import threading
import time
from typing import Optional

from ..cancellation import CancellationToken, sleep_or_cancel
from ..config import (
    RATE_LIMIT_JITTER_RANGE,
    RATE_LIMIT_MAX_CONCURRENT,
    RATE_LIMIT_MIN_INTERVAL_SECONDS,
    RATE_LIMIT_THROTTLE_SECONDS,
)

__all__ = ["RateLimiter"]


class RateLimiter:
    """Concurrency cap plus minimum spacing between request starts.

    Every caller sharing an instance draws start slots from the same
    schedule, so overlapping runs cannot jointly exceed the provider's rate.
    """

    def __init__(
        self,
        max_concurrent: int = RATE_LIMIT_MAX_CONCURRENT,
        min_interval: float = RATE_LIMIT_MIN_INTERVAL_SECONDS,
        jitter_range: tuple[float, float] = RATE_LIMIT_JITTER_RANGE,
        throttle_seconds: float = RATE_LIMIT_THROTTLE_SECONDS,
    ) -> None:
        if max_concurrent < 1:
            raise ValueError("max_concurrent must be >= 1")
        if min_interval < 0:
            raise ValueError("min_interval must be >= 0")
        self._lock = threading.Lock()
        self._cond = threading.Condition(self._lock)
        self._max_allowed = max_concurrent
        self._in_flight = 0
        self._min_interval = min_interval
        self._next_slot: float = 0.0
        self._throttle_until: float = 0.0
        self._jitter_range = jitter_range
        self._throttle_seconds = throttle_seconds

    def resize(self, new_max: int) -> None:
        """Adjust maximum concurrent requests at runtime."""

        if new_max < 1:
            raise ValueError("new_max must be >= 1")
        with self._cond:
            old = self._max_allowed
            self._max_allowed = new_max
            self._cond.notify_all()
        logging.info("RateLimiter resized from %s to %s", old, new_max)

    def before_request(self, cancel_token: Optional[CancellationToken] = None) -> None:
        """Block until a slot is free and the next start time has arrived."""

        with self._cond:
            while self._in_flight >= self._max_allowed:
                if cancel_token is not None:
                    cancel_token.raise_if_cancelled()
                    self._cond.wait(timeout=0.1)
                else:
                    self._cond.wait()
            self._in_flight += 1
            now = time.monotonic()
            slot = max(now, self._next_slot, self._throttle_until)
            self._next_slot = slot + self._min_interval
            wait_for = slot - now
        try:
            if wait_for > 0:
                sleep_or_cancel(wait_for, cancel_token)
            lo, hi = self._jitter_range
            if hi > 0:
                # Random jitter smooths bursts; not used for security-sensitive logic.
                sleep_or_cancel(random.uniform(lo, hi), cancel_token)  # nosec B311
        except BaseException:
            self._release()
            raise

    def after_response(
        self, status_code: Optional[int], *, rate_limited: bool = False
    ) -> None:
        if rate_limited or status_code == 429:
            logging.warning(
                "Directions rate limit signalled (status=%s). Throttling %ss.",
                status_code,
                self._throttle_seconds,
            )
            with self._cond:
                self._throttle_until = time.monotonic() + self._throttle_seconds
        self._release()

    def _release(self) -> None:
        with self._cond:
            self._in_flight = max(0, self._in_flight - 1)
            if self._in_flight < self._max_allowed:
                self._cond.notify()

    def snapshot(self) -> dict[str, float | int]:  # pragma: no cover - debug helper
        """Return current limiter stats (used by tests and diagnostics)."""

        with self._lock:
            return {
                "max_allowed": self._max_allowed,
                "in_flight": self._in_flight,
                "min_interval": self._min_interval,
                "throttle_until": self._throttle_until,
            }
