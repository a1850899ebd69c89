import threading
import time

import pytest

from route_painter.cancellation import CancellationToken
from route_painter.directions_client import RateLimiter
from route_painter.errors import GenerationCancelledError


def make_limiter(**kwargs) -> RateLimiter:
    params = {"min_interval": 0.0, "jitter_range": (0.0, 0.0), "throttle_seconds": 0.0}
    params.update(kwargs)
    return RateLimiter(**params)


def worker(limiter: RateLimiter, started_evt: threading.Event, release_evt: threading.Event):
    """Acquire a slot, signal start, wait until release, then free slot."""
    limiter.before_request()
    started_evt.set()
    release_evt.wait()
    limiter.after_response(200)


def test_rate_limiter_resize_behavior():
    """Validate dynamic resize semantics (grow then shrink)."""
    limiter = make_limiter(max_concurrent=2)

    # Start two initial workers (should both start immediately)
    workers = []
    for _ in range(2):
        started = threading.Event()
        release = threading.Event()
        t = threading.Thread(target=worker, args=(limiter, started, release))
        workers.append((started, release, t))
        t.start()

    for started, _, _ in workers:
        assert started.wait(0.3), "Initial worker failed to start in time"

    # Third worker should block (limit=2)
    c_started, c_release = threading.Event(), threading.Event()
    c_thread = threading.Thread(target=worker, args=(limiter, c_started, c_release))
    c_thread.start()
    assert not c_started.wait(0.07), "Third worker should have been blocked before resize"

    # Grow limit -> unblock waiting worker
    limiter.resize(3)
    assert c_started.wait(0.3), "Blocked worker did not start after resize increase"

    # Release everything
    for _, release, thread in workers:
        release.set()
        thread.join(timeout=0.6)
    c_release.set()
    c_thread.join(timeout=0.6)

    # Shrink limit to 1 and validate blocking behavior
    limiter.resize(1)
    e_started, e_release = threading.Event(), threading.Event()
    e_thread = threading.Thread(target=worker, args=(limiter, e_started, e_release))
    e_thread.start()
    assert e_started.wait(0.3), "First worker after shrink did not start"

    f_started, f_release = threading.Event(), threading.Event()
    f_thread = threading.Thread(target=worker, args=(limiter, f_started, f_release))
    f_thread.start()
    assert not f_started.wait(0.07), "Second worker should block with limit=1"

    e_release.set()
    e_thread.join(timeout=0.6)
    assert f_started.wait(0.3), "Second worker did not start after first released"
    f_release.set()
    f_thread.join(timeout=0.6)

    snap = limiter.snapshot()
    assert snap["in_flight"] == 0, "All workers should have completed"
    assert snap["max_allowed"] == 1, "Limiter should retain last resized value"


def test_min_interval_spaces_request_starts():
    limiter = make_limiter(max_concurrent=4, min_interval=0.05)
    started = time.monotonic()
    for _ in range(3):
        limiter.before_request()
        limiter.after_response(200)
    # Second and third starts wait one interval each.
    assert time.monotonic() - started >= 0.09


def test_rate_limited_response_delays_next_start():
    limiter = make_limiter(throttle_seconds=0.1)
    limiter.before_request()
    limiter.after_response(429)
    assert limiter.snapshot()["throttle_until"] > time.monotonic()
    started = time.monotonic()
    limiter.before_request()
    limiter.after_response(200)
    assert time.monotonic() - started >= 0.05


def test_waiting_request_honours_cancellation():
    limiter = make_limiter(max_concurrent=1)
    limiter.before_request()
    token = CancellationToken()
    token.cancel()
    with pytest.raises(GenerationCancelledError):
        limiter.before_request(token)
    limiter.after_response(200)
    assert limiter.snapshot()["in_flight"] == 0


def test_invalid_configuration_rejected():
    with pytest.raises(ValueError):
        RateLimiter(max_concurrent=0)
    with pytest.raises(ValueError):
        make_limiter().resize(0)
