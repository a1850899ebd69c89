"""Directions client components (rate limiter, session, provider client)."""

from .client import (  # noqa: F401
    DirectionsProvider,
    DirectionsRequest,
    DirectionsResult,
    GoogleDirectionsClient,
    get_default_provider,
    get_directions_with_retry,
    parse_directions_payload,
    set_default_provider,
)
from .rate_limiter import RateLimiter  # noqa: F401
from .session import (  # noqa: F401
    create_default_session,
    get_default_session,
    reset_default_session,
)
