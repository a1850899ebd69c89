"""Central configuration for the Running Route Painter.

All values are constants imported by the rest of the package. Adjust as needed
for your environment. Secrets are read from environment variables (optionally
via a local `.env`).
"""

from __future__ import annotations

import os

from dotenv import load_dotenv


def _env_float(key: str, default: float) -> float:
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _env_int(key: str, default: int) -> int:
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


# Load .env from the current directory or any parent folder.
load_dotenv()


# ---------------------------------------------------------------------------
# Directions provider
# ---------------------------------------------------------------------------
# Google Directions web service endpoint.
DIRECTIONS_BASE_URL = os.getenv(
    "DIRECTIONS_BASE_URL", "https://maps.googleapis.com/maps/api/directions/json"
)

# API key pulled from the environment. Do not hardcode secrets.
GOOGLE_MAPS_API_KEY = os.getenv("GOOGLE_MAPS_API_KEY", "")

# Travel mode used when the caller does not choose one (WALKING or BICYCLING).
DEFAULT_TRAVEL_MODE = os.getenv("DEFAULT_TRAVEL_MODE", "WALKING").upper()

# Request timeout in seconds.
REQUEST_TIMEOUT = _env_int("REQUEST_TIMEOUT", 15)

# HTTP session pool sizes.
HTTP_POOL_CONNECTIONS = 4
HTTP_POOL_MAXSIZE = 4


# ---------------------------------------------------------------------------
# Rate limiting / retries
# ---------------------------------------------------------------------------
# RATE_LIMIT_MAX_CONCURRENT caps total in-flight directions requests.
RATE_LIMIT_MAX_CONCURRENT = _env_int("RATE_LIMIT_MAX_CONCURRENT", 1)
# RATE_LIMIT_MIN_INTERVAL_SECONDS is the minimum spacing between request starts,
# shared by every caller of the same limiter.
RATE_LIMIT_MIN_INTERVAL_SECONDS = _env_float("RATE_LIMIT_MIN_INTERVAL_SECONDS", 0.3)
# RATE_LIMIT_JITTER_RANGE adds random delay (seconds) to smooth bursts.
RATE_LIMIT_JITTER_RANGE = (0.0, 0.05)
# RATE_LIMIT_THROTTLE_SECONDS is the pause applied after a rate-limit response.
RATE_LIMIT_THROTTLE_SECONDS = _env_float("RATE_LIMIT_THROTTLE_SECONDS", 2.0)

# DIRECTIONS_MAX_RETRIES bounds attempts for rate-limited and network failures.
DIRECTIONS_MAX_RETRIES = _env_int("DIRECTIONS_MAX_RETRIES", 3)
# Exponential backoff starts here and doubles per attempt (1s, 2s, 4s, ...).
DIRECTIONS_BACKOFF_BASE_SECONDS = _env_float("DIRECTIONS_BACKOFF_BASE_SECONDS", 1.0)
# DIRECTIONS_BACKOFF_MAX_SECONDS caps a single backoff wait.
DIRECTIONS_BACKOFF_MAX_SECONDS = _env_float("DIRECTIONS_BACKOFF_MAX_SECONDS", 8.0)


# ---------------------------------------------------------------------------
# Route generation defaults
# ---------------------------------------------------------------------------
# Accepted target distance range (metres).
MIN_TARGET_DISTANCE_M = 500.0
MAX_TARGET_DISTANCE_M = 100_000.0
DEFAULT_TARGET_DISTANCE_M = _env_float("DEFAULT_TARGET_DISTANCE_M", 10_000.0)

# Chunking of the projected path before snapping.
DEFAULT_NUM_SEGMENTS = _env_int("DEFAULT_NUM_SEGMENTS", 5)
# Provider waypoint ceiling per request (origin and destination included).
DEFAULT_MAX_WAYPOINTS_PER_SEGMENT = _env_int("DEFAULT_MAX_WAYPOINTS_PER_SEGMENT", 8)

# Bearing change (degrees) that marks a corner worth keeping as a waypoint.
KEY_POINT_MIN_ANGLE_CHANGE = 5.0
# Interval sampling distance for non-corner waypoints.
KEY_POINT_SPACING_M = 100.0
# Boundary points closer than this are treated as duplicates when merging chunks.
MERGE_DUPLICATE_THRESHOLD_M = 10.0

# Accepted |measured / target - 1| before the distance optimizer acts.
DEFAULT_DISTANCE_TOLERANCE = _env_float("DEFAULT_DISTANCE_TOLERANCE", 0.15)
# Upper bound on detour loops added to a short route.
DEFAULT_MAX_LOOPS = _env_int("DEFAULT_MAX_LOOPS", 3)
# Deficit covered by a single loop when deciding how many loops to add.
LOOP_DISTANCE_M = 500.0
# Routes shorter than this many points are never extended with loops.
MIN_POINTS_FOR_LOOPS = 10

# Grid mode: typical city block size and minimum target shrink ratio.
DEFAULT_BLOCK_SIZE_M = _env_float("DEFAULT_BLOCK_SIZE_M", 100.0)
GRID_MIN_INFLATION_RATIO = 1.3

# Local metres per degree of latitude used by the projector.
METERS_PER_DEGREE_LAT = 111_320.0


# ---------------------------------------------------------------------------
# Shapes and glyphs
# ---------------------------------------------------------------------------
# Font files tried in order by the font glyph source. Separate with os.pathsep.
FONT_PATHS = [
    path
    for path in os.getenv(
        "ROUTE_PAINTER_FONT_PATHS",
        os.pathsep.join(
            [
                "fonts/ArialBlack.ttf",
                "fonts/Arial-Bold.ttf",
                "fonts/Roboto-Bold.ttf",
            ]
        ),
    ).split(os.pathsep)
    if path.strip()
]

# Render size used for glyph outlines before normalization.
GLYPH_FONT_SIZE = 200.0
# Samples per flattened Bezier segment.
CURVE_SAMPLES = 10
# Raw-unit thresholds applied to rendered text before normalization.
TEXT_DEDUPE_THRESHOLD = 0.1
TEXT_SIMPLIFY_TOLERANCE = 2.0
# Maximum number of rendered glyphs kept by a glyph cache.
GLYPH_CACHE_SIZE = _env_int("GLYPH_CACHE_SIZE", 256)
# Longest text accepted as route input.
MAX_TEXT_LENGTH = _env_int("MAX_TEXT_LENGTH", 10)

# Samples taken along each predefined SVG shape path.
SHAPE_SAMPLES_PER_PATH = 30

# Seconds to wait for a device position fix.
GEOLOCATION_TIMEOUT_SECONDS = _env_float("GEOLOCATION_TIMEOUT_SECONDS", 10.0)


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------
# Google Maps URLs stay readable with up to this many points.
MAPS_URL_MAX_WAYPOINTS = 9
# Browsers and the Maps app truncate longer URLs.
MAPS_URL_MAX_LENGTH = 2000
GPX_CREATOR = "route_painter"
