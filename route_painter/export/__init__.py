"""Route exports: GPX files, Google Maps links and HTML previews."""

from .gpx import (  # noqa: F401
    export_gpx,
    generate_gpx,
    generate_route_description,
    sanitize_file_name,
    validate_route_for_export,
)
from .maps_url import (  # noqa: F401
    generate_google_maps_search_url,
    generate_google_maps_url,
    validate_route_for_url,
)
from .preview_map import create_route_map  # noqa: F401
