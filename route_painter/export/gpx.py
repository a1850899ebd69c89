"""GPX 1.1 track export for generated routes."""

from __future__ import annotations

import logging
import re
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional, Sequence, Union

from ..config import GPX_CREATOR
from ..errors import InputValidationError
from ..geo import is_valid_latlng
from ..models import LatLng, ValidationResult

LOGGER = logging.getLogger(__name__)

PathLike = Union[str, Path]

__all__ = [
    "generate_gpx",
    "export_gpx",
    "generate_route_description",
    "validate_route_for_export",
    "sanitize_file_name",
]


def _escape_xml(text: str) -> str:
    """Escape special XML characters."""
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&apos;")
    )


def _iso(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace(
        "+00:00", "Z"
    )


def generate_gpx(
    route: Sequence[LatLng],
    name: str,
    description: Optional[str] = None,
    *,
    start_time: Optional[datetime] = None,
) -> str:
    """Render ``route`` as a GPX 1.1 running track.

    Every point becomes a ``<trkpt>`` with zero elevation and a synthetic
    timestamp one second after the previous point.
    """

    start = start_time or datetime.now(timezone.utc)
    gpx_lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        f'<gpx version="1.1" creator="{_escape_xml(GPX_CREATOR)}"',
        '     xmlns="http://www.topografix.com/GPX/1/1"',
        '     xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance"',
        '     xsi:schemaLocation="http://www.topografix.com/GPX/1/1 '
        'http://www.topografix.com/GPX/1/1/gpx.xsd">',
        "  <metadata>",
        f"    <name>{_escape_xml(name)}</name>",
    ]
    if description:
        gpx_lines.append(f"    <desc>{_escape_xml(description)}</desc>")
    gpx_lines.extend(
        [
            f"    <time>{_iso(start)}</time>",
            "  </metadata>",
            "  <trk>",
            f"    <name>{_escape_xml(name)}</name>",
        ]
    )
    if description:
        gpx_lines.append(f"    <desc>{_escape_xml(description)}</desc>")
    gpx_lines.extend(["    <type>running</type>", "    <trkseg>"])

    for index, (lat, lng) in enumerate(route):
        timestamp = _iso(start + timedelta(seconds=index))
        gpx_lines.extend(
            [
                f'      <trkpt lat="{lat:.6f}" lon="{lng:.6f}">',
                "        <ele>0</ele>",
                f"        <time>{timestamp}</time>",
                "      </trkpt>",
            ]
        )

    gpx_lines.extend(["    </trkseg>", "  </trk>", "</gpx>"])
    return "\n".join(gpx_lines)


def sanitize_file_name(name: str) -> str:
    """Lowercase ``name`` with anything but ``[a-z0-9_-]`` collapsed to ``_``."""

    cleaned = re.sub(r"[^a-z0-9_\-]", "_", name, flags=re.IGNORECASE)
    return re.sub(r"_+", "_", cleaned).lower()


def validate_route_for_export(route: Optional[Sequence[LatLng]]) -> ValidationResult:
    if not route:
        return ValidationResult(False, "No route to export")
    if len(route) < 2:
        return ValidationResult(False, "Route must have at least 2 points")
    if not all(is_valid_latlng(point) for point in route):
        return ValidationResult(False, "Route contains invalid coordinates")
    return ValidationResult(True)


def export_gpx(
    route: Sequence[LatLng],
    name: str,
    description: Optional[str] = None,
    *,
    output_dir: PathLike = ".",
    file_name: Optional[str] = None,
) -> Path:
    """Write the GPX file and return its path.

    The file name defaults to ``<sanitized name>.gpx`` inside ``output_dir``.
    """

    validation = validate_route_for_export(route)
    if not validation.valid:
        raise InputValidationError(validation.error or "Route cannot be exported")
    output_path = Path(output_dir) / (file_name or f"{sanitize_file_name(name)}.gpx")
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(generate_gpx(route, name, description), encoding="utf-8")
    LOGGER.info("Wrote GPX with %d points to %s", len(route), output_path)
    return output_path


def generate_route_description(
    distance: float, shape: str, date: Optional[datetime] = None
) -> str:
    when = date or datetime.now()
    distance_km = f"{distance / 1000:.1f}"
    return (
        f'Running route shaped like "{shape}" - {distance_km} km. '
        f"Created with Running Route Painter on {when.date().isoformat()}."
    )
