"""Interactive HTML preview of a generated route."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

import folium  # Using folium to build an interactive Leaflet map.

from ..geo import calculate_geo_centroid, format_distance, get_geo_bounds
from ..models import GeneratedRoute

PathLike = Union[str, Path]

_IDEAL_COLOR = "#1a9641"
_SNAPPED_COLOR = "#2c7bb6"
_FALLBACK_COLOR = "#d73027"


def create_route_map(
    route: GeneratedRoute,
    *,
    title: Optional[str] = None,
    output_html_path: Optional[PathLike] = None,
) -> folium.Map:
    """Overlay the projected shape and the road-snapped route on one map.

    Args:
        route: Result returned by :func:`route_painter.routing.generate_route`.
        title: Optional label used in the start marker tooltip.
        output_html_path: Optional path to persist the map as an HTML file.

    Returns:
        A :class:`folium.Map` with the ideal path, the snapped route and
        start/finish markers.

    Raises:
        ValueError: If the route has no geometry to draw.
    """

    if not route.snapped_route and not route.geo_path:
        raise ValueError("Route has no geometry to draw")

    points = route.snapped_route or route.geo_path
    folium_map = folium.Map(
        location=calculate_geo_centroid(points), zoom_start=14, control_scale=True
    )
    if len(route.geo_path) >= 2:
        folium.PolyLine(
            route.geo_path,
            color=_IDEAL_COLOR,
            weight=3,
            opacity=0.6,
            dash_array="6",
            tooltip="Ideal shape",
        ).add_to(folium_map)
    if len(route.snapped_route) >= 2:
        folium.PolyLine(
            route.snapped_route,
            color=_SNAPPED_COLOR,
            weight=4,
            opacity=0.9,
            tooltip=f"Route ({format_distance(route.distance)})",
        ).add_to(folium_map)

    label = title or "Route"
    popup = folium.Popup(
        html=(
            f"<strong>{label}</strong><br>"
            f"{format_distance(route.distance)} of {format_distance(route.target_distance)} "
            f"({route.accuracy:.1f}%)"
        ),
        max_width=300,
    )
    folium.CircleMarker(
        location=points[0],
        radius=7,
        color=_SNAPPED_COLOR,
        fill=True,
        fill_color=_SNAPPED_COLOR,
        tooltip="Start",
        popup=popup,
    ).add_to(folium_map)
    folium.CircleMarker(
        location=points[-1],
        radius=5,
        color=_FALLBACK_COLOR if route.diagnostics.get("failed_chunks") else _SNAPPED_COLOR,
        fill=True,
        tooltip="Finish",
    ).add_to(folium_map)

    south, west, north, east = get_geo_bounds(points)
    folium_map.fit_bounds([(south, west), (north, east)])

    if output_html_path is not None:
        output_path = Path(output_html_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        folium_map.save(str(output_path))

    return folium_map


__all__ = ["create_route_map"]
