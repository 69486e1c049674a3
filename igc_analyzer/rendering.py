"""Interactive Leaflet map of the tracks and the baseline grid."""

from __future__ import annotations

from html import escape
import logging
from pathlib import Path
from typing import Iterable, List, Optional, Union

import folium  # Using folium to build an interactive Leaflet map.

from .config import AVAILABLE_THEMES, BASELINE_LINE_STYLE, GRID_LINE_STYLE
from .models import GridRole, GridSegment, Track, Viewport
from .track_map import TrackMap

PathLike = Union[str, Path]

LOGGER = logging.getLogger(__name__)

_POPUP_ROWS = (
    ("#", "num_flight"),
    ("Callsign", "callsign"),
    ("Type", "glider_type"),
    ("Registration", "registration"),
)


def track_popup_html(track: Track) -> str:
    """Return the popup body listing flight metadata and the max offset."""

    rows = [
        f"<dt style=\"font-weight:bold;\">{label}</dt>"
        f"<dd>{escape(getattr(track, attr) or '-')}</dd>"
        for label, attr in _POPUP_ROWS
    ]
    rows.append(
        "<dt style=\"font-weight:bold;\">Distance to field</dt>"
        f"<dd>{track.max_offset_m:.0f} m</dd>"
    )
    return (
        "<div style=\"font-family:sans-serif; font-size:13px;\">"
        "<dl style=\"margin:0; display:grid; grid-template-columns:auto 1fr; gap:2px 8px;\">"
        + "".join(rows)
        + "</dl></div>"
    )


def build_grid_layer(segments: Iterable[GridSegment]) -> folium.FeatureGroup:
    """Return a feature group drawing gridlines and the baseline."""

    layer = folium.FeatureGroup(name="Grid")
    for segment in segments:
        style = BASELINE_LINE_STYLE if segment.role is GridRole.BASELINE else GRID_LINE_STYLE
        folium.PolyLine([segment.start, segment.end], **style).add_to(layer)
    return layer


def _tiles_for(theme: str) -> Optional[str]:
    if theme not in AVAILABLE_THEMES:
        LOGGER.warning("Unknown theme '%s'; falling back to OpenStreetMap", theme)
        return "OpenStreetMap"
    return AVAILABLE_THEMES[theme]


def render_map(
    track_map: TrackMap,
    viewport: Viewport,
    *,
    output_html_path: Optional[PathLike] = None,
) -> folium.Map:
    """Create an interactive map with visible tracks and the grid for ``viewport``.

    Args:
        track_map: Track collection providing tracks, styles and the grid.
        viewport: View the grid is generated for; also the initial view.
        output_html_path: Optional path to persist the map as an HTML file.

    Returns:
        A :class:`folium.Map` instance.
    """

    folium_map = folium.Map(
        location=viewport.center,
        zoom_start=int(round(viewport.zoom)),
        tiles=_tiles_for(track_map.options.theme),
        control_scale=True,
    )
    build_grid_layer(track_map.viewport_changed(viewport)).add_to(folium_map)
    folium.LayerControl(collapsed=True).add_to(folium_map)

    line_options = track_map.options.line_options
    visible: List[Track] = track_map.visible_tracks()
    for track in visible:
        style = track_map.display_style(track)
        folium.PolyLine(
            track.points,
            color=style.color,
            weight=style.weight,
            opacity=style.opacity,
            smooth_factor=line_options.smooth_factor,
            tooltip=track.filename,
            popup=folium.Popup(html=track_popup_html(track), max_width=300),
        ).add_to(folium_map)

    if visible:
        points = [pt for track in visible for pt in track.points]
        lats = [pt[0] for pt in points]
        lons = [pt[1] for pt in points]
        folium_map.fit_bounds([(min(lats), min(lons)), (max(lats), max(lons))])

    if output_html_path is not None:
        output_path = Path(output_html_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        folium_map.save(str(output_path))

    return folium_map


__all__ = ["build_grid_layer", "render_map", "track_popup_html"]
