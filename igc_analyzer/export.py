"""Vector export of tracks in pixel space.

Points are projected to pixels at the current zoom, upscaled, rounded to a
tenth of a pixel and collapsed where consecutive samples land on the same
spot. Tracks with no point inside the scaled view are left out.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable, List, Optional, Sequence
from xml.etree import ElementTree as ET

import numpy as np

from .config import EXPORT_QUANTIZE_FACTOR
from .geometry.projection import PlanarArray, WebMercatorProjection
from .models import ExportPath, LineStyle, PixelBounds, Track, Viewport

LOGGER = logging.getLogger(__name__)

StyleResolver = Callable[[Track], LineStyle]

_SVG_NS = "http://www.w3.org/2000/svg"


def quantize_pixels(
    pixels: PlanarArray, scale: float, factor: int = EXPORT_QUANTIZE_FACTOR
) -> PlanarArray:
    """Upscale pixel coordinates and round them to ``1/factor`` pixel.

    Halves round up, matching how the browser map rounds points.
    """

    array = np.asarray(pixels, dtype=float).reshape(-1, 2)
    return np.floor(array * (scale * factor) + 0.5) / factor


def dedupe_consecutive(points: PlanarArray) -> PlanarArray:
    """Drop points equal to the point kept just before them.

    Only adjacent repeats collapse; a path returning to an earlier coordinate
    keeps that revisit.
    """

    array = np.asarray(points, dtype=float).reshape(-1, 2)
    if array.shape[0] < 2:
        return array
    changed = np.any(np.diff(array, axis=0) != 0, axis=1)
    keep = np.concatenate(([True], changed))
    return array[keep]


def any_inside(points: PlanarArray, bounds: PixelBounds) -> bool:
    array = np.asarray(points, dtype=float).reshape(-1, 2)
    if array.shape[0] == 0:
        return False
    inside = (
        (array[:, 0] >= bounds.min_x)
        & (array[:, 0] <= bounds.max_x)
        & (array[:, 1] >= bounds.min_y)
        & (array[:, 1] <= bounds.max_y)
    )
    return bool(inside.any())


def export_track(
    track: Track,
    style: LineStyle,
    projection: WebMercatorProjection,
    viewport: Viewport,
    scale: float,
) -> Optional[ExportPath]:
    """Return the simplified export path of a track, or ``None`` when off-screen."""

    pixels = projection.to_pixels(track.points, viewport.zoom)
    reduced = dedupe_consecutive(quantize_pixels(pixels, scale))
    bounds = projection.pixel_bounds(viewport).scaled(scale)
    if not any_inside(reduced, bounds):
        return None
    return ExportPath(
        filename=track.filename,
        points=tuple((float(x), float(y)) for x, y in reduced),
        color=style.color,
        opacity=style.opacity,
        width=scale * style.weight,
    )


def export_paths(
    tracks: Iterable[Track],
    style_of: StyleResolver,
    projection: WebMercatorProjection,
    viewport: Viewport,
    scale: float,
) -> List[ExportPath]:
    """Export every track that has at least one point in view."""

    paths: List[ExportPath] = []
    skipped = 0
    for track in tracks:
        path = export_track(track, style_of(track), projection, viewport, scale)
        if path is None:
            skipped += 1
            continue
        paths.append(path)
    LOGGER.info("Exported %d paths (%d outside the view)", len(paths), skipped)
    return paths


def _format_number(value: float) -> str:
    # Twelve significant digits keep tenth-pixel detail up to ~1e11 px.
    return f"{value:.12g}"


def path_data(points: Sequence[Sequence[float]]) -> str:
    """Return SVG path data (``M x y L x y ...``) for an open polyline."""

    parts = []
    for index, (x, y) in enumerate(points):
        parts.append(f"{'M' if index == 0 else 'L'}{_format_number(x)} {_format_number(y)}")
    return "".join(parts)


def render_svg(paths: Sequence[ExportPath], bounds: PixelBounds) -> str:
    """Serialize export paths into an SVG document framed by ``bounds``.

    ``bounds`` must already be scaled by the export factor.
    """

    ET.register_namespace("", _SVG_NS)
    svg = ET.Element(
        f"{{{_SVG_NS}}}svg",
        {
            "viewBox": " ".join(
                _format_number(v)
                for v in (bounds.min_x, bounds.min_y, bounds.width, bounds.height)
            )
        },
    )
    root = ET.SubElement(svg, f"{{{_SVG_NS}}}g")
    for path in paths:
        if not path.points:
            continue
        ET.SubElement(
            root,
            f"{{{_SVG_NS}}}path",
            {
                "stroke": path.color,
                "stroke-opacity": _format_number(path.opacity),
                "stroke-width": _format_number(path.width),
                "stroke-linecap": "round",
                "stroke-linejoin": "round",
                "fill": "none",
                "d": path_data(path.points),
            },
        )
    return ET.tostring(svg, encoding="unicode")


__all__ = [
    "quantize_pixels",
    "dedupe_consecutive",
    "any_inside",
    "export_track",
    "export_paths",
    "path_data",
    "render_svg",
]
