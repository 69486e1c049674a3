"""Rotated reference grid covering the current map view.

The grid is aligned with the baseline and regenerated from scratch for every
view change. It is built in the rendering projection so that lines are
straight on screen; a single ``1 / cos(mid latitude)`` factor converts the
metric spacing into projected units. That correction is only accurate near
the anchors' latitude, which is fine for the airfield-sized views this tool
shows but drifts for views spanning many degrees of latitude.
"""

from __future__ import annotations

import logging
import math
from typing import List, Optional, Tuple

import numpy as np
from shapely.affinity import affine_transform
from shapely.geometry import box

from ..config import GRID_MAX_LINES_PER_AXIS, GRID_PADDING_STEPS
from ..models import GridRole, GridSegment, LatLon, Viewport
from .baseline import BaselineFrame, build_baseline_frame
from .projection import Projection, WebMercatorProjection

LOGGER = logging.getLogger(__name__)

SnapRange = Tuple[int, int]


def grid_step(anchor_start: LatLon, anchor_end: LatLon, spacing_m: float) -> float:
    """Return the projected distance between gridlines for ``spacing_m``.

    Returns ``nan`` when the correction is undefined (anchors at a pole).
    """

    mid_lat = (anchor_start[0] + anchor_end[0]) / 2.0
    cos_lat = math.cos(math.radians(mid_lat))
    if cos_lat <= 0:
        return math.nan
    return spacing_m / cos_lat


def _snap_range(low: float, high: float, step: float) -> SnapRange:
    return math.floor(low / step), math.ceil(high / step)


class GridOverlay:
    """Generate baseline-aligned gridlines for arbitrary viewports.

    The overlay owns an immutable frame built from the anchors in the
    rendering projection; it keeps no other state, so :meth:`regenerate` is a
    pure function of the viewport.
    """

    def __init__(
        self,
        anchor_start: LatLon,
        anchor_end: LatLon,
        spacing_m: float,
        projection: Optional[Projection] = None,
        *,
        padding_steps: float = GRID_PADDING_STEPS,
        max_lines_per_axis: int = GRID_MAX_LINES_PER_AXIS,
    ) -> None:
        self.projection = projection or WebMercatorProjection()
        self.frame: BaselineFrame = build_baseline_frame(
            anchor_start, anchor_end, self.projection
        )
        self.spacing_m = spacing_m
        self.step = grid_step(self.frame.anchor_start, self.frame.anchor_end, spacing_m)
        self.padding_steps = padding_steps
        self.max_lines_per_axis = max_lines_per_axis

    def local_bounds(self, viewport: Viewport) -> Tuple[float, float, float, float]:
        """Return ``(min_x, min_y, max_x, max_y)`` of the padded view in the frame."""

        padding = self.padding_steps * self.step
        nw = self.projection.project(*viewport.north_west)
        se = self.projection.project(*viewport.south_east)
        padded = box(
            min(nw[0], se[0]) - padding,
            min(nw[1], se[1]) - padding,
            max(nw[0], se[0]) + padding,
            max(nw[1], se[1]) + padding,
        )
        return affine_transform(padded, self.frame.local_affine()).bounds

    def regenerate(self, viewport: Viewport) -> List[GridSegment]:
        """Return every gridline covering ``viewport`` plus the baseline.

        Degenerate input (zero-size view, unusable step, oversized range)
        yields an empty list.
        """

        step = self.step
        if not math.isfinite(step) or step <= 0:
            LOGGER.warning("Grid step %s is unusable; skipping grid", step)
            return []
        if viewport.is_degenerate():
            LOGGER.debug("Viewport %s has no area; skipping grid", viewport)
            return []

        min_x, min_y, max_x, max_y = self.local_bounds(viewport)
        if not all(math.isfinite(v) for v in (min_x, min_y, max_x, max_y)):
            LOGGER.warning("Viewport %s is not projectable; skipping grid", viewport)
            return []
        x_range = _snap_range(min_x, max_x, step)
        y_range = _snap_range(min_y, max_y, step)
        x_count = x_range[1] - x_range[0] + 1
        y_count = y_range[1] - y_range[0] + 1
        if x_count < 1 or y_count < 1:
            return []
        if max(x_count, y_count) > self.max_lines_per_axis:
            LOGGER.warning(
                "Grid needs %d x %d lines (cap %d); zoom in to show it",
                x_count,
                y_count,
                self.max_lines_per_axis,
            )
            return []

        start_x, end_x = x_range[0] * step, x_range[1] * step
        start_y, end_y = y_range[0] * step, y_range[1] * step
        xs = np.arange(x_range[0], x_range[1] + 1, dtype=float) * step
        ys = np.arange(y_range[0], y_range[1] + 1, dtype=float) * step

        segments = self._lines(
            np.column_stack((xs, np.full_like(xs, start_y))),
            np.column_stack((xs, np.full_like(xs, end_y))),
            axis="along",
        )
        segments.extend(
            self._lines(
                np.column_stack((np.full_like(ys, start_x), ys)),
                np.column_stack((np.full_like(ys, end_x), ys)),
                axis="across",
            )
        )
        segments.append(
            GridSegment(
                start=self.frame.anchor_start,
                end=self.frame.anchor_end,
                role=GridRole.BASELINE,
            )
        )
        LOGGER.debug(
            "Generated %d gridlines (%d x %d) for %s", len(segments) - 1, x_count, y_count, viewport
        )
        return segments

    def _lines(
        self, local_starts: np.ndarray, local_ends: np.ndarray, *, axis: str
    ) -> List[GridSegment]:
        geo_starts = self.projection.unproject_many(self.frame.local_to_planar(local_starts))
        geo_ends = self.projection.unproject_many(self.frame.local_to_planar(local_ends))
        return [
            GridSegment(
                start=(float(s[0]), float(s[1])),
                end=(float(e[0]), float(e[1])),
                role=GridRole.GRID,
                axis=axis,
            )
            for s, e in zip(geo_starts, geo_ends)
        ]


def generate_grid(
    anchor_start: LatLon,
    anchor_end: LatLon,
    spacing_m: float,
    viewport: Viewport,
    projection: Optional[Projection] = None,
    *,
    padding_steps: float = GRID_PADDING_STEPS,
    max_lines_per_axis: int = GRID_MAX_LINES_PER_AXIS,
) -> List[GridSegment]:
    """One-shot helper around :class:`GridOverlay`."""

    overlay = GridOverlay(
        anchor_start,
        anchor_end,
        spacing_m,
        projection,
        padding_steps=padding_steps,
        max_lines_per_axis=max_lines_per_axis,
    )
    return overlay.regenerate(viewport)


__all__ = ["GridOverlay", "generate_grid", "grid_step"]
