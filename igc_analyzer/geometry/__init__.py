"""Coordinate frames, deviation analysis and grid generation.

This package holds the projection adapter, the baseline-relative frame used
to measure lateral deviation and the rotated grid overlay.
"""

from .projection import (
    Projection,
    WebMercatorProjection,
    metric_projection,
    utm_crs_for,
)
from .baseline import BaselineFrame, build_baseline_frame
from .offsets import max_lateral_offset
from .grid import GridOverlay, generate_grid, grid_step

__all__ = [
    "Projection",
    "WebMercatorProjection",
    "metric_projection",
    "utm_crs_for",
    "BaselineFrame",
    "build_baseline_frame",
    "max_lateral_offset",
    "GridOverlay",
    "generate_grid",
    "grid_step",
]
