"""Global pytest fixtures & helpers.

Adds project root to path and provides the airfield baseline, a ready
``TrackMap`` and the default view used across the overlay tests.
"""
from __future__ import annotations

import os
import sys

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from igc_analyzer.geometry import BaselineFrame, build_baseline_frame, metric_projection
from igc_analyzer.models import Viewport
from igc_analyzer.track_map import OverlayConfig, TrackMap
from track_factories import ANCHOR_END, ANCHOR_START


# --- Fixtures --------------------------------------------------------
@pytest.fixture
def anchors():
    return ANCHOR_START, ANCHOR_END


@pytest.fixture
def metric_frame() -> BaselineFrame:
    projection = metric_projection((ANCHOR_START, ANCHOR_END), "EPSG:32631")
    return build_baseline_frame(ANCHOR_START, ANCHOR_END, projection)


@pytest.fixture
def overlay_config() -> OverlayConfig:
    return OverlayConfig(
        anchor_start=ANCHOR_START,
        anchor_end=ANCHOR_END,
        grid_spacing_m=250.0,
        metric_crs="EPSG:32631",
    )


@pytest.fixture
def track_map(overlay_config: OverlayConfig) -> TrackMap:
    return TrackMap(overlay_config)


@pytest.fixture
def airfield_viewport() -> Viewport:
    """View covering both anchors with a margin, at zoom 15."""

    return Viewport.from_points([ANCHOR_START, ANCHOR_END], 15).padded(0.25)
