"""Tests for the rotated grid overlay."""

from __future__ import annotations

import math

import numpy as np
import pytest

from igc_analyzer.errors import BaselineError
from igc_analyzer.geometry import GridOverlay, WebMercatorProjection, generate_grid, grid_step
from igc_analyzer.models import GridRole, Viewport
from track_factories import ANCHOR_END, ANCHOR_START


@pytest.fixture
def overlay() -> GridOverlay:
    return GridOverlay(ANCHOR_START, ANCHOR_END, 250.0, WebMercatorProjection())


def _local_offsets(overlay: GridOverlay, segments, axis: str) -> np.ndarray:
    column = 0 if axis == "along" else 1
    starts = [s.start for s in segments if s.axis == axis]
    return np.sort(overlay.frame.to_local_many(starts)[:, column])


def test_step_uses_mid_latitude_correction() -> None:
    mid_lat = (ANCHOR_START[0] + ANCHOR_END[0]) / 2.0
    expected = 250.0 / math.cos(math.radians(mid_lat))
    assert grid_step(ANCHOR_START, ANCHOR_END, 250.0) == pytest.approx(expected)
    assert grid_step((60.0, 0.0), (60.0, 1.0), 100.0) == pytest.approx(200.0)


def test_regeneration_is_idempotent(overlay, airfield_viewport) -> None:
    first = overlay.regenerate(airfield_viewport)
    second = overlay.regenerate(airfield_viewport)
    assert first
    assert first == second


def test_one_shot_helper_matches_overlay(overlay, airfield_viewport) -> None:
    segments = generate_grid(ANCHOR_START, ANCHOR_END, 250.0, airfield_viewport)
    assert segments == overlay.regenerate(airfield_viewport)


def test_exactly_one_baseline_segment(overlay, airfield_viewport) -> None:
    segments = overlay.regenerate(airfield_viewport)
    baselines = [s for s in segments if s.role is GridRole.BASELINE]
    assert len(baselines) == 1
    assert baselines[0].start == ANCHOR_START
    assert baselines[0].end == ANCHOR_END
    assert baselines[0].axis is None


def test_parallel_lines_are_one_step_apart(overlay, airfield_viewport) -> None:
    segments = overlay.regenerate(airfield_viewport)
    for axis in ("along", "across"):
        offsets = _local_offsets(overlay, segments, axis)
        assert offsets.size >= 2
        np.testing.assert_allclose(np.diff(offsets), overlay.step, atol=1e-4)
        # Lines sit on whole multiples of the step.
        np.testing.assert_allclose(
            offsets / overlay.step, np.round(offsets / overlay.step), atol=1e-6
        )


def test_line_count_matches_snapped_local_range(overlay, airfield_viewport) -> None:
    segments = overlay.regenerate(airfield_viewport)
    min_x, min_y, max_x, max_y = overlay.local_bounds(airfield_viewport)
    step = overlay.step
    expected_along = math.ceil(max_x / step) - math.floor(min_x / step) + 1
    expected_across = math.ceil(max_y / step) - math.floor(min_y / step) + 1

    assert sum(1 for s in segments if s.axis == "along") == expected_along
    assert sum(1 for s in segments if s.axis == "across") == expected_across
    assert len(segments) == expected_along + expected_across + 1


def test_grid_covers_padded_viewport(overlay, airfield_viewport) -> None:
    segments = overlay.regenerate(airfield_viewport)
    along = _local_offsets(overlay, segments, "along")
    across = _local_offsets(overlay, segments, "across")
    corners = [
        (airfield_viewport.north, airfield_viewport.west),
        (airfield_viewport.north, airfield_viewport.east),
        (airfield_viewport.south, airfield_viewport.west),
        (airfield_viewport.south, airfield_viewport.east),
    ]
    local = overlay.frame.to_local_many(corners)
    padding = overlay.padding_steps * overlay.step
    assert along.min() <= local[:, 0].min() - padding + 1e-6
    assert along.max() >= local[:, 0].max() + padding - 1e-6
    assert across.min() <= local[:, 1].min() - padding + 1e-6
    assert across.max() >= local[:, 1].max() + padding - 1e-6


def test_lines_span_full_snapped_range(overlay, airfield_viewport) -> None:
    segments = overlay.regenerate(airfield_viewport)
    along_lines = [s for s in segments if s.axis == "along"]
    starts = overlay.frame.to_local_many([s.start for s in along_lines])
    ends = overlay.frame.to_local_many([s.end for s in along_lines])
    np.testing.assert_allclose(starts[:, 0], ends[:, 0], atol=1e-4)
    assert np.all(ends[:, 1] > starts[:, 1])


def test_degenerate_viewport_yields_no_segments(overlay) -> None:
    flat = Viewport(south=51.56, west=4.93, north=51.56, east=4.95, zoom=15)
    narrow = Viewport(south=51.55, west=4.93, north=51.57, east=4.93, zoom=15)
    assert overlay.regenerate(flat) == []
    assert overlay.regenerate(narrow) == []


@pytest.mark.parametrize("spacing", [0.0, -250.0, float("nan")])
def test_unusable_spacing_yields_no_segments(spacing, airfield_viewport) -> None:
    overlay = GridOverlay(ANCHOR_START, ANCHOR_END, spacing)
    assert overlay.regenerate(airfield_viewport) == []


def test_line_cap_yields_no_segments(airfield_viewport) -> None:
    overlay = GridOverlay(ANCHOR_START, ANCHOR_END, 250.0, max_lines_per_axis=3)
    assert overlay.regenerate(airfield_viewport) == []


def test_coincident_anchors_fail_at_construction() -> None:
    with pytest.raises(BaselineError):
        GridOverlay(ANCHOR_START, ANCHOR_START, 250.0)


def test_different_views_produce_independent_grids(overlay, airfield_viewport) -> None:
    wide = airfield_viewport.padded(1.0)
    small = overlay.regenerate(airfield_viewport)
    large = overlay.regenerate(wide)
    assert len(large) > len(small)
    assert overlay.regenerate(airfield_viewport) == small
