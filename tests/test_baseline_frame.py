"""Tests for the baseline frame and projection adapter."""

from __future__ import annotations

import math

import numpy as np
import pytest

from igc_analyzer.errors import BaselineError, ProjectionError
from igc_analyzer.geometry import (
    Projection,
    WebMercatorProjection,
    build_baseline_frame,
    metric_projection,
    utm_crs_for,
)
from track_factories import ANCHOR_END, ANCHOR_START, point_at


def test_start_anchor_maps_to_origin(metric_frame) -> None:
    along, across = metric_frame.to_local(ANCHOR_START)
    assert along == pytest.approx(0.0, abs=1e-6)
    assert across == pytest.approx(0.0, abs=1e-6)


def test_end_anchor_maps_to_baseline_length(metric_frame) -> None:
    along, across = metric_frame.to_local(ANCHOR_END)
    assert along == pytest.approx(metric_frame.length, abs=1e-6)
    assert across == pytest.approx(0.0, abs=1e-6)
    # Roughly 1.7 km between launch line and winch.
    assert 1500.0 < metric_frame.length < 1900.0


def test_basis_is_orthonormal_and_right_handed(metric_frame) -> None:
    ax, ay = metric_frame.along
    cx, cy = metric_frame.across
    assert math.hypot(ax, ay) == pytest.approx(1.0)
    assert math.hypot(cx, cy) == pytest.approx(1.0)
    assert ax * cx + ay * cy == pytest.approx(0.0, abs=1e-12)
    assert ax * cy - ay * cx == pytest.approx(1.0)


def test_point_left_of_baseline_has_positive_across(metric_frame) -> None:
    point = point_at(metric_frame, 400.0, 120.0)
    along, across = metric_frame.to_local(point)
    assert along == pytest.approx(400.0, abs=1e-3)
    assert across == pytest.approx(120.0, abs=1e-3)


def test_to_local_many_matches_single_point_calls(metric_frame) -> None:
    points = [point_at(metric_frame, 10.0 * i, -35.0 * i) for i in range(5)]
    batch = metric_frame.to_local_many(points)
    single = np.array([metric_frame.to_local(pt) for pt in points])
    np.testing.assert_allclose(batch, single, atol=1e-9)


def test_local_planar_round_trip(metric_frame) -> None:
    local = np.array([[0.0, 0.0], [125.5, -40.0], [-300.0, 900.0]])
    planar = metric_frame.local_to_planar(local)
    np.testing.assert_allclose(metric_frame.planar_to_local(planar), local, atol=1e-9)


def test_coincident_anchors_raise() -> None:
    projection = Projection("EPSG:32631")
    with pytest.raises(BaselineError):
        build_baseline_frame(ANCHOR_START, ANCHOR_START, projection)


def test_metric_projection_picks_utm_zone_from_anchors() -> None:
    assert utm_crs_for([ANCHOR_START, ANCHOR_END]).to_epsg() == 32631
    assert metric_projection([ANCHOR_START, ANCHOR_END]).crs.to_epsg() == 32631
    southern = utm_crs_for([(-33.9, 18.4)])
    assert southern.to_epsg() == 32734


def test_unknown_crs_is_reported() -> None:
    with pytest.raises(ProjectionError):
        Projection("EPSG:not-a-code")


def test_web_mercator_pixels_follow_tile_scheme() -> None:
    projection = WebMercatorProjection()
    pixels = projection.to_pixels([(0.0, 0.0), (0.0, 180.0)], zoom=0)
    assert tuple(pixels[0]) == pytest.approx((128.0, 128.0), abs=1e-6)
    assert pixels[1][0] == pytest.approx(256.0, abs=1e-6)
    doubled = projection.to_pixels([(0.0, 0.0)], zoom=1)
    assert tuple(doubled[0]) == pytest.approx((256.0, 256.0), abs=1e-6)
