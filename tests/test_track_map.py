"""Tests for the track map orchestration layer."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from igc_analyzer.config import DEVIATION_COLOR
from igc_analyzer.errors import BaselineError
from igc_analyzer.filters import DateFilter
from igc_analyzer.models import GridRole, LineOptions, MapOptions, TrackClass
from igc_analyzer.track_map import OverlayConfig, TrackMap
from track_factories import ANCHOR_START, make_raw_track, track_along_baseline


def test_add_track_attaches_offset_and_class(track_map) -> None:
    near = track_map.add_track(
        make_raw_track(track_along_baseline(track_map.frame, 150.0), filename="near.igc")
    )
    far = track_map.add_track(
        make_raw_track(track_along_baseline(track_map.frame, -950.0), filename="far.igc")
    )

    assert near.max_offset_m == pytest.approx(150.0, abs=0.01)
    assert near.classification is TrackClass.DEFAULT
    assert near.style == track_map.options.line_options.to_style()
    assert far.max_offset_m == pytest.approx(950.0, abs=0.01)
    assert far.classification is TrackClass.DEVIATION
    assert far.style.color == DEVIATION_COLOR
    assert [t.filename for t in track_map.tracks] == ["near.igc", "far.igc"]


def test_add_track_keeps_metadata_and_freezes_points(track_map) -> None:
    raw = make_raw_track(
        [ANCHOR_START, (51.56, 4.94)],
        callsign="K7",
        glider_type="ASK 21",
        registration="PH-123",
        num_flight="4",
    )
    track = track_map.add_track(raw)
    assert isinstance(track.points, tuple)
    assert track.callsign == "K7"
    assert track.glider_type == "ASK 21"
    assert track.registration == "PH-123"
    assert track.num_flight == "4"
    assert track.visible is True


def test_empty_track_is_accepted_with_zero_offset(track_map) -> None:
    track = track_map.add_track(make_raw_track([]))
    assert track.max_offset_m == 0.0
    assert track.classification is TrackClass.DEFAULT


def test_filename_pattern_classification(track_map) -> None:
    track = track_map.add_track(
        make_raw_track(track_along_baseline(track_map.frame, 0.0), filename="day-Ride.gpx")
    )
    assert track.classification is TrackClass.RIDE


def test_override_replaces_display_style_without_mutating_tracks(track_map) -> None:
    deviating = track_map.add_track(
        make_raw_track(track_along_baseline(track_map.frame, 1000.0))
    )
    stored = deviating.style
    new_lines = LineOptions(color="#abcdef", weight=4.0, opacity=1.0, override_existing=True)

    track_map.update_options(MapOptions(line_options=new_lines))

    assert track_map.display_style(deviating) == new_lines.to_style()
    assert deviating.style == stored
    assert deviating.classification is TrackClass.DEVIATION

    # Toggling repeatedly does not drift.
    track_map.update_options(MapOptions(line_options=new_lines))
    assert track_map.display_style(deviating) == new_lines.to_style()


def test_options_without_override_keep_classified_styles(track_map) -> None:
    deviating = track_map.add_track(
        make_raw_track(track_along_baseline(track_map.frame, 1000.0))
    )
    track_map.update_options(
        MapOptions(line_options=LineOptions(color="#abcdef", override_existing=False))
    )
    assert track_map.display_style(deviating).color == DEVIATION_COLOR


def test_reclassify_clears_override(track_map) -> None:
    deviating = track_map.add_track(
        make_raw_track(track_along_baseline(track_map.frame, 1000.0))
    )
    original_style = deviating.style
    track_map.update_options(
        MapOptions(line_options=LineOptions(color="#abcdef", weight=3.0))
    )
    [rebuilt] = track_map.reclassify()

    assert track_map.tracks == [rebuilt]
    style = track_map.display_style(rebuilt)
    assert style.color == DEVIATION_COLOR
    assert style.weight == 3.0
    # The earlier reference is left as it was.
    assert deviating.style == original_style


def test_override_skips_tracks_added_afterwards(track_map) -> None:
    early = track_map.add_track(
        make_raw_track(track_along_baseline(track_map.frame, 10.0), filename="early.igc")
    )
    override = LineOptions(color="#00ff00", override_existing=True)
    track_map.update_options(MapOptions(line_options=override))

    late = track_map.add_track(
        make_raw_track(track_along_baseline(track_map.frame, 1500.0), filename="late.igc")
    )

    assert late.classification is TrackClass.DEVIATION
    assert track_map.display_style(late).color == DEVIATION_COLOR
    assert track_map.display_style(early).color == "#00ff00"

    # Applying the override again picks up the late track too.
    track_map.update_options(MapOptions(line_options=override))
    assert track_map.display_style(late).color == "#00ff00"


def test_filters_toggle_visibility(track_map) -> None:
    points = track_along_baseline(track_map.frame, 0.0)
    early = track_map.add_track(
        make_raw_track(points, filename="early.igc", timestamp=datetime(2023, 4, 1))
    )
    late = track_map.add_track(
        make_raw_track(
            points, filename="late.igc", timestamp=datetime(2024, 6, 1, tzinfo=timezone.utc)
        )
    )
    undated = track_map.add_track(make_raw_track(points, filename="undated.igc"))

    visible = track_map.apply_filters(
        DateFilter(min_date=datetime(2024, 1, 1), max_date=datetime(2024, 12, 31))
    )
    assert visible == 2
    assert (early.visible, late.visible, undated.visible) == (False, True, True)

    track_map.apply_filters(DateFilter())
    assert all(t.visible for t in track_map.tracks)


def test_viewport_changed_notifies_listeners(track_map, airfield_viewport) -> None:
    received = []
    track_map.add_viewport_listener(received.append)

    first = track_map.viewport_changed(airfield_viewport)
    second = track_map.viewport_changed(airfield_viewport.padded(0.5))

    assert received == [first, second]
    assert sum(1 for s in first if s.role is GridRole.BASELINE) == 1

    track_map.remove_viewport_listener(received.append)
    track_map.viewport_changed(airfield_viewport)
    assert len(received) == 2


def test_regenerate_grid_is_pure(track_map, airfield_viewport) -> None:
    assert track_map.regenerate_grid(airfield_viewport) == track_map.regenerate_grid(
        airfield_viewport
    )


def test_bounds(track_map) -> None:
    assert track_map.bounds() is None
    track_map.add_track(make_raw_track([(51.0, 4.0), (52.0, 5.0)]))
    bounds = track_map.bounds(zoom=12)
    assert (bounds.south, bounds.west, bounds.north, bounds.east) == (51.0, 4.0, 52.0, 5.0)
    assert bounds.zoom == 12


def test_coincident_anchor_config_is_fatal() -> None:
    config = OverlayConfig(anchor_start=ANCHOR_START, anchor_end=ANCHOR_START)
    with pytest.raises(BaselineError):
        TrackMap(config)
