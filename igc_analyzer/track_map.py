"""Track collection with baseline analysis, grid overlay and export.

``TrackMap`` is the object the rendering layer talks to. It analyses every
track once when it is added, regenerates the grid whenever the renderer
reports a view change and produces vector export paths on request.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
import logging
from typing import Callable, List, Optional, Sequence, Set

from .classification import ClassificationRules, classify_track, style_for
from .config import (
    GRID_ANCHOR_END,
    GRID_ANCHOR_START,
    GRID_MAX_LINES_PER_AXIS,
    GRID_PADDING_STEPS,
    GRID_SPACING_M,
    INIT_ZOOM,
    METRIC_CRS,
)
from .export import export_paths
from .filters import DateFilter
from .geometry import (
    BaselineFrame,
    GridOverlay,
    WebMercatorProjection,
    build_baseline_frame,
    max_lateral_offset,
    metric_projection,
)
from .models import (
    ExportPath,
    GridSegment,
    LatLon,
    LineStyle,
    MapOptions,
    RawTrack,
    Track,
    Viewport,
)

GridListener = Callable[[List[GridSegment]], None]


@dataclass(frozen=True, slots=True)
class OverlayConfig:
    """Settings fixed for the lifetime of a :class:`TrackMap`."""

    anchor_start: LatLon = GRID_ANCHOR_START
    anchor_end: LatLon = GRID_ANCHOR_END
    grid_spacing_m: float = GRID_SPACING_M
    grid_padding_steps: float = GRID_PADDING_STEPS
    grid_max_lines_per_axis: int = GRID_MAX_LINES_PER_AXIS
    metric_crs: Optional[str] = METRIC_CRS
    rules: ClassificationRules = field(default_factory=ClassificationRules)

    @classmethod
    def from_settings(cls) -> "OverlayConfig":
        return cls()


class TrackMap:
    def __init__(
        self,
        config: OverlayConfig | None = None,
        options: MapOptions | None = None,
    ) -> None:
        self.config = config or OverlayConfig.from_settings()
        self.options = options or MapOptions()
        self._log = logging.getLogger(self.__class__.__name__)
        anchors = (self.config.anchor_start, self.config.anchor_end)
        self.metric_projection = metric_projection(anchors, self.config.metric_crs)
        self.rendering_projection = WebMercatorProjection()
        self.frame: BaselineFrame = build_baseline_frame(
            self.config.anchor_start, self.config.anchor_end, self.metric_projection
        )
        self.grid = GridOverlay(
            self.config.anchor_start,
            self.config.anchor_end,
            self.config.grid_spacing_m,
            self.rendering_projection,
            padding_steps=self.config.grid_padding_steps,
            max_lines_per_axis=self.config.grid_max_lines_per_axis,
        )
        self.tracks: List[Track] = []
        self._style_override: LineStyle | None = None
        self._overridden: Set[int] = set()
        self._grid_listeners: List[GridListener] = []
        self._log.debug(
            "Baseline %s -> %s is %.1f m in %r",
            self.frame.anchor_start,
            self.frame.anchor_end,
            self.frame.length,
            self.metric_projection,
        )

    # ------------------------------------------------------------------
    # Tracks
    # ------------------------------------------------------------------
    def add_track(self, raw: RawTrack) -> Track:
        """Analyse and store one decoded track.

        The maximum lateral offset, the classification and the initial style
        are computed here once and never recomputed for this track.
        """

        points = tuple((float(lat), float(lon)) for lat, lon in raw.points)
        max_offset = max_lateral_offset(points, self.frame)
        line_options = self.options.line_options
        track_class = classify_track(
            max_offset,
            raw.filename,
            self.config.rules,
            detect_colors=line_options.detect_colors,
        )
        track = Track(
            points=points,
            filename=raw.filename,
            max_offset_m=max_offset,
            classification=track_class,
            style=style_for(track_class, line_options, self.config.rules),
            timestamp=raw.timestamp,
            pilot=raw.pilot,
            callsign=raw.callsign,
            glider_type=raw.glider_type,
            registration=raw.registration,
            num_flight=raw.num_flight,
        )
        self.tracks.append(track)
        self._log.info(
            "track %s maxOffsetMeters=%.1f baselineLen=%.1f class=%s",
            track.filename,
            max_offset,
            self.frame.length,
            track_class.value,
        )
        return track

    def visible_tracks(self) -> List[Track]:
        return [t for t in self.tracks if t.visible]

    def apply_filters(self, date_filter: DateFilter) -> int:
        """Update track visibility; returns the number of visible tracks."""

        for track in self.tracks:
            track.visible = not date_filter.hides(track)
        visible = len(self.visible_tracks())
        self._log.info("Filter %s leaves %d/%d tracks visible", date_filter, visible, len(self.tracks))
        return visible

    def bounds(self, zoom: float = INIT_ZOOM) -> Optional[Viewport]:
        """Return a viewport enclosing all tracks, or ``None`` when empty."""

        points = [pt for track in self.tracks for pt in track.points]
        if not points:
            return None
        return Viewport.from_points(points, zoom)

    # ------------------------------------------------------------------
    # Styles
    # ------------------------------------------------------------------
    def display_style(self, track: Track) -> LineStyle:
        """Return the style a track is drawn with right now."""

        if self._style_override is not None and id(track) in self._overridden:
            return self._style_override
        return track.style

    def update_options(self, options: MapOptions) -> None:
        """Apply new map options.

        With ``override_existing`` the tracks loaded so far are drawn with the
        new default line style, regardless of their classification, until
        :meth:`reclassify` is called. Tracks added later keep their own
        classified style.
        """

        if options.line_options.override_existing:
            self._style_override = options.line_options.to_style()
            self._overridden = {id(track) for track in self.tracks}
            self._log.info(
                "Overriding style of %d tracks with %s", len(self.tracks), self._style_override
            )
        self.options = options

    def reclassify(self) -> List[Track]:
        """Rebuild every track's class and style from the current options.

        Stored tracks are replaced rather than edited, so references taken
        before the call keep their old style. Returns the new track list.
        """

        line_options = self.options.line_options
        rebuilt: List[Track] = []
        for track in self.tracks:
            track_class = classify_track(
                track.max_offset_m,
                track.filename,
                self.config.rules,
                detect_colors=line_options.detect_colors,
            )
            rebuilt.append(
                replace(
                    track,
                    classification=track_class,
                    style=style_for(track_class, line_options, self.config.rules),
                )
            )
        self.tracks = rebuilt
        self._style_override = None
        self._overridden = set()
        return rebuilt

    # ------------------------------------------------------------------
    # Grid
    # ------------------------------------------------------------------
    def regenerate_grid(self, viewport: Viewport) -> List[GridSegment]:
        return self.grid.regenerate(viewport)

    def add_viewport_listener(self, listener: GridListener) -> None:
        """Register a callback receiving each freshly generated grid."""

        self._grid_listeners.append(listener)

    def remove_viewport_listener(self, listener: GridListener) -> None:
        self._grid_listeners.remove(listener)

    def viewport_changed(self, viewport: Viewport) -> List[GridSegment]:
        """Entry point for pan/zoom-end notifications from the renderer.

        The previous grid is discarded; listeners receive the complete new
        segment set.
        """

        segments = self.regenerate_grid(viewport)
        for listener in list(self._grid_listeners):
            listener(segments)
        return segments

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------
    def export_paths(self, viewport: Viewport, scale: float) -> List[ExportPath]:
        return export_paths(
            self.visible_tracks(),
            self.display_style,
            self.rendering_projection,
            viewport,
            scale,
        )

    def add_tracks(self, raws: Sequence[RawTrack]) -> List[Track]:
        return [self.add_track(raw) for raw in raws]


__all__ = ["OverlayConfig", "TrackMap", "GridListener"]
