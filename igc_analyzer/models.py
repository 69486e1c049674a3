"""Dataclasses describing tracks, map views and overlay geometry."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

from .config import (
    DEFAULT_DETECT_COLORS,
    DEFAULT_LINE_COLOR,
    DEFAULT_LINE_OPACITY,
    DEFAULT_LINE_SMOOTH_FACTOR,
    DEFAULT_LINE_WEIGHT,
    DEFAULT_OVERRIDE_EXISTING,
    DEFAULT_THEME,
)

LatLon = Tuple[float, float]
PlanarPoint = Tuple[float, float]


class TrackClass(str, Enum):
    DEVIATION = "deviation"
    HIKE = "hike"
    RUN = "run"
    RIDE = "ride"
    DEFAULT = "default"


class GridRole(str, Enum):
    GRID = "grid"
    BASELINE = "baseline"


@dataclass(frozen=True, slots=True)
class Viewport:
    """Visible geodetic rectangle plus the zoom level defining pixel space."""

    south: float
    west: float
    north: float
    east: float
    zoom: float

    @property
    def north_west(self) -> LatLon:
        return (self.north, self.west)

    @property
    def south_east(self) -> LatLon:
        return (self.south, self.east)

    @property
    def center(self) -> LatLon:
        return ((self.south + self.north) / 2.0, (self.west + self.east) / 2.0)

    def is_degenerate(self) -> bool:
        """Return ``True`` when the view has no width or no height."""

        return self.north == self.south or self.east == self.west

    @classmethod
    def from_points(cls, points: Sequence[LatLon], zoom: float) -> "Viewport":
        """Return the smallest viewport containing ``points``."""

        if not points:
            raise ValueError("Cannot build a viewport from no points")
        lats = [pt[0] for pt in points]
        lons = [pt[1] for pt in points]
        return cls(
            south=min(lats), west=min(lons), north=max(lats), east=max(lons), zoom=zoom
        )

    def padded(self, fraction: float) -> "Viewport":
        """Return a copy grown by ``fraction`` of its span on every side."""

        d_lat = (self.north - self.south) * fraction
        d_lon = (self.east - self.west) * fraction
        return replace(
            self,
            south=self.south - d_lat,
            north=self.north + d_lat,
            west=self.west - d_lon,
            east=self.east + d_lon,
        )


@dataclass(frozen=True, slots=True)
class PixelBounds:
    """Axis-aligned rectangle in pixel space (inclusive)."""

    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    def scaled(self, factor: float) -> "PixelBounds":
        return PixelBounds(
            self.min_x * factor,
            self.min_y * factor,
            self.max_x * factor,
            self.max_y * factor,
        )


@dataclass(frozen=True, slots=True)
class GridSegment:
    """One rendered gridline, or the distinguished baseline."""

    start: LatLon
    end: LatLon
    role: GridRole = GridRole.GRID
    # "along" for lines of constant along-baseline offset, "across" otherwise.
    axis: Optional[str] = None


@dataclass(frozen=True, slots=True)
class LineStyle:
    color: str
    weight: float
    opacity: float


@dataclass(frozen=True, slots=True)
class LineOptions:
    """User-adjustable defaults for track polylines."""

    color: str = DEFAULT_LINE_COLOR
    weight: float = DEFAULT_LINE_WEIGHT
    opacity: float = DEFAULT_LINE_OPACITY
    smooth_factor: float = DEFAULT_LINE_SMOOTH_FACTOR
    override_existing: bool = DEFAULT_OVERRIDE_EXISTING
    detect_colors: bool = DEFAULT_DETECT_COLORS

    def to_style(self) -> LineStyle:
        return LineStyle(color=self.color, weight=self.weight, opacity=self.opacity)


@dataclass(frozen=True, slots=True)
class MapOptions:
    """Options edited through the settings layer and persisted between runs."""

    theme: str = DEFAULT_THEME
    line_options: LineOptions = field(default_factory=LineOptions)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "MapOptions":
        """Build options from a mapping, keeping defaults for missing keys.

        Raises:
            ValueError: If ``line_options`` is present but not a mapping, or
                contains unknown keys.
        """

        raw_line = payload.get("line_options", {}) or {}
        if not isinstance(raw_line, Mapping):
            raise ValueError("line_options must be a mapping")
        try:
            line_options = LineOptions(**dict(raw_line))
        except TypeError as exc:
            raise ValueError(f"Invalid line options: {exc}") from exc
        theme = payload.get("theme", DEFAULT_THEME)
        return cls(theme=str(theme), line_options=line_options)


@dataclass(slots=True)
class RawTrack:
    """Decoded track as handed over by upstream file decoding."""

    points: Sequence[LatLon]
    filename: str
    timestamp: Optional[datetime] = None
    pilot: Optional[str] = None
    callsign: Optional[str] = None
    glider_type: Optional[str] = None
    registration: Optional[str] = None
    num_flight: Optional[str] = None


@dataclass(slots=True)
class Track:
    points: Tuple[LatLon, ...]
    filename: str
    max_offset_m: float
    classification: TrackClass
    style: LineStyle
    timestamp: Optional[datetime] = None
    pilot: Optional[str] = None
    callsign: Optional[str] = None
    glider_type: Optional[str] = None
    registration: Optional[str] = None
    num_flight: Optional[str] = None
    visible: bool = True


@dataclass(frozen=True, slots=True)
class ExportPath:
    """Quantized vector path for one track, ready for serialization."""

    filename: str
    points: Tuple[PlanarPoint, ...]
    color: str
    opacity: float
    width: float
