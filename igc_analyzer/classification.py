"""Utilities for classifying tracks and deriving their line style."""

from __future__ import annotations

from dataclasses import dataclass
import re
from typing import Tuple

from .config import (
    ACTIVITY_COLOR_PATTERNS,
    DEVIATION_COLOR,
    DEVIATION_MIN_WEIGHT,
    DEVIATION_THRESHOLD_M,
)
from .models import LineOptions, LineStyle, TrackClass

__all__ = [
    "ActivityPattern",
    "ClassificationRules",
    "classify_track",
    "style_for",
]


@dataclass(frozen=True, slots=True)
class ActivityPattern:
    track_class: TrackClass
    pattern: re.Pattern[str]
    color: str


def _default_patterns() -> Tuple[ActivityPattern, ...]:
    return tuple(
        ActivityPattern(TrackClass(name), re.compile(regex), color)
        for name, regex, color in ACTIVITY_COLOR_PATTERNS
    )


@dataclass(frozen=True, slots=True)
class ClassificationRules:
    """Thresholds and colours used to classify tracks."""

    threshold_m: float = DEVIATION_THRESHOLD_M
    deviation_color: str = DEVIATION_COLOR
    min_weight: float = DEVIATION_MIN_WEIGHT
    activity_patterns: Tuple[ActivityPattern, ...] = _default_patterns()


def classify_track(
    max_offset_m: float,
    filename: str,
    rules: ClassificationRules,
    *,
    detect_colors: bool = True,
) -> TrackClass:
    """Return the class of a track; the first matching rule wins.

    Args:
        max_offset_m: Largest across-baseline distance of the track.
        filename: Source filename, inspected for an activity suffix such as
            ``-Run.gpx``.
        rules: Threshold and pattern configuration.
        detect_colors: When ``False`` filename patterns are ignored.

    Returns:
        :attr:`TrackClass.DEVIATION` when the offset is strictly above the
        threshold, otherwise the first matching activity class, otherwise
        :attr:`TrackClass.DEFAULT`.
    """

    if max_offset_m > rules.threshold_m:
        return TrackClass.DEVIATION
    if detect_colors:
        for activity in rules.activity_patterns:
            if activity.pattern.search(filename or ""):
                return activity.track_class
    return TrackClass.DEFAULT


def style_for(
    track_class: TrackClass, line_options: LineOptions, rules: ClassificationRules
) -> LineStyle:
    """Return the line style for ``track_class`` based on the current options."""

    base = line_options.to_style()
    if track_class is TrackClass.DEVIATION:
        return LineStyle(
            color=rules.deviation_color,
            weight=max(base.weight, rules.min_weight),
            opacity=base.opacity,
        )
    for activity in rules.activity_patterns:
        if activity.track_class is track_class:
            return LineStyle(color=activity.color, weight=base.weight, opacity=base.opacity)
    return base
