"""IGC track analyzer package."""

from .main import main
from .models import GridSegment, RawTrack, Track, Viewport
from .track_map import OverlayConfig, TrackMap
from .errors import BaselineError, IGCAnalyzerError, TrackFormatError

__all__ = [
    "main",
    "GridSegment",
    "RawTrack",
    "Track",
    "Viewport",
    "OverlayConfig",
    "TrackMap",
    "BaselineError",
    "IGCAnalyzerError",
    "TrackFormatError",
]
