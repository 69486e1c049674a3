"""Central error types used across the application."""

from __future__ import annotations


class IGCAnalyzerError(RuntimeError):
    """Base error for track analysis failures."""


class BaselineError(IGCAnalyzerError):
    """Raised when the baseline anchors cannot define a local frame."""


class ProjectionError(IGCAnalyzerError):
    """Raised when a coordinate reference system cannot be resolved."""


class TrackFormatError(IGCAnalyzerError):
    """Raised when a decoded track document is missing or has invalid data."""


__all__ = [
    "IGCAnalyzerError",
    "BaselineError",
    "ProjectionError",
    "TrackFormatError",
]
