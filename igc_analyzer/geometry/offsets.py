"""Lateral deviation of a track from the baseline."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from ..models import LatLon
from .baseline import BaselineFrame


def max_lateral_offset(points: Sequence[LatLon], frame: BaselineFrame) -> float:
    """Return the largest absolute across-baseline distance of ``points``.

    An empty sequence has no measurable deviation and yields ``0.0``.
    """

    if len(points) == 0:
        return 0.0
    local = frame.to_local_many(points)
    return float(np.max(np.abs(local[:, 1])))


__all__ = ["max_lateral_offset"]
