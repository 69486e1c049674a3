"""Local (along, across) frame anchored on the baseline."""

from __future__ import annotations

from dataclasses import dataclass
import math
from typing import List, Sequence

import numpy as np

from ..errors import BaselineError
from ..models import LatLon, PlanarPoint
from .projection import PlanarArray, Projection, as_point


@dataclass(frozen=True, slots=True)
class BaselineFrame:
    """Orthonormal frame with its origin on the start anchor.

    ``along`` points from the start anchor to the end anchor and ``across`` is
    ``along`` rotated by +90 degrees. Both are unit vectors in the planar
    system of ``projection``, so local coordinates are in that system's units.
    """

    anchor_start: LatLon
    anchor_end: LatLon
    origin: PlanarPoint
    along: PlanarPoint
    across: PlanarPoint
    length: float
    projection: Projection

    def to_local(self, point: LatLon) -> PlanarPoint:
        """Return ``(along, across)`` offsets of a lat/lon point."""

        x, y = self.projection.project(point[0], point[1])
        rel_x = x - self.origin[0]
        rel_y = y - self.origin[1]
        return (
            rel_x * self.along[0] + rel_y * self.along[1],
            rel_x * self.across[0] + rel_y * self.across[1],
        )

    def to_local_many(self, points: Sequence[LatLon]) -> PlanarArray:
        return self.planar_to_local(self.projection.project_many(points))

    def planar_to_local(self, planar: PlanarArray) -> PlanarArray:
        """Rotate already projected coordinates into the frame."""

        relative = np.asarray(planar, dtype=float).reshape(-1, 2) - np.asarray(self.origin)
        return relative @ self._basis().T

    def local_to_planar(self, local: PlanarArray) -> PlanarArray:
        """Rotate frame coordinates back into the projection's planar system."""

        array = np.asarray(local, dtype=float).reshape(-1, 2)
        return array @ self._basis() + np.asarray(self.origin)

    def local_affine(self) -> List[float]:
        """Return the planar-to-local transform as ``[a, b, d, e, xoff, yoff]``."""

        ax, ay = self.along
        cx, cy = self.across
        ox, oy = self.origin
        return [ax, ay, cx, cy, -(ax * ox + ay * oy), -(cx * ox + cy * oy)]

    def _basis(self) -> np.ndarray:
        return np.array([self.along, self.across], dtype=float)


def build_baseline_frame(
    anchor_start: LatLon, anchor_end: LatLon, projection: Projection
) -> BaselineFrame:
    """Build the baseline frame for two anchors in ``projection``.

    Raises:
        BaselineError: If the anchors project onto the same planar point or
            produce non-finite coordinates.
    """

    start = as_point(anchor_start)
    end = as_point(anchor_end)
    origin = projection.project(*start)
    target = projection.project(*end)
    dx = target[0] - origin[0]
    dy = target[1] - origin[1]
    length = math.hypot(dx, dy)
    if not math.isfinite(length):
        raise BaselineError(
            f"Baseline anchors {start} -> {end} are not projectable in {projection!r}"
        )
    if length == 0:
        raise BaselineError(f"Baseline anchors coincide at {start}")
    ux, uy = dx / length, dy / length
    return BaselineFrame(
        anchor_start=start,
        anchor_end=end,
        origin=origin,
        along=(ux, uy),
        across=(-uy, ux),
        length=length,
        projection=projection,
    )


__all__ = ["BaselineFrame", "build_baseline_frame"]
