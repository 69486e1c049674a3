"""Forward/inverse projections between WGS84 and planar coordinate systems.

Two planar systems are in play and must not be mixed up: the rendering
projection (spherical Web Mercator, used for anything tied to the screen) and
a metric projection (UTM, used for true distances from the baseline).
"""

from __future__ import annotations

import math
from typing import Optional, Sequence, Tuple

import numpy as np
from numpy.typing import NDArray
from pyproj import CRS, Transformer
from pyproj.exceptions import CRSError

from ..config import RENDER_CRS, TILE_SIZE
from ..errors import ProjectionError
from ..models import LatLon, PixelBounds, PlanarPoint, Viewport

PlanarArray = NDArray[np.float64]

_WGS84 = CRS.from_epsg(4326)
# Sphere radius used by EPSG:3857.
EARTH_RADIUS_M = 6378137.0


class Projection:
    """Project lat/lon pairs into a planar CRS and back."""

    def __init__(self, crs: CRS | str | int) -> None:
        try:
            self.crs = CRS.from_user_input(crs)
        except CRSError as exc:
            raise ProjectionError(f"Unknown coordinate reference system: {crs}") from exc
        self._forward = Transformer.from_crs(_WGS84, self.crs, always_xy=True)
        self._inverse = Transformer.from_crs(self.crs, _WGS84, always_xy=True)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.crs.to_string()!r})"

    def project(self, lat: float, lon: float) -> PlanarPoint:
        x, y = self._forward.transform(lon, lat)
        return float(x), float(y)

    def unproject(self, x: float, y: float) -> LatLon:
        lon, lat = self._inverse.transform(x, y)
        return float(lat), float(lon)

    def project_many(self, points: Sequence[LatLon]) -> PlanarArray:
        """Project lat/lon pairs into an ``(N, 2)`` planar array."""

        if len(points) == 0:
            return np.empty((0, 2), dtype=float)
        array = np.asarray(points, dtype=float).reshape(-1, 2)
        xs, ys = self._forward.transform(array[:, 1], array[:, 0])
        return np.column_stack((xs, ys)).astype(float, copy=False)

    def unproject_many(self, planar: PlanarArray) -> PlanarArray:
        """Return an ``(N, 2)`` array of (lat, lon) for planar coordinates."""

        array = np.asarray(planar, dtype=float).reshape(-1, 2)
        if array.shape[0] == 0:
            return np.empty((0, 2), dtype=float)
        lons, lats = self._inverse.transform(array[:, 0], array[:, 1])
        return np.column_stack((lats, lons)).astype(float, copy=False)


class WebMercatorProjection(Projection):
    """Spherical Mercator with Leaflet-compatible pixel coordinates.

    Pixel space at zoom ``z`` spans ``TILE_SIZE * 2**z`` pixels, with the
    origin in the north-west corner and ``y`` growing southwards.
    """

    def __init__(self, crs: CRS | str | int = RENDER_CRS, tile_size: int = TILE_SIZE):
        super().__init__(crs)
        self.tile_size = tile_size

    def _world_size(self, zoom: float) -> float:
        return self.tile_size * math.pow(2.0, zoom)

    def to_pixels(self, points: Sequence[LatLon], zoom: float) -> PlanarArray:
        planar = self.project_many(points)
        if planar.shape[0] == 0:
            return planar
        size = self._world_size(zoom)
        half_circumference = math.pi * EARTH_RADIUS_M
        px = size * (0.5 + planar[:, 0] / (2.0 * half_circumference))
        py = size * (0.5 - planar[:, 1] / (2.0 * half_circumference))
        return np.column_stack((px, py))

    def pixel_bounds(self, viewport: Viewport) -> PixelBounds:
        """Return the pixel rectangle covered by ``viewport``."""

        corners = self.to_pixels([viewport.north_west, viewport.south_east], viewport.zoom)
        (x1, y1), (x2, y2) = corners
        return PixelBounds(
            min_x=float(min(x1, x2)),
            min_y=float(min(y1, y2)),
            max_x=float(max(x1, x2)),
            max_y=float(max(y1, y2)),
        )


def utm_crs_for(points: Sequence[LatLon]) -> CRS:
    """Return the WGS84 UTM CRS for the zone containing the points' centroid."""

    if not points:
        raise ProjectionError("Cannot pick a UTM zone for an empty point collection")
    mean_lat = float(np.mean([pt[0] for pt in points]))
    mean_lon = float(np.mean([pt[1] for pt in points]))
    zone = int((mean_lon + 180.0) // 6.0) + 1
    zone = max(1, min(zone, 60))
    epsg = 32600 + zone if mean_lat >= 0 else 32700 + zone
    return CRS.from_epsg(epsg)


def metric_projection(
    anchors: Sequence[LatLon], crs: Optional[str] = None
) -> Projection:
    """Return the metric projection for baseline maths.

    Args:
        anchors: Baseline anchors, used to pick a UTM zone when ``crs`` is
            empty.
        crs: Explicit CRS identifier (for example ``"EPSG:32631"``).
    """

    if crs:
        return Projection(crs)
    return Projection(utm_crs_for(anchors))


def as_point(value: Sequence[float]) -> Tuple[float, float]:
    lat, lon = value
    return float(lat), float(lon)


__all__ = [
    "EARTH_RADIUS_M",
    "PlanarArray",
    "Projection",
    "WebMercatorProjection",
    "metric_projection",
    "utm_crs_for",
    "as_point",
]
