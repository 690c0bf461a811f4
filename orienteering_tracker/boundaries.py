"""Course boundary polygons and containment checks."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import List, Sequence, Tuple

import numpy as np
from numpy.typing import NDArray
from pyproj import CRS, Transformer
from shapely.geometry import Point, Polygon

from .config import BOUNDARY_MIN_POINTS, BOUNDARY_PADDING_KM, KM_PER_DEGREE
from .errors import BoundaryError
from .geo import is_valid_coordinate
from .models import Beacon, LatLon

MetricArray = NDArray[np.float64]

_LOG = logging.getLogger(__name__)


@dataclass(slots=True)
class CourseBoundary:
    """Closed polygon (lat/lon vertices) delimiting a course area."""

    points: List[LatLon]

    def __post_init__(self) -> None:
        cleaned = [
            (float(lat), float(lon))
            for lat, lon in self.points
            if is_valid_coordinate(lat, lon)
        ]
        if len(cleaned) < BOUNDARY_MIN_POINTS:
            raise BoundaryError(
                f"At least {BOUNDARY_MIN_POINTS} coordinates are required to "
                f"define a boundary (got {len(cleaned)})"
            )
        self.points = cleaned


def boundary_from_beacons(
    beacons: Sequence[Beacon],
    padding_km: float = BOUNDARY_PADDING_KM,
) -> CourseBoundary:
    """Return a padded bounding box around the placed beacons.

    Corners are emitted south-west, north-west, north-east, south-east. The
    padding is converted with a flat ``KM_PER_DEGREE`` ratio on both axes.
    """

    coords = [beacon.coordinates for beacon in beacons]
    placed = [c for c in coords if c is not None and is_valid_coordinate(*c)]
    if len(placed) < 2:
        raise BoundaryError("Need at least 2 placed beacons to derive a boundary")
    lats = [lat for lat, _ in placed]
    lons = [lon for _, lon in placed]
    pad = max(padding_km, 0.0) / KM_PER_DEGREE
    south, north = min(lats) - pad, max(lats) + pad
    west, east = min(lons) - pad, max(lons) + pad
    return CourseBoundary(
        points=[(south, west), (north, west), (north, east), (south, east)]
    )


def points_outside_boundary(
    points: Sequence[LatLon],
    boundary: CourseBoundary,
) -> List[int]:
    """Return indices of ``points`` lying outside ``boundary``.

    Containment is evaluated in a local UTM projection. Points on the edge
    count as inside; points with invalid coordinates are skipped.
    """

    polygon, transformer = _metric_polygon(boundary)
    valid_indices = [
        idx for idx, (lat, lon) in enumerate(points) if is_valid_coordinate(lat, lon)
    ]
    if not valid_indices:
        return []
    metric = _project_points([points[idx] for idx in valid_indices], transformer)
    outside = [
        idx
        for idx, (x, y) in zip(valid_indices, metric)
        if not polygon.covers(Point(float(x), float(y)))
    ]
    if outside:
        _LOG.debug("%d of %d points outside course boundary", len(outside), len(points))
    return outside


def boundary_area_m2(boundary: CourseBoundary) -> float:
    """Return the boundary's enclosed area in square metres."""

    polygon, _ = _metric_polygon(boundary)
    return float(polygon.area)


def _metric_polygon(boundary: CourseBoundary) -> Tuple[Polygon, Transformer]:
    transformer = _build_local_transformer(boundary.points)
    polygon = Polygon(_project_points(boundary.points, transformer))
    if not polygon.is_valid:
        # Self-intersecting outlines drawn by hand.
        polygon = polygon.buffer(0)
    return polygon, transformer


def _build_local_transformer(points: Sequence[LatLon]) -> Transformer:
    """Build a local UTM transformer centred on the provided coordinates."""

    lats = [pt[0] for pt in points]
    lons = [pt[1] for pt in points]
    mean_lat = float(np.mean(lats))
    mean_lon = float(np.mean(lons))
    zone = int((mean_lon + 180.0) // 6.0) + 1
    zone = max(1, min(zone, 60))
    if mean_lat >= 0:
        epsg = 32600 + zone
    else:
        epsg = 32700 + zone
    try:
        target_crs = CRS.from_epsg(epsg)
    except Exception:
        target_crs = CRS.from_epsg(3857)
    return Transformer.from_crs(CRS.from_epsg(4326), target_crs, always_xy=True)


def _project_points(points: Sequence[LatLon], transformer: Transformer) -> MetricArray:
    if not points:
        return np.empty((0, 2), dtype=float)
    lats = np.asarray([pt[0] for pt in points], dtype=float)
    lons = np.asarray([pt[1] for pt in points], dtype=float)
    xs, ys = transformer.transform(lons, lats)
    return np.column_stack((xs, ys)).astype(float, copy=False)


__all__ = [
    "CourseBoundary",
    "boundary_area_m2",
    "boundary_from_beacons",
    "points_outside_boundary",
]
