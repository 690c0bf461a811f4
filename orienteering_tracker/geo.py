"""Great-circle distance helpers shared by validation, routing and statistics."""

from __future__ import annotations

import math
from typing import Optional, Sequence

import numpy as np
from numpy.typing import NDArray

from .config import EARTH_RADIUS_M
from .models import LatLon

MetricArray = NDArray[np.float64]


def haversine_m(first: LatLon, second: LatLon) -> float:
    """Return the Haversine distance in metres between two ``(lat, lon)`` pairs."""

    lat1, lon1 = first
    lat2, lon2 = second
    sin = math.sin
    cos = math.cos
    radians = math.radians
    atan2 = math.atan2
    sqrt = math.sqrt
    lat1_rad = radians(lat1)
    lat2_rad = radians(lat2)
    delta_lat = lat2_rad - lat1_rad
    delta_lon = radians(lon2 - lon1)
    sin_half_lat = sin(delta_lat / 2.0)
    sin_half_lon = sin(delta_lon / 2.0)
    a = sin_half_lat**2 + cos(lat1_rad) * cos(lat2_rad) * sin_half_lon**2
    # Rounding can push ``a`` a hair past 1 for antipodal points.
    a = min(max(a, 0.0), 1.0)
    c = 2.0 * atan2(sqrt(a), sqrt(1.0 - a))
    return EARTH_RADIUS_M * c


def haversine_to_many(origin: LatLon, points: MetricArray) -> MetricArray:
    """Vectorised Haversine from ``origin`` to every row of an ``(n, 2)`` array.

    Rows containing non-finite values produce ``inf`` so callers can rank
    them last.
    """

    array = np.asarray(points, dtype=float)
    if array.size == 0:
        return np.empty(0, dtype=float)
    if array.ndim != 2 or array.shape[1] != 2:
        raise ValueError("Expected a sequence of (lat, lon) pairs")
    if not (math.isfinite(origin[0]) and math.isfinite(origin[1])):
        return np.full(array.shape[0], np.inf, dtype=float)
    lat1 = math.radians(origin[0])
    lon1 = math.radians(origin[1])
    lat2 = np.radians(array[:, 0])
    lon2 = np.radians(array[:, 1])
    sin_half_lat = np.sin((lat2 - lat1) / 2.0)
    sin_half_lon = np.sin((lon2 - lon1) / 2.0)
    a = sin_half_lat**2 + math.cos(lat1) * np.cos(lat2) * sin_half_lon**2
    a = np.clip(a, 0.0, 1.0)
    c = 2.0 * np.arctan2(np.sqrt(a), np.sqrt(1.0 - a))
    distances = EARTH_RADIUS_M * c
    return np.where(np.isfinite(distances), distances, np.inf)


def is_valid_coordinate(latitude: Optional[float], longitude: Optional[float]) -> bool:
    """Return True for finite latitude in [-90, 90] and longitude in [-180, 180]."""

    for value in (latitude, longitude):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return False
    if not (math.isfinite(latitude) and math.isfinite(longitude)):
        return False
    return -90.0 <= latitude <= 90.0 and -180.0 <= longitude <= 180.0


def path_length_m(points: Sequence[LatLon]) -> float:
    """Sum leg distances along ``points``, skipping legs with invalid ends."""

    total = 0.0
    if len(points) < 2:
        return total
    previous = points[0]
    for current in points[1:]:
        if is_valid_coordinate(*previous) and is_valid_coordinate(*current):
            total += haversine_m(previous, current)
        previous = current
    return total


__all__ = [
    "haversine_m",
    "haversine_to_many",
    "is_valid_coordinate",
    "path_length_m",
]
