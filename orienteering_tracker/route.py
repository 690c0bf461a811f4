"""Suggested visiting order for course previews.

Greedy nearest-neighbour approximation of the travelling-salesman tour over
a course's control points. The result is a heuristic preview aid only: it
carries no optimality guarantee and never influences scan validation.
"""

from __future__ import annotations

import logging
from typing import Any, List, Sequence

import numpy as np

from .geo import haversine_to_many, path_length_m
from .models import BEACON_TYPE_START, Beacon, LatLon
from .utils import coerce_float

_LOG = logging.getLogger(__name__)


def optimize_route(points: Sequence[Any], start_index: int = 0) -> List[int]:
    """Return a closed visiting order over ``points`` as a list of indices.

    Starting at ``start_index`` the tour repeatedly moves to the closest
    unvisited point (Haversine distance); ties go to the lowest input index.
    The start index is appended again at the end to close the loop, so ``n``
    points yield ``n + 1`` indices. Points with missing or non-finite
    coordinates are treated as infinitely far away.

    An out-of-range ``start_index`` falls back to 0.
    """

    count = len(points)
    if count == 0:
        return []
    if not 0 <= start_index < count:
        _LOG.warning(
            "start_index %s outside 0..%d; starting from index 0",
            start_index,
            count - 1,
        )
        start_index = 0
    if count == 1:
        return [start_index, start_index]

    coords = _as_coordinate_array(points)
    visited = np.zeros(count, dtype=bool)
    current = start_index
    visited[current] = True
    order = [current]
    for _ in range(count - 1):
        candidates = np.nonzero(~visited)[0]
        distances = haversine_to_many(
            (float(coords[current, 0]), float(coords[current, 1])),
            coords[candidates],
        )
        # argmin returns the first minimum, i.e. the lowest candidate index.
        current = int(candidates[int(np.argmin(distances))])
        visited[current] = True
        order.append(current)
    order.append(start_index)
    return order


def suggest_course_order(beacons: Sequence[Beacon]) -> List[int]:
    """Return a visiting order over ``beacons`` starting at the start beacon.

    The first beacon typed ``start`` opens the tour; without one the tour
    starts at index 0.
    """

    start_index = 0
    for index, beacon in enumerate(beacons):
        if beacon.type == BEACON_TYPE_START:
            start_index = index
            break
    else:
        if beacons:
            _LOG.debug("No start beacon among %d beacons; using index 0", len(beacons))
    points = [beacon.coordinates for beacon in beacons]
    return optimize_route(points, start_index=start_index)


def route_length_m(points: Sequence[Any], order: Sequence[int]) -> float:
    """Return the length in metres of visiting ``points`` in ``order``."""

    coords = _as_coordinate_array(points)
    legs: List[LatLon] = []
    for index in order:
        if not 0 <= index < len(coords):
            continue
        legs.append((float(coords[index, 0]), float(coords[index, 1])))
    return path_length_m(legs)


def _as_coordinate_array(points: Sequence[Any]) -> np.ndarray:
    """Convert ``(lat, lon)`` pairs (or ``None``) into an ``(n, 2)`` float array."""

    array = np.full((len(points), 2), np.nan, dtype=float)
    for row, point in enumerate(points):
        lat, lon = _split_point(point)
        if lat is not None and lon is not None:
            array[row, 0] = lat
            array[row, 1] = lon
    return array


def _split_point(point: Any) -> tuple[float | None, float | None]:
    if point is None:
        return None, None
    if isinstance(point, Beacon):
        coords = point.coordinates
        return (coords[0], coords[1]) if coords else (None, None)
    try:
        lat, lon = point
    except (TypeError, ValueError):
        return None, None
    return coerce_float(lat), coerce_float(lon)


__all__ = ["optimize_route", "route_length_m", "suggest_course_order"]
