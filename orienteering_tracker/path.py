"""Merge a runner's GPS samples and beacon scans into one chronological path."""

from __future__ import annotations

import logging
from typing import Iterable, List, Sequence

from .models import KIND_BEACON_SCAN, KIND_GPS, GpsPoint, LatLon, PathPoint, ScanEvent
from .geo import is_valid_coordinate
from .utils import timestamp_sort_key

_LOG = logging.getLogger(__name__)


def reconstruct_path(
    gps_points: Sequence[GpsPoint],
    scan_events: Sequence[ScanEvent],
) -> List[PathPoint]:
    """Return GPS points and scans as one list ordered by timestamp.

    GPS points are tagged ``gps`` and scans ``beacon_scan``. Records without a
    usable timestamp sort as the Unix epoch, i.e. first. The sort is stable:
    equal timestamps keep GPS points ahead of scans and each group in input
    order. Inputs are never modified.
    """

    merged: List[PathPoint] = [
        PathPoint(
            kind=KIND_GPS,
            latitude=point.latitude,
            longitude=point.longitude,
            timestamp=point.timestamp,
            runner_id=point.runner_id,
        )
        for point in gps_points
    ]
    merged.extend(
        PathPoint(
            kind=KIND_BEACON_SCAN,
            latitude=scan.latitude,
            longitude=scan.longitude,
            timestamp=scan.timestamp,
            runner_id=scan.runner_id,
            beacon_id=scan.beacon_id,
        )
        for scan in scan_events
    )
    missing = sum(1 for point in merged if point.timestamp is None)
    if missing:
        _LOG.debug("%d path points have no timestamp; ordering them first", missing)
    return sorted(merged, key=lambda point: timestamp_sort_key(point.timestamp))


def path_coordinates(path: Iterable[PathPoint]) -> List[LatLon]:
    """Return the drawable ``(lat, lon)`` pairs of a path, dropping bad fixes."""

    coords: List[LatLon] = []
    for point in path:
        if is_valid_coordinate(point.latitude, point.longitude):
            coords.append((point.latitude, point.longitude))  # type: ignore[arg-type]
    return coords


def scans_in_path(path: Iterable[PathPoint]) -> List[PathPoint]:
    """Return the beacon-scan points of a path in path order."""

    return [point for point in path if point.kind == KIND_BEACON_SCAN]


__all__ = ["path_coordinates", "reconstruct_path", "scans_in_path"]
