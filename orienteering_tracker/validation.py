"""Beacon scan validation.

A scan counts when the scanning device's GPS fix lies within
``SCAN_VALIDITY_THRESHOLD_M`` metres (inclusive) of the beacon's registered
position. Every failure mode is reported as data: an unplaced beacon, an
unknown beacon id or a malformed coordinate yields ``is_valid=False`` with
``distance_m=None`` instead of an exception, so one bad sample from a field
device never breaks the caller's rendering request.
"""

from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional, Sequence

from .config import SCAN_VALIDITY_THRESHOLD_M
from .geo import haversine_m, is_valid_coordinate
from .models import Beacon, BeaconId, ScanEvent, ValidationResult
from .utils import coerce_float, parse_int_id

_LOG = logging.getLogger(__name__)

BeaconRegistry = Mapping[BeaconId, Beacon]


def scan_distance_m(
    beacon_lat: Any,
    beacon_lon: Any,
    scan_lat: Any,
    scan_lon: Any,
) -> Optional[float]:
    """Return the beacon-to-scan distance in metres, or ``None`` if unmeasurable."""

    b_lat = coerce_float(beacon_lat)
    b_lon = coerce_float(beacon_lon)
    if b_lat is None or b_lon is None:
        return None
    if b_lat == 0 and b_lon == 0:
        # (0, 0) is the "not placed yet" sentinel.
        return None
    s_lat = coerce_float(scan_lat)
    s_lon = coerce_float(scan_lon)
    if not (is_valid_coordinate(b_lat, b_lon) and is_valid_coordinate(s_lat, s_lon)):
        return None
    return haversine_m((b_lat, b_lon), (s_lat, s_lon))  # type: ignore[arg-type]


def validate_scan(
    beacon_lat: Any,
    beacon_lon: Any,
    scan_lat: Any,
    scan_lon: Any,
    *,
    beacon_id: Optional[BeaconId] = None,
    threshold_m: float = SCAN_VALIDITY_THRESHOLD_M,
) -> ValidationResult:
    """Compare a scanned position against a beacon's registered position.

    Args:
        beacon_lat: Registered beacon latitude in degrees.
        beacon_lon: Registered beacon longitude in degrees.
        scan_lat: Latitude reported by the runner's device.
        scan_lon: Longitude reported by the runner's device.
        beacon_id: Identifier echoed back on the result.
        threshold_m: Maximum accepted distance in metres (inclusive).

    Returns:
        A :class:`ValidationResult`; ``distance_m`` is ``None`` whenever the
        distance cannot be measured, in which case ``is_valid`` is ``False``.
    """

    distance = scan_distance_m(beacon_lat, beacon_lon, scan_lat, scan_lon)
    if distance is None:
        return ValidationResult(beacon_id=beacon_id, distance_m=None, is_valid=False)
    return ValidationResult(
        beacon_id=beacon_id,
        distance_m=distance,
        is_valid=distance <= threshold_m,
    )


def validate_scan_event(
    scan: ScanEvent,
    beacons: BeaconRegistry,
    *,
    threshold_m: float = SCAN_VALIDITY_THRESHOLD_M,
) -> ValidationResult:
    """Resolve the scan's beacon in ``beacons`` and validate the scan against it."""

    beacon = lookup_beacon(beacons, scan.beacon_id)
    if beacon is None:
        _LOG.debug("Scan references unknown beacon id=%r", scan.beacon_id)
        return ValidationResult(
            beacon_id=scan.beacon_id, distance_m=None, is_valid=False
        )
    return validate_scan(
        beacon.latitude,
        beacon.longitude,
        scan.latitude,
        scan.longitude,
        beacon_id=beacon.id,
        threshold_m=threshold_m,
    )


def validate_scans(
    scans: Sequence[ScanEvent],
    beacons: BeaconRegistry,
    *,
    threshold_m: float = SCAN_VALIDITY_THRESHOLD_M,
) -> List[ValidationResult]:
    """Validate each scan in order."""

    results = [
        validate_scan_event(scan, beacons, threshold_m=threshold_m) for scan in scans
    ]
    invalid = sum(1 for result in results if not result.is_valid)
    if invalid:
        _LOG.debug("%d of %d scans failed validation", invalid, len(results))
    return results


def build_beacon_registry(beacons: Sequence[Beacon]) -> dict[BeaconId, Beacon]:
    """Index beacons by id; the first beacon wins on duplicate ids."""

    registry: dict[BeaconId, Beacon] = {}
    for beacon in beacons:
        if beacon.id in registry:
            _LOG.warning("Duplicate beacon id=%r ignored", beacon.id)
            continue
        registry[beacon.id] = beacon
    return registry


def lookup_beacon(
    beacons: BeaconRegistry, beacon_id: Optional[BeaconId]
) -> Optional[Beacon]:
    """Return the beacon for ``beacon_id``, matching ``"12"`` and ``12`` alike."""

    if beacon_id is None:
        return None
    beacon = beacons.get(beacon_id)
    if beacon is not None:
        return beacon
    if isinstance(beacon_id, str):
        number = parse_int_id(beacon_id)
        return beacons.get(number) if number is not None else None
    return beacons.get(str(beacon_id))


__all__ = [
    "BeaconRegistry",
    "build_beacon_registry",
    "lookup_beacon",
    "scan_distance_m",
    "validate_scan",
    "validate_scan_event",
    "validate_scans",
]
