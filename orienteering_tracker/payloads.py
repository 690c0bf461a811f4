"""Conversion between JSON-shaped records and the core dataclasses.

Field devices and older front-end code disagree on names (``waypoints`` vs
``points``, ``isValid`` vs ``validated``, ``lng`` vs ``longitude``). Records
are normalised here once; everything past this module works with the
dataclasses in :mod:`orienteering_tracker.models`, and everything emitted
back uses a single schema.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import polyline

from .config import (
    BEACON_SCAN_LOG_TYPE,
    GPS_LOG_TYPES,
    SCAN_VALIDITY_THRESHOLD_M,
    UNKNOWN_BEACON_NAME,
)
from .errors import PayloadFormatError
from .models import (
    BEACON_TYPE_CONTROL,
    BEACON_TYPES,
    Beacon,
    BeaconId,
    GpsPoint,
    PathPoint,
    Runner,
    RunnerId,
    ScanEvent,
    ValidationResult,
)
from .path import path_coordinates
from .utils import coerce_float, parse_int_id, parse_iso_datetime
from .validation import BeaconRegistry, lookup_beacon, validate_scan_event

_LOG = logging.getLogger(__name__)

Record = Mapping[str, Any]
JsonDict = Dict[str, Any]


def _first(record: Record, *keys: str) -> Any:
    for key in keys:
        value = record.get(key)
        if value is not None:
            return value
    return None


def _coerce_id(value: Any) -> Optional[BeaconId]:
    """Return ids as ints when they look numeric, otherwise stripped strings."""

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    text = str(value).strip()
    if not text:
        return None
    number = parse_int_id(text)
    return text if number is None else number


def _record_runner_id(
    record: Record, default: Optional[RunnerId]
) -> Optional[RunnerId]:
    value = _coerce_id(_first(record, "runnerId", "runner_id"))
    return default if value is None else value


def _coerce_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


def _iter_records(items: Any, label: str) -> Iterable[Record]:
    if items is None:
        return
    if not isinstance(items, (list, tuple)):
        raise PayloadFormatError(f"'{label}' must be a list")
    for index, item in enumerate(items):
        if not isinstance(item, Mapping):
            _LOG.debug("Skipping non-object %s entry at index %d", label, index)
            continue
        yield item


def beacon_from_record(record: Record) -> Beacon:
    """Build a :class:`Beacon` from a beacon registry row."""

    raw_type = _first(record, "type")
    beacon_type = str(raw_type).strip().lower() if raw_type else BEACON_TYPE_CONTROL
    if beacon_type not in BEACON_TYPES:
        _LOG.debug("Beacon id=%r has unrecognised type %r", record.get("id"), raw_type)
    return Beacon(
        id=_coerce_id(record.get("id")),  # type: ignore[arg-type]
        name=str(_first(record, "name") or ""),
        type=beacon_type,
        latitude=coerce_float(_first(record, "latitude", "lat")),
        longitude=coerce_float(_first(record, "longitude", "lng", "lon")),
        is_placed=_coerce_bool(_first(record, "isPlaced", "is_placed")),
        placed_at=parse_iso_datetime(_first(record, "placedAt", "placed_at")),
    )


def gps_point_from_record(
    record: Record, runner_id: Optional[RunnerId] = None
) -> GpsPoint:
    return GpsPoint(
        runner_id=_record_runner_id(record, runner_id),
        latitude=coerce_float(_first(record, "latitude", "lat")),
        longitude=coerce_float(_first(record, "longitude", "lng", "lon")),
        timestamp=parse_iso_datetime(_first(record, "timestamp", "time")),
    )


def scan_event_from_record(
    record: Record, runner_id: Optional[RunnerId] = None
) -> ScanEvent:
    """Build a :class:`ScanEvent`; raw log rows carry the beacon id in ``additionalData``."""

    return ScanEvent(
        runner_id=_record_runner_id(record, runner_id),
        beacon_id=_coerce_id(
            _first(record, "beaconId", "beacon_id", "additionalData", "additional_data")
        ),
        latitude=coerce_float(_first(record, "latitude", "lat")),
        longitude=coerce_float(_first(record, "longitude", "lng", "lon")),
        timestamp=parse_iso_datetime(_first(record, "timestamp", "time")),
    )


def runner_from_record(record: Record) -> Runner:
    return Runner(
        id=_coerce_id(record.get("id")),  # type: ignore[arg-type]
        name=str(record.get("name") or ""),
        departure=parse_iso_datetime(record.get("departure")),
        arrival=parse_iso_datetime(record.get("arrival")),
    )


def parse_beacons(items: Any) -> List[Beacon]:
    return [beacon_from_record(record) for record in _iter_records(items, "beacons")]


def split_log_records(
    records: Any, runner_id: Optional[RunnerId] = None
) -> Tuple[List[GpsPoint], List[ScanEvent]]:
    """Split raw log-session rows into GPS samples and beacon scans by ``type``.

    Rows of any other type are ignored.
    """

    gps_points: List[GpsPoint] = []
    scans: List[ScanEvent] = []
    ignored = 0
    for record in _iter_records(records, "logs"):
        log_type = str(record.get("type") or "").strip().lower()
        if log_type in GPS_LOG_TYPES:
            gps_points.append(gps_point_from_record(record, runner_id))
        elif log_type == BEACON_SCAN_LOG_TYPE:
            scans.append(scan_event_from_record(record, runner_id))
        else:
            ignored += 1
    if ignored:
        _LOG.debug("Ignored %d log rows of unknown type", ignored)
    return gps_points, scans


def parse_runner_logs(
    document: Any, runner_id: Optional[RunnerId] = None
) -> Tuple[List[GpsPoint], List[ScanEvent]]:
    """Parse a ``{"logs": [...], "waypoints": [...]}`` runner-logs document.

    ``points`` is accepted in place of ``waypoints``.

    Raises:
        PayloadFormatError: If the document is not an object or a list field
            has another type.
    """

    if not isinstance(document, Mapping):
        raise PayloadFormatError("Runner logs document must be a JSON object")
    scan_items = document.get("waypoints")
    if scan_items is None:
        scan_items = document.get("points")
    gps_points = [
        gps_point_from_record(record, runner_id)
        for record in _iter_records(document.get("logs"), "logs")
    ]
    scans = [
        scan_event_from_record(record, runner_id)
        for record in _iter_records(scan_items, "waypoints")
    ]
    return gps_points, scans


def scan_is_valid(record: Record) -> bool:
    """Read a scan's validity flag from either ``isValid`` or legacy ``validated``."""

    value = record.get("isValid")
    if value is None:
        value = record.get("validated")
    return _coerce_bool(value) if value is not None else False


def validation_to_json(result: ValidationResult) -> JsonDict:
    return {
        "beaconId": result.beacon_id,
        "distance": result.distance_m,
        "isValid": result.is_valid,
    }


def path_point_to_json(point: PathPoint) -> JsonDict:
    return {
        "kind": point.kind,
        "latitude": point.latitude,
        "longitude": point.longitude,
        "timestamp": point.timestamp.isoformat() if point.timestamp else None,
        "beaconId": point.beacon_id,
    }


def path_to_json(path: Sequence[PathPoint]) -> List[JsonDict]:
    return [path_point_to_json(point) for point in path]


def encode_path_polyline(path: Sequence[PathPoint], precision: int = 5) -> str:
    """Return the drawable part of ``path`` as a Google encoded polyline."""

    coords = path_coordinates(path)
    if not coords:
        return ""
    return polyline.encode(coords, precision)


def build_runner_logs_response(
    gps_points: Sequence[GpsPoint],
    scans: Sequence[ScanEvent],
    beacons: BeaconRegistry,
    *,
    threshold_m: float = SCAN_VALIDITY_THRESHOLD_M,
) -> JsonDict:
    """Return the ``{"logs", "waypoints"}`` document served for a runner.

    Each waypoint carries its beacon's name (``Unknown`` when the id does not
    resolve to a course beacon), the scan-to-beacon distance and ``isValid``.
    """

    logs = [
        {
            "latitude": point.latitude,
            "longitude": point.longitude,
            "timestamp": point.timestamp.isoformat() if point.timestamp else None,
        }
        for point in gps_points
    ]
    waypoints = []
    for scan in scans:
        result = validate_scan_event(scan, beacons, threshold_m=threshold_m)
        beacon = lookup_beacon(beacons, scan.beacon_id)
        waypoints.append(
            {
                "beaconId": scan.beacon_id,
                "beaconName": beacon.name if beacon else UNKNOWN_BEACON_NAME,
                "timestamp": scan.timestamp.isoformat() if scan.timestamp else None,
                "isValid": result.is_valid,
                "distance": result.distance_m,
                "latitude": scan.latitude,
                "longitude": scan.longitude,
            }
        )
    return {"logs": logs, "waypoints": waypoints}


__all__ = [
    "beacon_from_record",
    "build_runner_logs_response",
    "encode_path_polyline",
    "gps_point_from_record",
    "parse_beacons",
    "parse_runner_logs",
    "path_point_to_json",
    "path_to_json",
    "runner_from_record",
    "scan_event_from_record",
    "scan_is_valid",
    "split_log_records",
    "validation_to_json",
]
