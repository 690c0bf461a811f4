"""Plain records exchanged between the host application and the core."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Literal, Optional, Tuple

LatLon = Tuple[float, float]
BeaconId = int | str
RunnerId = int | str

BEACON_TYPE_START = "start"
BEACON_TYPE_FINISH = "finish"
BEACON_TYPE_CONTROL = "control"
BEACON_TYPES = (BEACON_TYPE_START, BEACON_TYPE_FINISH, BEACON_TYPE_CONTROL)

PathPointKind = Literal["gps", "beacon_scan"]
KIND_GPS: PathPointKind = "gps"
KIND_BEACON_SCAN: PathPointKind = "beacon_scan"


@dataclass(frozen=True, slots=True)
class Beacon:
    """Registered physical waypoint of a course."""

    id: BeaconId
    name: str
    type: str = BEACON_TYPE_CONTROL
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    is_placed: bool = False
    placed_at: Optional[datetime] = None

    @property
    def coordinates(self) -> Optional[LatLon]:
        """Return ``(lat, lon)`` or ``None`` while the beacon is unplaced."""

        if self.latitude is None or self.longitude is None:
            return None
        if self.latitude == 0 and self.longitude == 0:
            return None
        return (self.latitude, self.longitude)


@dataclass(frozen=True, slots=True)
class GpsPoint:
    runner_id: Optional[RunnerId]
    latitude: Optional[float]
    longitude: Optional[float]
    timestamp: Optional[datetime] = None


@dataclass(frozen=True, slots=True)
class ScanEvent:
    runner_id: Optional[RunnerId]
    beacon_id: Optional[BeaconId]
    latitude: Optional[float]
    longitude: Optional[float]
    timestamp: Optional[datetime] = None


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """Outcome of checking one scan against its beacon."""

    beacon_id: Optional[BeaconId]
    distance_m: Optional[float]
    is_valid: bool


@dataclass(frozen=True, slots=True)
class PathPoint:
    """One element of a runner's reconstructed path."""

    kind: PathPointKind
    latitude: Optional[float]
    longitude: Optional[float]
    timestamp: Optional[datetime]
    runner_id: Optional[RunnerId] = None
    beacon_id: Optional[BeaconId] = None


@dataclass
class Runner:
    id: RunnerId
    name: str
    departure: datetime | None = None
    arrival: datetime | None = None


__all__ = [
    "BEACON_TYPES",
    "BEACON_TYPE_CONTROL",
    "BEACON_TYPE_FINISH",
    "BEACON_TYPE_START",
    "Beacon",
    "BeaconId",
    "GpsPoint",
    "KIND_BEACON_SCAN",
    "KIND_GPS",
    "LatLon",
    "PathPoint",
    "PathPointKind",
    "Runner",
    "RunnerId",
    "ScanEvent",
    "ValidationResult",
]
