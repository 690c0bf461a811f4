"""Runner and session statistics.

Pure functions turning reconstructed paths and scan validations into the
figures shown next to a session map: beacon counts, completion times and
distances, plus a ranked pandas table across a session's runners.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, List, Optional, Sequence

import pandas as pd

from .geo import path_length_m
from .models import Beacon, BeaconId, PathPoint, Runner, RunnerId, ValidationResult
from .path import path_coordinates
from .route import route_length_m, suggest_course_order
from .utils import format_duration, to_utc_aware

RUNNER_COL = "Runner"
RANK_COL = "Rank"
VALID_BEACONS_COL = "Valid Beacons"
SCANS_COL = "Scans"
INVALID_SCANS_COL = "Invalid Scans"
COMPLETION_SEC_COL = "Completion Time (sec)"
COMPLETION_FMT_COL = "Completion Time (h:mm:ss)"
DISTANCE_KM_COL = "Distance (km)"

SUMMARY_COLUMNS = [
    RANK_COL,
    RUNNER_COL,
    VALID_BEACONS_COL,
    SCANS_COL,
    INVALID_SCANS_COL,
    COMPLETION_SEC_COL,
    COMPLETION_FMT_COL,
    DISTANCE_KM_COL,
]


@dataclass(slots=True)
class RunnerSummary:
    """Per-runner figures derived from one session's logs."""

    runner_id: Optional[RunnerId]
    runner_name: str
    total_scans: int
    valid_scans: int
    invalid_scans: int
    valid_beacon_ids: List[BeaconId] = field(default_factory=list)
    missing_beacon_ids: List[BeaconId] = field(default_factory=list)
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    completion_time_s: Optional[float] = None
    path_distance_m: float = 0.0


def summarize_runner(
    runner: Runner,
    path: Sequence[PathPoint],
    validations: Sequence[ValidationResult],
    course_beacons: Sequence[Beacon] = (),
) -> RunnerSummary:
    """Summarise a runner's session.

    Completion time comes from the runner's departure/arrival when both are
    recorded, otherwise from the first and last timestamped path points.
    A beacon counts once however many valid scans reference it.
    """

    valid = [result for result in validations if result.is_valid]
    valid_ids = _distinct(result.beacon_id for result in valid)
    valid_set = set(valid_ids)
    missing = [beacon.id for beacon in course_beacons if beacon.id not in valid_set]

    started_at, finished_at = _session_bounds(runner, path)
    completion: Optional[float] = None
    if started_at is not None and finished_at is not None:
        elapsed = (finished_at - started_at).total_seconds()
        completion = elapsed if elapsed >= 0 else None

    return RunnerSummary(
        runner_id=runner.id,
        runner_name=runner.name,
        total_scans=len(validations),
        valid_scans=len(valid),
        invalid_scans=len(validations) - len(valid),
        valid_beacon_ids=valid_ids,
        missing_beacon_ids=missing,
        started_at=started_at,
        finished_at=finished_at,
        completion_time_s=completion,
        path_distance_m=path_length_m(path_coordinates(path)),
    )


def course_length_m(beacons: Sequence[Beacon]) -> float:
    """Length of the course visiting placed beacons in their authored order."""

    coords = [beacon.coordinates for beacon in beacons]
    return path_length_m([c for c in coords if c is not None])


def optimal_course_length_m(beacons: Sequence[Beacon]) -> float:
    """Length of the nearest-neighbour loop suggested for ``beacons``."""

    placed = [beacon for beacon in beacons if beacon.coordinates is not None]
    if len(placed) < 2:
        return 0.0
    return route_length_m(placed, suggest_course_order(placed))


def session_summary_frame(summaries: Iterable[RunnerSummary]) -> pd.DataFrame:
    """Return a ranked table of runner summaries.

    Runners are ordered by distinct valid beacons (descending) and then by
    completion time (ascending, unknown times last). Rank is positional.
    """

    rows = [
        {
            RUNNER_COL: summary.runner_name,
            VALID_BEACONS_COL: len(summary.valid_beacon_ids),
            SCANS_COL: summary.total_scans,
            INVALID_SCANS_COL: summary.invalid_scans,
            COMPLETION_SEC_COL: summary.completion_time_s,
            COMPLETION_FMT_COL: format_duration(summary.completion_time_s),
            DISTANCE_KM_COL: round(summary.path_distance_m / 1000.0, 3),
        }
        for summary in summaries
    ]
    if not rows:
        return pd.DataFrame(columns=SUMMARY_COLUMNS)
    df = pd.DataFrame(rows)
    df[COMPLETION_SEC_COL] = pd.to_numeric(df[COMPLETION_SEC_COL], errors="coerce")
    df = df.sort_values(
        by=[VALID_BEACONS_COL, COMPLETION_SEC_COL],
        ascending=[False, True],
        na_position="last",
        kind="mergesort",
    ).reset_index(drop=True)
    df[RANK_COL] = range(1, len(df) + 1)
    return df[SUMMARY_COLUMNS]


def _session_bounds(
    runner: Runner, path: Sequence[PathPoint]
) -> tuple[Optional[datetime], Optional[datetime]]:
    departure = _as_utc(runner.departure)
    arrival = _as_utc(runner.arrival)
    if departure is not None and arrival is not None:
        return departure, arrival
    stamps = [
        stamp
        for stamp in (_as_utc(point.timestamp) for point in path)
        if stamp is not None
    ]
    if not stamps:
        return None, None
    return min(stamps), max(stamps)


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if not isinstance(value, datetime):
        return None
    try:
        return to_utc_aware(value)
    except OverflowError:
        return None


def _distinct(values: Iterable[Optional[BeaconId]]) -> List[BeaconId]:
    seen: set[BeaconId] = set()
    ordered: List[BeaconId] = []
    for value in values:
        if value is None or value in seen:
            continue
        seen.add(value)
        ordered.append(value)
    return ordered


__all__ = [
    "RunnerSummary",
    "SUMMARY_COLUMNS",
    "course_length_m",
    "optimal_course_length_m",
    "session_summary_frame",
    "summarize_runner",
]
