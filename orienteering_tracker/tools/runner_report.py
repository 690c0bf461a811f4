"""Build a validation report from an exported session document.

The export is a JSON object::

    {
      "beacons": [{"id": 1, "name": "Start", "type": "start",
                   "latitude": 45.84, "longitude": 1.27}, ...],
      "boundary": [{"lat": 45.83, "lng": 1.26}, ...],
      "runners": [{"id": 7, "name": "Alice",
                   "departure": "...", "arrival": "...",
                   "logs": [{"type": "gps", ...}, {"type": "beacon_scan", ...}]}]
    }

Runner entries may instead carry the served ``{"logs", "waypoints"}`` shape.
"""

from __future__ import annotations

import argparse
from datetime import datetime
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import pandas as pd

from ..boundaries import (
    CourseBoundary,
    boundary_area_m2,
    boundary_from_beacons,
    points_outside_boundary,
)
from ..config import (
    REPORT_OUTPUT_FILE,
    REPORT_TIMESTAMP_ENABLED,
    SCAN_VALIDITY_THRESHOLD_M,
)
from ..errors import BoundaryError, PayloadFormatError
from ..models import Beacon
from ..path import reconstruct_path
from ..payloads import (
    encode_path_polyline,
    parse_beacons,
    parse_runner_logs,
    path_to_json,
    runner_from_record,
    split_log_records,
    validation_to_json,
)
from ..route import suggest_course_order
from ..session_stats import (
    RunnerSummary,
    course_length_m,
    optimal_course_length_m,
    session_summary_frame,
    summarize_runner,
)
from ..utils import coerce_float, json_dumps_sorted
from ..validation import build_beacon_registry, validate_scans

LOGGER = logging.getLogger(__name__)


def build_session_report(
    document: Any,
    *,
    threshold_m: float = SCAN_VALIDITY_THRESHOLD_M,
) -> Dict[str, Any]:
    """Validate every runner in ``document`` and return a JSON-ready report.

    Raises:
        PayloadFormatError: If ``document`` is not an object or one of its
            list fields has another type.
    """

    if not isinstance(document, Mapping):
        raise PayloadFormatError("Session export must be a JSON object")
    beacons = parse_beacons(document.get("beacons"))
    registry = build_beacon_registry(beacons)
    boundary = _resolve_boundary(document.get("boundary"), beacons)

    runner_items = document.get("runners") or []
    if not isinstance(runner_items, list):
        raise PayloadFormatError("'runners' must be a list")

    runner_reports: List[Dict[str, Any]] = []
    summaries: List[RunnerSummary] = []
    for record in runner_items:
        if not isinstance(record, Mapping):
            LOGGER.debug("Skipping non-object runner entry")
            continue
        runner = runner_from_record(record)
        if "waypoints" in record or "points" in record:
            gps_points, scans = parse_runner_logs(record, runner.id)
        else:
            gps_points, scans = split_log_records(record.get("logs"), runner.id)
        path = reconstruct_path(gps_points, scans)
        validations = validate_scans(scans, registry, threshold_m=threshold_m)
        summary = summarize_runner(runner, path, validations, beacons)
        summaries.append(summary)
        outside: List[int] = []
        if boundary is not None:
            outside = points_outside_boundary(
                [(point.latitude, point.longitude) for point in path], boundary
            )
        runner_reports.append(
            {
                "id": runner.id,
                "name": runner.name,
                "validations": [validation_to_json(v) for v in validations],
                "path": path_to_json(path),
                "polyline": encode_path_polyline(path),
                "outsideBoundary": outside,
                "stats": _summary_to_json(summary),
            }
        )
        LOGGER.info(
            "Runner %s: %d/%d scans valid, %d GPS samples",
            runner.name or runner.id,
            summary.valid_scans,
            summary.total_scans,
            len(gps_points),
        )

    order = suggest_course_order(beacons)
    ranking = session_summary_frame(summaries)
    return {
        "course": {
            "beacons": len(beacons),
            "lengthM": course_length_m(beacons),
            "optimalLengthM": optimal_course_length_m(beacons),
            "suggestedOrder": [beacons[index].id for index in order],
            "boundaryAreaM2": (
                boundary_area_m2(boundary) if boundary is not None else None
            ),
        },
        "runners": runner_reports,
        "ranking": ranking.to_dict(orient="records"),
    }


def _resolve_boundary(
    raw: Any, beacons: Sequence[Beacon]
) -> Optional[CourseBoundary]:
    """Use the exported boundary, else a padded box around placed beacons."""

    if raw:
        if not isinstance(raw, list):
            raise PayloadFormatError("'boundary' must be a list")
        points = []
        for item in raw:
            if isinstance(item, Mapping):
                lat = coerce_float(item.get("lat", item.get("latitude")))
                lon = coerce_float(item.get("lng", item.get("longitude")))
            elif isinstance(item, (list, tuple)) and len(item) == 2:
                lat, lon = coerce_float(item[0]), coerce_float(item[1])
            else:
                continue
            if lat is not None and lon is not None:
                points.append((lat, lon))
        try:
            return CourseBoundary(points)
        except BoundaryError as exc:
            LOGGER.warning("Ignoring exported boundary: %s", exc)
    try:
        return boundary_from_beacons(beacons)
    except BoundaryError:
        LOGGER.info("No course boundary available; skipping containment checks")
        return None


def _summary_to_json(summary: RunnerSummary) -> Dict[str, Any]:
    return {
        "totalScans": summary.total_scans,
        "validScans": summary.valid_scans,
        "invalidScans": summary.invalid_scans,
        "validBeaconIds": summary.valid_beacon_ids,
        "missingBeaconIds": summary.missing_beacon_ids,
        "startedAt": summary.started_at,
        "finishedAt": summary.finished_at,
        "completionTimeS": summary.completion_time_s,
        "pathDistanceM": summary.path_distance_m,
    }


def _resolve_output_path(output: Optional[Path]) -> Path:
    if output is not None:
        return output
    if REPORT_TIMESTAMP_ENABLED:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        return Path(f"{REPORT_OUTPUT_FILE}_{timestamp}.json")
    return Path(f"{REPORT_OUTPUT_FILE}.json")


def _build_parser() -> argparse.ArgumentParser:
    """Return the CLI argument parser for the report tool."""

    parser = argparse.ArgumentParser(
        description=(
            "Validate beacon scans and rebuild runner paths from an exported"
            " session document."
        )
    )
    parser.add_argument("input", type=Path, help="Exported session JSON file")
    parser.add_argument(
        "--output",
        type=Path,
        help="Report path; defaults to REPORT_OUTPUT_FILE[_timestamp].json",
    )
    parser.add_argument(
        "--threshold-m",
        type=float,
        default=SCAN_VALIDITY_THRESHOLD_M,
        help=(
            "Maximum scan-to-beacon distance in metres"
            f" (default: {SCAN_VALIDITY_THRESHOLD_M:g})"
        ),
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """CLI entry point used via ``python -m orienteering_tracker.tools.runner_report``."""

    parser = _build_parser()
    args = parser.parse_args(argv)

    if not logging.getLogger().hasHandlers():
        logging.basicConfig(
            level=getattr(logging, args.log_level),
            format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        )

    try:
        with args.input.open("r", encoding="utf-8") as handle:
            document = json.load(handle)
    except (OSError, json.JSONDecodeError) as exc:
        LOGGER.error("Failed to read export '%s': %s", args.input, exc)
        return 1

    try:
        report = build_session_report(document, threshold_m=args.threshold_m)
    except PayloadFormatError as exc:
        LOGGER.error("Invalid export '%s': %s", args.input, exc)
        return 1

    table = _format_ranking(report)
    if table:
        print(table)

    output_path = _resolve_output_path(args.output)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json_dumps_sorted(report, indent=2), encoding="utf-8")
    LOGGER.info("Report written to %s", output_path)
    return 0


def _format_ranking(report: Mapping[str, Any]) -> str:
    rows = report.get("ranking") or []
    if not rows:
        return ""
    return pd.DataFrame(rows).to_string(index=False)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
