"""Orienteering course tracking core.

Beacon scan validation, runner path reconstruction and course route
suggestions, consumed by the host web application with plain records.
"""

from .errors import BoundaryError, OrienteeringError, PayloadFormatError
from .models import Beacon, GpsPoint, PathPoint, Runner, ScanEvent, ValidationResult
from .path import reconstruct_path
from .route import optimize_route, suggest_course_order
from .validation import validate_scan, validate_scan_event, validate_scans

__all__ = [
    "Beacon",
    "BoundaryError",
    "GpsPoint",
    "OrienteeringError",
    "PathPoint",
    "PayloadFormatError",
    "Runner",
    "ScanEvent",
    "ValidationResult",
    "optimize_route",
    "reconstruct_path",
    "suggest_course_order",
    "validate_scan",
    "validate_scan_event",
    "validate_scans",
]
