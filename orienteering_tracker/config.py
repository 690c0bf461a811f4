"""Central configuration for the orienteering tracker.

All values are constants imported by the rest of the package. Tunables can be
overridden through environment variables (optionally via a local `.env`).
"""

from __future__ import annotations

import importlib
import os


def _env_float(key: str, default: float) -> float:
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _env_bool(key: str, default: bool) -> bool:
    value = os.getenv(key)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    return default


# Load .env variables when python-dotenv is available.
_load_dotenv = None
try:
    _dotenv_mod = importlib.import_module("dotenv")
    _load_dotenv = getattr(_dotenv_mod, "load_dotenv", None)
except Exception:
    _load_dotenv = None

if callable(_load_dotenv):
    # Load .env from the current directory or any parent folder.
    _load_dotenv()


# ---------------------------------------------------------------------------
# Geodesy
# ---------------------------------------------------------------------------
# Mean Earth radius (metres) for the spherical Haversine approximation.
EARTH_RADIUS_M = 6_371_000.0


# ---------------------------------------------------------------------------
# Beacon scan validation
# ---------------------------------------------------------------------------
# Maximum distance (metres) between a beacon's registered position and the
# scanning device's GPS fix for the scan to count. Inclusive.
SCAN_VALIDITY_THRESHOLD_M = _env_float("SCAN_VALIDITY_THRESHOLD_M", 20.0)


# ---------------------------------------------------------------------------
# Runner log records
# ---------------------------------------------------------------------------
# Log session types carrying raw tracking positions.
GPS_LOG_TYPES = frozenset({"gps", "location"})

# Log session type carrying a beacon scan; the beacon id lives in
# ``additionalData``.
BEACON_SCAN_LOG_TYPE = "beacon_scan"

# Beacon name reported for scans that do not resolve to a course beacon.
UNKNOWN_BEACON_NAME = "Unknown"


# ---------------------------------------------------------------------------
# Course boundaries
# ---------------------------------------------------------------------------
# Padding (km) added around placed beacons when deriving a default boundary.
BOUNDARY_PADDING_KM = _env_float("BOUNDARY_PADDING_KM", 0.5)

# Rough kilometres per degree used to convert the padding.
KM_PER_DEGREE = 111.0

# Minimum vertex count for a boundary polygon.
BOUNDARY_MIN_POINTS = 3


# ---------------------------------------------------------------------------
# Offline report tool
# ---------------------------------------------------------------------------
# Output path stem for the JSON report (absolute or relative).
REPORT_OUTPUT_FILE = os.getenv("REPORT_OUTPUT_FILE", "runner_report")

# Append _YYYYMMDD_HHMMSS to the report name when True.
REPORT_TIMESTAMP_ENABLED = _env_bool("REPORT_TIMESTAMP_ENABLED", True)
