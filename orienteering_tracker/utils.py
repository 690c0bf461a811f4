"""General utility helpers shared across modules."""

from __future__ import annotations

import json
import math
import re
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any

import numpy as np

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

_INT_ID_RE = re.compile(r"-?\d+", re.ASCII)


def to_utc_aware(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime; naive values are taken as UTC."""

    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_iso_datetime(raw: Any) -> datetime | None:
    """Parse an ISO-8601 string, epoch seconds or datetime; ``None`` on failure."""

    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, datetime):
        return raw
    if isinstance(raw, (int, float)):
        if not math.isfinite(raw):
            return None
        try:
            return datetime.fromtimestamp(raw, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if not isinstance(raw, str):
        return None
    text = raw.strip()
    if not text:
        return None
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def timestamp_sort_key(value: datetime | None) -> datetime:
    """Return a comparable UTC datetime, mapping missing values to the epoch."""

    if not isinstance(value, datetime):
        return EPOCH
    try:
        return to_utc_aware(value)
    except OverflowError:
        # Offset pushes the instant past datetime.min/max.
        return EPOCH


def parse_int_id(text: str) -> int | None:
    """Return ``text`` as an int when it is a plain ASCII integer literal."""

    stripped = text.strip()
    if _INT_ID_RE.fullmatch(stripped) is None:
        return None
    return int(stripped)


def coerce_float(value: Any) -> float | None:
    """Return ``value`` as a finite float or ``None``."""

    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def format_duration(seconds: float | None) -> str:
    """Format seconds into a ``H:MM:SS`` string."""

    if seconds is None:
        return ""
    total = int(round(seconds))
    sign = "-" if total < 0 else ""
    hours, remainder = divmod(abs(total), 3600)
    mins, sec = divmod(remainder, 60)
    return f"{sign}{hours}:{mins:02d}:{sec:02d}"


def _normalise_value(value: Any) -> Any:
    """Convert objects to JSON-friendly representations."""

    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, np.generic):
        return _normalise_value(value.item())
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="ignore")
    if isinstance(value, (set, frozenset)):
        return sorted(_normalise_value(item) for item in value)
    if isinstance(value, (list, tuple)):
        return [_normalise_value(item) for item in value]
    if isinstance(value, dict):
        return {str(key): _normalise_value(val) for key, val in value.items()}
    return value


def json_dumps_sorted(value: Any, *, indent: int | None = None) -> str:
    """Return canonical JSON with datetimes rendered as ISO strings."""

    normalised = _normalise_value(value)
    if indent is None:
        return json.dumps(normalised, sort_keys=True, separators=(",", ":"))
    return json.dumps(normalised, sort_keys=True, indent=indent)
