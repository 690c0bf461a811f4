"""Global pytest fixtures & helpers.

Adds project root to path and provides a small course (beacons, GPS samples
and scans) shared by the validation, path and statistics tests.
"""
from __future__ import annotations

import os
import sys
from datetime import datetime, timezone

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from orienteering_tracker.models import Beacon, GpsPoint, Runner, ScanEvent


# --- Factory helpers -------------------------------------------------
def ts(minute: int, second: int = 0) -> datetime:
    return datetime(2025, 11, 21, 9, minute, second, tzinfo=timezone.utc)


def make_beacons():
    return [
        Beacon(id=1, name="Start", type="start", latitude=45.8419284, longitude=1.2768559, is_placed=True),
        Beacon(id=2, name="Oak", type="control", latitude=45.8431000, longitude=1.2781000, is_placed=True),
        Beacon(id=3, name="Pond", type="control", latitude=45.8442000, longitude=1.2760000, is_placed=True),
        Beacon(id=4, name="Finish", type="finish", latitude=45.8421000, longitude=1.2770000, is_placed=True),
        Beacon(id=5, name="Unplaced", type="control", latitude=0.0, longitude=0.0),
    ]


# --- Fixtures --------------------------------------------------------
@pytest.fixture
def course_beacons():
    return make_beacons()


@pytest.fixture
def beacon_registry(course_beacons):
    return {beacon.id: beacon for beacon in course_beacons}


@pytest.fixture
def runner():
    return Runner(id=7, name="Alice")


@pytest.fixture
def gps_points():
    return [
        GpsPoint(runner_id=7, latitude=45.8425000, longitude=1.2774000, timestamp=ts(3)),
        GpsPoint(runner_id=7, latitude=45.8419300, longitude=1.2768600, timestamp=ts(0)),
        GpsPoint(runner_id=7, latitude=45.8436000, longitude=1.2771000, timestamp=ts(8)),
    ]


@pytest.fixture
def scan_events():
    return [
        # 2 m from beacon 2 -> valid
        ScanEvent(runner_id=7, beacon_id=2, latitude=45.8431150, longitude=1.2781050, timestamp=ts(5)),
        # exactly on beacon 1 -> valid
        ScanEvent(runner_id=7, beacon_id=1, latitude=45.8419284, longitude=1.2768559, timestamp=ts(1)),
        # ~110 m from beacon 3 -> invalid
        ScanEvent(runner_id=7, beacon_id=3, latitude=45.8452000, longitude=1.2760000, timestamp=ts(10)),
        # unknown beacon
        ScanEvent(runner_id=7, beacon_id=99, latitude=45.8421000, longitude=1.2770000, timestamp=ts(12)),
    ]
