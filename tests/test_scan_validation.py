"""Unit tests for beacon scan validation."""

from __future__ import annotations

import random

import pytest

from orienteering_tracker.config import SCAN_VALIDITY_THRESHOLD_M
from orienteering_tracker.models import Beacon, ScanEvent, ValidationResult
from orienteering_tracker.validation import (
    build_beacon_registry,
    lookup_beacon,
    scan_distance_m,
    validate_scan,
    validate_scan_event,
    validate_scans,
)


def test_default_threshold_is_twenty_metres() -> None:
    assert SCAN_VALIDITY_THRESHOLD_M == 20.0


def test_scan_on_beacon_is_valid() -> None:
    result = validate_scan(45.8419284, 1.2768559, 45.8419284, 1.2768559)
    assert result.distance_m == pytest.approx(0.0)
    assert result.is_valid is True


def test_scan_111m_away_is_invalid() -> None:
    result = validate_scan(45.0, 1.0, 45.001, 1.0)
    assert result.distance_m == pytest.approx(111.2, abs=0.1)
    assert result.is_valid is False


@pytest.mark.parametrize(
    "scan_lat, expected_valid",
    [
        (45.00017, True),  # ~18.9 m
        (45.0002, False),  # ~22.2 m
    ],
)
def test_threshold_around_twenty_metres(scan_lat: float, expected_valid: bool) -> None:
    result = validate_scan(45.0, 1.0, scan_lat, 1.0)
    assert result.is_valid is expected_valid


def test_threshold_is_inclusive() -> None:
    distance = scan_distance_m(45.0, 1.0, 45.00015, 1.0001)
    assert distance is not None
    assert validate_scan(45.0, 1.0, 45.00015, 1.0001, threshold_m=distance).is_valid
    assert not validate_scan(
        45.0, 1.0, 45.00015, 1.0001, threshold_m=distance - 1e-9
    ).is_valid


def test_validity_matches_distance_for_random_scans() -> None:
    rng = random.Random(1234)
    for _ in range(200):
        beacon = (rng.uniform(-60, 60), rng.uniform(-170, 170))
        scan = (
            beacon[0] + rng.uniform(-0.0004, 0.0004),
            beacon[1] + rng.uniform(-0.0004, 0.0004),
        )
        result = validate_scan(*beacon, *scan)
        assert result.distance_m is not None
        assert result.is_valid is (result.distance_m <= 20.0)
        reverse = scan_distance_m(*scan, *beacon)
        assert reverse == pytest.approx(result.distance_m)


@pytest.mark.parametrize(
    "beacon_lat, beacon_lon",
    [(0.0, 0.0), (0, 0), (None, 1.0), (45.0, None), (None, None)],
)
def test_unplaced_beacon_cannot_validate(beacon_lat, beacon_lon) -> None:
    result = validate_scan(beacon_lat, beacon_lon, 0.0, 0.0)
    assert result == ValidationResult(beacon_id=None, distance_m=None, is_valid=False)


@pytest.mark.parametrize(
    "scan_lat, scan_lon",
    [
        (None, 1.0),
        ("not-a-number", 1.0),
        (float("nan"), 1.0),
        (float("inf"), 1.0),
        (95.0, 1.0),
        (45.0, 200.0),
    ],
)
def test_malformed_scan_is_invalid_not_an_error(scan_lat, scan_lon) -> None:
    result = validate_scan(45.0, 1.0, scan_lat, scan_lon)
    assert result.distance_m is None
    assert result.is_valid is False


def test_numeric_strings_are_accepted() -> None:
    result = validate_scan("45.0", "1.0", "45.0", "1.0")
    assert result.distance_m == pytest.approx(0.0)
    assert result.is_valid is True


def test_beacon_only_zero_latitude_is_placed() -> None:
    # Only the exact (0, 0) pair is the unplaced sentinel.
    result = validate_scan(0.0, 10.0, 0.0, 10.0)
    assert result.is_valid is True


def test_validate_scan_event_resolves_beacon(beacon_registry, scan_events) -> None:
    result = validate_scan_event(scan_events[0], beacon_registry)
    assert result.beacon_id == 2
    assert result.distance_m is not None and result.distance_m < 2.0
    assert result.is_valid is True


def test_validate_scan_event_unknown_beacon(beacon_registry) -> None:
    scan = ScanEvent(runner_id=1, beacon_id=42, latitude=45.0, longitude=1.0)
    result = validate_scan_event(scan, beacon_registry)
    assert result == ValidationResult(beacon_id=42, distance_m=None, is_valid=False)


def test_validate_scan_event_without_beacon_id(beacon_registry) -> None:
    scan = ScanEvent(runner_id=1, beacon_id=None, latitude=45.0, longitude=1.0)
    assert validate_scan_event(scan, beacon_registry).is_valid is False


def test_validate_scan_event_unplaced_beacon(beacon_registry) -> None:
    scan = ScanEvent(runner_id=1, beacon_id=5, latitude=0.0, longitude=0.0)
    result = validate_scan_event(scan, beacon_registry)
    assert result.beacon_id == 5
    assert result.distance_m is None
    assert result.is_valid is False


def test_validate_scans_preserves_order(beacon_registry, scan_events) -> None:
    results = validate_scans(scan_events, beacon_registry)
    assert [r.beacon_id for r in results] == [2, 1, 3, 99]
    assert [r.is_valid for r in results] == [True, True, False, False]
    assert results[2].distance_m == pytest.approx(111.2, abs=0.5)


def test_custom_threshold_is_applied(beacon_registry, scan_events) -> None:
    results = validate_scans(scan_events, beacon_registry, threshold_m=150.0)
    assert [r.is_valid for r in results] == [True, True, True, False]


def test_lookup_beacon_matches_numeric_strings(beacon_registry) -> None:
    assert lookup_beacon(beacon_registry, "2").name == "Oak"
    assert lookup_beacon(beacon_registry, " 3 ").name == "Pond"
    assert lookup_beacon(beacon_registry, "abc") is None
    text_registry = {"7": Beacon(id="7", name="Seven")}
    assert lookup_beacon(text_registry, 7).name == "Seven"


def test_build_beacon_registry_keeps_first_duplicate() -> None:
    first = Beacon(id=1, name="first")
    second = Beacon(id=1, name="second")
    registry = build_beacon_registry([first, second])
    assert registry == {1: first}


@pytest.mark.parametrize("beacon_id", ["--5", "²", "1.5", "-", "", "12abc", "-2"])
def test_malformed_beacon_id_is_invalid_not_an_error(beacon_registry, beacon_id) -> None:
    scan = ScanEvent(runner_id=1, beacon_id=beacon_id, latitude=45.0, longitude=1.0)
    result = validate_scan_event(scan, beacon_registry)
    assert result == ValidationResult(beacon_id=beacon_id, distance_m=None, is_valid=False)
    assert lookup_beacon(beacon_registry, beacon_id) is None
