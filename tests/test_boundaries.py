"""Tests for course boundary polygons."""

from __future__ import annotations

import pytest

from orienteering_tracker.boundaries import (
    CourseBoundary,
    boundary_area_m2,
    boundary_from_beacons,
    points_outside_boundary,
)
from orienteering_tracker.errors import BoundaryError
from orienteering_tracker.models import Beacon


@pytest.fixture
def square_boundary() -> CourseBoundary:
    return CourseBoundary(
        points=[(45.0, 1.0), (45.01, 1.0), (45.01, 1.01), (45.0, 1.01)]
    )


def test_boundary_requires_three_points() -> None:
    with pytest.raises(BoundaryError):
        CourseBoundary(points=[(45.0, 1.0), (45.01, 1.0)])


def test_boundary_drops_invalid_vertices() -> None:
    with pytest.raises(BoundaryError):
        CourseBoundary(points=[(45.0, 1.0), (45.01, 1.0), (float("nan"), 1.0)])
    boundary = CourseBoundary(
        points=[(45.0, 1.0), (None, 2.0), (45.01, 1.0), (45.01, 1.01)]
    )
    assert len(boundary.points) == 3


def test_boundary_from_beacons_pads_bounding_box(course_beacons) -> None:
    boundary = boundary_from_beacons(course_beacons, padding_km=0.5)
    pad = 0.5 / 111.0
    south, west = boundary.points[0]
    north, east = boundary.points[2]
    assert south == pytest.approx(45.8419284 - pad)
    assert west == pytest.approx(1.2760000 - pad)
    assert north == pytest.approx(45.8442000 + pad)
    assert east == pytest.approx(1.2781000 + pad)
    assert boundary.points[1] == pytest.approx((north, west))
    assert boundary.points[3] == pytest.approx((south, east))


def test_boundary_from_beacons_ignores_unplaced_and_needs_two() -> None:
    beacons = [
        Beacon(id=1, name="a", latitude=45.0, longitude=1.0),
        Beacon(id=2, name="b", latitude=0.0, longitude=0.0),
        Beacon(id=3, name="c"),
    ]
    with pytest.raises(BoundaryError):
        boundary_from_beacons(beacons)


def test_points_outside_boundary(square_boundary: CourseBoundary) -> None:
    points = [
        (45.005, 1.005),  # centre
        (45.02, 1.005),  # north of the box
        (None, None),  # skipped
        (45.005, 0.99),  # west of the box
        (45.0001, 1.005),  # ~11 m inside the southern edge
    ]
    assert points_outside_boundary(points, square_boundary) == [1, 3]


def test_points_outside_boundary_empty(square_boundary: CourseBoundary) -> None:
    assert points_outside_boundary([], square_boundary) == []


def test_boundary_area_of_one_square_kilometre() -> None:
    # 0.009 deg of latitude ~ 1000.8 m; 0.0127 deg of longitude at 45N ~ 999.6 m
    boundary = CourseBoundary(
        points=[(45.0, 1.0), (45.009, 1.0), (45.009, 1.0127), (45.0, 1.0127)]
    )
    assert boundary_area_m2(boundary) == pytest.approx(1.0e6, rel=0.02)
