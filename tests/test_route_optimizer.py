"""Tests for the nearest-neighbour course route suggestion."""

from __future__ import annotations

import random

import pytest

from orienteering_tracker.geo import haversine_m
from orienteering_tracker.models import Beacon
from orienteering_tracker.route import (
    optimize_route,
    route_length_m,
    suggest_course_order,
)


def _assert_closed_tour(order, count, start):
    assert len(order) == count + 1
    assert order[0] == start
    assert order[-1] == start
    assert sorted(order[:-1]) == list(range(count))


def test_two_points() -> None:
    assert optimize_route([(45.0, 1.0), (45.001, 1.0)]) == [0, 1, 0]


def test_degenerate_inputs() -> None:
    assert optimize_route([]) == []
    assert optimize_route([(45.0, 1.0)]) == [0, 0]


def test_points_on_a_meridian_are_walked_in_order() -> None:
    points = [(45.0, 1.0), (45.003, 1.0), (45.001, 1.0), (45.002, 1.0)]
    assert optimize_route(points) == [0, 2, 3, 1, 0]


def test_custom_start_index() -> None:
    points = [(45.0, 1.0), (45.003, 1.0), (45.001, 1.0), (45.002, 1.0)]
    assert optimize_route(points, start_index=1) == [1, 3, 2, 0, 1]


def test_ties_go_to_lowest_index() -> None:
    points = [(45.0, 1.0), (45.002, 1.0), (45.002, 1.0)]
    assert optimize_route(points) == [0, 1, 2, 0]
    assert optimize_route(points, start_index=2) == [2, 1, 0, 2]


def test_out_of_range_start_falls_back_to_zero() -> None:
    points = [(45.0, 1.0), (45.001, 1.0)]
    assert optimize_route(points, start_index=5) == [0, 1, 0]
    assert optimize_route(points, start_index=-1) == [0, 1, 0]


def test_points_without_coordinates_are_visited_last() -> None:
    points = [(45.0, 1.0), None, (45.001, 1.0), (float("nan"), 1.0), (45.002, 1.0)]
    assert optimize_route(points) == [0, 2, 4, 1, 3, 0]


@pytest.mark.parametrize("count", [3, 7, 20])
def test_random_courses_produce_closed_tours(count: int) -> None:
    rng = random.Random(count)
    points = [
        (45.84 + rng.uniform(-0.01, 0.01), 1.27 + rng.uniform(-0.01, 0.01))
        for _ in range(count)
    ]
    for start in (0, count - 1):
        _assert_closed_tour(optimize_route(points, start_index=start), count, start)


def test_each_step_moves_to_nearest_unvisited() -> None:
    rng = random.Random(7)
    points = [(rng.uniform(45.0, 45.05), rng.uniform(1.0, 1.05)) for _ in range(12)]
    order = optimize_route(points)
    visited = {order[0]}
    for current, chosen in zip(order, order[1:-1]):
        best = min(
            haversine_m(points[current], points[j])
            for j in range(len(points))
            if j not in visited
        )
        assert haversine_m(points[current], points[chosen]) == pytest.approx(best)
        visited.add(chosen)


def test_suggest_course_order_starts_at_start_beacon(course_beacons) -> None:
    beacons = course_beacons[:4]
    rotated = beacons[1:] + beacons[:1]  # start beacon now at index 3
    order = suggest_course_order(rotated)
    assert order[0] == 3
    assert order[-1] == 3
    _assert_closed_tour(order, 4, 3)


def test_suggest_course_order_without_start_uses_index_zero() -> None:
    beacons = [
        Beacon(id=1, name="a", latitude=45.0, longitude=1.0),
        Beacon(id=2, name="b", latitude=45.001, longitude=1.0),
    ]
    assert suggest_course_order(beacons) == [0, 1, 0]


def test_route_length_sums_legs() -> None:
    points = [(45.0, 1.0), (45.001, 1.0), (45.002, 1.0)]
    leg = haversine_m(points[0], points[1])
    two_legs = haversine_m(points[0], points[2])
    expected = leg + haversine_m(points[1], points[2]) + two_legs
    assert route_length_m(points, [0, 1, 2, 0]) == pytest.approx(expected)
    assert route_length_m(points, []) == 0.0
