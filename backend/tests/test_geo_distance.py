from __future__ import annotations

import math

import pytest

from geo.bounds import Bounds, Position
from geo.distance import bounds_from_radius, distance_km, to_degrees, to_radians


def test_distance_identity_is_zero():
    p = Position(lat=-37.8136, lng=144.9631)
    assert distance_km(p, p) == 0.0


def test_distance_is_symmetric():
    melbourne = Position(lat=-37.8136, lng=144.9631)
    sydney = Position(lat=-33.8688, lng=151.2093)
    assert distance_km(melbourne, sydney) == distance_km(sydney, melbourne)


def test_distance_melbourne_sydney_is_about_714_km():
    melbourne = Position(lat=-37.8136, lng=144.9631)
    sydney = Position(lat=-33.8688, lng=151.2093)
    assert distance_km(melbourne, sydney) == pytest.approx(714.0, abs=5.0)


def test_one_degree_of_latitude_is_about_111_km():
    d = distance_km(Position(lat=0.0, lng=0.0), Position(lat=1.0, lng=0.0))
    assert d == pytest.approx(111.19, abs=0.05)


def test_nan_propagates():
    d = distance_km(Position(lat=float("nan"), lng=0.0), Position(lat=0.0, lng=0.0))
    assert math.isnan(d)


def test_radian_round_trip():
    assert to_radians(180.0) == pytest.approx(math.pi)
    assert to_degrees(math.pi / 2) == pytest.approx(90.0)


def test_bounds_from_radius_on_equator_is_square_in_degrees():
    b = bounds_from_radius(Position(lat=0.0, lng=10.0), 111.0)
    assert b.north == pytest.approx(1.0)
    assert b.south == pytest.approx(-1.0)
    assert b.east == pytest.approx(11.0)
    assert b.west == pytest.approx(9.0)


def test_bounds_from_radius_widens_longitude_away_from_equator():
    b = bounds_from_radius(Position(lat=60.0, lng=0.0), 111.0)
    # cos(60deg) == 0.5 -> twice the longitude span.
    assert b.east == pytest.approx(2.0)
    assert b.west == pytest.approx(-2.0)
    assert b.north - b.south == pytest.approx(2.0)


def test_bounds_expanded_and_contains_are_inclusive():
    b = Bounds(north=1.0, south=0.0, east=1.0, west=0.0)
    assert b.contains(Position(lat=1.0, lng=0.0))
    assert not b.contains(Position(lat=1.0001, lng=0.0))

    e = b.expanded(0.1)
    assert e.north == pytest.approx(1.1)
    assert e.south == pytest.approx(-0.1)
    assert e.east == pytest.approx(1.1)
    assert e.west == pytest.approx(-0.1)
