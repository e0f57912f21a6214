"""Unit tests for the Haversine distance helpers."""

import math

import pytest

from src.domain.distance import EARTH_RADIUS_KM, distance, haversine_km
from src.domain.entities import Location


class TestHaversine:
    def test_same_point_is_zero(self):
        assert haversine_km(23.8433, 90.3978, 23.8433, 90.3978) == 0.0

    def test_known_distance(self):
        # Dhaka airport → Gulshan 2 (~5.8 km)
        d = haversine_km(23.8433, 90.3978, 23.7925, 90.4078)
        assert 5.0 < d < 6.5

    def test_symmetric(self):
        d1 = haversine_km(19.0, 72.0, 20.0, 73.0)
        d2 = haversine_km(20.0, 73.0, 19.0, 72.0)
        assert abs(d1 - d2) < 1e-9

    def test_equator_to_pole_quarter_circle(self):
        d = haversine_km(0, 0, 0, 90)
        assert d == pytest.approx(10007.5, abs=1.0)
        assert d == pytest.approx(EARTH_RADIUS_KM * math.pi / 2)

    def test_antipodal_points(self):
        d = haversine_km(0, 0, 0, 180)
        assert d == pytest.approx(EARTH_RADIUS_KM * math.pi)

    def test_out_of_range_input_still_numeric(self):
        d = haversine_km(120.0, 400.0, -95.0, -200.0)
        assert math.isfinite(d)
        assert d >= 0


class TestLocationDistance:
    def test_identical_locations(self):
        p = Location(23.7561, 90.3742)
        assert distance(p, p) == 0.0

    def test_symmetric(self):
        a, b = Location(23.7561, 90.3742), Location(23.7330, 90.4172)
        assert distance(a, b) == distance(b, a)

    def test_monotonic_with_separation(self):
        origin = Location(0.0, 0.0)
        d1 = distance(origin, Location(0.0, 10.0))
        d2 = distance(origin, Location(0.0, 20.0))
        d3 = distance(origin, Location(0.0, 40.0))
        assert d1 < d2 < d3

    def test_matches_raw_formula(self):
        a, b = Location(19.0896, 72.8656), Location(19.1176, 72.8490)
        assert distance(a, b) == haversine_km(19.0896, 72.8656, 19.1176, 72.8490)
