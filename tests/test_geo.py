from __future__ import annotations

import math

import pytest

from missiontrack.geo import distance_km, eta_minutes, is_same_position
from missiontrack.models.geo import GeoPoint


def _p(lat: float, lng: float) -> GeoPoint:
    return GeoPoint(lat=lat, lng=lng)


class TestDistance:
    def test_same_point_is_zero(self) -> None:
        for point in (_p(20.0, 78.0), _p(-33.9, 151.2), _p(89.9, -179.9)):
            assert distance_km(point, point) == 0.0

    def test_symmetric(self) -> None:
        a, b = _p(20.05, 78.05), _p(20.1, 78.1)
        assert distance_km(a, b) == pytest.approx(distance_km(b, a))

    def test_live_to_dropoff_scenario(self) -> None:
        assert distance_km(_p(20.05, 78.05), _p(20.1, 78.1)) == pytest.approx(7.63, abs=0.05)

    def test_pickup_to_dropoff(self) -> None:
        assert distance_km(_p(20.0, 78.0), _p(20.1, 78.1)) == pytest.approx(15.25, abs=0.1)

    def test_one_degree_of_latitude(self) -> None:
        assert distance_km(_p(0.0, 10.0), _p(1.0, 10.0)) == pytest.approx(111.19, abs=0.01)

    def test_antipodal_points(self) -> None:
        assert distance_km(_p(0.0, 0.1), _p(0.0, -179.9)) == pytest.approx(math.pi * 6371.0, rel=1e-9)

    def test_monotonic_with_separation(self) -> None:
        origin = _p(20.0, 78.0)
        distances = [distance_km(origin, _p(20.0 + step * 0.5, 78.0 + step * 0.5)) for step in range(1, 10)]
        assert distances == sorted(distances)
        assert len(set(distances)) == len(distances)


class TestEta:
    def test_zero_distance(self) -> None:
        assert eta_minutes(0.0) == 0

    def test_never_negative(self) -> None:
        assert eta_minutes(-5.0) == 0
        assert eta_minutes(float("nan")) == 0

    def test_rounds_up(self) -> None:
        assert eta_minutes(1.0) == 3
        assert eta_minutes(7.63) == 23
        assert eta_minutes(0.01) == 1

    def test_speed_override(self) -> None:
        assert eta_minutes(10.0, speed_kmh=40.0) == 15

    def test_rejects_non_positive_speed(self) -> None:
        with pytest.raises(ValueError):
            eta_minutes(1.0, speed_kmh=0.0)

    def test_monotonic_non_decreasing(self) -> None:
        etas = [eta_minutes(step * 0.37) for step in range(200)]
        assert all(a <= b for a, b in zip(etas, etas[1:], strict=False))


def test_is_same_position_within_epsilon() -> None:
    a = _p(20.0, 78.0)
    assert is_same_position(a, _p(20.0000005, 78.0000005))
    assert not is_same_position(a, _p(20.00001, 78.0))
    assert is_same_position(a, _p(20.001, 78.0), epsilon_deg=0.01)
