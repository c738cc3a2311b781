import math
from datetime import datetime, timezone

import pytest

from src.salestrack.models.domain import Observation, PlannedStop
from src.salestrack.services.geospatial import haversine_m
from src.salestrack.services.tracking.verification import nearest_distance_m, verify_visits

STAMP = datetime(2025, 1, 6, 10, 0, tzinfo=timezone.utc)
METRES_PER_DEGREE_LAT = 111_195.0

STOP = PlannedStop(stop_id="D1", customer_id="C1", latitude=-6.2, longitude=106.8, visit_order=1)


def _ping_north_of_stop(metres: float) -> Observation:
    return Observation(latitude=-6.2 + metres / METRES_PER_DEGREE_LAT, longitude=106.8, timestamp=STAMP)


def test_ping_just_inside_threshold_verifies():
    [result] = verify_visits([_ping_north_of_stop(199)], [STOP])
    assert result.verified
    assert result.nearest_distance_m == pytest.approx(199, abs=0.5)


def test_ping_just_outside_threshold_does_not_verify():
    [result] = verify_visits([_ping_north_of_stop(201)], [STOP])
    assert not result.verified
    assert result.nearest_distance_m == pytest.approx(201, abs=0.5)


def test_distance_equal_to_threshold_counts_as_visit():
    ping = _ping_north_of_stop(150)
    exact = haversine_m(ping.latitude, ping.longitude, STOP.latitude, STOP.longitude)
    [result] = verify_visits([ping], [STOP], threshold_m=exact)
    assert result.verified


def test_nearest_of_several_pings_is_used():
    pings = [_ping_north_of_stop(900), _ping_north_of_stop(120), _ping_north_of_stop(450)]
    [result] = verify_visits(pings, [STOP])
    assert result.verified
    assert result.nearest_distance_m == pytest.approx(120, abs=0.5)


def test_no_observations_means_unverified():
    [result] = verify_visits([], [STOP])
    assert not result.verified
    assert math.isinf(result.nearest_distance_m)


def test_non_finite_pings_ignored():
    broken = Observation(latitude=float("nan"), longitude=106.8, timestamp=STAMP)
    assert math.isinf(nearest_distance_m([broken], STOP.latitude, STOP.longitude))


def test_one_result_per_stop_in_input_order():
    far_stop = PlannedStop(stop_id="D2", customer_id="C2", latitude=-6.3, longitude=106.9, visit_order=2)
    results = verify_visits([_ping_north_of_stop(10)], [STOP, far_stop])
    assert [result.stop_id for result in results] == ["D1", "D2"]
    assert [result.verified for result in results] == [True, False]


def test_invalid_threshold_rejected():
    with pytest.raises(ValueError):
        verify_visits([], [STOP], threshold_m=-1)
    with pytest.raises(ValueError):
        verify_visits([], [STOP], threshold_m=float("nan"))
