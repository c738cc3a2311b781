import math
import random
from datetime import datetime, timezone

import pytest

from src.salestrack.models.domain import PlannedStop
from src.salestrack.services.geospatial import haversine_m
from src.salestrack.services.tracking.synthetic import generate_day_trace, generate_road_like_path
from src.salestrack.services.tracking.verification import verify_visits

JAKARTA = (106.8456, -6.2088)
BOGOR = (106.7972, -6.5950)


def test_short_distance_gives_no_points():
    assert generate_road_like_path(JAKARTA, BOGOR, 0.05, rng=random.Random(1)) == []


def test_identical_endpoints_give_no_points():
    assert generate_road_like_path(JAKARTA, JAKARTA, 5.0, rng=random.Random(1)) == []


def test_non_finite_input_gives_no_points():
    assert generate_road_like_path((float("nan"), -6.2), BOGOR, 5.0) == []
    assert generate_road_like_path(JAKARTA, BOGOR, float("inf")) == []


@pytest.mark.parametrize(
    "distance_km, expected",
    [
        (0.5, 1),  # clamped up to 2 segments
        (6.0, 3),
        (43.0, 9),  # clamped down to 10 segments
        (400.0, 9),
    ],
)
def test_interior_point_count_tracks_distance(distance_km, expected):
    points = generate_road_like_path(JAKARTA, BOGOR, distance_km, rng=random.Random(7))
    assert len(points) == expected
    assert all(math.isfinite(lon) and math.isfinite(lat) for lon, lat in points)


def test_points_stay_near_the_straight_line():
    points = generate_road_like_path(JAKARTA, BOGOR, 43.0, rng=random.Random(3))
    lats = [lat for _, lat in points]
    # progresses from start latitude towards end latitude
    assert min(lats) > BOGOR[1] - 0.01
    assert max(lats) < JAKARTA[1] + 0.01


def _stops() -> list[PlannedStop]:
    return [
        PlannedStop(stop_id="D2", customer_id="C2", latitude=-6.25, longitude=106.85, visit_order=2, customer_name="Toko Dua"),
        PlannedStop(stop_id="D1", customer_id="C1", latitude=-6.21, longitude=106.82, visit_order=1, customer_name="Toko Satu"),
        PlannedStop(stop_id="D3", customer_id="C3", latitude=-6.30, longitude=106.90, visit_order=3, customer_name="Toko Tiga"),
    ]


def test_day_trace_shape():
    start = datetime(2025, 1, 6, 8, 0, tzinfo=timezone.utc)
    end = datetime(2025, 1, 6, 17, 0, tzinfo=timezone.utc)
    trace = generate_day_trace(_stops(), start, end, origin=JAKARTA, employee_id="E1", rng=random.Random(11))

    assert trace[0].event_name == "clock_in" and trace[0].flags.is_start
    assert trace[-1].event_name == "clock_out" and trace[-1].flags.is_end
    assert trace[0].timestamp == start
    assert trace[-1].timestamp == end
    assert all(a.timestamp < b.timestamp for a, b in zip(trace, trace[1:]))
    assert [o.flags.sequence_number for o in trace] == list(range(1, len(trace) + 1))
    assert all(o.employee_id == "E1" for o in trace)

    deliveries = [o for o in trace if o.event_name == "delivery_completed"]
    assert [o.flags.description for o in deliveries] == ["Toko Satu", "Toko Dua", "Toko Tiga"]
    assert all(o.flags.is_at_customer and o.is_significant for o in deliveries)


def test_day_trace_verifies_every_stop():
    start = datetime(2025, 1, 6, 8, 0, tzinfo=timezone.utc)
    end = datetime(2025, 1, 6, 17, 0, tzinfo=timezone.utc)
    stops = _stops()
    trace = generate_day_trace(stops, start, end, rng=random.Random(5))

    assert all(result.verified for result in verify_visits(trace, stops))
    for stop in stops:
        delivery = next(o for o in trace if o.flags.description == stop.customer_name)
        assert haversine_m(delivery.latitude, delivery.longitude, stop.latitude, stop.longitude) < 50


def test_day_trace_without_stops_or_origin_is_empty():
    start = datetime(2025, 1, 6, 8, 0, tzinfo=timezone.utc)
    assert generate_day_trace([], start, start.replace(hour=9)) == []


def test_day_trace_rejects_inverted_window():
    start = datetime(2025, 1, 6, 8, 0, tzinfo=timezone.utc)
    with pytest.raises(ValueError):
        generate_day_trace(_stops(), start, start)
