"""Synthetic GPS traces for seeding demo data and exercising the tracking pipeline."""

from __future__ import annotations

import math
import random
from datetime import datetime
from typing import Sequence

from ...models.domain import Coordinate, Observation, ObservationFlags, PlannedStop
from ..geospatial import haversine_km

MIN_CURVED_DISTANCE_KM = 0.1
KM_PER_SAMPLE = 1.5
MIN_SEGMENTS = 2
MAX_SEGMENTS = 10

# Maximum per-axis offset (degrees) of a delivery ping from the customer, roughly 30 m.
STOP_JITTER_DEG = 0.0003


def _is_finite_point(point: Sequence[float]) -> bool:
    return len(point) >= 2 and math.isfinite(point[0]) and math.isfinite(point[1])


def generate_road_like_path(
    start: Coordinate,
    end: Coordinate,
    distance_km: float,
    *,
    rng: random.Random | None = None,
    curve_range: tuple[float, float] = (0.1, 0.3),
    curve_scale: float = 0.01,
    jitter: float = 0.0005,
) -> list[Coordinate]:
    """Interior points of a gently curved path from ``start`` to ``end``.

    Points lie on a quadratic Bezier curve whose control point is pushed off
    the straight line along its perpendicular by a random fraction of
    ``curve_scale`` degrees, then receive a small random jitter. One sample is
    taken per ~1.5 km of straight-line distance (the curve is cut into 2..10
    segments). Coordinates are (lng, lat); endpoints are not included.
    """
    rng = rng or random.Random()
    if not (_is_finite_point(start) and _is_finite_point(end)) or not math.isfinite(distance_km):
        return []
    if distance_km < MIN_CURVED_DISTANCE_KM:
        return []

    dx = end[0] - start[0]
    dy = end[1] - start[1]
    length = math.hypot(dx, dy)
    if length == 0 or not math.isfinite(length):
        return []

    perp_x, perp_y = -dy / length, dx / length
    offset = rng.uniform(*curve_range) * curve_scale * rng.choice((-1.0, 1.0))
    control_x = (start[0] + end[0]) / 2 + perp_x * offset
    control_y = (start[1] + end[1]) / 2 + perp_y * offset

    segments = min(MAX_SEGMENTS, max(MIN_SEGMENTS, round(distance_km / KM_PER_SAMPLE)))
    points: list[Coordinate] = []
    for i in range(1, segments):
        t = i / segments
        u = 1 - t
        x = u * u * start[0] + 2 * u * t * control_x + t * t * end[0]
        y = u * u * start[1] + 2 * u * t * control_y + t * t * end[1]
        x += rng.uniform(-jitter, jitter)
        y += rng.uniform(-jitter, jitter)
        if math.isfinite(x) and math.isfinite(y):
            points.append((x, y))
    return points


def generate_day_trace(
    stops: Sequence[PlannedStop],
    start_time: datetime,
    end_time: datetime,
    *,
    origin: Coordinate | None = None,
    employee_id: str | None = None,
    rng: random.Random | None = None,
) -> list[Observation]:
    """Fabricate a working day of observations visiting ``stops`` in visit order.

    The trace opens with a ``clock_in`` ping at ``origin`` (or the first stop),
    follows a road-like curve to each customer where it records a
    ``delivery_completed`` ping, and closes with a ``clock_out`` ping at the
    last position. Timestamps are spread evenly between ``start_time`` and
    ``end_time``.
    """
    if end_time <= start_time:
        raise ValueError("end_time must be later than start_time")
    rng = rng or random.Random()
    ordered = sorted(stops, key=lambda stop: stop.visit_order)
    if origin is None:
        if not ordered:
            return []
        origin = ordered[0].coordinate

    # (coordinate, event name, flags) before timestamps are assigned
    pings: list[tuple[Coordinate, str, dict]] = [(origin, "clock_in", {"is_start": True})]
    position = origin
    for stop in ordered:
        target = (
            stop.longitude + rng.uniform(-STOP_JITTER_DEG, STOP_JITTER_DEG),
            stop.latitude + rng.uniform(-STOP_JITTER_DEG, STOP_JITTER_DEG),
        )
        distance = haversine_km(position[1], position[0], target[1], target[0])
        for point in generate_road_like_path(position, target, distance, rng=rng):
            pings.append((point, "location_update", {}))
        pings.append(
            (
                target,
                "delivery_completed",
                {"is_at_customer": True, "description": stop.customer_name or stop.customer_id},
            )
        )
        position = target
    pings.append((position, "clock_out", {"is_end": True}))

    span = end_time - start_time
    intervals = len(pings) - 1
    observations: list[Observation] = []
    for index, (coordinate, event_name, flags) in enumerate(pings):
        observations.append(
            Observation(
                latitude=coordinate[1],
                longitude=coordinate[0],
                timestamp=start_time + span * index / intervals,
                event_name=event_name,
                flags=ObservationFlags(sequence_number=index + 1, **flags),
                employee_id=employee_id,
            )
        )
    return observations
