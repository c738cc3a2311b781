"""Proximity-based confirmation that planned customer stops were visited."""

from __future__ import annotations

import math
from typing import Sequence

from ...models.domain import Observation, PlannedStop, VisitVerification
from ..geospatial import haversine_m

DEFAULT_VISIT_THRESHOLD_M = 200.0


def nearest_distance_m(observations: Sequence[Observation], latitude: float, longitude: float) -> float:
    """Smallest distance from any observation to the point; ``inf`` when nothing qualifies."""

    nearest = math.inf
    if not (math.isfinite(latitude) and math.isfinite(longitude)):
        return nearest
    for observation in observations:
        if not observation.is_finite:
            continue
        distance = haversine_m(observation.latitude, observation.longitude, latitude, longitude)
        if distance < nearest:
            nearest = distance
    return nearest


def verify_visits(
    observations: Sequence[Observation],
    stops: Sequence[PlannedStop],
    threshold_m: float = DEFAULT_VISIT_THRESHOLD_M,
) -> list[VisitVerification]:
    """Flag each stop as visited when some observation came within ``threshold_m``.

    The scan is stops x observations; a day of pings for one salesperson keeps
    that small.
    """
    if threshold_m < 0 or not math.isfinite(threshold_m):
        raise ValueError(f"threshold_m must be a non-negative finite number, got {threshold_m}")

    results: list[VisitVerification] = []
    for stop in stops:
        distance = nearest_distance_m(observations, stop.latitude, stop.longitude)
        results.append(
            VisitVerification(
                stop_id=stop.stop_id,
                verified=distance <= threshold_m,
                nearest_distance_m=distance,
            )
        )
    return results
