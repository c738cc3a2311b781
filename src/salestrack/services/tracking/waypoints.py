"""Waypoint selection and request batching for path reconstruction.

Tracked devices report a position every few seconds, which is far more than a
directions request accepts. The selector thins a day of observations down to
the positions that matter for the shape of the trip, and the batcher splits
long waypoint lists into overlapping chunks so consecutive routed segments
join end to start.
"""

from __future__ import annotations

from typing import Iterable, Sequence

from ...models.domain import Observation, Waypoint
from ..geospatial import haversine_m

DEFAULT_MIN_SPACING_M = 30.0
DEFAULT_BATCH_SIZE = 5


def sort_observations(observations: Iterable[Observation]) -> list[Observation]:
    """Return observations in ascending timestamp order (stable for ties)."""

    return sorted(observations, key=lambda observation: observation.timestamp)


def _distance_between(a: Waypoint, b: Waypoint) -> float:
    return haversine_m(a[1], a[0], b[1], b[0])


def select_waypoints(
    observations: Sequence[Observation],
    *,
    min_spacing_m: float = DEFAULT_MIN_SPACING_M,
) -> list[Waypoint]:
    """Pick the waypoints worth sending to a directions service.

    The first and last observations are always kept. Interior observations are
    kept when they are significant (trip start/end, customer visit, delivery
    completion) or when they lie at least ``min_spacing_m`` from the previously
    kept waypoint. Observations must already be in timestamp order. Positions
    with non-finite coordinates are ignored.
    """
    if min_spacing_m < 0:
        raise ValueError("min_spacing_m must be non-negative")

    usable = [observation for observation in observations if observation.is_finite]
    if not usable:
        return []

    waypoints: list[Waypoint] = [usable[0].coordinate]
    if len(usable) == 1:
        return waypoints

    for observation in usable[1:-1]:
        candidate = observation.coordinate
        if candidate == waypoints[-1]:
            continue
        if observation.is_significant or _distance_between(waypoints[-1], candidate) >= min_spacing_m:
            waypoints.append(candidate)

    last = usable[-1].coordinate
    if last != waypoints[-1]:
        waypoints.append(last)
    return waypoints


def partition_batches(
    waypoints: Sequence[Waypoint],
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> list[list[Waypoint]]:
    """Split waypoints into batches that share one point with their neighbour.

    Every batch after the first begins with the last waypoint of the batch
    before it, so routed segments can be stitched without gaps.
    """
    if batch_size < 2:
        raise ValueError("batch_size must be at least 2 so consecutive batches can overlap")
    if not waypoints:
        return []
    if len(waypoints) <= batch_size:
        return [list(waypoints)]

    batches: list[list[Waypoint]] = []
    step = batch_size - 1
    start = 0
    while start < len(waypoints) - 1:
        batches.append(list(waypoints[start : start + batch_size]))
        start += step
    return batches
