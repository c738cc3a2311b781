"""Reconstruct the road a salesperson actually travelled from sparse GPS pings.

The directions service is asked to connect the selected waypoints along the
road network. Anything it cannot route degrades to straight segments between
the raw positions, one batch at a time, so a map always has a line to draw
whenever at least one position was recorded.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Literal, Protocol, Sequence

from ...models.domain import Coordinate, Observation, PlannedStop, RoutePath, Waypoint
from ..geospatial import is_finite_coordinate
from .routing_client import RouteFailure, RouteOutcome, RouteSuccess
from .waypoints import DEFAULT_BATCH_SIZE, DEFAULT_MIN_SPACING_M, partition_batches, select_waypoints

DEFAULT_MAX_WAYPOINTS_PER_REQUEST = 25
DEFAULT_BATCH_DELAY_SECONDS = 0.05

logger = logging.getLogger(__name__)

PathSource = Literal["routed", "partial", "straight_line", "empty"]


class Router(Protocol):
    @property
    def is_available(self) -> bool: ...

    def route(self, waypoints: Sequence[Coordinate], profile: str | None = None) -> RouteOutcome: ...


@dataclass(slots=True)
class BatchOutcome:
    index: int
    waypoints: list[Waypoint]
    outcome: RouteOutcome

    @property
    def routed(self) -> bool:
        return isinstance(self.outcome, RouteSuccess)


@dataclass(slots=True)
class Reconstruction:
    path: RoutePath
    source: PathSource
    batches: list[BatchOutcome] = field(default_factory=list)

    @property
    def failed_batches(self) -> int:
        return sum(1 for batch in self.batches if not batch.routed)


def straight_line_path(observations: Sequence[Observation]) -> RoutePath:
    """Raw observation coordinates, in order, skipping non-finite positions."""

    return [observation.coordinate for observation in observations if observation.is_finite]


def planned_path(stops: Sequence[PlannedStop]) -> RoutePath:
    """Straight line through the planned stops in visit order."""

    ordered = sorted(stops, key=lambda stop: stop.visit_order)
    return [stop.coordinate for stop in ordered if is_finite_coordinate(stop.latitude, stop.longitude)]


def is_drawable(path: Sequence[Coordinate]) -> bool:
    return len(path) >= 2


def _extend_path(path: RoutePath, segment: Sequence[Coordinate]) -> None:
    """Append ``segment``, dropping its first point when it repeats the path's end."""
    if not segment:
        return
    start = 1 if path and tuple(segment[0]) == path[-1] else 0
    path.extend(tuple(point) for point in segment[start:])


class RoutePathReconstructor:
    """Turn a day's observations into a road-following polyline."""

    def __init__(
        self,
        router: Router | None,
        *,
        max_waypoints_per_request: int = DEFAULT_MAX_WAYPOINTS_PER_REQUEST,
        batch_size: int = DEFAULT_BATCH_SIZE,
        batch_delay_seconds: float = DEFAULT_BATCH_DELAY_SECONDS,
        min_spacing_m: float = DEFAULT_MIN_SPACING_M,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if max_waypoints_per_request < 2:
            raise ValueError("max_waypoints_per_request must be at least 2")
        if batch_size < 2 or batch_size > max_waypoints_per_request:
            raise ValueError("batch_size must be between 2 and max_waypoints_per_request")
        if batch_delay_seconds < 0:
            raise ValueError("batch_delay_seconds must be non-negative")
        self.router = router
        self.max_waypoints_per_request = max_waypoints_per_request
        self.batch_size = batch_size
        self.batch_delay_seconds = batch_delay_seconds
        self.min_spacing_m = min_spacing_m
        self._sleep = sleep

    @property
    def routing_available(self) -> bool:
        return self.router is not None and self.router.is_available

    def reconstruct(
        self,
        observations: Sequence[Observation],
        waypoints: Sequence[Waypoint] | None = None,
    ) -> Reconstruction:
        """Reconstruct the travelled path for observations already in timestamp order."""
        raw_path = straight_line_path(observations)
        if not raw_path:
            return Reconstruction(path=[], source="empty")

        if not self.routing_available:
            logger.info("Directions service unavailable; drawing straight-line path")
            return Reconstruction(path=raw_path, source="straight_line")

        if waypoints is None:
            waypoints = select_waypoints(observations, min_spacing_m=self.min_spacing_m)
        if len(waypoints) < 2:
            return Reconstruction(path=raw_path, source="straight_line")

        if len(waypoints) <= self.max_waypoints_per_request:
            outcome = self._route_batch(list(waypoints))
            batch = BatchOutcome(index=0, waypoints=list(waypoints), outcome=outcome)
            if isinstance(outcome, RouteSuccess):
                return Reconstruction(path=list(outcome.geometry), source="routed", batches=[batch])
            logger.warning(f"Directions request failed, using straight-line path: {outcome.reason}")
            return Reconstruction(path=raw_path, source="straight_line", batches=[batch])

        return self._reconstruct_in_batches(list(waypoints), raw_path)

    def _reconstruct_in_batches(self, waypoints: list[Waypoint], raw_path: RoutePath) -> Reconstruction:
        batches = partition_batches(waypoints, self.batch_size)
        logger.info(
            f"Routing {len(waypoints)} waypoints in {len(batches)} batches "
            f"(batch size {self.batch_size})"
        )

        path: RoutePath = []
        outcomes: list[BatchOutcome] = []
        for index, batch in enumerate(batches):
            if index > 0 and self.batch_delay_seconds:
                self._sleep(self.batch_delay_seconds)
            outcome = self._route_batch(batch)
            outcomes.append(BatchOutcome(index=index, waypoints=batch, outcome=outcome))
            if isinstance(outcome, RouteSuccess):
                _extend_path(path, outcome.geometry)
            else:
                logger.warning(
                    f"Batch {index + 1}/{len(batches)} could not be routed, "
                    f"using straight segments: {outcome.reason}"
                )
                _extend_path(path, batch)

        if not path:
            return Reconstruction(path=raw_path, source="straight_line", batches=outcomes)

        routed = sum(1 for outcome in outcomes if outcome.routed)
        if routed == len(outcomes):
            source: PathSource = "routed"
        elif routed == 0:
            source = "straight_line"
        else:
            source = "partial"
        return Reconstruction(path=path, source=source, batches=outcomes)

    def _route_batch(self, batch: list[Waypoint]) -> RouteOutcome:
        try:
            return self.router.route(batch)
        except Exception as exc:  # noqa: BLE001
            logger.exception(f"Unexpected error from directions client: {exc}")
            return RouteFailure(reason=f"Unexpected routing error: {exc}")
