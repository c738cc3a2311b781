"""Tracking orchestration service."""

from __future__ import annotations

import logging
import math
from collections import Counter
from datetime import date
from typing import Sequence

from ...config import settings
from ...data.tracking_repository import get_route, list_observations, list_routes_for_date
from ...models.domain import Observation, PlannedStop, RoutePath, RouteRecord, VisitVerification
from ...schemas.tracking import (
    ActualPathResponse,
    DashboardResponse,
    DeliveryProgressModel,
    ReconstructionSummaryModel,
    RouteSummaryModel,
    RouteTrackingResponse,
    StopVerificationModel,
)
from ..coverage import UNKNOWN_REGION, classify_region, region_counts
from ..geospatial import path_length_m
from .progress import DeliveryProgress, delivery_progress
from .reconstructor import Reconstruction, RoutePathReconstructor, planned_path
from .routing_client import RoutingClient, RoutingConfig
from .verification import verify_visits
from .waypoints import select_waypoints, sort_observations

logger = logging.getLogger(__name__)


def build_reconstructor() -> RoutePathReconstructor:
    router = RoutingClient(RoutingConfig.from_settings())
    return RoutePathReconstructor(
        router,
        max_waypoints_per_request=settings.max_waypoints_per_request,
        batch_size=settings.batch_size,
        batch_delay_seconds=settings.batch_delay_seconds,
        min_spacing_m=settings.min_waypoint_spacing_m,
    )


def _as_pairs(path: RoutePath) -> list[list[float]]:
    return [[lon, lat] for lon, lat in path]


def _progress_model(progress: DeliveryProgress) -> DeliveryProgressModel:
    return DeliveryProgressModel(delivered=progress.delivered, total=progress.total, percent=progress.percent)


def _route_region(stops: Sequence[PlannedStop]) -> str | None:
    regions = Counter(classify_region(stop.latitude, stop.longitude) for stop in stops)
    regions.pop(UNKNOWN_REGION, None)
    if not regions:
        return None
    return regions.most_common(1)[0][0]


def _reconstruct(observations: list[Observation]) -> tuple[Reconstruction, ReconstructionSummaryModel]:
    waypoints = select_waypoints(observations, min_spacing_m=settings.min_waypoint_spacing_m)
    reconstruction = build_reconstructor().reconstruct(observations, waypoints)
    summary = ReconstructionSummaryModel(
        source=reconstruction.source,
        observation_count=len(observations),
        waypoint_count=len(waypoints),
        batch_count=len(reconstruction.batches),
        failed_batches=reconstruction.failed_batches,
        length_m=round(path_length_m(reconstruction.path), 1),
    )
    return reconstruction, summary


def _stop_models(stops: Sequence[PlannedStop], verifications: Sequence[VisitVerification]) -> list[StopVerificationModel]:
    models = []
    for stop, verification in zip(stops, verifications):
        distance = verification.nearest_distance_m
        models.append(
            StopVerificationModel(
                stop_id=stop.stop_id,
                customer_id=stop.customer_id,
                customer_name=stop.customer_name,
                visit_order=stop.visit_order,
                delivery_status=stop.delivery_status.value,
                latitude=stop.latitude,
                longitude=stop.longitude,
                verified=verification.verified,
                nearest_distance_m=round(distance, 1) if math.isfinite(distance) else None,
            )
        )
    return models


def track_route(route: RouteRecord, observations: Sequence[Observation]) -> RouteTrackingResponse:
    """Planned path, travelled path and visit checks for a route and its day of observations."""
    ordered = sort_observations(observations)
    reconstruction, summary = _reconstruct(ordered)
    verifications = verify_visits(ordered, route.stops, settings.visit_threshold_m)
    verified_count = sum(1 for verification in verifications if verification.verified)
    logger.info(
        f"Route {route.route_id}: {verified_count}/{len(route.stops)} stops verified, "
        f"path source {reconstruction.source} ({len(reconstruction.path)} points)"
    )
    return RouteTrackingResponse(
        route_id=route.route_id,
        date=route.date,
        salesperson_id=route.salesperson_id,
        salesperson_name=route.salesperson_name,
        region=_route_region(route.stops),
        planned_path=_as_pairs(planned_path(route.stops)),
        actual_path=_as_pairs(reconstruction.path),
        stops=_stop_models(route.stops, verifications),
        progress=_progress_model(delivery_progress(route.stops)),
        reconstruction=summary,
    )


def build_route_tracking(route_id: str) -> RouteTrackingResponse:
    route = get_route(route_id)
    observations = list_observations(route.salesperson_id, route.date)
    return track_route(route, observations)


def build_actual_path(employee_id: str, day: date) -> ActualPathResponse:
    observations = sort_observations(list_observations(employee_id, day))
    reconstruction, summary = _reconstruct(observations)
    return ActualPathResponse(
        employee_id=employee_id,
        date=day,
        path=_as_pairs(reconstruction.path),
        reconstruction=summary,
    )


def build_dashboard(day: date) -> DashboardResponse:
    routes = list_routes_for_date(day)
    summaries = []
    delivered = total = 0
    stop_points: list[tuple[float, float]] = []
    for route in routes:
        stop_points.extend((stop.latitude, stop.longitude) for stop in route.stops)
        progress = delivery_progress(route.stops)
        delivered += progress.delivered
        total += progress.total
        summaries.append(
            RouteSummaryModel(
                route_id=route.route_id,
                salesperson_id=route.salesperson_id,
                salesperson_name=route.salesperson_name,
                region=_route_region(route.stops),
                progress=_progress_model(progress),
            )
        )
    return DashboardResponse(
        date=day,
        routes=summaries,
        progress=_progress_model(DeliveryProgress(delivered=delivered, total=total)),
        stops_by_region=region_counts(stop_points),
    )
