"""Tracking response schemas."""

from __future__ import annotations

import datetime as dt
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class DeliveryProgressModel(BaseModel):
    delivered: int
    total: int
    percent: float


class StopVerificationModel(BaseModel):
    stop_id: str
    customer_id: str
    customer_name: Optional[str] = None
    visit_order: int
    delivery_status: str
    latitude: float
    longitude: float
    verified: bool
    nearest_distance_m: Optional[float] = Field(
        default=None,
        description="Distance to the closest tracked position; null when nothing was tracked.",
    )


class ReconstructionSummaryModel(BaseModel):
    source: str = Field(..., description="routed, partial, straight_line or empty")
    observation_count: int
    waypoint_count: int
    batch_count: int
    failed_batches: int
    length_m: float


class RouteTrackingResponse(BaseModel):
    route_id: str
    date: dt.date
    salesperson_id: str
    salesperson_name: Optional[str] = None
    region: Optional[str] = None
    planned_path: List[List[float]] = Field(default_factory=list, description="[lng, lat] pairs in visit order.")
    actual_path: List[List[float]] = Field(default_factory=list, description="[lng, lat] pairs of the travelled path.")
    stops: List[StopVerificationModel] = Field(default_factory=list)
    progress: DeliveryProgressModel
    reconstruction: ReconstructionSummaryModel


class ActualPathResponse(BaseModel):
    employee_id: str
    date: dt.date
    path: List[List[float]]
    reconstruction: ReconstructionSummaryModel


class RouteSummaryModel(BaseModel):
    route_id: str
    salesperson_id: str
    salesperson_name: Optional[str] = None
    region: Optional[str] = None
    progress: DeliveryProgressModel


class DashboardResponse(BaseModel):
    date: dt.date
    routes: List[RouteSummaryModel]
    progress: DeliveryProgressModel
    stops_by_region: Dict[str, int] = Field(
        default_factory=dict,
        description="Planned stops per coverage region across all routes of the day.",
    )
