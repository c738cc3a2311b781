"""Route tracking endpoints."""

from __future__ import annotations

import logging
from datetime import date
from typing import NoReturn

from fastapi import APIRouter, HTTPException, Query, status

from ...data.tracking_repository import DataStoreUnavailableError
from ...schemas.tracking import ActualPathResponse, DashboardResponse, RouteTrackingResponse
from ...services.export.geojson import route_tracking_to_geojson
from ...services.tracking.service import build_actual_path, build_dashboard, build_route_tracking

router = APIRouter(prefix="/tracking", tags=["tracking"])


def _raise_for(exc: Exception, action: str) -> NoReturn:
    if isinstance(exc, LookupError):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    if isinstance(exc, DataStoreUnavailableError):
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    if isinstance(exc, ValueError):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    logging.exception(f"Error {action}: {exc}")
    raise HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed {action}: {str(exc)}",
    ) from exc


@router.get("/routes/{route_id}", response_model=RouteTrackingResponse, status_code=status.HTTP_200_OK)
def get_route_tracking(route_id: str) -> RouteTrackingResponse:
    """Planned vs. travelled path and visit verification for one route."""
    try:
        return build_route_tracking(route_id)
    except Exception as exc:
        _raise_for(exc, "building route tracking")


@router.get("/routes/{route_id}/geojson", status_code=status.HTTP_200_OK)
def get_route_geojson(route_id: str) -> dict:
    try:
        tracking = build_route_tracking(route_id)
    except Exception as exc:
        _raise_for(exc, "building route tracking")
    return route_tracking_to_geojson(tracking)


@router.get("/employees/{employee_id}/path", response_model=ActualPathResponse, status_code=status.HTTP_200_OK)
def get_employee_path(
    employee_id: str,
    day: date = Query(..., alias="date", description="Working day (YYYY-MM-DD)"),
) -> ActualPathResponse:
    try:
        return build_actual_path(employee_id, day)
    except Exception as exc:
        _raise_for(exc, "reconstructing employee path")


@router.get("/dashboard", response_model=DashboardResponse, status_code=status.HTTP_200_OK)
def get_dashboard(
    day: date = Query(..., alias="date", description="Working day (YYYY-MM-DD)"),
) -> DashboardResponse:
    """Delivery progress of every route scheduled on a day."""
    try:
        return build_dashboard(day)
    except Exception as exc:
        _raise_for(exc, "loading dashboard")
