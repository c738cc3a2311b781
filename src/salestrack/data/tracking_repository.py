"""Access to routes, deliveries and activity logs stored in Supabase."""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Optional, Sequence
from zoneinfo import ZoneInfo

from ..config import settings
from ..db.supabase import get_supabase_client
from ..models.domain import (
    DeliveryStatus,
    Observation,
    ObservationFlags,
    PlannedStop,
    RouteRecord,
)
from ..services.tracking.waypoints import sort_observations

logger = logging.getLogger(__name__)

ROUTE_SELECT = (
    "id, date, salesperson_id, "
    "employees!routes_salesperson_id_fkey(name), "
    "deliveries(id, customer_id, status, visit_order, delivered_at, customers(name, latitude, longitude))"
)


class DataStoreUnavailableError(RuntimeError):
    """Raised when Supabase credentials are missing."""


def _client():
    client = get_supabase_client()
    if client is None:
        raise DataStoreUnavailableError(
            "Supabase not configured. Set SALESTRACK_SUPABASE_URL and SALESTRACK_SUPABASE_KEY."
        )
    return client


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp from PostgREST into an aware datetime."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _coerce_float(value: Any) -> float:
    if value is None or value == "":
        return float("nan")
    return float(value)


def _day_window(day: date, tz_name: str) -> tuple[str, str]:
    """UTC bounds of ``day`` from local midnight to the next local midnight."""
    zone = ZoneInfo(tz_name)
    start = datetime.combine(day, time.min, tzinfo=zone)
    end = datetime.combine(day + timedelta(days=1), time.min, tzinfo=zone)
    return start.astimezone(timezone.utc).isoformat(), end.astimezone(timezone.utc).isoformat()


def observation_from_row(row: dict[str, Any]) -> Observation:
    timestamp = parse_timestamp(row.get("created_at"))
    if timestamp is None:
        raise ValueError("activity log has no created_at timestamp")
    return Observation(
        latitude=_coerce_float(row.get("latitude")),
        longitude=_coerce_float(row.get("longitude")),
        timestamp=timestamp,
        event_name=row.get("event_name") or "location_update",
        flags=ObservationFlags.from_metadata(row.get("metadata")),
        employee_id=row.get("employee_id"),
        id=row.get("id"),
    )


def observation_to_row(observation: Observation) -> dict[str, Any]:
    """Shape an observation as an ``activity_logs`` row."""
    return {
        "employee_id": observation.employee_id,
        "event_name": observation.event_name,
        "latitude": observation.latitude,
        "longitude": observation.longitude,
        "metadata": observation.flags.to_metadata(),
        "created_at": observation.timestamp.isoformat(),
    }


def _single(value: Any) -> dict[str, Any]:
    """Embedded one-to-one relations come back as an object or a one-item list."""
    if isinstance(value, list):
        return value[0] if value else {}
    return value or {}


def stop_from_delivery_row(row: dict[str, Any]) -> PlannedStop:
    customer = _single(row.get("customers"))
    status = row.get("status") or DeliveryStatus.PENDING.value
    return PlannedStop(
        stop_id=str(row["id"]),
        customer_id=str(row.get("customer_id")),
        latitude=_coerce_float(customer.get("latitude")),
        longitude=_coerce_float(customer.get("longitude")),
        visit_order=int(row["visit_order"]),
        delivery_status=DeliveryStatus(status),
        customer_name=customer.get("name"),
        delivered_at=parse_timestamp(row.get("delivered_at")),
    )


def route_from_row(row: dict[str, Any]) -> RouteRecord:
    salesperson = _single(row.get("employees"))
    stops = sorted(
        (stop_from_delivery_row(delivery) for delivery in row.get("deliveries") or []),
        key=lambda stop: stop.visit_order,
    )
    return RouteRecord(
        route_id=str(row["id"]),
        date=date.fromisoformat(str(row["date"])),
        salesperson_id=str(row["salesperson_id"]),
        salesperson_name=salesperson.get("name"),
        stops=stops,
    )


def list_observations(employee_id: str, day: date, tz_name: str | None = None) -> list[Observation]:
    """Activity-log positions for one employee on one local working day, oldest first.

    The day runs between midnights in ``tz_name`` (``settings.tracking_timezone``
    by default).
    """
    start, end = _day_window(day, tz_name or settings.tracking_timezone)
    response = (
        _client()
        .table("activity_logs")
        .select("id, employee_id, event_name, latitude, longitude, metadata, created_at")
        .eq("employee_id", employee_id)
        .gte("created_at", start)
        .lt("created_at", end)
        .order("created_at")
        .execute()
    )
    rows = response.data or []
    observations = []
    for row in rows:
        try:
            observations.append(observation_from_row(row))
        except (TypeError, ValueError) as exc:
            logger.warning(f"Skipping malformed activity log {row.get('id')}: {exc}")
    # Everything downstream assumes timestamp order.
    return sort_observations(observations)


def get_route(route_id: str) -> RouteRecord:
    response = _client().table("routes").select(ROUTE_SELECT).eq("id", route_id).limit(1).execute()
    rows = response.data or []
    if not rows:
        raise LookupError(f"Route '{route_id}' not found")
    return route_from_row(rows[0])


def list_routes_for_date(day: date) -> list[RouteRecord]:
    response = (
        _client()
        .table("routes")
        .select(ROUTE_SELECT)
        .eq("date", day.isoformat())
        .order("created_at", desc=True)
        .execute()
    )
    routes = []
    for row in response.data or []:
        try:
            routes.append(route_from_row(row))
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning(f"Skipping malformed route {row.get('id')}: {exc}")
    return routes


def insert_observations(observations: Sequence[Observation], chunk_size: int = 500) -> int:
    """Write observations to ``activity_logs`` in chunks; returns the number of rows sent."""
    if chunk_size < 1:
        raise ValueError("chunk_size must be at least 1")
    rows = [observation_to_row(observation) for observation in observations if observation.is_finite]
    if not rows:
        return 0
    client = _client()
    for start in range(0, len(rows), chunk_size):
        chunk = rows[start : start + chunk_size]
        client.table("activity_logs").insert(chunk).execute()
        logger.info(f"Inserted {len(chunk)} activity logs")
    return len(rows)
