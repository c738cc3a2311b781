"""Domain models for tracked positions, routes and planned stops."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Mapping, Optional

# Coordinates are (longitude, latitude) pairs, the order map renderers and
# directions services expect.
Coordinate = tuple[float, float]
Waypoint = Coordinate
RoutePath = list[Coordinate]

DELIVERY_COMPLETION_EVENTS = frozenset({"delivery_completed", "delivery_complete", "delivered"})


class DeliveryStatus(str, Enum):
    PENDING = "pending"
    DELIVERED = "delivered"


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"true", "1", "yes"}
    return bool(value)


def _as_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


@dataclass(frozen=True, slots=True)
class ObservationFlags:
    """Semantic tags a device attaches to a position report."""

    is_start: bool = False
    is_end: bool = False
    is_at_customer: bool = False
    sequence_number: Optional[int] = None
    description: Optional[str] = None

    @classmethod
    def from_metadata(cls, metadata: Mapping[str, Any] | None) -> "ObservationFlags":
        """Read the known flags from a raw metadata mapping, ignoring anything else."""
        if not metadata:
            return cls()
        description = metadata.get("description")
        return cls(
            is_start=_as_bool(metadata.get("is_start", False)),
            is_end=_as_bool(metadata.get("is_end", False)),
            is_at_customer=_as_bool(metadata.get("is_at_customer", False)),
            sequence_number=_as_int(metadata.get("sequence_number")),
            description=str(description) if description is not None else None,
        )

    def to_metadata(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.is_start:
            data["is_start"] = True
        if self.is_end:
            data["is_end"] = True
        if self.is_at_customer:
            data["is_at_customer"] = True
        if self.sequence_number is not None:
            data["sequence_number"] = self.sequence_number
        if self.description:
            data["description"] = self.description
        return data


@dataclass(frozen=True, slots=True)
class Observation:
    """A single timestamped position reported by a salesperson's device."""

    latitude: float
    longitude: float
    timestamp: datetime
    event_name: str = "location_update"
    flags: ObservationFlags = field(default_factory=ObservationFlags)
    employee_id: Optional[str] = None
    id: Optional[str] = None

    @property
    def coordinate(self) -> Coordinate:
        return (self.longitude, self.latitude)

    @property
    def is_finite(self) -> bool:
        return math.isfinite(self.latitude) and math.isfinite(self.longitude)

    @property
    def is_significant(self) -> bool:
        """True for start/end/customer-visit positions and delivery completions."""
        return (
            self.flags.is_start
            or self.flags.is_end
            or self.flags.is_at_customer
            or self.event_name.strip().lower() in DELIVERY_COMPLETION_EVENTS
        )


@dataclass(frozen=True, slots=True)
class PlannedStop:
    """One scheduled customer visit on a route."""

    stop_id: str
    customer_id: str
    latitude: float
    longitude: float
    visit_order: int
    delivery_status: DeliveryStatus = DeliveryStatus.PENDING
    customer_name: Optional[str] = None
    delivered_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if self.visit_order < 1:
            raise ValueError(f"visit_order must be a positive integer, got {self.visit_order}")

    @property
    def coordinate(self) -> Coordinate:
        return (self.longitude, self.latitude)


@dataclass(slots=True)
class RouteRecord:
    """A salesperson's route for one working day."""

    route_id: str
    date: date
    salesperson_id: str
    salesperson_name: Optional[str]
    stops: list[PlannedStop]

    def __post_init__(self) -> None:
        orders = [stop.visit_order for stop in self.stops]
        if len(orders) != len(set(orders)):
            raise ValueError(f"Route '{self.route_id}' has duplicate visit orders: {sorted(orders)}")


@dataclass(frozen=True, slots=True)
class VisitVerification:
    stop_id: str
    verified: bool
    nearest_distance_m: float
