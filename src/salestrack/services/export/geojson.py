"""GeoJSON export utilities for tracked routes."""

from __future__ import annotations

from typing import Any, Dict, List

from ...schemas.tracking import RouteTrackingResponse

PLANNED_COLOR = "#1FA033"
ACTUAL_COLOR = "#2563EB"
DELIVERED_COLOR = "#30D148"
PENDING_COLOR = "#FFC107"


def linestring_feature(coordinates: List[List[float]], properties: Dict[str, Any]) -> Dict[str, Any] | None:
    """Build a LineString feature, or None when there are fewer than 2 coordinates.

    Args:
        coordinates: List of [lng, lat] pairs
        properties: Feature properties
    """
    if len(coordinates) < 2:
        return None
    return {
        "type": "Feature",
        "properties": properties,
        "geometry": {"type": "LineString", "coordinates": coordinates},
    }


def route_tracking_to_geojson(tracking: RouteTrackingResponse) -> Dict[str, Any]:
    """Convert a route tracking view into a GeoJSON FeatureCollection.

    Planned and actual paths become LineString features when drawable; every
    stop becomes a Point feature carrying its status and visit verification.
    """
    features: List[Dict[str, Any]] = []

    planned = linestring_feature(
        tracking.planned_path,
        {"kind": "planned", "route_id": tracking.route_id, "color": PLANNED_COLOR},
    )
    if planned:
        features.append(planned)

    actual = linestring_feature(
        tracking.actual_path,
        {
            "kind": "actual",
            "route_id": tracking.route_id,
            "color": ACTUAL_COLOR,
            "source": tracking.reconstruction.source,
        },
    )
    if actual:
        features.append(actual)

    for stop in sorted(tracking.stops, key=lambda item: item.visit_order):
        features.append(
            {
                "type": "Feature",
                "properties": {
                    "kind": "stop",
                    "stop_id": stop.stop_id,
                    "customer_id": stop.customer_id,
                    "customer_name": stop.customer_name,
                    "visit_order": stop.visit_order,
                    "delivery_status": stop.delivery_status,
                    "verified": stop.verified,
                    "nearest_distance_m": stop.nearest_distance_m,
                    "color": DELIVERED_COLOR if stop.delivery_status == "delivered" else PENDING_COLOR,
                },
                "geometry": {"type": "Point", "coordinates": [stop.longitude, stop.latitude]},
            }
        )

    return {
        "type": "FeatureCollection",
        "properties": {
            "route_id": tracking.route_id,
            "date": tracking.date.isoformat(),
            "salesperson_id": tracking.salesperson_id,
            "salesperson_name": tracking.salesperson_name,
            "delivered": tracking.progress.delivered,
            "total": tracking.progress.total,
        },
        "features": features,
    }
