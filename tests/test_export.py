from datetime import date

from src.salestrack.schemas.tracking import (
    DeliveryProgressModel,
    ReconstructionSummaryModel,
    RouteTrackingResponse,
    StopVerificationModel,
)
from src.salestrack.services.export.geojson import (
    DELIVERED_COLOR,
    PENDING_COLOR,
    linestring_feature,
    route_tracking_to_geojson,
)


def _stop(order: int, status: str) -> StopVerificationModel:
    return StopVerificationModel(
        stop_id=f"D{order}",
        customer_id=f"C{order}",
        visit_order=order,
        delivery_status=status,
        latitude=-6.2,
        longitude=106.8 + order * 0.01,
        verified=status == "delivered",
        nearest_distance_m=None,
    )


def _tracking(actual_path) -> RouteTrackingResponse:
    return RouteTrackingResponse(
        route_id="R1",
        date=date(2025, 1, 6),
        salesperson_id="E1",
        planned_path=[[106.81, -6.2], [106.82, -6.2]],
        actual_path=actual_path,
        stops=[_stop(2, "pending"), _stop(1, "delivered")],
        progress=DeliveryProgressModel(delivered=1, total=2, percent=50.0),
        reconstruction=ReconstructionSummaryModel(
            source="partial",
            observation_count=40,
            waypoint_count=30,
            batch_count=8,
            failed_batches=1,
            length_m=2500.0,
        ),
    )


def test_feature_collection_layers():
    collection = route_tracking_to_geojson(_tracking([[106.8, -6.2], [106.81, -6.2], [106.82, -6.2]]))

    assert collection["type"] == "FeatureCollection"
    assert collection["properties"]["date"] == "2025-01-06"
    kinds = [feature["properties"]["kind"] for feature in collection["features"]]
    assert kinds == ["planned", "actual", "stop", "stop"]

    actual = collection["features"][1]
    assert actual["geometry"]["type"] == "LineString"
    assert actual["properties"]["source"] == "partial"

    stops = collection["features"][2:]
    assert [feature["properties"]["visit_order"] for feature in stops] == [1, 2]
    assert stops[0]["properties"]["color"] == DELIVERED_COLOR
    assert stops[1]["properties"]["color"] == PENDING_COLOR
    assert stops[0]["geometry"]["coordinates"] == [106.81, -6.2]


def test_single_point_path_is_not_drawn():
    collection = route_tracking_to_geojson(_tracking([[106.8, -6.2]]))
    kinds = [feature["properties"]["kind"] for feature in collection["features"]]
    assert "actual" not in kinds
    assert linestring_feature([[106.8, -6.2]], {}) is None
