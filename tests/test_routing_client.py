import httpx
import pytest

from src.salestrack.config import Settings
from src.salestrack.services.tracking.routing_client import (
    RouteFailure,
    RouteSuccess,
    RoutingClient,
    RoutingConfig,
)

WAYPOINTS = [(106.8456, -6.2088), (106.8272, -6.1751)]

OK_PAYLOAD = {
    "code": "Ok",
    "routes": [
        {
            "distance": 5321.4,
            "duration": 812.0,
            "geometry": {
                "type": "LineString",
                "coordinates": [[106.8456, -6.2088], [106.84, -6.19], [106.8272, -6.1751]],
            },
        }
    ],
}


def _client(handler, **overrides) -> RoutingClient:
    options = {"base_url": "https://api.mapbox.com", "access_token": "pk.test"}
    options.update(overrides)
    config = RoutingConfig(**options)
    return RoutingClient(config, http_client=httpx.Client(transport=httpx.MockTransport(handler)))


def test_mapbox_request_and_parsed_geometry():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=OK_PAYLOAD)

    outcome = _client(handler).route(WAYPOINTS)

    assert isinstance(outcome, RouteSuccess)
    assert outcome.geometry == [(106.8456, -6.2088), (106.84, -6.19), (106.8272, -6.1751)]
    assert outcome.distance_m == pytest.approx(5321.4)
    assert outcome.duration_s == pytest.approx(812.0)

    request = seen[0]
    assert "/directions/v5/mapbox/driving/" in request.url.path
    assert request.url.params["access_token"] == "pk.test"
    assert request.url.params["geometries"] == "geojson"


def test_osrm_provider_uses_route_endpoint_without_token():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=OK_PAYLOAD)

    outcome = _client(handler, base_url="http://localhost:5000", access_token=None, provider="osrm").route(WAYPOINTS)

    assert isinstance(outcome, RouteSuccess)
    assert seen[0].url.path.startswith("/route/v1/driving/")
    assert "access_token" not in seen[0].url.params


def test_no_route_code_is_failure():
    outcome = _client(lambda request: httpx.Response(200, json={"code": "NoRoute", "message": "No route found"})).route(
        WAYPOINTS
    )
    assert isinstance(outcome, RouteFailure)
    assert "No route found" in outcome.reason


def test_malformed_geometry_is_failure():
    payload = {"code": "Ok", "routes": [{"geometry": {"coordinates": [[106.8, "north"], [106.9, -6.2]]}}]}
    outcome = _client(lambda request: httpx.Response(200, json=payload)).route(WAYPOINTS)
    assert isinstance(outcome, RouteFailure)


def test_invalid_json_is_failure():
    outcome = _client(lambda request: httpx.Response(200, content=b"<html>oops</html>")).route(WAYPOINTS)
    assert isinstance(outcome, RouteFailure)
    assert "JSON" in outcome.reason


def test_client_error_status_is_failure_without_retry():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(401, json={"message": "Not Authorized - Invalid Token"})

    outcome = _client(handler, max_retries=3, backoff_seconds=0.0).route(WAYPOINTS)
    assert isinstance(outcome, RouteFailure)
    assert outcome.status_code == 401
    assert len(calls) == 1


def test_transient_errors_are_retried():
    responses = [httpx.Response(503), httpx.Response(200, json=OK_PAYLOAD)]

    def handler(request: httpx.Request) -> httpx.Response:
        return responses.pop(0)

    outcome = _client(handler, max_retries=1, backoff_seconds=0.0).route(WAYPOINTS)
    assert isinstance(outcome, RouteSuccess)


def test_network_error_becomes_failure():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    outcome = _client(handler).route(WAYPOINTS)
    assert isinstance(outcome, RouteFailure)
    assert "connection refused" in outcome.reason


def test_waypoint_limits_checked_before_request():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json=OK_PAYLOAD)

    client = _client(handler, max_waypoints_per_request=25)
    too_many = [(106.8 + i * 0.001, -6.2) for i in range(26)]
    assert isinstance(client.route(too_many), RouteFailure)
    assert isinstance(client.route(WAYPOINTS[:1]), RouteFailure)
    assert calls == []


def test_availability_depends_on_credentials():
    assert not RoutingConfig(base_url="https://api.mapbox.com", access_token=None).is_available
    assert RoutingConfig(base_url="https://api.mapbox.com", access_token="pk.x").is_available
    assert RoutingConfig(base_url="http://localhost:5000", provider="osrm").is_available
    assert not RoutingConfig(base_url=None, provider="osrm").is_available


def test_unconfigured_client_does_not_call_out():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json=OK_PAYLOAD)

    outcome = _client(handler, access_token=None).route(WAYPOINTS)
    assert isinstance(outcome, RouteFailure)
    assert calls == []


def test_config_from_settings():
    source = Settings(routing_access_token="pk.abc", routing_profile="walking", max_waypoints_per_request=10)
    config = RoutingConfig.from_settings(source)
    assert config.access_token == "pk.abc"
    assert config.profile == "walking"
    assert config.max_waypoints_per_request == 10
    assert config.is_available
