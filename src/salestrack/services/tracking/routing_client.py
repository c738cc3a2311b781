"""HTTP client for directions services (Mapbox Directions or OSRM route)."""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass
from typing import Literal, Sequence, Union

import httpx

from ...config import Settings, settings
from ...models.domain import Coordinate

# Hosted directions APIs cap the number of coordinates in a single request.
DEFAULT_MAX_WAYPOINTS_PER_REQUEST = 25

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RoutingConfig:
    """Endpoint and credential for the directions service."""

    base_url: str | None
    access_token: str | None = None
    provider: Literal["mapbox", "osrm"] = "mapbox"
    profile: str = "driving"
    timeout_seconds: float = 10.0
    max_retries: int = 0
    backoff_seconds: float = 0.5
    max_waypoints_per_request: int = DEFAULT_MAX_WAYPOINTS_PER_REQUEST

    @property
    def is_available(self) -> bool:
        """Whether requests can be attempted at all.

        Mapbox rejects every request without an access token, so a missing token
        means the service is unavailable. Self-hosted OSRM only needs a URL.
        """
        if not self.base_url:
            return False
        if self.provider == "mapbox":
            return bool(self.access_token)
        return True

    @classmethod
    def from_settings(cls, source: Settings | None = None) -> "RoutingConfig":
        source = source or settings
        return cls(
            base_url=source.routing_base_url,
            access_token=source.routing_access_token,
            provider=source.routing_provider,
            profile=source.routing_profile,
            timeout_seconds=source.routing_timeout_seconds,
            max_retries=source.routing_max_retries,
            backoff_seconds=source.routing_backoff_seconds,
            max_waypoints_per_request=source.max_waypoints_per_request,
        )


@dataclass(frozen=True, slots=True)
class RouteSuccess:
    geometry: list[Coordinate]
    distance_m: float
    duration_s: float

    ok = True


@dataclass(frozen=True, slots=True)
class RouteFailure:
    reason: str
    status_code: int | None = None

    ok = False


RouteOutcome = Union[RouteSuccess, RouteFailure]


class _TransientRoutingError(Exception):
    """Raised inside the retry loop for failures worth another attempt."""


def _parse_geometry(data: dict) -> RouteOutcome:
    if data.get("code") != "Ok":
        message = data.get("message") or data.get("code") or "unknown error"
        return RouteFailure(reason=f"Directions request failed: {message}")

    routes = data.get("routes")
    if not isinstance(routes, list) or not routes:
        return RouteFailure(reason="Directions response contained no routes")

    route = routes[0]
    geometry = route.get("geometry") if isinstance(route, dict) else None
    coordinates = geometry.get("coordinates") if isinstance(geometry, dict) else None
    if not isinstance(coordinates, list) or len(coordinates) < 2:
        return RouteFailure(reason="Directions response is missing a line geometry")

    parsed: list[Coordinate] = []
    for point in coordinates:
        if not isinstance(point, (list, tuple)) or len(point) < 2:
            return RouteFailure(reason=f"Malformed coordinate in directions geometry: {point!r}")
        try:
            lon, lat = float(point[0]), float(point[1])
        except (TypeError, ValueError):
            return RouteFailure(reason=f"Malformed coordinate in directions geometry: {point!r}")
        if not (math.isfinite(lon) and math.isfinite(lat)):
            return RouteFailure(reason="Directions geometry contains non-finite coordinates")
        parsed.append((lon, lat))

    try:
        distance = float(route.get("distance") or 0.0)
        duration = float(route.get("duration") or 0.0)
    except (TypeError, ValueError):
        distance, duration = 0.0, 0.0
    return RouteSuccess(geometry=parsed, distance_m=distance, duration_s=duration)


class RoutingClient:
    """Issue single directions requests and report the outcome without raising."""

    def __init__(self, config: RoutingConfig, http_client: httpx.Client | None = None) -> None:
        self.config = config
        self._http_client = http_client

    @property
    def is_available(self) -> bool:
        return self.config.is_available

    def _get_client(self) -> httpx.Client:
        if self._http_client is not None:
            return self._http_client
        return httpx.Client(timeout=httpx.Timeout(self.config.timeout_seconds, connect=5.0))

    def _build_request(self, waypoints: Sequence[Coordinate], profile: str) -> tuple[str, dict[str, str]]:
        coordinate_str = ";".join(f"{lon},{lat}" for lon, lat in waypoints)
        base = (self.config.base_url or "").rstrip("/")
        params = {
            "geometries": "geojson",
            "overview": "full",
            "steps": "false",
        }
        if self.config.provider == "mapbox":
            url = f"{base}/directions/v5/mapbox/{profile}/{coordinate_str}"
            params["access_token"] = self.config.access_token or ""
        else:
            url = f"{base}/route/v1/{profile}/{coordinate_str}"
        return url, params

    def route(self, waypoints: Sequence[Coordinate], profile: str | None = None) -> RouteOutcome:
        """Request a road-following route through ``waypoints`` ((lng, lat) pairs)."""
        if not self.is_available:
            return RouteFailure(reason="Directions service is not configured")
        if len(waypoints) < 2:
            return RouteFailure(reason="At least two waypoints are required for a route")
        if len(waypoints) > self.config.max_waypoints_per_request:
            return RouteFailure(
                reason=(
                    f"Too many waypoints for one request ({len(waypoints)} > "
                    f"{self.config.max_waypoints_per_request})"
                )
            )

        url, params = self._build_request(waypoints, profile or self.config.profile)
        client = self._get_client()
        try:
            attempt = 0
            while True:
                try:
                    return self._request_once(client, url, params)
                except _TransientRoutingError as error:
                    attempt += 1
                    if attempt > self.config.max_retries:
                        return RouteFailure(reason=str(error))
                    wait_time = self.config.backoff_seconds * attempt
                    logger.debug(
                        f"Directions request failed, retrying in {wait_time:.2f}s "
                        f"(attempt {attempt}/{self.config.max_retries}): {error}"
                    )
                    time.sleep(wait_time)
        finally:
            if self._http_client is None:
                client.close()

    def _request_once(self, client: httpx.Client, url: str, params: dict[str, str]) -> RouteOutcome:
        try:
            response = client.get(url, params=params)
        except httpx.TimeoutException as exc:
            raise _TransientRoutingError(f"Directions request timed out: {exc}") from exc
        except httpx.HTTPError as exc:
            raise _TransientRoutingError(f"Failed to reach directions service: {exc}") from exc

        if response.status_code == 429 or response.status_code >= 500:
            raise _TransientRoutingError(f"Directions service returned HTTP {response.status_code}")
        if response.status_code >= 400:
            return RouteFailure(
                reason=f"Directions service rejected the request (HTTP {response.status_code})",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError:
            return RouteFailure(reason="Directions response is not valid JSON", status_code=response.status_code)
        if not isinstance(data, dict):
            return RouteFailure(reason="Directions response has an unexpected shape", status_code=response.status_code)
        return _parse_geometry(data)


def check_health(config: RoutingConfig | None = None) -> bool:
    """Check the directions service by routing between two nearby points in Jakarta."""
    config = config or RoutingConfig.from_settings()
    if not config.is_available:
        return False
    outcome = RoutingClient(config).route([(106.8456, -6.2088), (106.8272, -6.1751)])
    return isinstance(outcome, RouteSuccess)
