#!/usr/bin/env python3
"""Script to verify directions service connectivity and batched path reconstruction."""

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from src.salestrack.config import settings
from src.salestrack.models.domain import Observation
from src.salestrack.services.tracking.reconstructor import RoutePathReconstructor
from src.salestrack.services.tracking.routing_client import RouteSuccess, RoutingClient, RoutingConfig


def main():
    print("=" * 60)
    print("Directions Service Connection Test")
    print("=" * 60)
    print()

    print("1. Checking routing configuration...")
    config = RoutingConfig.from_settings()
    if not config.is_available:
        print("   [ERROR] Directions service is not configured")
        print("   Set SALESTRACK_ROUTING_ACCESS_TOKEN (Mapbox) or")
        print("   SALESTRACK_ROUTING_PROVIDER=osrm with SALESTRACK_ROUTING_BASE_URL")
        return 1

    print(f"   [OK] Provider: {config.provider}")
    print(f"   [OK] Base URL: {config.base_url}")
    print(f"   [OK] Profile: {config.profile}")
    print()

    print("2. Testing single route request...")
    client = RoutingClient(config)
    # Monas to Bundaran HI, Jakarta
    outcome = client.route([(106.8272, -6.1754), (106.8230, -6.1950)])
    if not isinstance(outcome, RouteSuccess):
        print(f"   [ERROR] Route request failed: {outcome.reason}")
        return 1
    print(f"   [OK] Geometry with {len(outcome.geometry)} points")
    print(f"   [OK] Distance: {outcome.distance_m:.0f} m, duration: {outcome.duration_s:.0f} s")
    print()

    print("3. Testing batched reconstruction (40 pings)...")
    start = datetime.now(timezone.utc)
    observations = [
        Observation(
            latitude=-6.2088 + i * 0.002,
            longitude=106.8456 + (i % 5) * 0.001,
            timestamp=start + timedelta(minutes=5 * i),
        )
        for i in range(40)
    ]
    reconstructor = RoutePathReconstructor(
        client,
        max_waypoints_per_request=settings.max_waypoints_per_request,
        batch_size=settings.batch_size,
        batch_delay_seconds=settings.batch_delay_seconds,
    )
    result = reconstructor.reconstruct(observations)
    print(f"   [OK] Source: {result.source}")
    print(f"   [OK] {len(result.batches)} batches, {result.failed_batches} fell back to straight lines")
    print(f"   [OK] Path has {len(result.path)} points")
    print()

    print("=" * 60)
    print("[SUCCESS] Directions service is connected and working!")
    print("=" * 60)
    return 0


if __name__ == "__main__":
    sys.exit(main())
