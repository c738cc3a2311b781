#!/usr/bin/env python3
"""Seed example GPS activity logs for every route scheduled on a day.

Usage: python seed_activity_logs.py [YYYY-MM-DD]   (defaults to today)
"""

import random
import sys
from datetime import date, datetime, time
from pathlib import Path
from zoneinfo import ZoneInfo

# Add project root to path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from src.salestrack.config import settings
from src.salestrack.data.tracking_repository import (
    DataStoreUnavailableError,
    insert_observations,
    list_routes_for_date,
)
from src.salestrack.services.tracking.synthetic import generate_day_trace

WORKDAY_START = time(8, 0)
WORKDAY_END = time(17, 0)


def seed_day(day: date, rng: random.Random | None = None) -> int:
    """Generate and store a trace per route on ``day``; returns the number of rows written."""
    rng = rng or random.Random()
    zone = ZoneInfo(settings.tracking_timezone)
    start = datetime.combine(day, WORKDAY_START, tzinfo=zone)
    end = datetime.combine(day, WORKDAY_END, tzinfo=zone)

    written = 0
    for route in list_routes_for_date(day):
        trace = generate_day_trace(route.stops, start, end, employee_id=route.salesperson_id, rng=rng)
        if not trace:
            print(f"   [SKIP] Route {route.route_id} has no stops")
            continue
        written += insert_observations(trace)
        print(f"   [OK] Route {route.route_id}: {len(trace)} pings for {route.salesperson_name or route.salesperson_id}")
    return written


def main(argv: list[str]) -> int:
    try:
        day = date.fromisoformat(argv[1]) if len(argv) > 1 else datetime.now(ZoneInfo(settings.tracking_timezone)).date()
    except ValueError:
        print(f"[ERROR] Invalid date '{argv[1]}', expected YYYY-MM-DD")
        return 1

    print(f"Seeding activity logs for {day.isoformat()} ({settings.tracking_timezone})...")
    try:
        written = seed_day(day)
    except DataStoreUnavailableError as exc:
        print(f"[ERROR] {exc}")
        return 1

    print(f"[SUCCESS] Seeded {written} activity logs")
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv))
