import random
from datetime import date, datetime
from zoneinfo import ZoneInfo

import seed_activity_logs
from src.salestrack.data import tracking_repository
from src.salestrack.models.domain import PlannedStop, RouteRecord

DAY = date(2025, 1, 6)


class RecordingSupabase:
    def __init__(self):
        self.inserted: list[tuple[str, list[dict]]] = []

    def table(self, name: str):
        supabase = self

        class _Insert:
            def insert(self, rows):
                supabase.inserted.append((name, rows))
                return self

            def execute(self):
                return None

        return _Insert()


def _route(route_id: str, salesperson_id: str, stops: list[PlannedStop]) -> RouteRecord:
    return RouteRecord(route_id=route_id, date=DAY, salesperson_id=salesperson_id, salesperson_name=None, stops=stops)


def test_seed_day_writes_one_trace_per_route(monkeypatch):
    stops = [
        PlannedStop(stop_id="D1", customer_id="C1", latitude=-6.21, longitude=106.82, visit_order=1, customer_name="Toko Satu"),
        PlannedStop(stop_id="D2", customer_id="C2", latitude=-6.25, longitude=106.85, visit_order=2, customer_name="Toko Dua"),
    ]
    routes = [_route("R1", "E1", stops), _route("R2", "E2", [])]
    fake = RecordingSupabase()
    monkeypatch.setattr(seed_activity_logs, "list_routes_for_date", lambda day: routes)
    monkeypatch.setattr(tracking_repository, "get_supabase_client", lambda: fake)
    monkeypatch.setattr(seed_activity_logs.settings, "tracking_timezone", "Asia/Jakarta")

    written = seed_activity_logs.seed_day(DAY, rng=random.Random(3))

    rows = [row for _, chunk in fake.inserted for row in chunk]
    assert {name for name, _ in fake.inserted} == {"activity_logs"}
    assert written == len(rows) > 0
    assert {row["employee_id"] for row in rows} == {"E1"}

    assert rows[0]["event_name"] == "clock_in"
    assert rows[0]["metadata"]["is_start"] is True
    assert rows[-1]["event_name"] == "clock_out"
    assert rows[0]["created_at"] == "2025-01-06T08:00:00+07:00"
    assert rows[-1]["created_at"] == "2025-01-06T17:00:00+07:00"

    deliveries = [row for row in rows if row["event_name"] == "delivery_completed"]
    assert [row["metadata"]["description"] for row in deliveries] == ["Toko Satu", "Toko Dua"]

    # seeded pings read back as the same local working day
    for row in rows:
        stamp = datetime.fromisoformat(row["created_at"])
        assert stamp.astimezone(ZoneInfo("Asia/Jakarta")).date() == DAY


def test_main_rejects_bad_date():
    assert seed_activity_logs.main(["seed_activity_logs.py", "06/01/2025"]) == 1
