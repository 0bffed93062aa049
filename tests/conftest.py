from datetime import date, datetime, timezone
from typing import Optional

import pytest

from booking_engine.models.domain import (
    Address,
    Appointment,
    AppointmentStatus,
    DayOfWeek,
    GeoPoint,
    Representative,
    TimeSlot,
    WeeklyTemplate,
)

ALL_WEEK = {day: frozenset(TimeSlot) for day in DayOfWeek}


def _address(lat: float, lng: float, street: str = "1 Main St", zip_code: str = "30303") -> Address:
    return Address(street=street, city="Atlanta", state="GA", zip=zip_code, location=GeoPoint(lat=lat, lng=lng))


def _rep(
    rep_id: str,
    lat: float,
    lng: float,
    *,
    name: Optional[str] = None,
    days: Optional[dict] = None,
) -> Representative:
    return Representative(
        id=rep_id,
        name=name or f"Rep {rep_id}",
        home_address=_address(lat, lng, street=f"{rep_id} Home Rd"),
        weekly_template=WeeklyTemplate(days=ALL_WEEK if days is None else days),
    )


def _appointment(
    apt_id: str,
    rep_id: Optional[str],
    on: date,
    slot: TimeSlot,
    lat: float,
    lng: float,
    *,
    status: AppointmentStatus = AppointmentStatus.SCHEDULED,
    street: str = "9 Customer Ln",
    zip_code: str = "30303",
) -> Appointment:
    return Appointment(
        id=apt_id,
        rep_id=rep_id,
        date=on,
        time_slot=slot,
        customer_address=_address(lat, lng, street=street, zip_code=zip_code),
        status=status,
        created_at=datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc),
        customer_name=f"Customer {apt_id}",
    )


@pytest.fixture
def make_address():
    return _address


@pytest.fixture
def make_rep():
    return _rep


@pytest.fixture
def make_appointment():
    return _appointment


@pytest.fixture(autouse=True)
def clear_caches():
    from booking_engine.data.roster_repository import load_roster
    from booking_engine.db.supabase import get_supabase_client
    from booking_engine.services.serviceability.gate import get_serviceability_gate

    for cached in (load_roster, get_supabase_client, get_serviceability_gate):
        cached.cache_clear()
    yield
    for cached in (load_roster, get_supabase_client, get_serviceability_gate):
        cached.cache_clear()


class FakeResponse:
    def __init__(self, data):
        self.data = data


class FakeQuery:
    """Chainable stand-in for a supabase table query."""

    def __init__(self, client: "FakeSupabase", table: str) -> None:
        self.client = client
        self.table_name = table
        self.action = "select"
        self.payload = None
        self.filters: list[tuple[str, object]] = []
        self.order_by: Optional[str] = None
        self.row_limit: Optional[int] = None

    def select(self, *args, **kwargs):
        self.action = "select"
        return self

    def insert(self, row):
        self.action, self.payload = "insert", row
        return self

    def update(self, values):
        self.action, self.payload = "update", values
        return self

    def eq(self, column, value):
        self.filters.append((column, value))
        return self

    def order(self, column):
        self.order_by = column
        return self

    def limit(self, count):
        self.row_limit = count
        return self

    def _matching(self) -> list[dict]:
        rows = self.client.tables.setdefault(self.table_name, [])
        return [row for row in rows if all(row.get(column) == value for column, value in self.filters)]

    def execute(self) -> FakeResponse:
        self.client.calls.append((self.table_name, self.action))
        if self.client.fail_with is not None:
            raise self.client.fail_with
        if self.action == "insert":
            if self.client.insert_error is not None:
                raise self.client.insert_error
            self.client.tables.setdefault(self.table_name, []).append(dict(self.payload))
            return FakeResponse([dict(self.payload)])
        if self.action == "update":
            if self.client.before_update is not None:
                self.client.before_update(self.client)
            matched = self._matching()
            for row in matched:
                row.update(self.payload)
            return FakeResponse([dict(row) for row in matched])
        rows = self._matching()
        if self.order_by:
            rows = sorted(rows, key=lambda row: str(row.get(self.order_by) or ""))
        if self.row_limit is not None:
            rows = rows[: self.row_limit]
        return FakeResponse([dict(row) for row in rows])


class FakeSupabase:
    def __init__(self, tables: Optional[dict] = None) -> None:
        self.tables: dict[str, list[dict]] = tables or {}
        self.calls: list[tuple[str, str]] = []
        self.fail_with: Optional[Exception] = None
        self.insert_error: Optional[Exception] = None
        self.before_update = None

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)


@pytest.fixture
def fake_supabase():
    return FakeSupabase()
