from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from booking_engine.api.routes import serviceability as serviceability_routes
from booking_engine.data.zip_registry import FileZipRegistry
from booking_engine.main import app
from booking_engine.persistence.appointments import FileAppointmentStore
from booking_engine.persistence.filesystem import FileStorage
from booking_engine.services.availability import service
from booking_engine.services.serviceability import RegistryCache, ServiceabilityGate

ZIPS = '[{"zip": "30303", "city": "Atlanta", "state": "GA", "excluded": false}, {"zip": "30220", "excluded": true, "notes": "Outside partner coverage."}]'


@pytest.fixture
def client(tmp_path: Path, monkeypatch, make_rep):
    (tmp_path / "zips.json").write_text(ZIPS, encoding="utf-8")
    storage = FileStorage(root=tmp_path)
    store = FileAppointmentStore(storage=storage, path=Path("appointments.json"))
    gate = ServiceabilityGate(
        FileZipRegistry(storage=storage, base_file=Path("zips.json"), overrides_file=Path("overrides.json")),
        RegistryCache(ttl_seconds=60),
    )
    roster = (make_rep("r1", 33.76, -84.40, name="Alice"), make_rep("r2", 33.90, -84.30, name="Bob"))

    monkeypatch.setattr(service, "get_appointment_store", lambda: store)
    monkeypatch.setattr(service, "get_serviceability_gate", lambda: gate)
    monkeypatch.setattr(service, "load_roster", lambda: roster)
    monkeypatch.setattr(serviceability_routes, "get_serviceability_gate", lambda: gate)
    return TestClient(app)


def _booking(street: str = "12 Peach St") -> dict:
    return {
        "slotSelection": {"date": "2024-06-12", "timeSlot": "2pm"},
        "customerDetails": {
            "name": "Dana Buyer",
            "address": {"street": street, "city": "Atlanta", "state": "GA", "zip": "30303", "lat": 33.75, "lng": -84.39},
        },
    }


def test_health(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_availability_grid(client):
    response = client.post(
        "/api/availability",
        json={"customerLocation": {"lat": 33.75, "lng": -84.39}, "zip": "30303", "startDate": "2024-06-12", "numDays": 2},
    )

    assert response.status_code == 200
    body = response.json()
    assert len(body["days"]) == 2
    assert [slot["timeSlot"] for slot in body["days"][0]["slots"]] == ["10am", "2pm", "7pm"]
    assert body["days"][0]["slots"][0]["availableReps"][0]["repId"] == "r1"
    assert body["days"][0]["slots"][0]["availableReps"][0]["anchor"]["source"] == "home"


def test_availability_for_excluded_zip(client):
    response = client.post(
        "/api/availability",
        json={"customerLocation": {"lat": 33.75, "lng": -84.39}, "zip": "30220"},
    )

    assert response.status_code == 422
    detail = response.json()["detail"]
    assert detail["excluded"] is True
    assert detail["notes"] == "Outside partner coverage."


def test_availability_rejects_null_island(client):
    response = client.post("/api/availability", json={"customerLocation": {"lat": 0, "lng": 0}, "zip": "30303"})

    assert response.status_code == 400


def test_booking_flow(client):
    created = client.post("/api/appointments", json=_booking())
    assert created.status_code == 201
    appointment = created.json()
    assert appointment["repId"] == "r1"
    assert appointment["repName"] == "Alice"

    duplicate = client.post("/api/appointments", json=_booking(street="12 peach st"))
    assert duplicate.status_code == 409
    assert duplicate.json()["detail"]["reason"] == "BookingConflict"

    listed = client.get("/api/appointments", params={"repId": "r1", "date": "2024-06-12"})
    assert [item["id"] for item in listed.json()] == [appointment["id"]]

    cancelled = client.patch(f"/api/appointments/{appointment['id']}/status", json={"status": "cancelled"})
    assert cancelled.status_code == 200
    assert cancelled.json()["status"] == "cancelled"

    again = client.patch(f"/api/appointments/{appointment['id']}/status", json={"status": "completed"})
    assert again.status_code == 400


def test_booking_without_capacity(client):
    client.post("/api/appointments", json=_booking(street="1 Oak St"))
    client.post("/api/appointments", json=_booking(street="2 Oak St"))

    response = client.post("/api/appointments", json=_booking(street="3 Oak St"))

    assert response.status_code == 409
    assert response.json()["detail"]["reason"] == "NoCapacity"


def test_unknown_appointment_status_update(client):
    response = client.patch("/api/appointments/apt-missing/status", json={"status": "completed"})

    assert response.status_code == 404


def test_zip_lookup_and_overrides(client):
    assert client.get("/api/serviceable-zips/30303-1234").json() == {
        "zip": "30303",
        "serviceable": True,
        "excluded": False,
        "notes": None,
    }
    assert client.get("/api/serviceable-zips/99999").json()["serviceable"] is False
    assert client.get("/api/serviceable-zips/123").status_code == 400

    saved = client.put(
        "/api/serviceable-zips/overrides",
        json={"overrides": [{"zip": "30303", "excluded": True, "notes": "Paused"}]},
    )
    assert saved.status_code == 200

    body = client.get("/api/serviceable-zips/30303").json()
    assert (body["serviceable"], body["excluded"], body["notes"]) == (False, True, "Paused")
