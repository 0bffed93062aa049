import json
import threading
from datetime import date
from pathlib import Path

import pytest

from booking_engine.errors import BookingConflict, InvalidInput, StoreUnavailable
from booking_engine.models.domain import AppointmentStatus, TimeSlot
from booking_engine.persistence.appointments import FileAppointmentStore
from booking_engine.persistence.filesystem import FileStorage

DAY = date(2024, 6, 12)


@pytest.fixture
def store(tmp_path: Path) -> FileAppointmentStore:
    return FileAppointmentStore(storage=FileStorage(root=tmp_path), path=Path("appointments.json"))


def test_create_then_list_with_filters(store, make_appointment):
    store.create(make_appointment("A1", "r1", DAY, TimeSlot.MORNING, 33.7, -84.4, street="1 Oak St"))
    store.create(make_appointment("A2", "r2", DAY, TimeSlot.MORNING, 33.7, -84.4, street="2 Oak St"))
    store.create(make_appointment("A3", "r1", date(2024, 6, 13), TimeSlot.EVENING, 33.7, -84.4))

    assert [item.id for item in store.list()] == ["A1", "A2", "A3"]
    assert [item.id for item in store.list(rep_id="r1")] == ["A1", "A3"]
    assert [item.id for item in store.list(on_date=DAY)] == ["A1", "A2"]
    assert store.list(status=AppointmentStatus.CANCELLED) == []


def test_records_are_written_in_front_end_format(store, make_appointment, tmp_path: Path):
    store.create(make_appointment("A1", "r1", DAY, TimeSlot.MIDDAY, 33.7, -84.4))

    rows = json.loads((tmp_path / "appointments.json").read_text(encoding="utf-8"))

    assert rows[0]["repId"] == "r1"
    assert rows[0]["timeSlot"] == "2pm"
    assert rows[0]["date"] == "2024-06-12"
    assert rows[0]["address"]["lat"] == 33.7


def test_duplicate_address_is_rejected_ignoring_case(store, make_appointment):
    store.create(make_appointment("A1", "r1", DAY, TimeSlot.MORNING, 33.7, -84.4, street="12 Peach St"))

    with pytest.raises(BookingConflict) as excinfo:
        store.create(make_appointment("A2", "r2", DAY, TimeSlot.MORNING, 33.7, -84.4, street="  12 PEACH st "))

    assert excinfo.value.conflicting_id == "A1"
    assert [item.id for item in store.list()] == ["A1"]


def test_rep_cannot_hold_the_same_slot_twice(store, make_appointment):
    store.create(make_appointment("A1", "r1", DAY, TimeSlot.MORNING, 33.7, -84.4, street="1 Oak St"))

    with pytest.raises(BookingConflict):
        store.create(make_appointment("A2", "r1", DAY, TimeSlot.MORNING, 33.8, -84.5, street="9 Pine St"))


def test_cancelled_appointment_frees_the_slot(store, make_appointment):
    store.create(make_appointment("A1", "r1", DAY, TimeSlot.MORNING, 33.7, -84.4))
    store.update_status("A1", AppointmentStatus.CANCELLED)

    store.create(make_appointment("A2", "r1", DAY, TimeSlot.MORNING, 33.7, -84.4))

    assert [item.id for item in store.list(status=AppointmentStatus.SCHEDULED)] == ["A2"]


def test_duplicate_id_is_rejected(store, make_appointment):
    store.create(make_appointment("A1", "r1", DAY, TimeSlot.MORNING, 33.7, -84.4))

    with pytest.raises(BookingConflict):
        store.create(make_appointment("A1", "r2", DAY, TimeSlot.EVENING, 33.7, -84.4, street="5 Elm St"))


def test_status_transitions(store, make_appointment):
    store.create(make_appointment("A1", "r1", DAY, TimeSlot.MORNING, 33.7, -84.4))

    completed = store.update_status("A1", AppointmentStatus.COMPLETED)
    assert completed.status is AppointmentStatus.COMPLETED

    with pytest.raises(InvalidInput):
        store.update_status("A1", AppointmentStatus.CANCELLED)
    with pytest.raises(KeyError):
        store.update_status("missing", AppointmentStatus.CANCELLED)


def test_unreadable_record_fails_the_read(store, tmp_path: Path):
    (tmp_path / "appointments.json").write_text(
        json.dumps([{"id": "bad", "repId": "r1", "date": "2024-06-12", "timeSlot": "noon", "address": {}}]),
        encoding="utf-8",
    )

    with pytest.raises(StoreUnavailable):
        store.list()


def test_concurrent_bookings_for_one_address_only_one_wins(store, make_appointment):
    barrier = threading.Barrier(8)
    outcomes: list[str] = []
    lock = threading.Lock()

    def attempt(index: int) -> None:
        candidate = make_appointment(f"A{index}", f"r{index}", DAY, TimeSlot.EVENING, 33.7, -84.4)
        barrier.wait()
        try:
            store.create(candidate)
            result = "created"
        except BookingConflict:
            result = "conflict"
        with lock:
            outcomes.append(result)

    threads = [threading.Thread(target=attempt, args=(index,)) for index in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert outcomes.count("created") == 1
    assert outcomes.count("conflict") == 7
    assert len(store.list()) == 1


def test_non_object_record_fails_the_read(store, tmp_path: Path):
    (tmp_path / "appointments.json").write_text(json.dumps(["apt-1"]), encoding="utf-8")

    with pytest.raises(StoreUnavailable):
        store.list()
