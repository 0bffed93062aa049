"""Appointment stores with conditional (compare-and-swap) create."""

from __future__ import annotations

import logging
import threading
from datetime import date
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional, Protocol

from ..config import settings
from ..data.records import appointment_from_record, appointment_to_record
from ..db.supabase import get_supabase_client
from ..errors import BookingConflict, InvalidInput, StoreUnavailable
from ..models.domain import Appointment, AppointmentStatus
from .filesystem import FileStorage

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: dict[AppointmentStatus, frozenset[AppointmentStatus]] = {
    AppointmentStatus.SCHEDULED: frozenset({AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED}),
    AppointmentStatus.COMPLETED: frozenset(),
    AppointmentStatus.CANCELLED: frozenset(),
}


class AppointmentStore(Protocol):
    def list(
        self,
        *,
        rep_id: Optional[str] = None,
        on_date: Optional[date] = None,
        status: Optional[AppointmentStatus] = None,
    ) -> list[Appointment]:
        ...

    def create(self, appointment: Appointment) -> Appointment:
        ...

    def update_status(self, appointment_id: str, status: AppointmentStatus) -> Appointment:
        ...


def find_conflict(existing: Iterable[Appointment], candidate: Appointment) -> Optional[Appointment]:
    """Return a Scheduled appointment that blocks ``candidate``, if any.

    Blocks on the same address/date/slot, or on the same rep already holding
    the (date, slot).
    """

    for other in existing:
        if not other.is_scheduled or other.id == candidate.id:
            continue
        if other.same_booking_key(candidate):
            return other
        if (
            candidate.rep_id is not None
            and other.rep_id == candidate.rep_id
            and other.date == candidate.date
            and other.time_slot is candidate.time_slot
        ):
            return other
    return None


def _conflict_error(candidate: Appointment, conflict: Appointment) -> BookingConflict:
    if conflict.same_booking_key(candidate):
        message = (
            f"An appointment is already scheduled for this address on "
            f"{candidate.date.strftime('%B %d, %Y')} at {candidate.time_slot.label}."
        )
    else:
        message = (
            f"Rep {candidate.rep_id} is already booked on {candidate.date.isoformat()} "
            f"at {candidate.time_slot.label}."
        )
    return BookingConflict(message, conflicting_id=conflict.id)


def check_transition(current: AppointmentStatus, requested: AppointmentStatus) -> None:
    if requested not in ALLOWED_TRANSITIONS[current]:
        raise InvalidInput(f"Cannot change appointment status from {current.value} to {requested.value}.")


def _matches(
    appointment: Appointment,
    rep_id: Optional[str],
    on_date: Optional[date],
    status: Optional[AppointmentStatus],
) -> bool:
    if rep_id is not None and appointment.rep_id != rep_id:
        return False
    if on_date is not None and appointment.date != on_date:
        return False
    if status is not None and appointment.status is not status:
        return False
    return True


def _read_record(row: Any) -> Appointment:
    if not isinstance(row, dict):
        raise StoreUnavailable(f"Unreadable appointment record {row!r}: expected an object.")
    try:
        return appointment_from_record(row)
    except (InvalidInput, KeyError) as exc:
        # A skipped row could hide a conflict, so the whole read fails.
        raise StoreUnavailable(f"Unreadable appointment record {row.get('id')!r}: {exc}") from exc


# Serializes read-check-write across every FileAppointmentStore in the process.
_FILE_LOCK = threading.Lock()


class FileAppointmentStore:
    """JSON-file appointment store used when no database is configured."""

    def __init__(self, storage: FileStorage | None = None, path: Path | None = None) -> None:
        self.storage = storage or FileStorage()
        self.path = path or settings.appointments_file

    def _read(self) -> list[Appointment]:
        rows = self.storage.read_json(self.path, default=[])
        if not isinstance(rows, list):
            raise StoreUnavailable(f"Appointment file {self.path} must contain a JSON array.")
        return [_read_record(row) for row in rows]

    def _write(self, appointments: Iterable[Appointment]) -> None:
        self.storage.write_json(self.path, [appointment_to_record(item) for item in appointments])

    def list(
        self,
        *,
        rep_id: Optional[str] = None,
        on_date: Optional[date] = None,
        status: Optional[AppointmentStatus] = None,
    ) -> list[Appointment]:
        with _FILE_LOCK:
            appointments = self._read()
        return [item for item in appointments if _matches(item, rep_id, on_date, status)]

    def create(self, appointment: Appointment) -> Appointment:
        with _FILE_LOCK:
            existing = self._read()
            if any(item.id == appointment.id for item in existing):
                raise BookingConflict(f"Appointment id {appointment.id} already exists.", conflicting_id=appointment.id)
            conflict = find_conflict(existing, appointment)
            if conflict is not None:
                logger.warning(f"Rejected booking {appointment.id}: conflicts with {conflict.id}")
                raise _conflict_error(appointment, conflict)
            existing.append(appointment)
            self._write(existing)
        logger.info(
            f"Created appointment {appointment.id} for rep {appointment.rep_id} "
            f"on {appointment.date} at {appointment.time_slot.value}"
        )
        return appointment

    def update_status(self, appointment_id: str, status: AppointmentStatus) -> Appointment:
        with _FILE_LOCK:
            existing = self._read()
            for item in existing:
                if item.id == appointment_id:
                    check_transition(item.status, status)
                    item.status = status
                    self._write(existing)
                    return item
        raise KeyError(appointment_id)


def _row_to_record(row: Mapping[str, Any]) -> dict[str, Any]:
    return {
        "id": row.get("id"),
        "repId": row.get("rep_id"),
        "date": row.get("date"),
        "timeSlot": row.get("time_slot"),
        "customerName": row.get("customer_name"),
        "customerPhone": row.get("customer_phone"),
        "customerEmail": row.get("customer_email"),
        "leadId": row.get("lead_id"),
        "notes": row.get("notes"),
        "status": row.get("status"),
        "createdAt": row.get("created_at"),
        "address": {
            "street": row.get("street"),
            "city": row.get("city"),
            "state": row.get("state"),
            "zip": row.get("zip"),
            "lat": row.get("lat"),
            "lng": row.get("lng"),
        },
    }


def _appointment_to_row(appointment: Appointment) -> dict[str, Any]:
    address = appointment.customer_address
    return {
        "id": appointment.id,
        "rep_id": appointment.rep_id,
        "date": appointment.date.isoformat(),
        "time_slot": appointment.time_slot.value,
        "customer_name": appointment.customer_name,
        "customer_phone": appointment.customer_phone,
        "customer_email": appointment.customer_email,
        "lead_id": appointment.lead_id,
        "notes": appointment.notes,
        "status": appointment.status.value,
        "created_at": appointment.created_at.isoformat(),
        "street": address.street,
        "city": address.city,
        "state": address.state,
        "zip": address.zip,
        "lat": address.location.lat,
        "lng": address.location.lng,
    }


def _is_unique_violation(exc: Exception) -> bool:
    text = str(exc).lower()
    return "23505" in text or "duplicate key" in text


class SupabaseAppointmentStore:
    """Appointment store over the ``appointments`` table.

    The table carries unique partial indexes on (street, city, state, zip,
    date, time_slot) and (rep_id, date, time_slot) where status = 'scheduled',
    so a racing insert fails in the database rather than double-booking.
    """

    table = "appointments"

    def __init__(self, client: Any) -> None:
        self.client = client

    def list(
        self,
        *,
        rep_id: Optional[str] = None,
        on_date: Optional[date] = None,
        status: Optional[AppointmentStatus] = None,
    ) -> list[Appointment]:
        query = self.client.table(self.table).select("*")
        if rep_id is not None:
            query = query.eq("rep_id", rep_id)
        if on_date is not None:
            query = query.eq("date", on_date.isoformat())
        if status is not None:
            query = query.eq("status", status.value)
        try:
            response = query.order("created_at").execute()
        except Exception as exc:
            raise StoreUnavailable(f"Failed to list appointments: {exc}") from exc
        return [_read_record(_row_to_record(row)) for row in response.data or []]

    def create(self, appointment: Appointment) -> Appointment:
        same_day = self.list(on_date=appointment.date, status=AppointmentStatus.SCHEDULED)
        conflict = find_conflict(same_day, appointment)
        if conflict is not None:
            logger.warning(f"Rejected booking {appointment.id}: conflicts with {conflict.id}")
            raise _conflict_error(appointment, conflict)
        try:
            self.client.table(self.table).insert(_appointment_to_row(appointment)).execute()
        except Exception as exc:
            if _is_unique_violation(exc):
                logger.warning(f"Rejected booking {appointment.id}: lost insert race ({exc})")
                raise BookingConflict(
                    f"The {appointment.time_slot.label} slot on {appointment.date.isoformat()} was just taken."
                ) from exc
            raise StoreUnavailable(f"Failed to create appointment: {exc}") from exc
        logger.info(
            f"Created appointment {appointment.id} for rep {appointment.rep_id} "
            f"on {appointment.date} at {appointment.time_slot.value}"
        )
        return appointment

    def update_status(self, appointment_id: str, status: AppointmentStatus) -> Appointment:
        try:
            response = self.client.table(self.table).select("*").eq("id", appointment_id).limit(1).execute()
        except Exception as exc:
            raise StoreUnavailable(f"Failed to load appointment {appointment_id}: {exc}") from exc
        if not response.data:
            raise KeyError(appointment_id)
        appointment = _read_record(_row_to_record(response.data[0]))
        check_transition(appointment.status, status)
        try:
            updated = (
                self.client.table(self.table)
                .update({"status": status.value})
                .eq("id", appointment_id)
                .eq("status", appointment.status.value)
                .execute()
            )
        except Exception as exc:
            raise StoreUnavailable(f"Failed to update appointment {appointment_id}: {exc}") from exc
        if not updated.data:
            # Another request moved the row out of the status it was read in.
            raise BookingConflict(
                f"Appointment {appointment_id} changed status concurrently; reload and retry.",
                conflicting_id=appointment_id,
            )
        appointment.status = status
        return appointment


def get_appointment_store() -> AppointmentStore:
    """Supabase-backed store when configured, otherwise the JSON file store."""
    client = get_supabase_client()
    if client is not None:
        return SupabaseAppointmentStore(client)
    return FileAppointmentStore()
