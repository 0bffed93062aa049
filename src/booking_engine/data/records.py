"""Conversions between on-disk/database records and domain models.

Records use the camelCase field names of the booking front end
(``repId``, ``timeSlot``, ``startingAddress`` ...).
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Mapping, Optional

from ..errors import InvalidInput
from ..models.domain import (
    Address,
    Appointment,
    AppointmentStatus,
    DayOfWeek,
    GeoPoint,
    TimeSlot,
    WeeklyTemplate,
)


def _coerce_float(value: Any, field_name: str) -> float:
    if value is None or value == "":
        raise InvalidInput(f"Missing coordinate '{field_name}'.")
    try:
        return float(str(value).replace(",", ""))
    except ValueError as exc:
        raise InvalidInput(f"Unable to parse float from value '{value}' for '{field_name}'.") from exc


def _optional_str(value: Any) -> Optional[str]:
    text = str(value).strip() if value is not None else ""
    return text or None


def address_from_record(row: Mapping[str, Any]) -> Address:
    return Address(
        street=str(row.get("street") or "").strip(),
        city=str(row.get("city") or "").strip(),
        state=str(row.get("state") or "").strip(),
        zip=str(row.get("zip") or "").strip(),
        location=GeoPoint(lat=_coerce_float(row.get("lat"), "lat"), lng=_coerce_float(row.get("lng"), "lng")),
    )


def address_to_record(address: Address) -> dict[str, Any]:
    return {
        "street": address.street,
        "city": address.city,
        "state": address.state,
        "zip": address.zip,
        "lat": address.location.lat,
        "lng": address.location.lng,
    }


def template_from_record(row: Mapping[str, Any] | None) -> WeeklyTemplate:
    """Parse ``{"monday": ["10am", "2pm"], ...}``; unknown keys or slots are rejected."""

    if not row:
        return WeeklyTemplate()
    days: dict[DayOfWeek, frozenset[TimeSlot]] = {}
    for day_name, slots in row.items():
        day = DayOfWeek.parse(day_name)
        if slots is None:
            slots = []
        if isinstance(slots, str) or not isinstance(slots, (list, tuple, set, frozenset)):
            raise InvalidInput(f"Slots for '{day_name}' must be a list, got {slots!r}.")
        days[day] = frozenset(TimeSlot.parse(slot) for slot in slots)
    return WeeklyTemplate(days=days)


def _parse_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError as exc:
        raise InvalidInput(f"Invalid appointment date '{value}'.") from exc


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if not value:
        return datetime.now(timezone.utc)
    text = str(value)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError as exc:
        raise InvalidInput(f"Invalid createdAt timestamp '{value}'.") from exc


def appointment_from_record(row: Mapping[str, Any]) -> Appointment:
    status_value = str(row.get("status") or AppointmentStatus.SCHEDULED.value).strip().lower()
    try:
        status = AppointmentStatus(status_value)
    except ValueError as exc:
        raise InvalidInput(f"Unknown appointment status '{status_value}'.") from exc

    return Appointment(
        id=str(row["id"]),
        rep_id=_optional_str(row.get("repId")),
        date=_parse_date(row.get("date")),
        time_slot=TimeSlot.parse(row.get("timeSlot")),
        customer_address=address_from_record(row.get("address") or {}),
        status=status,
        created_at=_parse_timestamp(row.get("createdAt")),
        customer_name=str(row.get("customerName") or "").strip(),
        customer_phone=_optional_str(row.get("customerPhone")),
        customer_email=_optional_str(row.get("customerEmail")),
        lead_id=_optional_str(row.get("leadId")),
        notes=_optional_str(row.get("notes")),
    )


def appointment_to_record(appointment: Appointment) -> dict[str, Any]:
    record: dict[str, Any] = {
        "id": appointment.id,
        "repId": appointment.rep_id,
        "date": appointment.date.isoformat(),
        "timeSlot": appointment.time_slot.value,
        "customerName": appointment.customer_name,
        "customerPhone": appointment.customer_phone,
        "customerEmail": appointment.customer_email,
        "leadId": appointment.lead_id,
        "notes": appointment.notes,
        "address": address_to_record(appointment.customer_address),
        "status": appointment.status.value,
        "createdAt": appointment.created_at.isoformat(),
    }
    return {key: value for key, value in record.items() if value is not None or key == "repId"}
