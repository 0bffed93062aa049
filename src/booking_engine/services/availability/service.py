"""Availability and booking orchestration service."""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Optional, Sequence

from ...config import settings
from ...data.roster_repository import load_roster
from ...models.domain import (
    Address,
    Appointment,
    AppointmentStatus,
    GeoPoint,
    RankedRep,
    Representative,
    SlotFeasibility,
    TimeSlot,
    day_of_week,
)
from ...persistence.appointments import AppointmentStore, get_appointment_store
from ...schemas.appointments import AddressModel, AppointmentModel, BookingRequest
from ...schemas.availability import (
    AnchorModel,
    AvailabilityRequest,
    AvailabilityResponse,
    DayModel,
    RankedRepModel,
    SlotModel,
)
from ..geospatial import validate_point
from ..serviceability.gate import ServiceabilityGate, get_serviceability_gate
from .assignment import CustomerDetails, book_slot
from .feasibility import evaluate_slot
from .grid import build_grid, summarize_grid
from .policy import DrivePolicy, policy_from_settings

logger = logging.getLogger(__name__)


def _ranked_rep_to_model(item: RankedRep) -> RankedRepModel:
    return RankedRepModel(
        repId=item.rep_id,
        repName=item.rep_name,
        distanceMiles=round(item.distance_miles, 2),
        anchor=AnchorModel(
            lat=item.anchor.location.lat,
            lng=item.anchor.location.lng,
            source=item.anchor.source.value,
            appointmentId=item.anchor.appointment_id,
        ),
    )


def _slot_to_model(cell: SlotFeasibility) -> SlotModel:
    return SlotModel(
        date=cell.date,
        timeSlot=cell.time_slot.value,
        label=cell.time_slot.label,
        availableCount=cell.available_count,
        status=cell.status.value,
        availableReps=[_ranked_rep_to_model(item) for item in cell.ranked_reps],
    )


def appointment_to_model(appointment: Appointment, ranked: Optional[RankedRep] = None) -> AppointmentModel:
    address = appointment.customer_address
    return AppointmentModel(
        id=appointment.id,
        repId=appointment.rep_id,
        repName=ranked.rep_name if ranked else None,
        distanceMiles=round(ranked.distance_miles, 2) if ranked else None,
        date=appointment.date,
        timeSlot=appointment.time_slot.value,
        customerName=appointment.customer_name,
        customerPhone=appointment.customer_phone,
        customerEmail=appointment.customer_email,
        leadId=appointment.lead_id,
        notes=appointment.notes,
        address=AddressModel(
            street=address.street,
            city=address.city,
            state=address.state,
            zip=address.zip,
            lat=address.location.lat,
            lng=address.location.lng,
        ),
        status=appointment.status.value,
        createdAt=appointment.created_at,
    )


def compute_availability(
    payload: AvailabilityRequest,
    *,
    store: AppointmentStore | None = None,
    roster: Sequence[Representative] | None = None,
    gate: ServiceabilityGate | None = None,
    policy: DrivePolicy | None = None,
    today: date | None = None,
) -> AvailabilityResponse:
    customer = validate_point(
        GeoPoint(lat=payload.customerLocation.lat, lng=payload.customerLocation.lng),
        label="customer",
    )
    gate = gate or get_serviceability_gate()
    serviceable = gate.require_serviceable(payload.zip)

    store = store or get_appointment_store()
    reps = tuple(roster) if roster is not None else load_roster()
    policy = policy or policy_from_settings()
    start = payload.startDate or today or date.today()
    num_days = payload.numDays or settings.grid_days

    # One snapshot per grid; every cell is evaluated against it.
    snapshot = store.list(status=AppointmentStatus.SCHEDULED)
    logger.info(
        f"Building availability grid for zip {serviceable.zip}: {num_days} days from {start}, "
        f"{len(reps)} reps, {len(snapshot)} scheduled appointments, policy={policy.name}"
    )
    grid = build_grid(
        customer,
        start,
        reps,
        snapshot,
        num_days,
        policy=policy,
        max_workers=settings.grid_max_workers,
    )

    days = [
        DayModel(
            date=cells[0].date,
            weekday=day_of_week(cells[0].date).value,
            slots=[_slot_to_model(cell) for cell in cells],
        )
        for cells in grid
    ]
    return AvailabilityResponse(
        zip=serviceable.zip,
        policy=policy.name,
        radiusMiles=policy.radius_miles,
        startDate=start,
        generatedAt=datetime.now(timezone.utc),
        days=days,
        summary=summarize_grid(grid),
    )


def book_appointment(
    payload: BookingRequest,
    *,
    store: AppointmentStore | None = None,
    roster: Sequence[Representative] | None = None,
    gate: ServiceabilityGate | None = None,
    policy: DrivePolicy | None = None,
) -> AppointmentModel:
    """Re-evaluate the selected slot against a fresh snapshot and book the closest rep.

    The grid the customer saw may be stale; feasibility is recomputed here and
    the store's conditional create makes the final decision.
    """

    details = payload.customerDetails
    location = validate_point(GeoPoint(lat=details.address.lat, lng=details.address.lng), label="customer")
    gate = gate or get_serviceability_gate()
    gate.require_serviceable(details.address.zip)

    store = store or get_appointment_store()
    reps = tuple(roster) if roster is not None else load_roster()
    policy = policy or policy_from_settings()
    selection = payload.slotSelection
    time_slot = TimeSlot.parse(selection.timeSlot)

    snapshot = store.list(status=AppointmentStatus.SCHEDULED)
    feasibility = evaluate_slot(
        location,
        selection.date,
        time_slot,
        reps,
        snapshot,
        policy.radius_miles,
        anchor_rule=policy.anchor_rule,
    )

    customer = CustomerDetails(
        name=details.name,
        address=Address(
            street=details.address.street,
            city=details.address.city,
            state=details.address.state,
            zip=details.address.zip,
            location=location,
        ),
        phone=details.phone,
        email=details.email,
        lead_id=details.leadId,
        notes=details.notes,
    )
    appointment = book_slot(feasibility, customer)
    created = store.create(appointment)
    chosen = feasibility.ranked_reps[0]
    logger.info(
        f"Booked {created.id}: rep {chosen.rep_id} ({chosen.distance_miles:.1f} mi, "
        f"anchor={chosen.anchor.source.value}) on {created.date} at {created.time_slot.value}"
    )
    return appointment_to_model(created, chosen)


def list_appointments(
    *,
    rep_id: Optional[str] = None,
    on_date: Optional[date] = None,
    status: Optional[AppointmentStatus] = None,
    store: AppointmentStore | None = None,
) -> list[AppointmentModel]:
    store = store or get_appointment_store()
    return [appointment_to_model(item) for item in store.list(rep_id=rep_id, on_date=on_date, status=status)]


def update_appointment_status(
    appointment_id: str,
    status: AppointmentStatus,
    *,
    store: AppointmentStore | None = None,
) -> AppointmentModel:
    store = store or get_appointment_store()
    updated = store.update_status(appointment_id, status)
    logger.info(f"Appointment {appointment_id} marked {status.value}")
    return appointment_to_model(updated)
