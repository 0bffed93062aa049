"""Assignment policy: pick the closest feasible representative for a booking."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional

from ...errors import NoCapacity
from ...models.domain import Address, Appointment, AppointmentStatus, RankedRep, SlotFeasibility


@dataclass(slots=True)
class CustomerDetails:
    name: str
    address: Address
    phone: Optional[str] = None
    email: Optional[str] = None
    lead_id: Optional[str] = None
    notes: Optional[str] = None


def new_appointment_id() -> str:
    return f"apt-{uuid.uuid4().hex[:12]}"


def select_rep(feasibility: SlotFeasibility) -> RankedRep:
    if not feasibility.ranked_reps:
        raise NoCapacity(feasibility.date.isoformat(), feasibility.time_slot.label)
    return feasibility.ranked_reps[0]


def book_slot(
    feasibility: SlotFeasibility,
    customer: CustomerDetails,
    *,
    id_factory: Callable[[], str] = new_appointment_id,
    now: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
) -> Appointment:
    """Build a Scheduled appointment for the closest representative.

    Raises ``NoCapacity`` when the feasibility result is empty. The returned
    appointment is not persisted; the store's conditional create is the
    authoritative duplicate check.
    """

    chosen = select_rep(feasibility)
    return Appointment(
        id=id_factory(),
        rep_id=chosen.rep_id,
        date=feasibility.date,
        time_slot=feasibility.time_slot,
        customer_address=customer.address,
        status=AppointmentStatus.SCHEDULED,
        created_at=now(),
        customer_name=customer.name,
        customer_phone=customer.phone,
        customer_email=customer.email,
        lead_id=customer.lead_id,
        notes=customer.notes,
    )
