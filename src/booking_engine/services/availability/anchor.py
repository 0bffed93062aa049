"""Anchor-point resolution: where a representative travels from for a slot."""

from __future__ import annotations

from datetime import date
from typing import Iterable

from ...models.domain import AnchorPoint, AnchorSource, Appointment, Representative, TimeSlot
from .policy import AnchorRule


def appointments_for_day(
    rep_id: str,
    target: date,
    appointments: Iterable[Appointment],
) -> list[Appointment]:
    return [
        appointment
        for appointment in appointments
        if appointment.rep_id == rep_id and appointment.date == target and appointment.is_scheduled
    ]


def _home(rep: Representative) -> AnchorPoint:
    return AnchorPoint(location=rep.home_address.location, source=AnchorSource.HOME)


def resolve_anchor(
    rep: Representative,
    target: date,
    time_slot: TimeSlot,
    appointments: Iterable[Appointment],
    *,
    rule: AnchorRule = AnchorRule.PRIOR_OR_NEXT,
) -> AnchorPoint:
    """Resolve the point a representative would drive from for ``time_slot`` on ``target``.

    The immediately preceding appointment wins. When the target is the first
    slot of the day and ``rule`` allows it, the immediately following
    appointment is used instead, otherwise the home base. This approximates
    routing; it does not minimise travel.
    """

    todays = appointments_for_day(rep.id, target, appointments)
    if not todays:
        return _home(rep)

    earlier = [appointment for appointment in todays if appointment.time_slot.order < time_slot.order]
    if earlier:
        prior = max(earlier, key=lambda appointment: appointment.time_slot.order)
        return AnchorPoint(
            location=prior.customer_address.location,
            source=AnchorSource.PRIOR_APPOINTMENT,
            appointment_id=prior.id,
        )

    if rule is AnchorRule.PRIOR_OR_NEXT:
        later = [appointment for appointment in todays if appointment.time_slot.order > time_slot.order]
        if later:
            following = min(later, key=lambda appointment: appointment.time_slot.order)
            return AnchorPoint(
                location=following.customer_address.location,
                source=AnchorSource.NEXT_APPOINTMENT,
                appointment_id=following.id,
            )

    return _home(rep)
