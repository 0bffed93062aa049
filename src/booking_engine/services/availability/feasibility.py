"""Per-slot feasibility: which representatives can take a booking, closest first."""

from __future__ import annotations

import logging
import math
from datetime import date, datetime
from typing import Sequence

from ...errors import InvalidInput
from ...models.domain import (
    Appointment,
    GeoPoint,
    RankedRep,
    Representative,
    SlotFeasibility,
    SlotStatus,
    TimeSlot,
)
from ..geospatial import distance_miles, validate_point
from .anchor import resolve_anchor
from .policy import AnchorRule

logger = logging.getLogger(__name__)


def ensure_calendar_date(value: date, *, label: str = "date") -> date:
    """Reject datetimes; the engine only works on plain calendar dates."""

    if isinstance(value, datetime):
        raise InvalidInput(f"{label} must be a calendar date without a time of day, got {value.isoformat()}.")
    if not isinstance(value, date):
        raise InvalidInput(f"{label} must be a calendar date, got {value!r}.")
    return value


def has_conflict(rep_id: str, target: date, time_slot: TimeSlot, appointments: Sequence[Appointment]) -> bool:
    return any(
        appointment.rep_id == rep_id
        and appointment.date == target
        and appointment.time_slot is time_slot
        and appointment.is_scheduled
        for appointment in appointments
    )


def evaluate_slot(
    customer: GeoPoint,
    target: date,
    time_slot: TimeSlot,
    reps: Sequence[Representative],
    appointments: Sequence[Appointment],
    radius_miles: float,
    *,
    anchor_rule: AnchorRule = AnchorRule.PRIOR_OR_NEXT,
) -> SlotFeasibility:
    """Rank every representative who can take ``time_slot`` on ``target``.

    A representative is included when the slot is in their weekly template,
    they hold no Scheduled appointment at that exact slot, and the distance
    from their resolved anchor to the customer is within ``radius_miles``.
    Ties keep roster order. Reads its arguments only.
    """

    validate_point(customer, label="customer")
    ensure_calendar_date(target)
    if not (isinstance(radius_miles, (int, float)) and math.isfinite(radius_miles) and radius_miles > 0):
        raise InvalidInput(f"Drive radius must be a positive number, got {radius_miles!r}.")

    ranked: list[RankedRep] = []
    for rep in reps:
        if not rep.weekly_template.allows(target, time_slot):
            logger.debug(f"Rep {rep.id} does not work {time_slot.value} on {target}")
            continue

        if has_conflict(rep.id, target, time_slot, appointments):
            logger.debug(f"Rep {rep.id} already booked on {target} at {time_slot.value}")
            continue

        anchor = resolve_anchor(rep, target, time_slot, appointments, rule=anchor_rule)
        if not anchor.location.is_valid:
            logger.debug(f"Rep {rep.id} has an invalid {anchor.source.value} anchor, excluding")
            continue

        distance = distance_miles(anchor.location, customer)
        if math.isnan(distance) or distance > radius_miles:
            logger.debug(f"Rep {rep.id} is {distance:.1f} mi from the customer, outside {radius_miles} mi")
            continue

        ranked.append(RankedRep(rep_id=rep.id, rep_name=rep.name, distance_miles=distance, anchor=anchor))

    # sorted() is stable, so equidistant reps keep roster order.
    ranked = sorted(ranked, key=lambda item: item.distance_miles)
    return SlotFeasibility(
        date=target,
        time_slot=time_slot,
        ranked_reps=tuple(ranked),
        status=SlotStatus.from_count(len(ranked)),
    )
