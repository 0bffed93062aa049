"""Availability grid: slot feasibility across consecutive days."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import date, timedelta
from typing import Iterable, Sequence

from ...errors import InvalidInput
from ...models.domain import Appointment, GeoPoint, Representative, SlotFeasibility, SlotStatus, TimeSlot
from ..geospatial import validate_point
from .feasibility import ensure_calendar_date, evaluate_slot
from .policy import STANDARD_POLICY, DrivePolicy

logger = logging.getLogger(__name__)

DEFAULT_NUM_DAYS = 5


def _evaluate_day(
    customer: GeoPoint,
    target: date,
    reps: Sequence[Representative],
    snapshot: Sequence[Appointment],
    policy: DrivePolicy,
) -> list[SlotFeasibility]:
    return [
        evaluate_slot(
            customer,
            target,
            time_slot,
            reps,
            snapshot,
            policy.radius_miles,
            anchor_rule=policy.anchor_rule,
        )
        for time_slot in TimeSlot.ordered()
    ]


def build_grid(
    customer: GeoPoint,
    start_date: date,
    reps: Sequence[Representative],
    appointments: Iterable[Appointment],
    num_days: int = DEFAULT_NUM_DAYS,
    *,
    policy: DrivePolicy = STANDARD_POLICY,
    max_workers: int = 1,
) -> list[list[SlotFeasibility]]:
    """Evaluate every (day, slot) cell starting at ``start_date``.

    Returns a dense ``[day][slot]`` grid, slots in chronological order. The
    appointment iterable is read once into a snapshot that every cell shares;
    with ``max_workers > 1`` days are evaluated on a thread pool.
    """

    validate_point(customer, label="customer")
    ensure_calendar_date(start_date, label="start_date")
    if num_days < 1:
        raise InvalidInput(f"num_days must be at least 1, got {num_days}.")

    snapshot = tuple(appointments)
    roster = tuple(reps)
    days = [start_date + timedelta(days=offset) for offset in range(num_days)]

    if max_workers > 1 and num_days > 1:
        with ThreadPoolExecutor(max_workers=min(max_workers, num_days)) as executor:
            grid = list(executor.map(lambda day: _evaluate_day(customer, day, roster, snapshot, policy), days))
    else:
        grid = [_evaluate_day(customer, day, roster, snapshot, policy) for day in days]

    logger.debug(
        f"Built {num_days}x{len(TimeSlot.ordered())} grid from {start_date} "
        f"({len(roster)} reps, {len(snapshot)} appointments, policy={policy.name})"
    )
    return grid


def summarize_grid(grid: Sequence[Sequence[SlotFeasibility]]) -> dict[str, int]:
    counts = {status.value: 0 for status in SlotStatus}
    for day in grid:
        for cell in day:
            counts[cell.status.value] += 1
    return counts
