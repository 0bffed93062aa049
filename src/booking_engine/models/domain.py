"""Domain models for representatives, schedules, appointments and slot feasibility."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Mapping, Optional

from ..errors import InvalidInput


class TimeSlot(str, Enum):
    """Daily booking buckets. Declaration order is the chronological order."""

    MORNING = "10am"
    MIDDAY = "2pm"
    EVENING = "7pm"

    @property
    def order(self) -> int:
        return _SLOT_ORDER[self]

    @property
    def label(self) -> str:
        return _SLOT_LABELS[self]

    @classmethod
    def ordered(cls) -> tuple["TimeSlot", ...]:
        return tuple(cls)

    @classmethod
    def parse(cls, value: "str | TimeSlot") -> "TimeSlot":
        if isinstance(value, TimeSlot):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as exc:
            raise InvalidInput(f"Unknown time slot '{value}'.") from exc

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, TimeSlot):
            return NotImplemented
        return self.order < other.order

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, TimeSlot):
            return NotImplemented
        return self.order > other.order

    def __le__(self, other: object) -> bool:
        if not isinstance(other, TimeSlot):
            return NotImplemented
        return self.order <= other.order

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, TimeSlot):
            return NotImplemented
        return self.order >= other.order


_SLOT_ORDER = {TimeSlot.MORNING: 1, TimeSlot.MIDDAY: 2, TimeSlot.EVENING: 3}
_SLOT_LABELS = {TimeSlot.MORNING: "10:00 AM", TimeSlot.MIDDAY: "2:00 PM", TimeSlot.EVENING: "7:00 PM"}


class DayOfWeek(str, Enum):
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"

    @classmethod
    def parse(cls, value: "str | DayOfWeek") -> "DayOfWeek":
        if isinstance(value, DayOfWeek):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as exc:
            raise InvalidInput(f"Unknown day of week '{value}'.") from exc


def day_of_week(target: date) -> DayOfWeek:
    """Map a calendar date to its weekday. Defined for every date."""

    return tuple(DayOfWeek)[target.weekday()]


class AppointmentStatus(str, Enum):
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class AnchorSource(str, Enum):
    HOME = "home"
    PRIOR_APPOINTMENT = "prior_appointment"
    NEXT_APPOINTMENT = "next_appointment"


class SlotStatus(str, Enum):
    GOOD = "good"
    LIMITED = "limited"
    NONE = "none"

    @classmethod
    def from_count(cls, count: int) -> "SlotStatus":
        if count >= 3:
            return cls.GOOD
        if count >= 1:
            return cls.LIMITED
        return cls.NONE


@dataclass(frozen=True, slots=True)
class GeoPoint:
    lat: float
    lng: float

    @property
    def is_valid(self) -> bool:
        if not (math.isfinite(self.lat) and math.isfinite(self.lng)):
            return False
        if not (-90.0 <= self.lat <= 90.0 and -180.0 <= self.lng <= 180.0):
            return False
        return not (self.lat == 0.0 and self.lng == 0.0)


@dataclass(frozen=True, slots=True)
class Address:
    street: str
    city: str
    state: str
    zip: str
    location: GeoPoint


@dataclass(frozen=True, slots=True)
class WeeklyTemplate:
    """Recurring weekly slots a representative is nominally willing to work."""

    days: Mapping[DayOfWeek, frozenset[TimeSlot]] = field(default_factory=dict)

    def slots_for(self, day: DayOfWeek) -> frozenset[TimeSlot]:
        return self.days.get(day, frozenset())

    def allows(self, target: date, time_slot: TimeSlot) -> bool:
        return time_slot in self.slots_for(day_of_week(target))


@dataclass(frozen=True, slots=True)
class Representative:
    id: str
    name: str
    home_address: Address
    weekly_template: WeeklyTemplate
    email: Optional[str] = None
    phone: Optional[str] = None
    color: Optional[str] = None


@dataclass(slots=True)
class Appointment:
    id: str
    rep_id: Optional[str]
    date: date
    time_slot: TimeSlot
    customer_address: Address
    status: AppointmentStatus
    created_at: datetime
    customer_name: str = ""
    customer_phone: Optional[str] = None
    customer_email: Optional[str] = None
    lead_id: Optional[str] = None
    notes: Optional[str] = None

    @property
    def is_scheduled(self) -> bool:
        return self.status is AppointmentStatus.SCHEDULED

    def same_booking_key(self, other: "Appointment") -> bool:
        """Same address, date and slot, ignoring case and surrounding whitespace."""

        mine, theirs = self.customer_address, other.customer_address
        return (
            mine.street.strip().lower() == theirs.street.strip().lower()
            and mine.city.strip().lower() == theirs.city.strip().lower()
            and mine.state.strip().upper() == theirs.state.strip().upper()
            and mine.zip.strip() == theirs.zip.strip()
            and self.date == other.date
            and self.time_slot is other.time_slot
        )


@dataclass(frozen=True, slots=True)
class AnchorPoint:
    location: GeoPoint
    source: AnchorSource
    appointment_id: Optional[str] = None


@dataclass(frozen=True, slots=True)
class RankedRep:
    rep_id: str
    rep_name: str
    distance_miles: float
    anchor: AnchorPoint


@dataclass(frozen=True, slots=True)
class SlotFeasibility:
    date: date
    time_slot: TimeSlot
    ranked_reps: tuple[RankedRep, ...]
    status: SlotStatus

    @property
    def available_count(self) -> int:
        return len(self.ranked_reps)
