"""Error taxonomy shared by the engine, the stores and the HTTP layer."""

from __future__ import annotations

from typing import Optional


class BookingEngineError(Exception):
    """Base class for every error raised by the booking engine."""


class InvalidInput(BookingEngineError, ValueError):
    """Malformed input rejected before any computation runs."""


class NotServiceable(BookingEngineError):
    """The address zip is excluded from, or not yet covered by, the service territory."""

    def __init__(self, zip_code: str, *, excluded: bool, notes: Optional[str] = None) -> None:
        self.zip = zip_code
        self.excluded = excluded
        self.notes = notes
        if excluded:
            message = f"Zip code {zip_code} is excluded from service."
            if notes:
                message = f"{message} {notes}"
        else:
            message = f"Zip code {zip_code} is not in a serviced territory yet."
        super().__init__(message)


class FeasibilityError(BookingEngineError):
    """A slot could not be booked from the given feasibility result."""

    def __init__(self, reason: str, message: str) -> None:
        self.reason = reason
        super().__init__(message)


class NoCapacity(FeasibilityError):
    """No representative can take the slot; the caller should re-render the grid."""

    def __init__(self, date_label: str, time_slot: str) -> None:
        super().__init__(
            "NoCapacity",
            f"No representative is available on {date_label} at {time_slot}.",
        )


class BookingConflict(BookingEngineError):
    """The appointment store rejected a conditional create."""

    def __init__(self, message: str, *, conflicting_id: Optional[str] = None) -> None:
        self.conflicting_id = conflicting_id
        super().__init__(message)


class StoreUnavailable(BookingEngineError):
    """An external collaborator (store, registry, roster) could not be reached or read."""
