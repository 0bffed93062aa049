"""Translate engine errors into HTTP responses."""

from __future__ import annotations

import logging

from fastapi import HTTPException, status

from ..errors import BookingConflict, InvalidInput, NoCapacity, NotServiceable, StoreUnavailable


def to_http_exception(exc: Exception, action: str) -> HTTPException:
    if isinstance(exc, InvalidInput):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    if isinstance(exc, NotServiceable):
        return HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={
                "message": str(exc),
                "zip": exc.zip,
                "serviceable": False,
                "excluded": exc.excluded,
                "notes": exc.notes,
            },
        )
    if isinstance(exc, NoCapacity):
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"message": str(exc), "reason": exc.reason},
        )
    if isinstance(exc, BookingConflict):
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"message": str(exc), "reason": "BookingConflict", "conflictingId": exc.conflicting_id},
        )
    if isinstance(exc, StoreUnavailable):
        logging.error(f"Store unavailable while trying to {action}: {exc}")
        return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc))
    logging.exception(f"Error trying to {action}: {exc}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to {action}: {str(exc)}",
    )
