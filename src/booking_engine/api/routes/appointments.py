"""Appointment booking endpoints."""

from __future__ import annotations

from datetime import date
from typing import List, Literal, Optional

from fastapi import APIRouter, HTTPException, Query, status

from ...models.domain import AppointmentStatus
from ...schemas.appointments import AppointmentModel, BookingRequest, StatusUpdateRequest
from ...services.availability.service import book_appointment, list_appointments, update_appointment_status
from ..errors import to_http_exception

router = APIRouter(prefix="/appointments", tags=["appointments"])


@router.post("", response_model=AppointmentModel, status_code=status.HTTP_201_CREATED)
def create_appointment(payload: BookingRequest) -> AppointmentModel:
    """Book the selected slot with the closest available rep."""
    try:
        return book_appointment(payload)
    except Exception as exc:
        raise to_http_exception(exc, "book appointment") from exc


@router.get("", response_model=List[AppointmentModel], status_code=status.HTTP_200_OK)
def get_appointments(
    repId: Optional[str] = Query(default=None, description="Filter by assigned rep"),
    on_date: Optional[date] = Query(default=None, alias="date", description="Filter by appointment date"),
    appointment_status: Optional[Literal["scheduled", "completed", "cancelled"]] = Query(
        default=None, alias="status", description="Filter by status"
    ),
) -> List[AppointmentModel]:
    try:
        return list_appointments(
            rep_id=repId,
            on_date=on_date,
            status=AppointmentStatus(appointment_status) if appointment_status else None,
        )
    except Exception as exc:
        raise to_http_exception(exc, "list appointments") from exc


@router.patch("/{appointment_id}/status", response_model=AppointmentModel, status_code=status.HTTP_200_OK)
def set_status(appointment_id: str, payload: StatusUpdateRequest) -> AppointmentModel:
    try:
        return update_appointment_status(appointment_id, AppointmentStatus(payload.status))
    except KeyError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Appointment {appointment_id} not found",
        ) from exc
    except Exception as exc:
        raise to_http_exception(exc, "update appointment status") from exc
