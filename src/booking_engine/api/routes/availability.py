"""Availability grid endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...schemas.availability import AvailabilityRequest, AvailabilityResponse
from ...services.availability.service import compute_availability
from ..errors import to_http_exception

router = APIRouter(prefix="/availability", tags=["availability"])


@router.post("", response_model=AvailabilityResponse, status_code=status.HTTP_200_OK)
def availability(payload: AvailabilityRequest) -> AvailabilityResponse:
    try:
        return compute_availability(payload)
    except Exception as exc:
        raise to_http_exception(exc, "compute availability") from exc
