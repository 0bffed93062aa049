"""Serviceable-zip endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...schemas.serviceability import ServiceabilityResponse, ZipOverridesRequest
from ...services.serviceability.gate import get_serviceability_gate
from ..errors import to_http_exception

router = APIRouter(prefix="/serviceable-zips", tags=["serviceable-zips"])


@router.get("/{zip_code}", response_model=ServiceabilityResponse, status_code=status.HTTP_200_OK)
def check_zip(zip_code: str) -> ServiceabilityResponse:
    try:
        result = get_serviceability_gate().check_serviceable(zip_code)
    except Exception as exc:
        raise to_http_exception(exc, "check zip code") from exc
    return ServiceabilityResponse(
        zip=result.zip,
        serviceable=result.serviceable,
        excluded=result.excluded,
        notes=result.notes,
    )


@router.put("/overrides", status_code=status.HTTP_200_OK)
def save_overrides(payload: ZipOverridesRequest) -> dict:
    """Replace exclusion/notes overrides and refresh the registry cache."""
    try:
        get_serviceability_gate().save_overrides([item.model_dump() for item in payload.overrides])
    except Exception as exc:
        raise to_http_exception(exc, "save zip overrides") from exc
    return {"success": True, "overrides": len(payload.overrides)}


@router.post("/cache/invalidate", status_code=status.HTTP_200_OK)
def invalidate_cache() -> dict:
    get_serviceability_gate().invalidate()
    return {"success": True}
