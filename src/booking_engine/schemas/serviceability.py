"""Serviceable-zip schemas."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class ServiceabilityResponse(BaseModel):
    zip: str
    serviceable: bool
    excluded: bool
    notes: Optional[str] = None


class ZipOverrideModel(BaseModel):
    zip: str = Field(..., min_length=5)
    excluded: bool = False
    notes: Optional[str] = None


class ZipOverridesRequest(BaseModel):
    overrides: List[ZipOverrideModel]
