"""Availability grid request/response schemas."""

from __future__ import annotations

import datetime as dt
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field


class GeoPointModel(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class AvailabilityRequest(BaseModel):
    customerLocation: GeoPointModel
    zip: str = Field(..., description="Customer postal code; gates whether the grid is computed.")
    startDate: Optional[dt.date] = Field(default=None, description="First day of the grid. Defaults to today.")
    numDays: Optional[int] = Field(default=None, ge=1, le=14)


class AnchorModel(BaseModel):
    lat: float
    lng: float
    source: Literal["home", "prior_appointment", "next_appointment"]
    appointmentId: Optional[str] = None


class RankedRepModel(BaseModel):
    repId: str
    repName: str
    distanceMiles: float
    anchor: AnchorModel


class SlotModel(BaseModel):
    date: dt.date
    timeSlot: Literal["10am", "2pm", "7pm"]
    label: str
    availableCount: int
    status: Literal["good", "limited", "none"]
    availableReps: List[RankedRepModel]


class DayModel(BaseModel):
    date: dt.date
    weekday: str
    slots: List[SlotModel]


class AvailabilityResponse(BaseModel):
    zip: str
    policy: str
    radiusMiles: float
    startDate: dt.date
    generatedAt: dt.datetime
    days: List[DayModel]
    summary: Dict[str, int]
