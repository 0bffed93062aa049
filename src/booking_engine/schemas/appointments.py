"""Appointment booking schemas."""

from __future__ import annotations

import datetime as dt
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator


class AddressModel(BaseModel):
    street: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)
    zip: str = Field(..., min_length=5)
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class CustomerDetailsModel(BaseModel):
    name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    leadId: Optional[str] = None
    notes: Optional[str] = None
    address: AddressModel

    @field_validator("name")
    @classmethod
    def _require_name(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Customer name is required.")
        return value.strip()


class SlotSelectionModel(BaseModel):
    date: dt.date
    timeSlot: Literal["10am", "2pm", "7pm"]


class BookingRequest(BaseModel):
    slotSelection: SlotSelectionModel
    customerDetails: CustomerDetailsModel


class AppointmentModel(BaseModel):
    id: str
    repId: Optional[str] = None
    repName: Optional[str] = None
    distanceMiles: Optional[float] = None
    date: dt.date
    timeSlot: Literal["10am", "2pm", "7pm"]
    customerName: str
    customerPhone: Optional[str] = None
    customerEmail: Optional[str] = None
    leadId: Optional[str] = None
    notes: Optional[str] = None
    address: AddressModel
    status: Literal["scheduled", "completed", "cancelled"]
    createdAt: dt.datetime


class StatusUpdateRequest(BaseModel):
    status: Literal["completed", "cancelled"]
