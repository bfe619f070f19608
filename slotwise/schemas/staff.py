# slotwise/schemas/staff.py
from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional, List
from datetime import datetime
from uuid import UUID

from slotwise.models.staff import AvailabilityType


class StaffCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    title: Optional[str] = Field(None, max_length=100)
    service_ids: List[UUID] = Field(default_factory=list, description="Services this staff member performs")


class StaffUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    title: Optional[str] = Field(None, max_length=100)
    is_active: Optional[bool] = None
    service_ids: Optional[List[UUID]] = None


class StaffOverrideCreate(BaseModel):
    """Ad hoc availability exception for one staff member"""
    start_time: datetime = Field(..., description="Start (ISO-8601 with offset)")
    end_time: datetime = Field(..., description="End (ISO-8601 with offset)")
    availability_type: AvailabilityType = AvailabilityType.UNAVAILABLE
    reason: Optional[str] = Field(None, max_length=500)

    @field_validator("start_time", "end_time")
    @classmethod
    def require_offset(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            raise ValueError("Datetime must include a timezone offset")
        return v

    @field_validator("end_time")
    @classmethod
    def end_after_start(cls, v: datetime, info) -> datetime:
        start_time = info.data.get("start_time")
        if start_time and v <= start_time:
            raise ValueError("End time must be after start time")
        return v
