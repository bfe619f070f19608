# slotwise/schemas/booking.py
"""
Pydantic schemas for public booking and availability endpoints
"""
from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional, List
from datetime import datetime
from uuid import UUID

from slotwise.models.booking import BookingStatus, PaymentMethod


class TimeSlotResponse(BaseModel):
    """Candidate slot with UTC ISO-8601 bounds"""
    start: str
    end: str
    available: bool
    available_capacity: int = 0


class AvailabilityResponse(BaseModel):
    provider_id: str
    service_id: str
    date: str = Field(..., description="Requested local date (YYYY-MM-DD)")
    timezone: str = Field(..., description="Timezone used to interpret business hours")
    slots: List[TimeSlotResponse] = Field(default_factory=list)


class BookingCreateRequest(BaseModel):
    """Public booking request"""
    provider_id: UUID
    service_id: UUID
    start_time: datetime = Field(..., description="Requested start (ISO-8601 with offset)")
    customer_name: str = Field(..., min_length=1, max_length=200)
    customer_email: EmailStr
    customer_phone: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = Field(None, max_length=2000)
    payment_method: PaymentMethod = PaymentMethod.CASH

    @field_validator("start_time")
    @classmethod
    def require_offset(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            raise ValueError("start_time must include a timezone offset")
        return v

    model_config = {
        "json_schema_extra": {
            "example": {
                "provider_id": "550e8400-e29b-41d4-a716-446655440000",
                "service_id": "660e8400-e29b-41d4-a716-446655440001",
                "start_time": "2025-06-02T07:00:00Z",
                "customer_name": "Ola Nordmann",
                "customer_email": "ola@example.com",
                "payment_method": "CASH"
            }
        }
    }


class BookingCancelRequest(BaseModel):
    customer_email: EmailStr
    reason: Optional[str] = Field(None, max_length=500)


class BookingStatusUpdate(BaseModel):
    status: BookingStatus
    reason: Optional[str] = Field(None, max_length=500)
