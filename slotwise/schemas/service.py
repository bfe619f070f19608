# slotwise/schemas/service.py
"""
Pydantic schemas for bookable services
"""
from pydantic import BaseModel, Field
from typing import Optional, List


class ServiceCreate(BaseModel):
    """Request model for creating a service"""
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    price: float = Field(0, ge=0)
    duration: int = Field(..., ge=1, description="Duration in minutes")
    buffer_time_before: int = Field(0, ge=0, description="Minutes blocked before each booking")
    buffer_time_after: int = Field(0, ge=0, description="Minutes blocked after each booking")
    requires_staff: bool = False
    any_staff_member: bool = True
    max_concurrent: int = Field(1, ge=1, description="Bookings allowed at the same time")


class ServiceUpdate(BaseModel):
    """Request model for updating a service. Only sent fields change."""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    duration: Optional[int] = Field(None, ge=1)
    buffer_time_before: Optional[int] = Field(None, ge=0)
    buffer_time_after: Optional[int] = Field(None, ge=0)
    requires_staff: Optional[bool] = None
    any_staff_member: Optional[bool] = None
    max_concurrent: Optional[int] = Field(None, ge=1)
    is_active: Optional[bool] = None


class ServiceResponse(BaseModel):
    id: str
    provider_id: str
    name: str
    description: Optional[str]
    price: Optional[float]
    duration: int
    formatted_duration: str
    buffer_time_before: int
    buffer_time_after: int
    requires_staff: bool
    any_staff_member: bool
    max_concurrent: int
    is_active: bool
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class ServiceListResponse(BaseModel):
    total: int
    services: List[ServiceResponse]
