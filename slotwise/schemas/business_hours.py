# slotwise/schemas/business_hours.py
from pydantic import BaseModel, Field, field_validator, model_validator
from typing import List, Optional
from datetime import datetime


def _validate_hhmm(v: str) -> str:
    try:
        datetime.strptime(v, "%H:%M")
    except ValueError:
        raise ValueError("Time must be in HH:MM format")
    return v


class BusinessHoursItem(BaseModel):
    """Opening hours for one weekday"""
    day_of_week: int = Field(..., description="Day of week (0=Sunday, 6=Saturday)", ge=0, le=6)
    is_open: bool = Field(True, description="Whether the business is open this day")
    open_time: str = Field("09:00", description="Opening time (HH:MM)")
    close_time: str = Field("17:00", description="Closing time (HH:MM)")

    @field_validator("open_time", "close_time")
    @classmethod
    def validate_time(cls, v: str) -> str:
        return _validate_hhmm(v)

    @model_validator(mode="after")
    def open_before_close(self):
        opens = datetime.strptime(self.open_time, "%H:%M")
        closes = datetime.strptime(self.close_time, "%H:%M")
        if self.is_open and opens >= closes:
            raise ValueError("Opening time must be before closing time")
        return self


class BusinessHoursUpdate(BaseModel):
    """Full replacement of a provider's weekly hours"""
    business_hours: List[BusinessHoursItem] = Field(..., max_length=7)

    @field_validator("business_hours")
    @classmethod
    def unique_days(cls, v: List[BusinessHoursItem]) -> List[BusinessHoursItem]:
        days = [item.day_of_week for item in v]
        if len(days) != len(set(days)):
            raise ValueError("Each day of week may appear only once")
        return v


class BusinessHoursResponse(BaseModel):
    business_hours: List[BusinessHoursItem]
    is_default: bool = False


class BlockedTimeCreate(BaseModel):
    """Provider-wide closure, e.g. a public holiday"""
    start_time: datetime = Field(..., description="Start (ISO-8601 with offset)")
    end_time: datetime = Field(..., description="End (ISO-8601 with offset)")
    reason: Optional[str] = Field(None, max_length=500)

    @field_validator("start_time", "end_time")
    @classmethod
    def require_offset(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            raise ValueError("Datetime must include a timezone offset")
        return v

    @model_validator(mode="after")
    def end_after_start(self):
        if self.end_time <= self.start_time:
            raise ValueError("End time must be after start time")
        return self
