# slotwise/services/availability/types.py
"""Read-only value types exchanged between the resource store and the engine"""
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from uuid import UUID

from slotwise.services.availability.exceptions import InvalidConfigurationError
from slotwise.services.availability.interval import Interval


@dataclass(frozen=True)
class ProviderInfo:
    id: UUID
    timezone: Optional[str] = None
    is_active: bool = True


@dataclass(frozen=True)
class ServiceConfig:
    id: UUID
    provider_id: UUID
    duration: int
    buffer_time_before: int = 0
    buffer_time_after: int = 0
    requires_staff: bool = False
    any_staff_member: bool = True
    max_concurrent: int = 1
    is_active: bool = True

    def validate(self) -> None:
        """Raise InvalidConfigurationError instead of coercing bad values"""
        if self.duration is None or self.duration < 1:
            raise InvalidConfigurationError(f"Service {self.id} has invalid duration {self.duration}")
        if self.max_concurrent is None or self.max_concurrent < 1:
            raise InvalidConfigurationError(
                f"Service {self.id} has invalid max_concurrent {self.max_concurrent}"
            )
        if self.buffer_time_before < 0 or self.buffer_time_after < 0:
            raise InvalidConfigurationError(f"Service {self.id} has negative buffer time")

    def effective_window(self, offered: Interval) -> Interval:
        return offered.padded(self.buffer_time_before, self.buffer_time_after)

    def conflict_window(self, offered: Interval) -> Interval:
        """
        Window that existing bookings' stored (offered) times must overlap for their
        effective windows to overlap the candidate's effective window.
        """
        total_buffer = self.buffer_time_before + self.buffer_time_after
        return offered.padded(total_buffer, total_buffer)


@dataclass(frozen=True)
class BusinessHoursRule:
    day_of_week: int  # 0=Sunday, 6=Saturday
    is_open: bool
    open_time: str
    close_time: str


@dataclass(frozen=True)
class StaffRef:
    id: UUID
    provider_id: UUID
    is_active: bool = True


@dataclass(frozen=True)
class StaffBooking:
    """A staff member's booking with the buffers of the service it was made for"""
    id: UUID
    staff_id: UUID
    interval: Interval
    buffer_time_before: int = 0
    buffer_time_after: int = 0

    @property
    def effective_interval(self) -> Interval:
        return self.interval.padded(self.buffer_time_before, self.buffer_time_after)


@dataclass(frozen=True)
class ProviderBlock:
    """Provider-wide blocked time (holidays, closures); applies to every service"""
    provider_id: UUID
    interval: Interval
    reason: Optional[str] = None


@dataclass(frozen=True)
class StaffOverride:
    staff_id: UUID
    interval: Interval
    is_available: bool  # True = AVAILABLE, False = UNAVAILABLE


@dataclass(frozen=True)
class TimeSlot:
    """Computed slot, never persisted"""
    start: datetime
    end: datetime
    available: bool
    available_capacity: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start": _isoformat(self.start),
            "end": _isoformat(self.end),
            "available": self.available,
            "available_capacity": self.available_capacity,
        }


def _isoformat(value: datetime) -> str:
    return value.astimezone(timezone.utc).isoformat(timespec="seconds")
