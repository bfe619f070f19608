# slotwise/models/__init__.py
from .base import Base
from .user import User, UserRole
from .password_reset import PasswordReset
from .provider import Provider, BusinessHours, BlockedTime
from .service import Service, staff_service_assignments
from .staff import StaffMember, StaffAvailability, AvailabilityType
from .booking import Booking, BookingStatus, PaymentMethod, INACTIVE_BOOKING_STATUSES

__all__ = [
    "Base",
    "User",
    "UserRole",
    "PasswordReset",
    "Provider",
    "BusinessHours",
    "BlockedTime",
    "Service",
    "staff_service_assignments",
    "StaffMember",
    "StaffAvailability",
    "AvailabilityType",
    "Booking",
    "BookingStatus",
    "PaymentMethod",
    "INACTIVE_BOOKING_STATUSES",
]
