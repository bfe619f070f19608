# slotwise/schemas/__init__.py
from .business_hours import (
    BusinessHoursItem,
    BusinessHoursUpdate,
    BusinessHoursResponse,
    BlockedTimeCreate
)

from .service import (
    ServiceCreate,
    ServiceUpdate,
    ServiceResponse,
    ServiceListResponse
)

from .staff import (
    StaffCreate,
    StaffUpdate,
    StaffOverrideCreate
)

from .booking import (
    TimeSlotResponse,
    AvailabilityResponse,
    BookingCreateRequest,
    BookingCancelRequest,
    BookingStatusUpdate
)
