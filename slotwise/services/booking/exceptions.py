# slotwise/services/booking/exceptions.py
"""Errors raised by the booking write path"""


class BookingError(Exception):
    """Base class for booking errors"""


class SlotUnavailableError(BookingError):
    """The requested window was taken or is not bookable"""

    def __init__(self, reason: str = None):
        self.reason = reason
        super().__init__("Time slot is no longer available")


class BookingNotFoundError(BookingError):
    pass


class BookingPermissionError(BookingError):
    pass


class BookingStateError(BookingError):
    """Status transition not allowed from the booking's current status"""
