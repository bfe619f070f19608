# slotwise/services/availability/exceptions.py
"""Errors raised by the availability engine"""


class AvailabilityError(Exception):
    """Base class for availability computation errors"""


class ResourceNotFoundError(AvailabilityError):
    """Provider or service does not exist (or is not bookable)"""

    def __init__(self, resource: str, resource_id):
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(f"{resource} {resource_id} not found")


class InvalidConfigurationError(AvailabilityError):
    """Stored configuration violates an invariant (duration <= 0, max_concurrent < 1, ...)"""


class InvalidTimeRangeError(AvailabilityError):
    """Window with end <= start, naive datetime, or unparseable date"""


class InvalidTimezoneError(InvalidTimeRangeError):
    """Unknown IANA timezone name"""
