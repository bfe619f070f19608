# slotwise/services/availability/timezones.py
"""
Calendar date + timezone -> UTC instant boundary.

Everything downstream of these helpers works on aware UTC datetimes only.
"""
from datetime import date, datetime, time, timezone
from typing import Optional, Union

import pytz

from slotwise.services.availability.exceptions import (
    InvalidConfigurationError,
    InvalidTimeRangeError,
    InvalidTimezoneError,
)


def resolve_timezone(name: Optional[str], fallback: str = "UTC"):
    """Return a pytz timezone for `name`, or for `fallback` when name is empty."""
    tz_name = name or fallback
    try:
        return pytz.timezone(tz_name)
    except pytz.UnknownTimeZoneError:
        raise InvalidTimezoneError(f"Unknown timezone: {tz_name}")


def parse_date(value: Union[str, date, datetime]) -> date:
    """Accept YYYY-MM-DD or a full ISO-8601 datetime string"""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError):
        pass

    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    except (AttributeError, ValueError):
        raise InvalidTimeRangeError(f"Invalid date: {value!r}")


def parse_hhmm(value: str) -> time:
    try:
        hours, minutes = value.split(":")
        return time(int(hours), int(minutes))
    except (AttributeError, ValueError):
        raise InvalidConfigurationError(f"Invalid HH:MM time: {value!r}")


def local_time_to_utc(day: date, hhmm: str, tz) -> datetime:
    """Wall-clock HH:MM on `day` in `tz` as an aware UTC datetime."""
    naive = datetime.combine(day, parse_hhmm(hhmm))
    # normalize() moves times inside a DST gap forward
    local = tz.normalize(tz.localize(naive, is_dst=False))
    return local.astimezone(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Stored datetimes without tzinfo are UTC"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
