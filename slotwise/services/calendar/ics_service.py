# slotwise/services/calendar/ics_service.py
"""ICS (RFC 5545) export for bookings"""
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from slotwise.config.settings import get_settings


@dataclass
class BookingEvent:
    id: str
    title: str
    start_time: datetime
    end_time: datetime
    organizer_name: str
    organizer_email: str
    attendee_name: str
    attendee_email: str
    description: Optional[str] = None
    location: Optional[str] = None


def format_ics_date(value: datetime) -> str:
    """YYYYMMDDTHHMMSSZ in UTC"""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime("%Y%m%dT%H%M%SZ")


def escape_ics_text(text: str) -> str:
    return (
        text.replace("\\", "\\\\")
        .replace(";", "\\;")
        .replace(",", "\\,")
        .replace("\n", "\\n")
    )


def generate_ics(event: BookingEvent, now: Optional[datetime] = None) -> str:
    settings = get_settings()
    dtstamp = format_ics_date(now or datetime.now(timezone.utc))

    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        f"PRODID:{settings.ICS_PRODID}",
        "CALSCALE:GREGORIAN",
        "METHOD:REQUEST",
        "BEGIN:VEVENT",
        f"UID:{event.id}@{settings.ICS_UID_DOMAIN}",
        f"DTSTAMP:{dtstamp}",
        f"DTSTART:{format_ics_date(event.start_time)}",
        f"DTEND:{format_ics_date(event.end_time)}",
        f"SUMMARY:{escape_ics_text(event.title)}",
    ]

    if event.description:
        lines.append(f"DESCRIPTION:{escape_ics_text(event.description)}")
    if event.location:
        lines.append(f"LOCATION:{escape_ics_text(event.location)}")

    lines.extend([
        f"ORGANIZER;CN={escape_ics_text(event.organizer_name)}:mailto:{event.organizer_email}",
        f"ATTENDEE;CN={escape_ics_text(event.attendee_name)};RSVP=TRUE:mailto:{event.attendee_email}",
        "STATUS:CONFIRMED",
        "SEQUENCE:0",
        "BEGIN:VALARM",
        "TRIGGER:-PT24H",
        "ACTION:DISPLAY",
        "DESCRIPTION:Reminder: your appointment is tomorrow",
        "END:VALARM",
        "BEGIN:VALARM",
        "TRIGGER:-PT1H",
        "ACTION:DISPLAY",
        "DESCRIPTION:Reminder: your appointment starts in 1 hour",
        "END:VALARM",
        "END:VEVENT",
        "END:VCALENDAR",
    ])

    return "\r\n".join(lines)
