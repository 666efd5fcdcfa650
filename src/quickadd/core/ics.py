"""iCalendar serialization - pure string building, no I/O."""

import re
from datetime import datetime, timezone

from .models import Capture, EventCapture, TaskCapture

PRODID = "-//QuickAdd//EN"
TASK_PRIORITY_CODES = {"high": 1, "medium": 5, "low": 9}


def format_utc(dt: datetime) -> str:
    """Format as an iCalendar UTC timestamp (YYYYMMDDTHHMMSSZ)."""
    return dt.astimezone(timezone.utc).strftime("%Y%m%dT%H%M%SZ")


def escape_text(value: str | None) -> str:
    """Escape backslash, newline, comma and semicolon for TEXT values."""
    if not value:
        return ""
    return (
        value.replace("\\", "\\\\")
        .replace("\n", "\\n")
        .replace(",", "\\,")
        .replace(";", "\\;")
    )


def _alarm_lines(minutes: int | None) -> list[str]:
    if minutes is None:
        return []
    return [
        "BEGIN:VALARM",
        "ACTION:DISPLAY",
        f"TRIGGER:-PT{minutes}M",
        "DESCRIPTION:Reminder",
        "END:VALARM",
    ]


def _event_lines(capture: EventCapture, stamp: datetime) -> list[str]:
    lines = [
        "BEGIN:VEVENT",
        f"UID:{capture.id}",
        f"DTSTAMP:{format_utc(stamp)}",
        f"DTSTART:{format_utc(capture.start)}",
        f"DTEND:{format_utc(capture.end)}",
        f"SUMMARY:{escape_text(capture.title)}",
    ]
    if capture.location:
        lines.append(f"LOCATION:{escape_text(capture.location)}")
    if capture.notes:
        lines.append(f"DESCRIPTION:{escape_text(capture.notes)}")
    for attendee in capture.attendees:
        cn = f";CN={escape_text(attendee.name)}" if attendee.name else ""
        lines.append(f"ATTENDEE;RSVP=FALSE{cn}:mailto:{attendee.email}")
    if capture.recurrence:
        lines.append(f"RRULE:{capture.recurrence.removeprefix('RRULE:')}")
    lines.extend(_alarm_lines(capture.reminder_minutes))
    lines.append("END:VEVENT")
    return lines


def _task_lines(capture: TaskCapture, stamp: datetime) -> list[str]:
    lines = [
        "BEGIN:VTODO",
        f"UID:{capture.id}",
        f"DTSTAMP:{format_utc(stamp)}",
        f"SUMMARY:{escape_text(capture.title)}",
    ]
    if capture.due:
        lines.append(f"DUE:{format_utc(capture.due)}")
    if capture.notes:
        lines.append(f"DESCRIPTION:{escape_text(capture.notes)}")
    if capture.priority:
        lines.append(f"PRIORITY:{TASK_PRIORITY_CODES[capture.priority]}")
    if capture.recurrence:
        lines.append(f"RRULE:{capture.recurrence.removeprefix('RRULE:')}")
    lines.extend(_alarm_lines(capture.reminder_minutes))
    lines.append("END:VTODO")
    return lines


def capture_to_ics(capture: Capture, stamp: datetime | None = None) -> str:
    """
    Render a capture as a VCALENDAR document.

    Pure function - stamp defaults to the current UTC time.
    """
    stamp = stamp or datetime.now(timezone.utc)
    lines = ["BEGIN:VCALENDAR", "VERSION:2.0", f"PRODID:{PRODID}"]
    if isinstance(capture, EventCapture):
        lines.extend(_event_lines(capture, stamp))
    elif isinstance(capture, TaskCapture):
        lines.extend(_task_lines(capture, stamp))
    else:
        raise TypeError(f"Cannot serialize capture of kind {capture.kind!r}")
    lines.append("END:VCALENDAR")
    return "\r\n".join(lines)


def ics_filename(title: str) -> str:
    """Slugified file name for a capture title."""
    cleaned = re.sub(r"[^a-z0-9]+", "-", title.lower()).strip("-")[:60]
    return f"{cleaned or 'quickadd-item'}.ics"
