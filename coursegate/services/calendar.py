"""
ICS calendar export for course sessions.

Builds a plain ``text/calendar`` document by hand: one VEVENT per session with
a usable start time. Whether the viewer may download it is decided by the
caller.
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Iterable, Optional

from coursegate.utils.settings import settings
from coursegate.utils.timeutils import parse_timestamp, utcnow

logger = logging.getLogger(__name__)

DEFAULT_SESSION_LENGTH = timedelta(hours=1)
CRLF = "\r\n"


def escape_text(value: Optional[str]) -> str:
    """Escape a TEXT value (RFC 5545 section 3.3.11)."""
    if not value:
        return ""
    return (
        value.replace("\\", "\\\\")
        .replace(";", "\\;")
        .replace(",", "\\,")
        .replace("\r\n", "\\n")
        .replace("\r", "\\n")
        .replace("\n", "\\n")
    )


def format_timestamp(value: datetime) -> str:
    return value.strftime("%Y%m%dT%H%M%SZ")


def _event_lines(course: Any, session: Any, stamp: str) -> Optional[list]:
    starts_at = parse_timestamp(getattr(session, "starts_at", None))
    if starts_at is None:
        return None
    ends_at = parse_timestamp(getattr(session, "ends_at", None))
    if ends_at is None or ends_at <= starts_at:
        ends_at = starts_at + DEFAULT_SESSION_LENGTH
    mode = getattr(session, "mode", None)
    summary = f"{course.title} ({mode})" if mode else course.title
    description = getattr(session, "note", None) or course.summary
    location = getattr(session, "location", None) or mode
    return [
        "BEGIN:VEVENT",
        f"UID:course-{course.id}-session-{session.id}@coursegate",
        f"DTSTAMP:{stamp}",
        f"DTSTART:{format_timestamp(starts_at)}",
        f"DTEND:{format_timestamp(ends_at)}",
        f"SUMMARY:{escape_text(summary)}",
        f"DESCRIPTION:{escape_text(description)}",
        f"LOCATION:{escape_text(location)}",
        "END:VEVENT",
    ]


def build_calendar(
    course: Any, sessions: Iterable[Any], now: Optional[datetime] = None
) -> Optional[str]:
    """Render the course schedule, or ``None`` when nothing is exportable."""
    stamp = format_timestamp(now or utcnow())
    events = []
    for session in sessions:
        lines = _event_lines(course, session, stamp)
        if lines is None:
            logger.debug("Skipping session %s without a start time", session.id)
            continue
        events.extend(lines)
    if not events:
        return None
    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        f"PRODID:{settings.calendar_prodid}",
        "CALSCALE:GREGORIAN",
        "METHOD:PUBLISH",
        f"X-WR-CALNAME:{escape_text(course.title)}",
        *events,
        "END:VCALENDAR",
    ]
    return CRLF.join(lines) + CRLF
