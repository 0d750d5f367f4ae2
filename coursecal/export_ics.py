"""
iCalendar (.ics) export.

We convert generated course sessions into a calendar file that can be imported into:
- Google Calendar
- Outlook
- Apple Calendar

All times are wall-clock times in Asia/Tokyo, written with a TZID parameter.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Iterable, Optional, Sequence
from urllib.parse import quote

from coursecal.model import CourseSession

logger = logging.getLogger(__name__)

ICS_MIME_TYPE = "text/calendar"
FILENAME_PREFIX = "keio-courses-"
UID_DOMAIN = "keio-course-planner.local"
TZID = "Asia/Tokyo"

# Rough figure shown before export; real credit values are not looked up.
CREDITS_PER_COURSE_ESTIMATE = 2

# first digit of the course code -> department label
CATEGORIES = {
    "1": "総合教育科目",
    "2": "外国語科目",
    "5": "文学部",
    "6": "経済学部",
    "7": "法学部",
}
DEFAULT_CATEGORY = "専門科目"

_HEADER = [
    "BEGIN:VCALENDAR",
    "VERSION:2.0",
    "PRODID:-//Keio Course Planner//Keio Distance Learning//JA",
    "CALSCALE:GREGORIAN",
    "METHOD:PUBLISH",
    "X-WR-CALNAME:慶應通信 コース予定",
    "X-WR-CALDESC:慶應義塾大学通信教育課程の選択科目スケジュール",
    f"X-WR-TIMEZONE:{TZID}",
    "BEGIN:VTIMEZONE",
    f"TZID:{TZID}",
    "BEGIN:STANDARD",
    "DTSTART:19700101T000000",
    "TZOFFSETFROM:+0900",
    "TZOFFSETTO:+0900",
    "TZNAME:JST",
    "END:STANDARD",
    "END:VTIMEZONE",
]
_FOOTER = "END:VCALENDAR"

_MAX_LINE_OCTETS = 75


def _ics_escape(text: str) -> str:
    """
    Escape a TEXT value (RFC 5545 3.3.11).
    """
    return (
        text.replace("\\", "\\\\")
        .replace("\r\n", "\\n")
        .replace("\r", "\\n")
        .replace("\n", "\\n")
        .replace(";", "\\;")
        .replace(",", "\\,")
    )


def _fold(line: str) -> str:
    """
    Fold a content line at 75 octets without cutting a UTF-8 character in half.
    """
    if len(line.encode("utf-8")) <= _MAX_LINE_OCTETS:
        return line

    parts: list[str] = []
    current = ""
    size = 0
    for ch in line:
        n = len(ch.encode("utf-8"))
        if size + n > _MAX_LINE_OCTETS:
            parts.append(current)
            # continuation lines start with a single space, which counts
            current = " "
            size = 1
        current += ch
        size += n
    parts.append(current)
    return "\r\n".join(parts)


def _dt_local(day: date, time_hh_mm: str) -> str:
    """
    Combine date + 'HH:MM' into ICS local datetime string 'YYYYMMDDTHHMMSS'.
    """
    t = datetime.strptime(time_hh_mm, "%H:%M").time()
    return datetime.combine(day, t).strftime("%Y%m%dT%H%M%S")


def _dtstamp(now: Optional[datetime]) -> str:
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(timezone.utc).strftime("%Y%m%dT%H%M%SZ")


def category_for_code(course_code: str) -> str:
    return CATEGORIES.get(course_code[:1], DEFAULT_CATEGORY)


def _event_lines(session: CourseSession, dtstamp: str) -> list[str]:
    description = "\\n".join(
        [
            f"コード: {_ics_escape(session.course_code)}",
            f"講師: {_ics_escape(session.professor)}",
            f"場所: {_ics_escape(session.location)}",
        ]
    )
    return [
        "BEGIN:VEVENT",
        f"UID:{_ics_escape(session.id)}@{UID_DOMAIN}",
        f"DTSTAMP:{dtstamp}",
        f"DTSTART;TZID={TZID}:{_dt_local(session.date, session.start_time)}",
        f"DTEND;TZID={TZID}:{_dt_local(session.date, session.end_time)}",
        f"SUMMARY:{_ics_escape(session.course_name)}",
        f"DESCRIPTION:{description}",
        f"LOCATION:{_ics_escape(session.location)}",
        f"CATEGORIES:{_ics_escape(category_for_code(session.course_code))}",
        "STATUS:CONFIRMED",
        "TRANSP:OPAQUE",
        "END:VEVENT",
    ]


def render(sessions: Iterable[CourseSession], now: Optional[datetime] = None) -> str:
    """
    Render sessions as an iCalendar document (CRLF line endings).

    Events keep the input order. An empty input still gives a valid calendar.
    """
    dtstamp = _dtstamp(now)

    lines: list[str] = list(_HEADER)
    for session in sessions:
        lines.extend(_event_lines(session, dtstamp))
    lines.append(_FOOTER)

    # ICS standard uses CRLF
    return "\r\n".join(_fold(line) for line in lines) + "\r\n"


@dataclass(frozen=True)
class ExportSummary:
    total_sessions: int
    unique_courses: int
    total_credits_estimate: int
    date_range: Optional[tuple[date, date]]

    def describe(self) -> str:
        """
        Text shown to the user before the file is written.
        """
        lines = [
            f"Sessions: {self.total_sessions}",
            f"Courses: {self.unique_courses}",
            f"Estimated credits: {self.total_credits_estimate}",
        ]
        if self.date_range is not None:
            first, last = self.date_range
            lines.append(f"Period: {first.isoformat()} to {last.isoformat()}")
        return "\n".join(lines)


def summarize(sessions: Sequence[CourseSession]) -> ExportSummary:
    """
    Aggregate counts over the sessions about to be exported.

    total_credits_estimate is unique courses x CREDITS_PER_COURSE_ESTIMATE,
    not the sum of real course credits.
    """
    unique = len({s.course_code for s in sessions})
    date_range = None
    if sessions:
        dates = [s.date for s in sessions]
        date_range = (min(dates), max(dates))
    return ExportSummary(
        total_sessions=len(sessions),
        unique_courses=unique,
        total_credits_estimate=unique * CREDITS_PER_COURSE_ESTIMATE,
        date_range=date_range,
    )


def default_filename(today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"{FILENAME_PREFIX}{today.isoformat()}.ics"


def ics_data_url(sessions: Iterable[CourseSession]) -> str:
    """
    data: URL carrying the whole calendar, for sharing/subscribing.
    """
    # unreserved characters plus !'()* stay literal
    encoded = quote(render(sessions), safe="!'()*")
    return f"data:{ICS_MIME_TYPE};charset=utf-8,{encoded}"


def export_sessions_to_ics(sessions: Sequence[CourseSession], out_path: str | Path) -> int:
    """
    Write sessions to an .ics file. Returns number of exported events.
    """
    out = Path(out_path)
    out.parent.mkdir(parents=True, exist_ok=True)

    # bytes, so that the CRLF terminators survive on every platform
    out.write_bytes(render(sessions).encode("utf-8"))
    logger.debug("wrote %d events to %s", len(sessions), out)
    return len(sessions)
