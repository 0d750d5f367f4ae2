"""
Session generation (Course -> dated CourseSession list).

Two recurrence shapes are supported:
- evening courses: one weekday, 12 weekly sessions, excluded dates are skipped
- weekend-intensive courses ("土日"): 3 consecutive weekends, Saturday afternoon + Sunday morning

Rules:
- unknown or missing recurrence -> empty list, never an exception
- the evening walk is bounded (MAX_WEEKLY_CANDIDATES) and may return fewer than 12 sessions
- the weekend block never consults the exclusion calendar
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Iterable, Optional

from coursecal.model import Course, CourseSession
from coursecal.term import DEFAULT_TERM, WEEKENDS_PER_INTENSIVE_COURSE, TermConfig

logger = logging.getLogger(__name__)

SESSIONS_PER_EVENING_COURSE = 12

# Hard stop for the weekly walk. Kept as-is; the term calendar does not define
# how many exclusions a course must tolerate.
MAX_WEEKLY_CANDIDATES = 25

# 0 = Sunday, 1 = Monday, ...
DAY_NUMBERS = {
    "monday": 1,
    "tuesday": 2,
    "wednesday": 3,
    "thursday": 4,
    "friday": 5,
}

FACULTY_COLORS = {
    "総合": "#3B82F6",
    "文学部": "#10B981",
    "経済学部": "#8B5CF6",
    "法学部": "#F59E0B",
    "教職": "#EF4444",
}
DEFAULT_COLOR = "#6B7280"


def faculty_color(faculty: str) -> str:
    return FACULTY_COLORS.get(faculty, DEFAULT_COLOR)


def _day_number(day: date) -> int:
    # date.weekday() is Monday=0, sessions use Sunday=0
    return (day.weekday() + 1) % 7


def _first_on_or_after(start: date, day_number: int) -> date:
    offset = (day_number - _day_number(start)) % 7
    return start + timedelta(days=offset)


def generate_evening_sessions(
    code: str,
    name: str,
    instructor: str,
    day_of_week: str,
    color: str,
    term: TermConfig = DEFAULT_TERM,
) -> list[CourseSession]:
    """
    Expand a weekday evening course into its weekly sessions.

    Walks week by week from the first matching weekday of the term. Excluded
    dates are skipped without using up a session. The walk stops after 12
    accepted sessions, after MAX_WEEKLY_CANDIDATES week offsets, or after the
    term end, whichever comes first.
    """
    sessions: list[CourseSession] = []

    target = DAY_NUMBERS.get((day_of_week or "").strip().lower())
    if target is None:
        return sessions

    anchor = _first_on_or_after(term.term_start, target)
    start_time, end_time = term.evening_slot

    week = 0
    while len(sessions) < SESSIONS_PER_EVENING_COURSE:
        candidate = anchor + timedelta(weeks=week)
        if candidate > term.term_end:
            break

        if term.is_excluded(candidate):
            logger.debug("%s: skipping excluded date %s", code, candidate)
        else:
            sessions.append(
                CourseSession(
                    id=f"{code}-{len(sessions) + 1}",
                    course_code=code,
                    course_name=name,
                    professor=instructor,
                    location=term.location,
                    date=candidate,
                    start_time=start_time,
                    end_time=end_time,
                    day_of_week=target,
                    color=color,
                )
            )

        week += 1
        if week > MAX_WEEKLY_CANDIDATES:
            break

    if len(sessions) < SESSIONS_PER_EVENING_COURSE:
        logger.debug(
            "%s: only %d of %d evening sessions fit into the term",
            code,
            len(sessions),
            SESSIONS_PER_EVENING_COURSE,
        )
    return sessions


def generate_weekend_sessions(
    code: str,
    name: str,
    instructor: str,
    color: str,
    term: TermConfig = DEFAULT_TERM,
) -> list[CourseSession]:
    """
    Expand a weekend-intensive course: 3 weekends x (Saturday + Sunday) = 6 sessions.
    """
    sessions: list[CourseSession] = []

    for week in range(WEEKENDS_PER_INTENSIVE_COURSE):
        saturday = term.weekend_anchor + timedelta(weeks=week)
        sunday = saturday + timedelta(days=1)

        sessions.append(
            CourseSession(
                id=f"{code}-sat-{week + 1}",
                course_code=code,
                course_name=name,
                professor=instructor,
                location=term.location,
                date=saturday,
                start_time=term.saturday_slot[0],
                end_time=term.saturday_slot[1],
                day_of_week=6,
                color=color,
            )
        )
        sessions.append(
            CourseSession(
                id=f"{code}-sun-{week + 1}",
                course_code=code,
                course_name=name,
                professor=instructor,
                location=term.location,
                date=sunday,
                start_time=term.sunday_slot[0],
                end_time=term.sunday_slot[1],
                day_of_week=0,
                color=color,
            )
        )

    return sessions


def generate_course_sessions(
    course: Course,
    term: TermConfig = DEFAULT_TERM,
    color: Optional[str] = None,
) -> list[CourseSession]:
    """
    Pick the generator matching the course's recurrence shape.
    """
    color = color or faculty_color(course.faculty)

    if course.is_weekend_intensive:
        return generate_weekend_sessions(course.code, course.name, course.instructor, color, term)
    if course.day_of_week:
        return generate_evening_sessions(
            course.code, course.name, course.instructor, course.day_of_week, color, term
        )

    logger.debug("%s: no recurrence shape, nothing to generate", course.code)
    return []


def generate_sessions(courses: Iterable[Course], term: TermConfig = DEFAULT_TERM) -> list[CourseSession]:
    """
    Sessions of all given courses, grouped by course in input order.
    """
    out: list[CourseSession] = []
    for course in courses:
        out.extend(generate_course_sessions(course, term))
    return out
