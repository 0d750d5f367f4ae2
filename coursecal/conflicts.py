"""
Conflict detection.

Two levels:
- course level: two selected courses that repeat on the same weekday (or are both
  weekend-intensive) cannot be taken together
- session level: generated sessions overlapping on the same date
    start < other_end AND end > other_start

Conflicts are only reported; nothing here resolves them.
"""

from __future__ import annotations

from typing import Iterable

from coursecal.model import Course, CourseSession


def _time_to_minutes(hhmm: str) -> int:
    """
    Convert 'HH:MM' to minutes since midnight.
    Raises ValueError for invalid formats.
    """
    parts = hhmm.strip().split(":")
    if len(parts) != 2:
        raise ValueError(f"Invalid time format: {hhmm!r}")
    h = int(parts[0])
    m = int(parts[1])
    if not (0 <= h <= 23 and 0 <= m <= 59):
        raise ValueError(f"Invalid time value: {hhmm!r}")
    return h * 60 + m


def _overlaps(a_start: int, a_end: int, b_start: int, b_end: int) -> bool:
    return a_start < b_end and a_end > b_start


def courses_conflict(a: Course, b: Course) -> bool:
    """
    True if both courses occupy the same recurrence slot (weekday or weekend block).
    """
    if a.code == b.code:
        return False
    key_a = a.recurrence
    key_b = b.recurrence
    return key_a is not None and key_a == key_b


def find_course_conflicts(courses: Iterable[Course]) -> list[tuple[Course, Course]]:
    """
    Conflicting course pairs (A,B), each pair once (i<j).
    """
    items = list(courses)
    conflicts: list[tuple[Course, Course]] = []
    for i in range(len(items)):
        for j in range(i + 1, len(items)):
            if courses_conflict(items[i], items[j]):
                conflicts.append((items[i], items[j]))
    return conflicts


def find_conflicts(sessions: Iterable[CourseSession]) -> list[tuple[CourseSession, CourseSession]]:
    """
    Find overlapping session pairs (A,B), each pair appears once (i<j).
    Overlap only if same date AND time intervals overlap.
    """
    conflicts: list[tuple[CourseSession, CourseSession]] = []

    parsed: list[tuple[int, int, CourseSession]] = []
    for s in sessions:
        try:
            start = _time_to_minutes(s.start_time)
            end = _time_to_minutes(s.end_time)
        except ValueError:
            continue
        # end <= start is not a valid interval
        if end <= start:
            continue
        parsed.append((start, end, s))

    for i in range(len(parsed)):
        s1, e1, ev1 = parsed[i]
        for j in range(i + 1, len(parsed)):
            s2, e2, ev2 = parsed[j]
            if ev1.date != ev2.date:
                continue
            if _overlaps(s1, e1, s2, e2):
                conflicts.append((ev1, ev2))

    return conflicts
