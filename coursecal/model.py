"""
Central data model definitions used across the project.

This module defines the canonical structure of Course and CourseSession objects so that:
- the catalog loader, the session generator and the exporter share the same field names
- a course definition (recurrence rule) stays separate from its concrete dated sessions
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Mapping, Optional

# Source literal used by the catalog for weekend-intensive courses
WEEKEND_INTENSIVE = "土日"


def _text(value: Any) -> str:
    return "" if value is None else str(value).strip()


@dataclass(frozen=True)
class Course:
    """
    One recurring course as listed in the catalog.

    Exactly one of day_of_week / schedule describes how the course repeats.
    """

    code: str
    name: str
    credits: int
    instructor: str
    faculty: str
    day_of_week: Optional[str] = None
    schedule: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Course":
        try:
            credits = int(data.get("credits") or 0)
        except (TypeError, ValueError):
            credits = 0
        return cls(
            code=_text(data.get("code")),
            name=_text(data.get("name")),
            credits=credits,
            instructor=_text(data.get("instructor")),
            faculty=_text(data.get("faculty")),
            day_of_week=_text(data.get("day_of_week")) or None,
            schedule=_text(data.get("schedule")) or None,
        )

    @property
    def is_weekend_intensive(self) -> bool:
        return self.schedule == WEEKEND_INTENSIVE

    @property
    def recurrence(self) -> Optional[str]:
        """
        Key used for display filtering and same-weekday conflicts.
        """
        if self.day_of_week:
            return self.day_of_week.lower()
        return self.schedule or None


@dataclass(frozen=True)
class CourseSession:
    """
    Represents one concrete, dated occurrence of a course.
    """

    id: str
    course_code: str
    course_name: str
    professor: str
    location: str
    date: date
    start_time: str
    end_time: str
    day_of_week: int  # 0 = Sunday ... 6 = Saturday
    color: str
    type: str = "lecture"

