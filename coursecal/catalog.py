"""
Course catalog loading.

The catalog is a JSON file with two sections:

    {"evening_courses": {"courses": [...]}, "weekend_courses": {"courses": [...]}}

A plain list of course objects is accepted as well.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Iterable

from coursecal.model import Course

logger = logging.getLogger(__name__)

CATALOG_ENV = "COURSECAL_CATALOG"
SECTIONS = ("evening_courses", "weekend_courses")


def _default_catalog_path() -> Path:
    """
    Return the catalog path: $COURSECAL_CATALOG if set, else the bundled sample.
    """
    env = os.environ.get(CATALOG_ENV, "").strip()
    if env:
        return Path(env)
    return Path(__file__).resolve().parent / "data" / "courses.json"


def _raw_courses(data: Any) -> list[Any]:
    if isinstance(data, list):
        return data
    if not isinstance(data, dict):
        return []
    out: list[Any] = []
    for section in SECTIONS:
        block = data.get(section) or {}
        courses = block.get("courses", []) if isinstance(block, dict) else []
        if isinstance(courses, list):
            out.extend(courses)
    return out


def load_courses(path: str | Path | None = None) -> list[Course]:
    """
    Load all courses (evening first, then weekend) from the catalog.

    Missing or broken files give an empty list instead of an exception.
    """
    catalog_path = Path(path) if path is not None else _default_catalog_path()

    try:
        data = json.loads(catalog_path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        logger.warning("catalog not found: %s", catalog_path)
        return []
    except (OSError, json.JSONDecodeError, UnicodeDecodeError) as exc:
        logger.warning("could not read catalog %s: %s", catalog_path, exc)
        return []

    courses: list[Course] = []
    for item in _raw_courses(data):
        if not isinstance(item, dict):
            continue
        course = Course.from_dict(item)
        if course.code:
            courses.append(course)
    return courses


def course_by_code(courses: Iterable[Course]) -> dict[str, Course]:
    return {c.code: c for c in courses}
