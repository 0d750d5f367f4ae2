"""
Persistent storage for the user's course selection.

This module manages the file:

    data/selected_courses.json

The catalog holds every course on offer; this file only remembers which
course codes the user picked, in the order they were picked. Sessions are
generated (and exported) in that order. Generated sessions themselves are
never stored.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterable

logger = logging.getLogger(__name__)


def _default_selected_path() -> Path:
    """
    Return the default path of selected_courses.json inside the package.

    Using a function instead of a constant makes testing easier,
    because tests can override the path.
    """
    base_dir = Path(__file__).resolve().parent
    return base_dir / "data" / "selected_courses.json"


def is_valid_code(code: str) -> bool:
    """
    A course code is one printable token: no whitespace, no control characters.
    """
    return bool(code) and code.isprintable() and not any(ch.isspace() for ch in code)


def _ordered_codes(codes: Iterable[object]) -> list[str]:
    # first occurrence wins, invalid entries are dropped
    out: list[str] = []
    for x in codes:
        if not isinstance(x, str):
            continue
        code = x.strip()
        if not is_valid_code(code):
            logger.warning("ignoring invalid course code %r", x)
            continue
        if code not in out:
            out.append(code)
    return out


def load_selected_codes(path: str | Path | None = None) -> list[str]:
    """
    Load selected course codes in selection order.

    Returns an empty list if the file does not exist or is invalid.
    """
    selected_path = Path(path) if path is not None else _default_selected_path()

    # First run: nothing selected yet
    if not selected_path.exists():
        return []

    try:
        data = json.loads(selected_path.read_text(encoding="utf-8"))
        codes = data.get("selected_course_codes", [])
    except (OSError, json.JSONDecodeError, UnicodeDecodeError, AttributeError):
        return []
    if not isinstance(codes, list):
        return []
    return _ordered_codes(codes)


def save_selected_codes(codes: Iterable[str], path: str | Path | None = None) -> None:
    """
    Save selected course codes, keeping their order and dropping duplicates.

    Creates parent directories if needed.
    """
    selected_path = Path(path) if path is not None else _default_selected_path()
    selected_path.parent.mkdir(parents=True, exist_ok=True)

    payload = {"selected_course_codes": _ordered_codes(codes)}
    selected_path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
