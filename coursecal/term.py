"""
Term configuration and the exclusion calendar.

A TermConfig bundles everything that is specific to one academic term:
- where evening courses start (first weekday on/after term_start)
- the closed date ranges on which no evening session may take place
- the first Saturday of the weekend-intensive block
- the fixed location and wall-clock time slots

DEFAULT_TERM reproduces the autumn 2025 schooling term.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta

WEEKENDS_PER_INTENSIVE_COURSE = 3


@dataclass(frozen=True)
class DateRange:
    """
    Inclusive range of calendar dates, e.g. a festival week.
    """

    start: date
    end: date
    label: str = ""

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise ValueError(f"Date range ends before it starts: {self.start} > {self.end}")

    def contains(self, day: date) -> bool:
        # full date comparison: 12-30 of another year is not inside a 2025/26 holiday
        return self.start <= day <= self.end


def _check_slot(name: str, slot: tuple[str, str]) -> None:
    start, end = slot
    try:
        t_start = datetime.strptime(start, "%H:%M").time()
        t_end = datetime.strptime(end, "%H:%M").time()
    except ValueError as exc:
        raise ValueError(f"Invalid {name} time slot: {slot!r}") from exc
    if t_start >= t_end:
        raise ValueError(f"{name} time slot must start before it ends: {slot!r}")


@dataclass(frozen=True)
class TermConfig:
    term_start: date
    term_end: date
    excluded: tuple[DateRange, ...]
    weekend_anchor: date
    location: str = "三田キャンパス"
    evening_slot: tuple[str, str] = ("18:20", "20:05")
    saturday_slot: tuple[str, str] = ("13:30", "17:15")
    sunday_slot: tuple[str, str] = ("09:00", "12:45")

    def __post_init__(self) -> None:
        if self.term_end < self.term_start:
            raise ValueError(f"Term ends before it starts: {self.term_start} > {self.term_end}")
        if self.weekend_anchor.weekday() != 5:
            raise ValueError(f"Weekend anchor must be a Saturday: {self.weekend_anchor}")
        if self.weekend_anchor < self.term_start or self.weekend_end > self.term_end:
            raise ValueError(
                f"Weekend block {self.weekend_anchor}..{self.weekend_end} lies outside the term "
                f"{self.term_start}..{self.term_end}"
            )
        _check_slot("evening", self.evening_slot)
        _check_slot("saturday", self.saturday_slot)
        _check_slot("sunday", self.sunday_slot)

    @property
    def weekend_end(self) -> date:
        """
        Sunday of the last weekend in the intensive block.
        """
        return self.weekend_anchor + timedelta(weeks=WEEKENDS_PER_INTENSIVE_COURSE - 1, days=1)

    def is_excluded(self, day: date) -> bool:
        """
        True if no evening session may be held on this date.
        """
        return any(r.contains(day) for r in self.excluded)


DEFAULT_TERM = TermConfig(
    term_start=date(2025, 10, 1),
    term_end=date(2026, 3, 31),
    excluded=(
        DateRange(date(2025, 11, 19), date(2025, 11, 24), "三田祭"),
        DateRange(date(2025, 12, 29), date(2026, 1, 5), "年末年始"),
    ),
    weekend_anchor=date(2025, 10, 11),
)


def is_excluded(day: date, term: TermConfig = DEFAULT_TERM) -> bool:
    return term.is_excluded(day)
