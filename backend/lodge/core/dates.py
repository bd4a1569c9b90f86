"""Calendar-date helpers for stays.

Every stay date is a plain ``datetime.date``. Strings are parsed as
``YYYY-MM-DD`` without passing through a timestamp, and "today" is the
calendar date in the configured local timezone. Ranges are half-open:
the check-in day is occupied, the check-out day is not.
"""

from __future__ import annotations

import datetime
import re
from collections.abc import Collection, Iterator
from dataclasses import dataclass
from zoneinfo import ZoneInfo

from lodge.core.config import get_settings
from lodge.core.errors import InvalidStayParameters
from lodge.models.pricing import DayType

_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

DateLike = datetime.date | str


def parse_local_date(value: DateLike) -> datetime.date:
    """Return ``value`` as a calendar date."""
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    if not value or not _DATE_PATTERN.match(value):
        raise InvalidStayParameters(
            f"Invalid date {value!r}; expected YYYY-MM-DD"
        )
    try:
        return datetime.date.fromisoformat(value)
    except ValueError as exc:
        raise InvalidStayParameters(f"Invalid date {value!r}") from exc


def format_local_date(day: datetime.date) -> str:
    return day.isoformat()


def is_valid_date_string(value: object) -> bool:
    if not isinstance(value, str):
        return False
    try:
        parse_local_date(value)
    except InvalidStayParameters:
        return False
    return True


def calculate_nights(start: DateLike, end: DateLike) -> int:
    """Return the number of nights between check-in and check-out."""
    start_day = parse_local_date(start)
    end_day = parse_local_date(end)
    if start_day >= end_day:
        raise InvalidStayParameters("Check-out date must be after check-in date")
    return max(1, (end_day - start_day).days)


def generate_date_range(start: DateLike, end: DateLike) -> list[datetime.date]:
    """Return each night of ``[start, end)``."""
    start_day = parse_local_date(start)
    end_day = parse_local_date(end)
    return list(_iter_days(start_day, end_day))


def _iter_days(
    start: datetime.date, end: datetime.date
) -> Iterator[datetime.date]:
    current = start
    while current < end:
        yield current
        current += datetime.timedelta(days=1)


def is_date_range_overlap(
    start1: DateLike, end1: DateLike, start2: DateLike, end2: DateLike
) -> bool:
    s1, e1 = parse_local_date(start1), parse_local_date(end1)
    s2, e2 = parse_local_date(start2), parse_local_date(end2)
    return s1 < e2 and s2 < e1


def overlap_window(
    start1: DateLike, end1: DateLike, start2: DateLike, end2: DateLike
) -> tuple[datetime.date, datetime.date, int] | None:
    """Return ``(start, end, nights)`` shared by two ranges, if any."""
    if not is_date_range_overlap(start1, end1, start2, end2):
        return None
    start = max(parse_local_date(start1), parse_local_date(start2))
    end = min(parse_local_date(end1), parse_local_date(end2))
    return start, end, (end - start).days


def is_date_in_range(day: DateLike, start: DateLike, end: DateLike) -> bool:
    return parse_local_date(start) <= parse_local_date(day) < parse_local_date(end)


def today(tz: str | None = None) -> datetime.date:
    """Return the current calendar date in the local timezone."""
    zone = ZoneInfo(tz or get_settings().local_timezone)
    return datetime.datetime.now(zone).date()


def day_type_for(day: datetime.date, weekend_days: Collection[int]) -> DayType:
    return DayType.WEEKEND if day.weekday() in weekend_days else DayType.WEEKDAY


@dataclass(frozen=True, slots=True)
class DateRange:
    """A stay window of one or more nights."""

    start_date: datetime.date
    end_date: datetime.date

    def __post_init__(self) -> None:
        if self.start_date >= self.end_date:
            raise InvalidStayParameters(
                "Check-out date must be after check-in date"
            )

    @classmethod
    def parse(cls, start: DateLike, end: DateLike) -> "DateRange":
        return cls(parse_local_date(start), parse_local_date(end))

    @property
    def nights(self) -> int:
        return (self.end_date - self.start_date).days

    def dates(self) -> list[datetime.date]:
        return list(_iter_days(self.start_date, self.end_date))

    def overlaps(self, other: "DateRange") -> bool:
        return self.start_date < other.end_date and other.start_date < self.end_date

    def shifted(self, days: int) -> "DateRange":
        delta = datetime.timedelta(days=days)
        return DateRange(self.start_date + delta, self.end_date + delta)


__all__ = [
    "DateRange",
    "calculate_nights",
    "day_type_for",
    "format_local_date",
    "generate_date_range",
    "is_date_in_range",
    "is_date_range_overlap",
    "is_valid_date_string",
    "overlap_window",
    "parse_local_date",
    "today",
]
