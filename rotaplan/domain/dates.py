"""Date helpers shared by the planning services."""
from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import List, Optional, Tuple, Union

DateLike = Union[date, str]

ISO_FORMAT = "%Y-%m-%d"


def parse_iso_date(value: object) -> Optional[date]:
    """Return a ``date`` for ``YYYY-MM-DD`` input, ``None`` when malformed.

    ``datetime`` objects and ISO datetime strings are reduced to their date
    part.
    """

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    text = value.strip()
    if len(text) > 10 and text[10] in "T ":
        text = text[:10]
    if len(text) != 10:
        return None
    try:
        return datetime.strptime(text, ISO_FORMAT).date()
    except ValueError:
        return None


def parse_day_key(value: object) -> Optional[date]:
    """Strict form of :func:`parse_iso_date` for grid cell keys.

    Strings must be exactly ``YYYY-MM-DD``; datetime strings, padding and
    other lenient forms are rejected.
    """

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or len(value) != 10:
        return None
    try:
        parsed = datetime.strptime(value, ISO_FORMAT).date()
    except ValueError:
        return None
    return parsed if iso(parsed) == value else None


def iso(day: date) -> str:
    return day.strftime(ISO_FORMAT)


def week_start(day: date) -> date:
    """Monday of the week containing *day*."""

    return day - timedelta(days=day.weekday())


def week_bounds(day: date) -> Tuple[date, date]:
    start = week_start(day)
    return start, start + timedelta(days=6)


def week_days(start: date, count: int = 7) -> List[date]:
    return [start + timedelta(days=offset) for offset in range(count)]


def iter_days(first: date, last: date) -> List[date]:
    if last < first:
        return []
    return week_days(first, (last - first).days + 1)


def is_weekend(day: date) -> bool:
    return day.weekday() >= 5


def calendar_week(day: date) -> Tuple[int, int]:
    """ISO (year, week number) for *day*."""

    year, week, _ = day.isocalendar()
    return year, week
