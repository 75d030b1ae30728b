"""Rotation utilities for recurring shift patterns."""
from __future__ import annotations

from datetime import date, timedelta
from enum import Enum
from typing import Iterator, List, Optional, Sequence, Tuple

from ..domain.dates import is_weekend
from ..domain.rotation import PatternKind, RotationEntry, RotationPattern
from ..domain.shift import ShiftType

THREE_SHIFT_CYCLE: Tuple[ShiftType, ...] = (ShiftType.EARLY, ShiftType.LATE, ShiftType.NIGHT)
TWO_SHIFT_CYCLE: Tuple[ShiftType, ...] = (ShiftType.EARLY, ShiftType.LATE)


class RotationWindowError(ValueError):
    """Raised when a generation window is empty or exceeds the yearly cap."""


class WeekSource(str, Enum):
    MANUAL = "manual"
    ROTATION = "rotation"
    FALLBACK = "fallback"
    EMPTY = "empty"


def cycle_days(start: date, count: int) -> Iterator[date]:
    day = start
    for _ in range(count):
        yield day
        day += timedelta(days=1)


def rotate_pattern(pattern: Sequence[ShiftType], offset: int) -> Sequence[ShiftType]:
    if not pattern:
        return pattern
    offset = offset % len(pattern)
    return tuple(pattern[offset:]) + tuple(pattern[:offset])


def weeks_since(anchor: date, day: date) -> int:
    return (day - anchor).days // 7


def shift_for_day(pattern: RotationPattern, group: ShiftType, day: date) -> ShiftType:
    """Shift the pattern gives an employee of *group* on *day*.

    A ``custom`` pattern with ``cycle_weeks == 1`` rotates weekly like
    ``alternate_fs``; any other ``custom`` pattern keeps the group.
    """

    if pattern.kind is PatternKind.FIXED_N:
        return ShiftType.NIGHT
    if pattern.kind is PatternKind.CUSTOM and pattern.config.cycle_weeks != 1:
        return group

    if pattern.config.ignore_night_shift:
        cycle = TWO_SHIFT_CYCLE
        offset = cycle.index(group) if group in cycle else 0
    else:
        cycle = THREE_SHIFT_CYCLE
        offset = cycle.index(group)
    rotated = rotate_pattern(cycle, offset)
    return rotated[weeks_since(pattern.starts_at, day) % len(rotated)]


def generate(pattern: RotationPattern, window_start: date, window_end: date) -> List[RotationEntry]:
    """Expand *pattern* over the inclusive window into history entries.

    Same pattern and window always produce the same list. With
    ``ignore_night_shift`` employees of the night group are left out.
    """

    entries: List[RotationEntry] = []
    if window_end < window_start:
        return entries
    config = pattern.config
    employees = sorted(config.shift_groups.items())
    for day in cycle_days(window_start, (window_end - window_start).days + 1):
        if config.skip_weekends and is_weekend(day):
            continue
        for employee_id, group in employees:
            if config.ignore_night_shift and group is ShiftType.NIGHT:
                continue
            shift_type = shift_for_day(pattern, group, day)
            if config.ignore_night_shift and shift_type is ShiftType.NIGHT:
                continue
            entries.append(RotationEntry(date=day, shift_type=shift_type, employee_id=employee_id))
    return entries


def year_cap(today: date) -> date:
    return date(today.year, 12, 31)


def validate_window(start: date, end: date, today: Optional[date] = None, *, cap_to_year: bool = True) -> None:
    if end <= start:
        raise RotationWindowError("The end date must be after the start date")
    if cap_to_year:
        limit = year_cap(today or date.today())
        if end > limit:
            raise RotationWindowError(f"The end date may not be later than {limit.isoformat()}")


def resolve_week_source(rotation_enabled: bool, has_history: bool, fallback_enabled: bool) -> WeekSource:
    """Decide what fills the grid for a week.

    Rotation history wins when present; without history the fallback flag
    chooses between the manual plan and an empty grid.
    """

    if not rotation_enabled:
        return WeekSource.MANUAL
    if has_history:
        return WeekSource.ROTATION
    if fallback_enabled:
        return WeekSource.FALLBACK
    return WeekSource.EMPTY


__all__ = [
    "RotationWindowError",
    "WeekSource",
    "cycle_days",
    "generate",
    "resolve_week_source",
    "rotate_pattern",
    "shift_for_day",
    "validate_window",
    "weeks_since",
    "year_cap",
]
