"""Effective availability of an employee on a day or within a week."""
from __future__ import annotations

from datetime import date, timedelta
from typing import Optional

from ..domain.dates import DateLike, parse_iso_date
from ..domain.employee import AvailabilityStatus, Employee

__all__ = ["ranges_overlap", "resolve_for_date", "resolve_for_week", "is_available_on"]


def _as_date(value: DateLike) -> date:
    parsed = parse_iso_date(value)
    if parsed is None:
        raise ValueError(f"Invalid date: {value!r}")
    return parsed


def ranges_overlap(start: Optional[date], end: Optional[date], other_start: date, other_end: date) -> bool:
    """Inclusive overlap test; a missing bound extends to the past/future."""

    effective_start = start or date.min
    effective_end = end or date.max
    return effective_start <= other_end and effective_end >= other_start


def resolve_for_date(employee: Employee, day: DateLike) -> AvailabilityStatus:
    status = employee.availability_status
    if status is AvailabilityStatus.AVAILABLE:
        return AvailabilityStatus.AVAILABLE
    check = _as_date(day)
    if ranges_overlap(employee.availability_start, employee.availability_end, check, check):
        return status
    return AvailabilityStatus.AVAILABLE


def resolve_for_week(employee: Employee, week_start: DateLike) -> AvailabilityStatus:
    """Status to flag for the 7-day window beginning at *week_start*."""

    status = employee.availability_status
    if status is AvailabilityStatus.AVAILABLE:
        return AvailabilityStatus.AVAILABLE
    start = _as_date(week_start)
    if ranges_overlap(employee.availability_start, employee.availability_end, start, start + timedelta(days=6)):
        return status
    return AvailabilityStatus.AVAILABLE


def is_available_on(employee: Employee, day: DateLike) -> bool:
    return resolve_for_date(employee, day) is AvailabilityStatus.AVAILABLE
