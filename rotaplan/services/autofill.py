"""Replicate one assignment across the remaining weekdays of its week."""
from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional

from ..domain.dates import DateLike, parse_iso_date, week_days, week_start
from ..domain.employee import Employee
from ..domain.scope import OrganizationalScope
from ..domain.shift import parse_shift_type
from .grid import AssignmentGrid
from .validator import AssignmentValidator

logger = logging.getLogger(__name__)


class AutofillAssistant:
    def __init__(self, grid: AssignmentGrid, validator: AssignmentValidator) -> None:
        self.grid = grid
        self.validator = validator

    def propagate(
        self,
        employee: Employee,
        origin_day: DateLike,
        shift: object,
        scope: Optional[OrganizationalScope] = None,
    ) -> List[date]:
        """Fill empty Mon-Fri cells of *shift* with *employee*; returns the days filled."""

        origin = parse_iso_date(origin_day)
        shift_type = parse_shift_type(shift)
        if origin is None or shift_type is None:
            return []

        filled: List[date] = []
        for day in week_days(week_start(origin), 5):
            if day == origin or self.grid.get(day, shift_type):
                continue
            if not self.validator.can_assign(employee, day, shift_type, scope):
                continue
            self.grid.set(day, shift_type, [employee.id])
            filled.append(day)
        if filled:
            logger.info(
                "Autofilled employee %s on %s for %d day(s)", employee.id, shift_type.value, len(filled)
            )
        return filled


__all__ = ["AutofillAssistant"]
