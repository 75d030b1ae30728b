"""Business-rule gate in front of every grid mutation."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from ..domain.dates import DateLike, parse_day_key
from ..domain.employee import AvailabilityStatus, Employee
from ..domain.errors import DuplicateShift, EmployeeUnavailable, InvalidCell, InvalidScope, Rejection
from ..domain.scope import OrganizationalScope
from ..domain.shift import SHIFT_ORDER, parse_shift_type
from . import availability
from .context import ContextResolver
from .grid import AssignmentGrid

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Verdict:
    accepted: bool
    rejection: Optional[Rejection] = None

    def __bool__(self) -> bool:
        return self.accepted

    @classmethod
    def accept(cls) -> "Verdict":
        return cls(True)

    @classmethod
    def reject(cls, rejection: Rejection) -> "Verdict":
        return cls(False, rejection)


class AssignmentValidator:
    """Checks scope, availability and same-day double booking, in that order."""

    def __init__(self, context: ContextResolver, grid: AssignmentGrid) -> None:
        self.context = context
        self.grid = grid

    def can_assign(
        self,
        employee: Employee,
        day: DateLike,
        target_shift: object,
        scope: Optional[OrganizationalScope] = None,
    ) -> Verdict:
        parsed_day = parse_day_key(day)
        shift_type = parse_shift_type(target_shift)
        if parsed_day is None or shift_type is None:
            return Verdict.reject(InvalidCell(str(day), str(target_shift)))

        check = self.context.validate(scope)
        if not check.valid:
            return self._reject(InvalidScope(check.reason or "invalid selection"))

        status = availability.resolve_for_date(employee, parsed_day)
        if status is not AvailabilityStatus.AVAILABLE:
            return self._reject(
                EmployeeUnavailable(
                    employee_name=employee.display_name,
                    day=parsed_day,
                    status=status,
                    reason=employee.availability_reason,
                )
            )

        for other in SHIFT_ORDER:
            if other is shift_type:
                continue
            if employee.id in self.grid.get(parsed_day, other):
                return self._reject(DuplicateShift(employee.display_name, other))

        return Verdict.accept()

    @staticmethod
    def _reject(rejection: Rejection) -> Verdict:
        logger.debug("Assignment rejected: %s", rejection.message)
        return Verdict.reject(rejection)


__all__ = ["AssignmentValidator", "Verdict"]
