"""Rejections, user notices and backend failures."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from .dates import iso
from .employee import AvailabilityStatus
from .shift import ShiftType, spec_for


@dataclass(frozen=True)
class Notice:
    level: str
    code: str
    message: str


class Rejection:
    """Base class for validation outcomes that block a mutation.

    Rejections are values: they are returned to the caller, never raised.
    """

    code = "REJECTED"

    @property
    def message(self) -> str:
        return "The action was rejected."

    def notice(self) -> Notice:
        return Notice(level="error", code=self.code, message=self.message)


@dataclass(frozen=True)
class InvalidScope(Rejection):
    reason: str
    code = "INVALID_SCOPE"

    @property
    def message(self) -> str:
        return f"Please complete the selection first ({self.reason})."


@dataclass(frozen=True)
class InvalidCell(Rejection):
    day: str
    shift: str
    code = "INVALID_CELL"

    @property
    def message(self) -> str:
        return f"Unknown shift cell {self.day}/{self.shift}."


@dataclass(frozen=True)
class UnknownEmployee(Rejection):
    employee_id: int
    code = "UNKNOWN_EMPLOYEE"

    @property
    def message(self) -> str:
        return f"Employee {self.employee_id} is not part of the current selection."


@dataclass(frozen=True)
class EmployeeUnavailable(Rejection):
    employee_name: str
    day: date
    status: AvailabilityStatus
    reason: Optional[str] = None
    code = "EMPLOYEE_UNAVAILABLE"

    @property
    def message(self) -> str:
        text = f"{self.employee_name} is not available on {iso(self.day)} ({self.status.value})"
        if self.reason:
            text += f": {self.reason}"
        return text + "."


@dataclass(frozen=True)
class DuplicateShift(Rejection):
    employee_name: str
    conflicting_shift: ShiftType
    code = "DUPLICATE_SHIFT"

    @property
    def message(self) -> str:
        label = spec_for(self.conflicting_shift).label
        return (
            f"Double shift not allowed: {self.employee_name} is already assigned to the {label}. "
            "An employee can only work one shift per day."
        )


@dataclass(frozen=True)
class PlanLocked(Rejection):
    rotation: bool = False
    code = "PLAN_LOCKED"

    @property
    def message(self) -> str:
        if self.rotation:
            return "This week is generated by a rotation pattern. Edit the rotation to change it."
        return "The shift plan is locked. Click 'Edit' to make changes."


class BackendError(RuntimeError):
    """Raised by backend gateways when a request fails."""

    code = "BACKEND_ERROR"
    default_message = "The request could not be completed. Please try again."

    def __init__(self, message: Optional[str] = None, *, status: Optional[int] = None) -> None:
        super().__init__(message or self.default_message)
        self.status = status

    @property
    def message(self) -> str:
        return str(self)

    def notice(self) -> Notice:
        return Notice(level="error", code=self.code, message=self.message)


class PersistenceFailure(BackendError):
    code = "PERSISTENCE_FAILURE"


class RotationOverlap(BackendError):
    code = "ROTATION_OVERLAP"
    default_message = "A rotation already covers this team and period. Adjust or remove it first."


class PlanNotFound(BackendError):
    code = "NOT_FOUND"
    default_message = "No shift plan exists for this week."


__all__ = [
    "BackendError",
    "DuplicateShift",
    "EmployeeUnavailable",
    "InvalidCell",
    "InvalidScope",
    "Notice",
    "PersistenceFailure",
    "PlanLocked",
    "PlanNotFound",
    "Rejection",
    "RotationOverlap",
    "UnknownEmployee",
]
