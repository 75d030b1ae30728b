"""Domain objects for the planning engine."""

from .employee import AvailabilityStatus, Employee, normalize_employee
from .errors import (
    BackendError,
    DuplicateShift,
    EmployeeUnavailable,
    InvalidCell,
    InvalidScope,
    Notice,
    PersistenceFailure,
    PlanLocked,
    PlanNotFound,
    Rejection,
    RotationOverlap,
    UnknownEmployee,
)
from .plan import PlanShift, ShiftPlan
from .rotation import PatternConfig, PatternKind, RotationEntry, RotationPattern
from .scope import Area, Department, Machine, OrganizationalScope, ScopeCheck, Team
from .shift import SHIFT_ORDER, SHIFT_SPECS, ShiftSpec, ShiftType, from_code, parse_shift_type, to_code

__all__ = [
    "Area",
    "AvailabilityStatus",
    "BackendError",
    "Department",
    "DuplicateShift",
    "Employee",
    "EmployeeUnavailable",
    "InvalidCell",
    "InvalidScope",
    "Machine",
    "Notice",
    "OrganizationalScope",
    "PatternConfig",
    "PatternKind",
    "PersistenceFailure",
    "PlanLocked",
    "PlanNotFound",
    "PlanShift",
    "Rejection",
    "RotationEntry",
    "RotationOverlap",
    "RotationPattern",
    "SHIFT_ORDER",
    "SHIFT_SPECS",
    "ScopeCheck",
    "ShiftPlan",
    "ShiftSpec",
    "ShiftType",
    "Team",
    "UnknownEmployee",
    "from_code",
    "normalize_employee",
    "parse_shift_type",
    "to_code",
]
