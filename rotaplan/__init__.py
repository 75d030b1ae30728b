"""Rotaplan planning core exposing primary components."""

from .services.session import PlanningSession
from .services.validator import AssignmentValidator
from .domain.employee import Employee
from .domain.rotation import RotationPattern
from .domain.shift import ShiftType

__all__ = ["PlanningSession", "AssignmentValidator", "Employee", "RotationPattern", "ShiftType"]
