"""Planning services: scope, grid, validation, lifecycle and rotation."""

from .autofill import AutofillAssistant
from .backend import PlanningBackend
from .context import ContextResolver
from .grid import AssignmentGrid
from .lifecycle import InvalidTransition, PlanLifecycle, PlanState
from .rotor import RotationWindowError, WeekSource
from .session import CellView, LoadTicket, PlanningPreferences, PlanningSession, WeekData
from .validator import AssignmentValidator, Verdict

__all__ = [
    "AssignmentGrid",
    "AssignmentValidator",
    "AutofillAssistant",
    "CellView",
    "ContextResolver",
    "InvalidTransition",
    "LoadTicket",
    "PlanLifecycle",
    "PlanState",
    "PlanningBackend",
    "PlanningPreferences",
    "PlanningSession",
    "RotationWindowError",
    "Verdict",
    "WeekData",
    "WeekSource",
]
