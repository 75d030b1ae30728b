"""Collaborator interface for the plan, rotation, directory and preference API.

Implementations raise :class:`~rotaplan.domain.errors.PlanNotFound` when no
plan exists for a week, :class:`~rotaplan.domain.errors.RotationOverlap`
for conflicting rotations and
:class:`~rotaplan.domain.errors.PersistenceFailure` for anything else.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol

from ..domain.scope import OrganizationalScope

Payload = Dict[str, Any]


class PlanningBackend(Protocol):
    # -- directory ----------------------------------------------------------------
    def list_areas(self) -> List[Payload]: ...

    def list_departments(self, area_id: Optional[int] = None) -> List[Payload]: ...

    def list_machines(self, department_id: Optional[int] = None) -> List[Payload]: ...

    def list_teams(self, department_id: Optional[int] = None, machine_id: Optional[int] = None) -> List[Payload]: ...

    def list_employees(self, team_id: Optional[int] = None, department_id: Optional[int] = None) -> List[Payload]: ...

    # -- plans --------------------------------------------------------------------
    def fetch_plan(self, scope: OrganizationalScope, start_date: str, end_date: str) -> Payload: ...

    def create_plan(self, payload: Payload) -> Payload: ...

    def update_plan(self, plan_id: int, payload: Payload) -> Payload: ...

    def delete_plan(self, plan_id: int) -> None: ...

    # -- rotation -----------------------------------------------------------------
    def fetch_rotation_history(
        self, start_date: str, end_date: str, team_id: Optional[int] = None
    ) -> List[Payload]: ...

    def create_pattern(self, payload: Payload) -> Payload: ...

    def update_pattern(self, pattern_id: int, payload: Payload) -> Payload: ...

    def assign_pattern(self, payload: Payload) -> List[Payload]: ...

    def generate_rotation(self, payload: Payload) -> List[Payload]: ...

    def delete_rotation_history(self, team_id: Optional[int]) -> int: ...

    # -- preferences --------------------------------------------------------------
    def get_preferences(self) -> Payload: ...

    def save_preference(self, key: str, value: Any) -> None: ...


__all__ = ["Payload", "PlanningBackend"]
