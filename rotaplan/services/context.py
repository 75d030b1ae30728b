"""Area -> Department -> Machine -> Team selection."""
from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional

from ..domain.scope import Area, Department, Machine, OrganizationalScope, ScopeCheck, Team

logger = logging.getLogger(__name__)

AREA_REQUIRED = "area required"
DEPARTMENT_REQUIRED = "department required"
MACHINE_NOT_IN_DEPARTMENT = "machine not in department"
TEAM_NOT_IN_DEPARTMENT = "team not in department"
DEPARTMENT_NOT_IN_AREA = "department not in area"


class ContextResolver:
    """Holds the organizational catalogs and the current selection.

    Every selection change bumps :attr:`token`; responses fetched for an
    older token are stale and must be dropped by the caller.
    """

    def __init__(
        self,
        areas: Iterable[Area] = (),
        departments: Iterable[Department] = (),
        machines: Iterable[Machine] = (),
        teams: Iterable[Team] = (),
    ) -> None:
        self._areas: Dict[int, Area] = {}
        self._departments: Dict[int, Department] = {}
        self._machines: Dict[int, Machine] = {}
        self._teams: Dict[int, Team] = {}
        self._scope = OrganizationalScope()
        self._token = 0
        self._store(self._areas, areas)
        self._store(self._departments, departments)
        self._store(self._machines, machines)
        self._store(self._teams, teams)

    # -- catalogs -----------------------------------------------------------------
    @staticmethod
    def _store(target: Dict, items: Iterable) -> None:
        for item in items:
            target[item.id] = item

    def _accept(self, token: Optional[int], kind: str) -> bool:
        if token is not None and token != self._token:
            logger.debug("Discarding stale %s list (token %s, current %s)", kind, token, self._token)
            return False
        return True

    def load_areas(self, areas: Iterable[Area], token: Optional[int] = None) -> bool:
        if not self._accept(token, "area"):
            return False
        self._areas = {}
        self._store(self._areas, areas)
        return True

    def load_departments(self, departments: Iterable[Department], token: Optional[int] = None) -> bool:
        if not self._accept(token, "department"):
            return False
        self._store(self._departments, departments)
        return True

    def load_machines(self, machines: Iterable[Machine], token: Optional[int] = None) -> bool:
        if not self._accept(token, "machine"):
            return False
        self._store(self._machines, machines)
        return True

    def load_teams(self, teams: Iterable[Team], token: Optional[int] = None) -> bool:
        if not self._accept(token, "team"):
            return False
        self._store(self._teams, teams)
        return True

    @property
    def areas(self) -> List[Area]:
        return list(self._areas.values())

    def departments_for_area(self, area_id: Optional[int]) -> List[Department]:
        return [d for d in self._departments.values() if area_id is None or d.area_id == area_id]

    def machines_for_department(self, department_id: Optional[int]) -> List[Machine]:
        return [m for m in self._machines.values() if department_id is None or m.department_id == department_id]

    def teams_for(self, department_id: Optional[int], machine_id: Optional[int] = None) -> List[Team]:
        teams = [t for t in self._teams.values() if department_id is None or t.department_id == department_id]
        if machine_id is not None:
            teams = [t for t in teams if t.machine_id in (None, machine_id)]
        return teams

    def department(self, department_id: Optional[int]) -> Optional[Department]:
        return self._departments.get(department_id) if department_id is not None else None

    def team(self, team_id: Optional[int]) -> Optional[Team]:
        return self._teams.get(team_id) if team_id is not None else None

    # -- selection ----------------------------------------------------------------
    @property
    def scope(self) -> OrganizationalScope:
        return self._scope

    @property
    def token(self) -> int:
        return self._token

    def is_current(self, token: int) -> bool:
        return token == self._token

    def _select(self, scope: OrganizationalScope) -> OrganizationalScope:
        self._scope = scope
        self._token += 1
        return scope

    def select_area(self, area_id: Optional[int]) -> OrganizationalScope:
        return self._select(OrganizationalScope(area_id=area_id))

    def select_department(self, department_id: Optional[int]) -> OrganizationalScope:
        return self._select(OrganizationalScope(area_id=self._scope.area_id, department_id=department_id))

    def select_machine(self, machine_id: Optional[int]) -> OrganizationalScope:
        return self._select(
            OrganizationalScope(
                area_id=self._scope.area_id,
                department_id=self._scope.department_id,
                machine_id=machine_id,
            )
        )

    def select_team(self, team_id: Optional[int]) -> OrganizationalScope:
        return self._select(
            OrganizationalScope(
                area_id=self._scope.area_id,
                department_id=self._scope.department_id,
                machine_id=self._scope.machine_id,
                team_id=team_id,
            )
        )

    def restore(self, scope: OrganizationalScope) -> OrganizationalScope:
        """Apply a complete scope at once (saved favorites, restored sessions)."""

        return self._select(scope)

    # -- validation ---------------------------------------------------------------
    def validate(self, scope: Optional[OrganizationalScope] = None) -> ScopeCheck:
        scope = scope or self._scope
        if self._areas and scope.area_id is None:
            return ScopeCheck(False, AREA_REQUIRED)
        if scope.department_id is None:
            return ScopeCheck(False, DEPARTMENT_REQUIRED)
        if scope.machine_id is not None:
            machine = self._machines.get(scope.machine_id)
            if machine is None or machine.department_id != scope.department_id:
                return ScopeCheck(False, MACHINE_NOT_IN_DEPARTMENT)
        if scope.team_id is not None:
            team = self._teams.get(scope.team_id)
            if team is None or team.department_id != scope.department_id:
                return ScopeCheck(False, TEAM_NOT_IN_DEPARTMENT)
        if scope.area_id is not None:
            department = self._departments.get(scope.department_id)
            if department is None or department.area_id != scope.area_id:
                return ScopeCheck(False, DEPARTMENT_NOT_IN_AREA)
        return ScopeCheck(True)


__all__ = [
    "AREA_REQUIRED",
    "ContextResolver",
    "DEPARTMENT_NOT_IN_AREA",
    "DEPARTMENT_REQUIRED",
    "MACHINE_NOT_IN_DEPARTMENT",
    "TEAM_NOT_IN_DEPARTMENT",
]
