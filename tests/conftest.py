from __future__ import annotations

import copy
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

from rotaplan.domain.errors import PersistenceFailure, PlanNotFound, RotationOverlap
from rotaplan.domain.rotation import RotationPattern
from rotaplan.domain.scope import OrganizationalScope
from rotaplan.services import rotor
from rotaplan.services.session import PlanningSession
from rotaplan_web import create_app

AREAS = [{"id": 1, "name": "Production"}, {"id": 9, "name": "Logistics"}]
DEPARTMENTS = [
    {"id": 2, "name": "Assembly", "areaId": 1},
    {"id": 3, "name": "Shipping", "areaId": 9},
]
MACHINES = [{"id": 5, "name": "Press line 1", "departmentId": 2, "areaId": 1}]
TEAMS = [
    {"id": 10, "name": "Assembly A", "departmentId": 2, "machineId": 5},
    {"id": 12, "name": "Dispatch", "departmentId": 3, "machineId": None},
]
EMPLOYEES = [
    {"id": 101, "firstName": "Anna", "lastName": "Berger", "availabilityStatus": "available", "teamId": 10},
    {
        "id": 102,
        "first_name": "Jonas",
        "last_name": "Keller",
        "availability_status": "vacation",
        "availability_start": "2024-07-01",
        "availability_end": "2024-07-14",
        "availability_reason": "Summer holiday",
        "team_id": 10,
    },
    {"id": 103, "firstName": "Lea", "lastName": "Hoffmann", "availabilityStatus": "", "teamId": 10},
]


class FakeBackend:
    """In-memory stand-in for the plan, rotation and directory API."""

    def __init__(self) -> None:
        self.areas = copy.deepcopy(AREAS)
        self.departments = copy.deepcopy(DEPARTMENTS)
        self.machines = copy.deepcopy(MACHINES)
        self.teams = copy.deepcopy(TEAMS)
        self.employees = copy.deepcopy(EMPLOYEES)
        self.plans: Dict[int, Dict[str, Any]] = {}
        self.history: List[Dict[str, Any]] = []
        self.patterns: Dict[int, Dict[str, Any]] = {}
        self.preferences: Dict[str, Any] = {}
        self.calls: List[str] = []
        self.failing: set = set()
        self.overlap = False
        self._next_id = 1

    def _enter(self, name: str) -> None:
        self.calls.append(name)
        if name in self.failing:
            raise PersistenceFailure("Database unavailable", status=500)

    def _new_id(self) -> int:
        self._next_id += 1
        return self._next_id

    # directory
    def list_areas(self):
        self._enter("list_areas")
        return list(self.areas)

    def list_departments(self, area_id=None):
        self._enter("list_departments")
        return [d for d in self.departments if area_id is None or d["areaId"] == area_id]

    def list_machines(self, department_id=None):
        self._enter("list_machines")
        return [m for m in self.machines if department_id is None or m["departmentId"] == department_id]

    def list_teams(self, department_id=None, machine_id=None):
        self._enter("list_teams")
        return [t for t in self.teams if department_id is None or t["departmentId"] == department_id]

    def list_employees(self, team_id=None, department_id=None):
        self._enter("list_employees")
        return [e for e in self.employees if team_id is None or e.get("teamId", e.get("team_id")) == team_id]

    # plans
    def store_plan(self, scope: OrganizationalScope, start: str, end: str, shifts, notes: str = "") -> int:
        plan_id = self._new_id()
        plan = dict(scope.as_params(), id=plan_id, startDate=start, endDate=end, name="stored", notes=notes)
        self.plans[plan_id] = {"plan": plan, "shifts": list(shifts)}
        return plan_id

    def fetch_plan(self, scope, start_date, end_date):
        self._enter("fetch_plan")
        for stored in self.plans.values():
            plan = stored["plan"]
            if (
                plan["departmentId"] == scope.department_id
                and plan["teamId"] == scope.team_id
                and plan["startDate"] == start_date
            ):
                return copy.deepcopy(stored)
        raise PlanNotFound(status=404)

    def create_plan(self, payload):
        self._enter("create_plan")
        plan_id = self._new_id()
        plan = {k: v for k, v in payload.items() if k != "shifts"}
        plan["id"] = plan_id
        self.plans[plan_id] = {"plan": plan, "shifts": list(payload["shifts"])}
        return {"planId": plan_id, "shiftIds": list(range(len(payload["shifts"])))}

    def update_plan(self, plan_id, payload):
        self._enter("update_plan")
        plan = {k: v for k, v in payload.items() if k != "shifts"}
        plan["id"] = plan_id
        self.plans[plan_id] = {"plan": plan, "shifts": list(payload["shifts"])}
        return {"planId": plan_id}

    def delete_plan(self, plan_id):
        self._enter("delete_plan")
        self.plans.pop(plan_id, None)

    # rotation
    def fetch_rotation_history(self, start_date, end_date, team_id=None):
        self._enter("fetch_rotation_history")
        return [
            row
            for row in self.history
            if start_date <= row.get("shiftDate", row.get("shift_date")) <= end_date
            and (team_id is None or row.get("teamId") == team_id)
        ]

    def create_pattern(self, payload):
        self._enter("create_pattern")
        if self.overlap:
            raise RotationOverlap(status=409)
        pattern_id = self._new_id()
        self.patterns[pattern_id] = dict(payload, id=pattern_id)
        return dict(payload, id=pattern_id)

    def assign_pattern(self, payload):
        self._enter("assign_pattern")
        self.patterns[payload["patternId"]]["assignment"] = payload
        return []

    def update_pattern(self, pattern_id, payload):
        self._enter("update_pattern")
        if self.overlap:
            raise RotationOverlap(status=409)
        stored = self.patterns[pattern_id]
        stored.update(payload)
        days = sorted(row["shiftDate"] for row in self.history if row.get("patternId") == pattern_id)
        self.history = [row for row in self.history if row.get("patternId") != pattern_id]
        rows = self._expand(pattern_id, days[0], days[-1]) if days else []
        return dict(stored, regenerated=len(rows))

    def _expand(self, pattern_id, start_date, end_date):
        stored = self.patterns[pattern_id]
        pattern = RotationPattern.from_payload(stored)
        entries = rotor.generate(pattern, date.fromisoformat(start_date), date.fromisoformat(end_date))
        rows = [dict(entry.to_payload(), teamId=stored["teamId"], patternId=pattern_id) for entry in entries]
        self.history.extend(rows)
        return rows

    def generate_rotation(self, payload):
        self._enter("generate_rotation")
        return self._expand(payload["patternId"], payload["startDate"], payload["endDate"])

    def delete_rotation_history(self, team_id):
        self._enter("delete_rotation_history")
        before = len(self.history)
        self.history = [row for row in self.history if row.get("teamId") != team_id]
        return before - len(self.history)

    # preferences
    def get_preferences(self):
        self._enter("get_preferences")
        return dict(self.preferences)

    def save_preference(self, key, value):
        self._enter("save_preference")
        self.preferences[key] = value


@pytest.fixture()
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture()
def session(backend: FakeBackend) -> PlanningSession:
    """A session scoped to area 1 / department 2 / team 10, week of 2024-07-01."""
    planning = PlanningSession(backend, today=date(2024, 7, 3))
    planning.select_area(1)
    planning.select_department(2)
    planning.select_team(10)
    assert planning.load_context_lists() is None
    assert planning.refresh_employees() is None
    planning.load_week()
    return planning


@pytest.fixture()
def app(tmp_path: Path):
    db_path = tmp_path / "test.sqlite"
    return create_app({
        "TESTING": True,
        "DATABASE": str(db_path),
        "AUTO_INIT_DB": True,
        "TODAY": "2024-07-03",
        "LOG_LEVEL": "WARNING",
    })


@pytest.fixture()
def client(app):
    with app.test_client() as client:
        yield client


def week_payload(shifts: Optional[list] = None, **overrides: Any) -> Dict[str, Any]:
    payload = {
        "areaId": 1,
        "departmentId": 2,
        "machineId": None,
        "teamId": 10,
        "startDate": "2024-07-01",
        "endDate": "2024-07-07",
        "notes": "",
        "shifts": shifts or [],
    }
    payload.update(overrides)
    return payload


@pytest.fixture()
def make_week_payload():
    return week_payload
