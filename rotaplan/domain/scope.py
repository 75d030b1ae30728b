"""Organizational hierarchy records and the selected scope."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional


@dataclass(frozen=True)
class Area:
    id: int
    name: str = ""


@dataclass(frozen=True)
class Department:
    id: int
    name: str = ""
    area_id: Optional[int] = None


@dataclass(frozen=True)
class Machine:
    id: int
    name: str = ""
    department_id: Optional[int] = None
    area_id: Optional[int] = None


@dataclass(frozen=True)
class Team:
    id: int
    name: str = ""
    department_id: Optional[int] = None
    machine_id: Optional[int] = None


@dataclass(frozen=True)
class OrganizationalScope:
    area_id: Optional[int] = None
    department_id: Optional[int] = None
    machine_id: Optional[int] = None
    team_id: Optional[int] = None

    def as_params(self) -> Dict[str, Optional[int]]:
        return {
            "areaId": self.area_id,
            "departmentId": self.department_id,
            "machineId": self.machine_id,
            "teamId": self.team_id,
        }

    @classmethod
    def from_params(cls, payload: Mapping[str, Any]) -> "OrganizationalScope":
        def _get(*names: str) -> Optional[int]:
            for name in names:
                value = payload.get(name)
                if value not in (None, ""):
                    return int(value)
            return None

        return cls(
            area_id=_get("areaId", "area_id"),
            department_id=_get("departmentId", "department_id"),
            machine_id=_get("machineId", "machine_id"),
            team_id=_get("teamId", "team_id"),
        )


@dataclass(frozen=True)
class ScopeCheck:
    valid: bool
    reason: Optional[str] = None

    def __bool__(self) -> bool:
        return self.valid


def _row_id(row: Mapping[str, Any]) -> int:
    return int(row["id"])


def _optional(row: Mapping[str, Any], *names: str) -> Optional[int]:
    for name in names:
        value = row.get(name)
        if value not in (None, ""):
            return int(value)
    return None


def area_from_row(row: Mapping[str, Any]) -> Area:
    return Area(id=_row_id(row), name=str(row.get("name") or ""))


def department_from_row(row: Mapping[str, Any]) -> Department:
    return Department(
        id=_row_id(row),
        name=str(row.get("name") or ""),
        area_id=_optional(row, "areaId", "area_id"),
    )


def machine_from_row(row: Mapping[str, Any]) -> Machine:
    return Machine(
        id=_row_id(row),
        name=str(row.get("name") or ""),
        department_id=_optional(row, "departmentId", "department_id"),
        area_id=_optional(row, "areaId", "area_id"),
    )


def team_from_row(row: Mapping[str, Any]) -> Team:
    return Team(
        id=_row_id(row),
        name=str(row.get("name") or ""),
        department_id=_optional(row, "departmentId", "department_id"),
        machine_id=_optional(row, "machineId", "machine_id"),
    )
