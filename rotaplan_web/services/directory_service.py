"""Directory lookups: organizational catalogs and employees."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from rotaplan.domain.scope import (
    OrganizationalScope,
    ScopeCheck,
    area_from_row,
    department_from_row,
    machine_from_row,
    team_from_row,
)
from rotaplan.services.context import ContextResolver

from ..dao import employees_dao, org_dao
from .errors import bad_request


def list_areas() -> List[Dict[str, Any]]:
    return org_dao.list_areas()


def list_departments(area_id: Optional[int] = None) -> List[Dict[str, Any]]:
    return org_dao.list_departments(area_id)


def list_machines(department_id: Optional[int] = None) -> List[Dict[str, Any]]:
    return org_dao.list_machines(department_id)


def list_teams(department_id: Optional[int] = None, machine_id: Optional[int] = None) -> List[Dict[str, Any]]:
    return org_dao.list_teams(department_id, machine_id)


def list_employees(team_id: Optional[int] = None, department_id: Optional[int] = None) -> List[Dict[str, Any]]:
    return employees_dao.list_employees(team_id, department_id)


def check_scope(scope: OrganizationalScope) -> ScopeCheck:
    """Validate *scope* against the stored hierarchy with the planning rules."""
    resolver = ContextResolver(
        areas=[area_from_row(row) for row in org_dao.list_areas()],
        departments=[department_from_row(row) for row in org_dao.list_departments()],
        machines=[machine_from_row(row) for row in org_dao.list_machines()],
        teams=[team_from_row(row) for row in org_dao.list_teams()],
    )
    return resolver.validate(scope)


def parse_scope(params: Any) -> OrganizationalScope:
    """Read a scope from request params; malformed ids are a bad request."""
    try:
        return OrganizationalScope.from_params(params)
    except (TypeError, ValueError) as exc:
        raise bad_request(f"Invalid scope parameters: {exc}") from exc


def parse_id(value: Any, name: str) -> Optional[int]:
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise bad_request(f"{name} must be an integer") from exc
