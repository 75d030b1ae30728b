"""In-process implementation of the planning backend over the web services.

``AppBackend(app)`` lets a :class:`rotaplan.services.session.PlanningSession`
run against the Flask application without an HTTP hop: each call opens an
app context, invokes the service and translates service failures into the
planning core's backend exceptions.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, TypeVar

from flask import Flask

from rotaplan.domain.errors import BackendError, PersistenceFailure, PlanNotFound, RotationOverlap
from rotaplan.domain.scope import OrganizationalScope

from ..dao.db import DatabaseError
from . import directory_service, plan_service, preferences_service, rotation_service
from .errors import ServiceError

logger = logging.getLogger(__name__)

T = TypeVar("T")
Payload = Dict[str, Any]


def translate(exc: ServiceError) -> BackendError:
    if exc.code == "ROTATION_OVERLAP":
        return RotationOverlap(exc.message, status=exc.status)
    if exc.status == 404:
        return PlanNotFound(exc.message, status=exc.status)
    return PersistenceFailure(exc.message, status=exc.status)


class AppBackend:
    def __init__(self, app: Flask) -> None:
        self.app = app

    def _call(self, func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        with self.app.app_context():
            try:
                return func(*args, **kwargs)
            except ServiceError as exc:
                logger.debug("%s failed: %s %s", func.__name__, exc.code, exc.message)
                raise translate(exc) from exc
            except DatabaseError as exc:
                logger.warning("%s failed: %s", func.__name__, exc)
                raise PersistenceFailure(str(exc), status=500) from exc

    # -- directory ----------------------------------------------------------------
    def list_areas(self) -> List[Payload]:
        return self._call(directory_service.list_areas)

    def list_departments(self, area_id: Optional[int] = None) -> List[Payload]:
        return self._call(directory_service.list_departments, area_id)

    def list_machines(self, department_id: Optional[int] = None) -> List[Payload]:
        return self._call(directory_service.list_machines, department_id)

    def list_teams(self, department_id: Optional[int] = None, machine_id: Optional[int] = None) -> List[Payload]:
        return self._call(directory_service.list_teams, department_id, machine_id)

    def list_employees(self, team_id: Optional[int] = None, department_id: Optional[int] = None) -> List[Payload]:
        return self._call(directory_service.list_employees, team_id, department_id)

    # -- plans --------------------------------------------------------------------
    def fetch_plan(self, scope: OrganizationalScope, start_date: str, end_date: str) -> Payload:
        params = dict(scope.as_params(), startDate=start_date, endDate=end_date)
        return self._call(plan_service.find_plan, params)

    def create_plan(self, payload: Payload) -> Payload:
        return self._call(plan_service.create_plan, payload)

    def update_plan(self, plan_id: int, payload: Payload) -> Payload:
        return self._call(plan_service.update_plan, plan_id, payload)

    def delete_plan(self, plan_id: int) -> None:
        self._call(plan_service.delete_plan, plan_id)

    # -- rotation -----------------------------------------------------------------
    def fetch_rotation_history(self, start_date: str, end_date: str, team_id: Optional[int] = None) -> List[Payload]:
        params = {"startDate": start_date, "endDate": end_date, "teamId": team_id}
        return self._call(rotation_service.history, params)

    def create_pattern(self, payload: Payload) -> Payload:
        return self._call(rotation_service.create_pattern, payload)

    def update_pattern(self, pattern_id: int, payload: Payload) -> Payload:
        return self._call(rotation_service.update_pattern, pattern_id, payload)

    def assign_pattern(self, payload: Payload) -> List[Payload]:
        return self._call(rotation_service.assign_employees, payload)

    def generate_rotation(self, payload: Payload) -> List[Payload]:
        return self._call(rotation_service.generate, payload)["entries"]

    def delete_rotation_history(self, team_id: Optional[int]) -> int:
        return self._call(rotation_service.delete_history, team_id)["history"]

    # -- preferences --------------------------------------------------------------
    def get_preferences(self) -> Payload:
        return self._call(preferences_service.get_preferences)

    def save_preference(self, key: str, value: Any) -> None:
        self._call(preferences_service.save_preference, key, value)


__all__ = ["AppBackend", "translate"]
