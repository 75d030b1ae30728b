"""Weekly plan persistence: lookup, create, update and delete."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, List, Mapping

from rotaplan.domain.dates import iso, parse_iso_date
from rotaplan.domain.plan import PlanShift, default_plan_name, shift_from_row

from ..dao import db, employees_dao, plans_dao
from . import directory_service
from .errors import ServiceError, bad_request, conflict, not_found

logger = logging.getLogger(__name__)


def find_plan(params: Mapping[str, Any]) -> Dict[str, Any]:
    """Return ``{"plan", "shifts"}`` for the scope and week in *params*."""
    scope = directory_service.parse_scope(params)
    start = parse_iso_date(params.get("startDate"))
    end = parse_iso_date(params.get("endDate"))
    if scope.department_id is None or start is None or end is None:
        raise bad_request("departmentId, startDate and endDate are required")
    plan = plans_dao.find_plan(scope.as_params(), iso(start), iso(end))
    if plan is None:
        raise not_found("No shift plan exists for this week")
    return {"plan": plan, "shifts": plans_dao.list_shifts(plan["id"])}


def get_plan(plan_id: int) -> Dict[str, Any]:
    plan = plans_dao.get_plan(plan_id)
    if plan is None:
        raise not_found(f"Shift plan {plan_id} not found")
    return {"plan": plan, "shifts": plans_dao.list_shifts(plan_id)}


def _parse_shifts(raw: Any, start: date, end: date) -> List[PlanShift]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise bad_request("shifts must be a list")
    shifts: List[PlanShift] = []
    seen: Dict[tuple, str] = {}
    for row in raw:
        shift = shift_from_row(row) if isinstance(row, Mapping) else None
        if shift is None:
            raise bad_request(f"Invalid shift entry: {row!r}")
        if not start <= shift.date <= end:
            raise bad_request(f"Shift on {iso(shift.date)} lies outside the plan week")
        key = (shift.employee_id, shift.date)
        if key in seen and seen[key] != shift.shift_type.value:
            raise ServiceError(
                "DUPLICATE_SHIFT",
                f"Employee {shift.employee_id} has more than one shift on {iso(shift.date)}",
                400,
            )
        if key in seen:
            continue
        seen[key] = shift.shift_type.value
        shifts.append(shift)
    unknown = {s.employee_id for s in shifts} - set(employees_dao.existing_ids(sorted({s.employee_id for s in shifts})))
    if unknown:
        raise bad_request(f"Unknown employees: {sorted(unknown)}")
    return shifts


def _normalize(payload: Mapping[str, Any]) -> Dict[str, Any]:
    if not isinstance(payload, Mapping):
        raise bad_request("JSON object expected")
    scope = directory_service.parse_scope(payload)
    check = directory_service.check_scope(scope)
    if not check.valid:
        raise ServiceError("INVALID_SCOPE", f"Invalid selection: {check.reason}", 400)
    start = parse_iso_date(payload.get("startDate"))
    end = parse_iso_date(payload.get("endDate"))
    if start is None or end is None or end < start:
        raise bad_request("startDate and endDate must be valid dates with startDate <= endDate")
    shifts = _parse_shifts(payload.get("shifts"), start, end)
    plan = dict(scope.as_params())
    plan.update(
        {
            "startDate": iso(start),
            "endDate": iso(end),
            "name": str(payload.get("name") or default_plan_name(start)),
            "notes": str(payload.get("notes") or ""),
        }
    )
    plan["shifts"] = [shift.to_payload() for shift in shifts]
    return plan


def create_plan(payload: Mapping[str, Any]) -> Dict[str, Any]:
    plan = _normalize(payload)
    existing = plans_dao.find_plan(plan, plan["startDate"], plan["endDate"])
    if existing is not None:
        raise conflict("PLAN_EXISTS", f"Shift plan {existing['id']} already covers this week")
    try:
        plan_id = plans_dao.insert_plan(plan)
        shift_ids = plans_dao.replace_shifts(plan_id, plan["shifts"])
        db.commit()
    except db.DatabaseError:
        db.get_db().rollback()
        raise
    logger.info("Created plan %s (%s..%s) with %d shift(s)", plan_id, plan["startDate"], plan["endDate"], len(shift_ids))
    return {"planId": plan_id, "shiftIds": shift_ids}


def update_plan(plan_id: int, payload: Mapping[str, Any]) -> Dict[str, Any]:
    if plans_dao.get_plan(plan_id) is None:
        raise not_found(f"Shift plan {plan_id} not found")
    plan = _normalize(payload)
    try:
        plans_dao.update_plan(plan_id, plan)
        shift_ids = plans_dao.replace_shifts(plan_id, plan["shifts"])
        db.commit()
    except db.DatabaseError:
        db.get_db().rollback()
        raise
    logger.info("Updated plan %s with %d shift(s)", plan_id, len(shift_ids))
    return {"planId": plan_id, "shiftIds": shift_ids}


def delete_plan(plan_id: int) -> None:
    if plans_dao.delete_plan(plan_id) == 0:
        raise not_found(f"Shift plan {plan_id} not found")
    logger.info("Deleted plan %s", plan_id)
