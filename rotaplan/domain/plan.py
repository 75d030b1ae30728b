"""Weekly plan records exchanged with the plan API."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Mapping, Optional

from .dates import calendar_week, iso, parse_iso_date
from .scope import OrganizationalScope
from .shift import ShiftType, parse_shift_type, spec_for, to_code


@dataclass(frozen=True)
class PlanShift:
    employee_id: int
    date: date
    shift_type: ShiftType

    def to_payload(self) -> Dict[str, Any]:
        spec = spec_for(self.shift_type)
        return {
            "userId": self.employee_id,
            "date": iso(self.date),
            "type": to_code(self.shift_type),
            "startTime": spec.start,
            "endTime": spec.end,
        }


@dataclass
class ShiftPlan:
    scope: OrganizationalScope
    start_date: date
    end_date: date
    id: Optional[int] = None
    name: str = ""
    notes: str = ""
    shifts: List[PlanShift] = field(default_factory=list)

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = dict(self.scope.as_params())
        payload.update(
            {
                "startDate": iso(self.start_date),
                "endDate": iso(self.end_date),
                "name": self.name or default_plan_name(self.start_date),
                "notes": self.notes,
                "shifts": [shift.to_payload() for shift in self.shifts],
            }
        )
        return payload


def default_plan_name(start: date) -> str:
    year, week = calendar_week(start)
    return f"Week plan CW {week}/{year}"


def shift_from_row(row: Mapping[str, Any]) -> Optional[PlanShift]:
    """Parse a persisted shift row; rows with unknown keys yield ``None``."""

    day = parse_iso_date(row.get("date") or row.get("shiftDate") or row.get("shift_date"))
    shift_type = parse_shift_type(row.get("type") or row.get("shiftType") or row.get("shift_type"))
    employee_id = row.get("userId", row.get("user_id", row.get("employeeId", row.get("employee_id"))))
    if day is None or shift_type is None or employee_id is None:
        return None
    return PlanShift(employee_id=int(employee_id), date=day, shift_type=shift_type)


def plan_from_response(plan: Mapping[str, Any], shifts: List[Mapping[str, Any]]) -> ShiftPlan:
    parsed = [shift for shift in (shift_from_row(row) for row in shifts) if shift is not None]
    return ShiftPlan(
        id=int(plan["id"]),
        scope=OrganizationalScope.from_params(plan),
        start_date=parse_iso_date(plan.get("startDate")) or date.min,
        end_date=parse_iso_date(plan.get("endDate")) or date.min,
        name=str(plan.get("name") or ""),
        notes=str(plan.get("notes") or ""),
        shifts=parsed,
    )


__all__ = ["PlanShift", "ShiftPlan", "default_plan_name", "plan_from_response", "shift_from_row"]
