"""Planning session: the explicit owner of scope, week, grid and plan state.

A session is created when the planning view is entered and dropped when
it is left. The UI layer calls its methods once per user action; every
method is synchronous. Network round-trips go through a
:class:`~rotaplan.services.backend.PlanningBackend`.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Dict, Iterable, List, Mapping, Optional

from ..domain.dates import DateLike, iso, parse_day_key, parse_iso_date, week_days, week_start
from ..domain.employee import AvailabilityStatus, Employee, normalize_employee
from ..domain.errors import (
    BackendError,
    InvalidCell,
    InvalidScope,
    Notice,
    PlanLocked,
    PlanNotFound,
    RotationOverlap,
    UnknownEmployee,
)
from ..domain.plan import PlanShift, ShiftPlan, default_plan_name, shift_from_row
from ..domain.rotation import RotationEntry, RotationPattern, normalize_history_row
from ..domain.scope import (
    OrganizationalScope,
    area_from_row,
    department_from_row,
    machine_from_row,
    team_from_row,
)
from ..domain.shift import SHIFT_ORDER, ShiftType, parse_shift_type
from . import availability, rotor
from .autofill import AutofillAssistant
from .backend import Payload, PlanningBackend
from .context import ContextResolver
from .grid import AssignmentGrid
from .lifecycle import PlanLifecycle, PlanState
from .validator import AssignmentValidator, Verdict

logger = logging.getLogger(__name__)

PREFERENCE_KEYS = {
    "autofill": "autofill_enabled",
    "rotation": "rotation_enabled",
    "fallback": "fallback_enabled",
}


@dataclass
class PlanningPreferences:
    autofill: bool = False
    rotation: bool = False
    fallback: bool = False

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "PlanningPreferences":
        values = {}
        for attr, key in PREFERENCE_KEYS.items():
            raw = payload.get(key, payload.get(attr))
            if raw is not None:
                values[attr] = raw is True or str(raw).lower() in {"1", "true", "yes", "on"}
        return cls(**values)


@dataclass(frozen=True)
class LoadTicket:
    token: int
    scope: OrganizationalScope
    week_start: date


@dataclass
class WeekData:
    history: List[RotationEntry] = field(default_factory=list)
    plan: Optional[Payload] = None
    shifts: List[Payload] = field(default_factory=list)


@dataclass(frozen=True)
class CellView:
    date: str
    shift_type: ShiftType
    employee_ids: List[int]
    locked: bool


class PlanningSession:
    def __init__(
        self,
        backend: PlanningBackend,
        *,
        today: Optional[date] = None,
        preferences: Optional[PlanningPreferences] = None,
    ) -> None:
        self.backend = backend
        self.context = ContextResolver()
        self.grid = AssignmentGrid()
        self.lifecycle = PlanLifecycle()
        self.validator = AssignmentValidator(self.context, self.grid)
        self.autofill = AutofillAssistant(self.grid, self.validator)
        self.preferences = preferences or PlanningPreferences()
        self.employees: Dict[int, Employee] = {}
        self.notes = ""
        self.plan_name = ""
        self.source = rotor.WeekSource.MANUAL
        self.week_start = week_start(today or date.today())
        self._today = today
        self._epoch = 0

    # -- derived state ------------------------------------------------------------
    @property
    def scope(self) -> OrganizationalScope:
        return self.context.scope

    @property
    def week_end(self) -> date:
        return self.week_start + timedelta(days=6)

    @property
    def days(self) -> List[date]:
        return week_days(self.week_start)

    @property
    def state(self) -> PlanState:
        return self.lifecycle.state

    @property
    def is_fallback(self) -> bool:
        return self.source is rotor.WeekSource.FALLBACK

    def _discard_week(self) -> None:
        self._epoch += 1
        self.lifecycle.reset()
        self.grid.clear()
        self.notes = ""
        self.plan_name = ""
        self.source = rotor.WeekSource.MANUAL

    # -- scope --------------------------------------------------------------------
    def load_context_lists(self) -> Optional[Notice]:
        """Fetch the catalogs needed for the current selection."""

        token = self.context.token
        scope = self.context.scope
        try:
            areas = [area_from_row(row) for row in self.backend.list_areas()]
            departments = [department_from_row(row) for row in self.backend.list_departments(scope.area_id)]
            machines = [machine_from_row(row) for row in self.backend.list_machines(scope.department_id)]
            teams = [team_from_row(row) for row in self.backend.list_teams(scope.department_id, scope.machine_id)]
        except BackendError as exc:
            logger.warning("Loading context lists failed: %s", exc)
            return exc.notice()
        self.context.load_areas(areas, token)
        self.context.load_departments(departments, token)
        self.context.load_machines(machines, token)
        self.context.load_teams(teams, token)
        return None

    def select_area(self, area_id: Optional[int]) -> OrganizationalScope:
        scope = self.context.select_area(area_id)
        self._discard_week()
        return scope

    def select_department(self, department_id: Optional[int]) -> OrganizationalScope:
        scope = self.context.select_department(department_id)
        self._discard_week()
        return scope

    def select_machine(self, machine_id: Optional[int]) -> OrganizationalScope:
        scope = self.context.select_machine(machine_id)
        self._discard_week()
        return scope

    def select_team(self, team_id: Optional[int]) -> OrganizationalScope:
        scope = self.context.select_team(team_id)
        self._discard_week()
        return scope

    def apply_favorite(self, favorite: Mapping[str, Any]) -> Optional[Notice]:
        """Restore a saved scope shortcut and load its current week."""

        self.context.restore(OrganizationalScope.from_params(favorite))
        self._discard_week()
        notice = self.load_context_lists() or self.refresh_employees()
        if notice is not None:
            return notice
        return self.load_week()

    # -- week navigation ------------------------------------------------------------
    def set_week(self, day: DateLike) -> date:
        parsed = parse_iso_date(day)
        if parsed is None:
            raise ValueError(f"Invalid date: {day!r}")
        start = week_start(parsed)
        if start != self.week_start:
            self.week_start = start
            self._discard_week()
        return self.week_start

    def next_week(self) -> date:
        return self.set_week(self.week_start + timedelta(days=7))

    def previous_week(self) -> date:
        return self.set_week(self.week_start - timedelta(days=7))

    # -- loading --------------------------------------------------------------------
    def begin_load(self) -> LoadTicket:
        return LoadTicket(token=self._epoch, scope=self.scope, week_start=self.week_start)

    def is_current(self, ticket: LoadTicket) -> bool:
        return ticket.token == self._epoch

    def begin_employee_load(self) -> LoadTicket:
        """Ticket for an employee list; only a scope change makes it stale."""
        return LoadTicket(token=self.context.token, scope=self.scope, week_start=self.week_start)

    def refresh_employees(self) -> Optional[Notice]:
        ticket = self.begin_employee_load()
        try:
            rows = self.backend.list_employees(self.scope.team_id, self.scope.department_id)
        except BackendError as exc:
            logger.warning("Loading employees failed: %s", exc)
            return exc.notice()
        self.apply_employees(ticket, rows)
        return None

    def apply_employees(self, ticket: LoadTicket, rows: Iterable[Mapping[str, Any]]) -> bool:
        if not self.context.is_current(ticket.token):
            logger.debug("Discarding stale employee list for %s", ticket.scope)
            return False
        self.employees = {employee.id: employee for employee in (normalize_employee(row) for row in rows)}
        return True

    def fetch_week(self, ticket: LoadTicket) -> WeekData:
        """Run the backend round-trips for *ticket*; raises :class:`BackendError`."""

        start, end = iso(ticket.week_start), iso(ticket.week_start + timedelta(days=6))
        data = WeekData()
        if self.preferences.rotation:
            rows = self.backend.fetch_rotation_history(start, end, ticket.scope.team_id)
            data.history = [entry for entry in (normalize_history_row(row) for row in rows) if entry is not None]
            if data.history or not self.preferences.fallback:
                return data
        try:
            response = self.backend.fetch_plan(ticket.scope, start, end)
        except PlanNotFound:
            return data
        data.plan = response.get("plan")
        data.shifts = list(response.get("shifts") or [])
        return data

    def apply_week(self, ticket: LoadTicket, data: WeekData) -> bool:
        """Populate the grid from *data* unless the ticket went stale."""

        if not self.is_current(ticket):
            logger.debug("Discarding stale week data for %s", iso(ticket.week_start))
            return False

        self.source = rotor.resolve_week_source(self.preferences.rotation, bool(data.history), self.preferences.fallback)
        self.grid.clear()
        self.notes = ""
        self.plan_name = ""

        if self.source is rotor.WeekSource.ROTATION:
            self.grid.load((iso(entry.date), entry.shift_type, entry.employee_id) for entry in data.history)
            self.lifecycle.rotation_locked()
        elif self.source is rotor.WeekSource.EMPTY:
            self.lifecycle.rotation_locked()
        else:
            plan_id = int(data.plan["id"]) if data.plan else None
            if data.plan:
                self.notes = str(data.plan.get("notes") or "")
                self.plan_name = str(data.plan.get("name") or "")
            shifts = [shift for shift in (shift_from_row(row) for row in data.shifts) if shift is not None]
            self.grid.load(
                (iso(shift.date), shift.shift_type, shift.employee_id)
                for shift in shifts
                if ticket.week_start <= shift.date <= ticket.week_start + timedelta(days=6)
            )
            self.lifecycle.loaded(plan_id)

        logger.info(
            "Loaded week %s (%s, state %s)", iso(ticket.week_start), self.source.value, self.lifecycle.state.value
        )
        return True

    def load_week(self) -> Optional[Notice]:
        ticket = self.begin_load()
        try:
            data = self.fetch_week(ticket)
        except BackendError as exc:
            logger.warning("Loading week %s failed: %s", iso(ticket.week_start), exc)
            return exc.notice()
        self.apply_week(ticket, data)
        if self.source is rotor.WeekSource.FALLBACK:
            return Notice("warning", "FALLBACK", "Showing manually planned shifts (fallback mode).")
        if self.source is rotor.WeekSource.ROTATION:
            return Notice("info", "ROTATION", "Automatic rotation active.")
        if self.source is rotor.WeekSource.EMPTY:
            return Notice("info", "ROTATION_EMPTY", "Rotation is active but has no shifts for this week.")
        return None

    # -- cells ----------------------------------------------------------------------
    def cell(self, day: DateLike, shift: object) -> CellView:
        parsed = parse_day_key(day)
        shift_type = parse_shift_type(shift) or ShiftType.EARLY
        return CellView(
            date=iso(parsed) if parsed else str(day),
            shift_type=shift_type,
            employee_ids=self.grid.get(day, shift),
            locked=not self.lifecycle.can_mutate,
        )

    def week_cells(self) -> List[CellView]:
        return [self.cell(day, shift) for day in self.days for shift in SHIFT_ORDER]

    def week_status(self, employee_id: int) -> AvailabilityStatus:
        """Status badge for the employee list of the current week."""

        employee = self.employees.get(int(employee_id))
        if employee is None:
            return AvailabilityStatus.AVAILABLE
        return availability.resolve_for_week(employee, self.week_start)

    # -- mutation -------------------------------------------------------------------
    def _gate(self, day: DateLike, shift: object, employee_id: int) -> Verdict | Employee:
        if parse_day_key(day) is None or parse_shift_type(shift) is None:
            return Verdict.reject(InvalidCell(str(day), str(shift)))
        locked = self.lifecycle.check_mutable()
        if locked is not None:
            return Verdict.reject(locked)
        employee = self.employees.get(int(employee_id))
        if employee is None:
            return Verdict.reject(UnknownEmployee(int(employee_id)))
        return employee

    def preview_drop(self, day: DateLike, shift: object, employee_id: int) -> Verdict:
        """Verdict for a drop without touching the grid."""

        gate = self._gate(day, shift, employee_id)
        if isinstance(gate, Verdict):
            return gate
        if gate.id in self.grid.get(day, shift):
            return Verdict.accept()
        return self.validator.can_assign(gate, day, shift, self.scope)

    def attempt_assign(self, day: DateLike, shift: object, employee_id: int) -> Verdict:
        """Single entry point for a drop or click on a cell.

        An employee already in the cell is taken out again; otherwise the
        validator decides and, on success, the employee is added (and
        autofilled across the week when enabled).
        """

        gate = self._gate(day, shift, employee_id)
        if isinstance(gate, Verdict):
            return gate
        employee = gate
        if employee.id in self.grid.get(day, shift):
            self.grid.toggle(day, shift, employee.id)
            return Verdict.accept()

        verdict = self.validator.can_assign(employee, day, shift, self.scope)
        if not verdict:
            return verdict
        self.grid.toggle(day, shift, employee.id)
        if self.preferences.autofill:
            self.autofill.propagate(employee, day, shift, self.scope)
        return verdict

    def remove_assignment(self, day: DateLike, shift: object, employee_id: int) -> Verdict:
        locked = self.lifecycle.check_mutable()
        if locked is not None:
            return Verdict.reject(locked)
        self.grid.remove(day, shift, employee_id)
        return Verdict.accept()

    # -- plan lifecycle -------------------------------------------------------------
    def unlock(self) -> Verdict:
        if self.lifecycle.state is PlanState.SAVED:
            self.lifecycle.unlock()
            return Verdict.accept()
        locked = self.lifecycle.check_mutable()
        if locked is not None:
            return Verdict.reject(locked)
        return Verdict.accept()

    def build_plan(self) -> ShiftPlan:
        shifts = [
            PlanShift(employee_id=employee_id, date=parse_iso_date(day), shift_type=shift_type)
            for day, shift_type, employee_id in self.grid.entries()
            if self.week_start <= parse_iso_date(day) <= self.week_end
        ]
        return ShiftPlan(
            id=self.lifecycle.plan_id,
            scope=self.scope,
            start_date=self.week_start,
            end_date=self.week_end,
            name=self.plan_name or default_plan_name(self.week_start),
            notes=self.notes,
            shifts=shifts,
        )

    def save(self, notes: Optional[str] = None) -> Notice:
        check = self.context.validate()
        if not check.valid:
            return InvalidScope(check.reason or "invalid selection").notice()
        locked = self.lifecycle.check_mutable()
        if locked is not None:
            return locked.notice()

        plan = self.build_plan()
        if notes is not None:
            plan.notes = notes
        payload = plan.to_payload()
        try:
            if self.lifecycle.plan_id is None:
                response = self.backend.create_plan(payload)
                plan_id = int(response["planId"])
            else:
                plan_id = self.lifecycle.plan_id
                self.backend.update_plan(plan_id, payload)
        except BackendError as exc:
            logger.warning("Saving plan for week %s failed: %s", iso(self.week_start), exc)
            return exc.notice()

        self.lifecycle.saved(plan_id)
        self.notes = plan.notes
        self.plan_name = plan.name
        logger.info("Saved plan %s with %d shift(s)", plan_id, len(plan.shifts))
        return Notice("success", "SAVED", f"Shift plan saved ({len(plan.shifts)} shifts).")

    def reset(self) -> Notice:
        """Discard the week; a persisted plan is deleted from the backend too."""

        plan_id = self.lifecycle.plan_id
        if plan_id is not None:
            try:
                self.backend.delete_plan(plan_id)
            except BackendError as exc:
                logger.warning("Deleting plan %s failed: %s", plan_id, exc)
                return exc.notice()
            self.lifecycle.deleted()
        elif self.lifecycle.state is PlanState.ROTATION:
            return PlanLocked(rotation=True).notice()
        self.grid.clear()
        self.notes = ""
        self.plan_name = ""
        return Notice("success", "RESET", "Shift plan reset.")

    # -- preferences ----------------------------------------------------------------
    def load_preferences(self) -> Optional[Notice]:
        try:
            payload = self.backend.get_preferences()
        except BackendError as exc:
            logger.warning("Loading preferences failed: %s", exc)
            return exc.notice()
        self.preferences = PlanningPreferences.from_mapping(payload)
        return None

    def _store_preference(self, attr: str, value: Any) -> Optional[Notice]:
        try:
            self.backend.save_preference(PREFERENCE_KEYS.get(attr, attr), value)
        except BackendError as exc:
            logger.warning("Saving preference %s failed: %s", attr, exc)
            return exc.notice()
        return None

    def set_autofill(self, enabled: bool) -> Optional[Notice]:
        self.preferences.autofill = enabled
        return self._store_preference("autofill", enabled)

    def set_fallback(self, enabled: bool) -> Optional[Notice]:
        self.preferences.fallback = enabled
        notice = self._store_preference("fallback", enabled)
        reload_notice = self.reload()
        return notice or reload_notice

    def set_rotation(self, enabled: bool) -> Optional[Notice]:
        """Toggle rotation mode; disabling it deletes the team's rotation history."""

        if not enabled and self.preferences.rotation:
            try:
                removed = self.backend.delete_rotation_history(self.scope.team_id)
            except BackendError as exc:
                logger.warning("Deleting rotation history failed: %s", exc)
                return exc.notice()
            logger.info("Deleted %d rotation history row(s) for team %s", removed, self.scope.team_id)
        self.preferences.rotation = enabled
        notice = self._store_preference("rotation", enabled)
        reload_notice = self.reload()
        return notice or reload_notice

    def reload(self) -> Optional[Notice]:
        """Reload the current week, discarding in-memory plan state first."""

        self._discard_week()
        return self.load_week()

    # -- rotation -------------------------------------------------------------------
    def preview_rotation(self, pattern: RotationPattern, start: date, end: date) -> List[RotationEntry]:
        return rotor.generate(pattern, start, end)

    def create_rotation(self, pattern: RotationPattern, start: date, end: date) -> Notice:
        """Persist *pattern*, assign its employees, generate history and show it."""

        try:
            rotor.validate_window(start, end, self._today)
        except rotor.RotationWindowError as exc:
            return Notice("error", "INVALID_WINDOW", str(exc))
        groups = pattern.config.shift_groups
        if not groups:
            return Notice("error", "NO_EMPLOYEES", "Drag at least one employee into a shift column.")

        payload = pattern.to_payload()
        if payload["teamId"] is None:
            payload["teamId"] = self.scope.team_id
        try:
            created = self.backend.create_pattern(payload)
            pattern_id = int(created["id"])
            self.backend.assign_pattern(
                {
                    "patternId": pattern_id,
                    "teamId": payload["teamId"],
                    "userIds": sorted(groups),
                    "shiftGroups": payload["patternConfig"]["shiftGroups"],
                    "startsAt": iso(start),
                    "endsAt": iso(end),
                }
            )
            generated = self.backend.generate_rotation(
                {"patternId": pattern_id, "startDate": iso(start), "endDate": iso(end)}
            )
        except RotationOverlap as exc:
            logger.warning("Rotation overlaps an existing one: %s", exc)
            return exc.notice()
        except BackendError as exc:
            logger.warning("Creating rotation failed: %s", exc)
            return exc.notice()

        logger.info("Rotation pattern %s generated %d shift(s)", pattern_id, len(generated))
        self.preferences.rotation = True
        self._store_preference("rotation", True)
        self._store_preference("rotation_pattern_id", pattern_id)
        self.reload()
        return Notice("success", "ROTATION_CREATED", f"Rotation created ({len(generated)} shifts).")

    def update_rotation(self, pattern: RotationPattern) -> Notice:
        """Send an edited pattern; the backend regenerates its history, then the week reloads."""

        if pattern.id is None:
            return Notice("error", "NO_PATTERN", "Select a saved rotation pattern to edit.")
        if not pattern.config.shift_groups:
            return Notice("error", "NO_EMPLOYEES", "Drag at least one employee into a shift column.")

        payload = pattern.to_payload()
        if payload["teamId"] is None:
            payload["teamId"] = self.scope.team_id
        try:
            updated = self.backend.update_pattern(pattern.id, payload)
        except RotationOverlap as exc:
            logger.warning("Edited rotation overlaps an existing one: %s", exc)
            return exc.notice()
        except BackendError as exc:
            logger.warning("Updating rotation %s failed: %s", pattern.id, exc)
            return exc.notice()

        regenerated = int(updated.get("regenerated") or 0)
        logger.info("Rotation pattern %s updated, %d shift(s) regenerated", pattern.id, regenerated)
        self.reload()
        return Notice("success", "ROTATION_UPDATED", f"Rotation updated ({regenerated} shifts regenerated).")


__all__ = [
    "CellView",
    "LoadTicket",
    "PREFERENCE_KEYS",
    "PlanningPreferences",
    "PlanningSession",
    "WeekData",
]
