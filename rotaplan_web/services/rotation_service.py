"""Rotation patterns, employee assignment and history generation."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import Any, Dict, List, Mapping, Optional, Tuple

from flask import current_app

from rotaplan.domain.dates import iso, parse_iso_date
from rotaplan.domain.rotation import RotationEntry, RotationPattern
from rotaplan.domain.shift import parse_shift_type, to_code
from rotaplan.services import rotor
from rotaplan.services.availability import ranges_overlap

from ..dao import employees_dao, rotation_dao
from .directory_service import parse_id
from .errors import bad_request, conflict, not_found

logger = logging.getLogger(__name__)


def _today() -> date:
    return parse_iso_date(current_app.config.get("TODAY")) or date.today()


def _cap_enabled() -> bool:
    return bool(current_app.config.get("ROTATION_YEAR_CAP", True))


def _parse_pattern(payload: Mapping[str, Any]) -> RotationPattern:
    if not isinstance(payload, Mapping):
        raise bad_request("JSON object expected")
    if not str(payload.get("name") or "").strip():
        raise bad_request("name is required")
    try:
        pattern = RotationPattern.from_payload(payload)
    except (TypeError, ValueError) as exc:
        raise bad_request(str(exc)) from exc
    if pattern.ends_at is not None and pattern.ends_at <= pattern.starts_at:
        raise bad_request("endsAt must be after startsAt")
    if _cap_enabled():
        cap = rotor.year_cap(_today())
        if pattern.starts_at > cap:
            raise bad_request(f"startsAt may not be later than {iso(cap)}")
        pattern = replace(pattern, ends_at=min(pattern.ends_at or cap, cap))
    return pattern


def _check_overlap(pattern: RotationPattern, exclude_id: Optional[int] = None) -> None:
    if pattern.team_id is None:
        return
    for other in rotation_dao.list_patterns(pattern.team_id, active_only=True):
        if other["id"] == exclude_id:
            continue
        if ranges_overlap(
            parse_iso_date(other["startsAt"]),
            parse_iso_date(other["endsAt"]),
            pattern.starts_at,
            pattern.ends_at or date.max,
        ):
            raise conflict(
                "ROTATION_OVERLAP",
                f"Rotation '{other['name']}' already covers team {pattern.team_id} in this period",
            )


def list_patterns(team_id: Optional[int] = None, *, active_only: bool = False) -> List[Dict[str, Any]]:
    return rotation_dao.list_patterns(team_id, active_only=active_only)


def get_pattern(pattern_id: int) -> Dict[str, Any]:
    pattern = rotation_dao.get_pattern(pattern_id)
    if pattern is None:
        raise not_found(f"Rotation pattern {pattern_id} not found")
    return pattern


def create_pattern(payload: Mapping[str, Any]) -> Dict[str, Any]:
    pattern = _parse_pattern(payload)
    _check_overlap(pattern)
    pattern_id = rotation_dao.insert_pattern(pattern.to_payload() | {"name": str(payload["name"]).strip()})
    logger.info("Created rotation pattern %s (%s) for team %s", pattern_id, pattern.kind.value, pattern.team_id)
    return get_pattern(pattern_id)


def update_pattern(pattern_id: int, payload: Mapping[str, Any]) -> Dict[str, Any]:
    """Apply an edit and regenerate the pattern's history over its old span.

    Shift groups sent in ``patternConfig`` replace the stored assignments.
    The result carries ``regenerated``, the number of history rows written.
    """
    if not isinstance(payload, Mapping):
        raise bad_request("JSON object expected")
    current = get_pattern(pattern_id)
    config_edit = payload.get("patternConfig") or {}
    if not isinstance(config_edit, Mapping):
        raise bad_request("patternConfig must be an object")
    merged = {**current, **payload, "patternConfig": {**current["patternConfig"], **config_edit}}
    pattern = _parse_pattern(merged)
    _check_overlap(pattern, exclude_id=pattern_id)
    stored = pattern.to_payload() | {"name": str(merged["name"]).strip(), "isActive": merged.get("isActive", True)}
    rotation_dao.update_pattern(pattern_id, stored)

    groups = pattern.config.shift_groups
    if config_edit.get("shiftGroups") and groups:
        starts_at = iso(pattern.starts_at)
        ends_at = iso(pattern.ends_at) if pattern.ends_at else None
        rotation_dao.upsert_assignments(
            pattern_id, [(user_id, to_code(group), starts_at, ends_at) for user_id, group in groups.items()]
        )
        rotation_dao.delete_other_assignments(pattern_id, sorted(groups))

    regenerated = 0
    span = rotation_dao.history_span(pattern_id)
    if span is not None:
        removed = rotation_dao.delete_pattern_history(pattern_id)
        start = max(parse_iso_date(span[0]), pattern.starts_at)
        end = parse_iso_date(span[1])
        if pattern.ends_at is not None:
            end = min(end, pattern.ends_at)
        edited, assignments = _load_for_generation(pattern_id)
        if start <= end and edited.config.shift_groups:
            fresh, _ = _expand(edited, assignments, start, end)
            _store(pattern_id, edited, fresh)
            regenerated = len(fresh)
        logger.info(
            "Regenerated %d rotation shift(s) for pattern %s (%d removed)", regenerated, pattern_id, removed
        )
    logger.info("Updated rotation pattern %s", pattern_id)
    result = get_pattern(pattern_id)
    result["regenerated"] = regenerated
    return result


def delete_pattern(pattern_id: int) -> None:
    if rotation_dao.delete_pattern(pattern_id) == 0:
        raise not_found(f"Rotation pattern {pattern_id} not found")
    logger.info("Deleted rotation pattern %s", pattern_id)


def assign_employees(payload: Mapping[str, Any]) -> List[Dict[str, Any]]:
    """Store each employee's shift group for a pattern.

    ``shiftGroups`` maps employee id to a shift code; ``userIds`` may list
    employees without a group, they default to the early shift.
    """
    if not isinstance(payload, Mapping):
        raise bad_request("JSON object expected")
    pattern_id = parse_id(payload.get("patternId"), "patternId")
    if pattern_id is None:
        raise bad_request("patternId is required")
    pattern = get_pattern(pattern_id)

    raw_groups = dict(payload.get("shiftGroups") or {})
    for user_id in payload.get("userIds") or []:
        raw_groups.setdefault(str(user_id), "F")
    if not raw_groups:
        raise bad_request("At least one employee must be assigned")

    groups: Dict[int, str] = {}
    for raw_id, raw_group in raw_groups.items():
        employee_id = parse_id(raw_id, "userId")
        shift_type = parse_shift_type(raw_group)
        if employee_id is None or shift_type is None:
            raise bad_request(f"Invalid shift group {raw_group!r} for employee {raw_id!r}")
        groups[employee_id] = to_code(shift_type)

    unknown = set(groups) - set(employees_dao.existing_ids(sorted(groups)))
    if unknown:
        raise bad_request(f"Unknown employees: {sorted(unknown)}")

    starts_at = parse_iso_date(payload.get("startsAt")) or parse_iso_date(pattern["startsAt"])
    ends_at = parse_iso_date(payload.get("endsAt")) or parse_iso_date(pattern["endsAt"])
    rotation_dao.upsert_assignments(
        pattern_id,
        [(employee_id, group, iso(starts_at), iso(ends_at) if ends_at else None) for employee_id, group in groups.items()],
    )

    config = dict(pattern["patternConfig"])
    config["shiftGroups"] = {**(config.get("shiftGroups") or {}), **{str(k): v for k, v in groups.items()}}
    rotation_dao.update_pattern(pattern_id, {**pattern, "patternConfig": config})
    logger.info("Assigned %d employee(s) to rotation pattern %s", len(groups), pattern_id)
    return rotation_dao.list_assignments(pattern_id)


def _within(assignment: Mapping[str, Any], day: date) -> bool:
    return ranges_overlap(
        parse_iso_date(assignment.get("startsAt")),
        parse_iso_date(assignment.get("endsAt")),
        day,
        day,
    )


def _load_for_generation(pattern_id: int) -> Tuple[RotationPattern, List[Dict[str, Any]]]:
    """The stored pattern with shift groups taken from its assignments."""
    stored = get_pattern(pattern_id)
    try:
        pattern = RotationPattern.from_payload(stored)
    except (TypeError, ValueError) as exc:
        raise bad_request(f"Stored pattern {pattern_id} is invalid: {exc}") from exc
    assignments = rotation_dao.list_assignments(pattern_id)
    if assignments:
        groups = {a["userId"]: parse_shift_type(a["shiftGroup"]) for a in assignments}
        pattern = replace(pattern, config=replace(pattern.config, shift_groups=groups))
    return pattern, assignments


def _expand(
    pattern: RotationPattern, assignments: List[Dict[str, Any]], start: date, end: date
) -> Tuple[List[RotationEntry], int]:
    """Entries for the window that have no history yet, and how many were skipped."""
    by_user = {a["userId"]: a for a in assignments}
    entries: List[RotationEntry] = [
        entry
        for entry in rotor.generate(pattern, start, end)
        if entry.employee_id not in by_user or _within(by_user[entry.employee_id], entry.date)
    ]
    existing = rotation_dao.existing_history_keys(sorted(pattern.config.shift_groups), iso(start), iso(end))
    fresh = [entry for entry in entries if (entry.employee_id, iso(entry.date)) not in existing]
    return fresh, len(entries) - len(fresh)


def _store(pattern_id: int, pattern: RotationPattern, entries: List[RotationEntry]) -> None:
    rotation_dao.insert_history(
        (pattern_id, pattern.team_id, e.employee_id, iso(e.date), to_code(e.shift_type), e.status) for e in entries
    )


def generate(payload: Mapping[str, Any]) -> Dict[str, Any]:
    """Expand a pattern over a window and persist the new history rows.

    Rows for an ``(employee, date)`` that already has history are skipped,
    so generating the same window twice stores nothing new. With
    ``preview`` set nothing is stored.
    """
    if not isinstance(payload, Mapping):
        raise bad_request("JSON object expected")
    pattern_id = parse_id(payload.get("patternId"), "patternId")
    if pattern_id is None:
        raise bad_request("patternId is required")
    pattern, assignments = _load_for_generation(pattern_id)
    if not pattern.config.shift_groups:
        raise bad_request(f"Rotation pattern {pattern_id} has no assigned employees")

    start = parse_iso_date(payload.get("startDate")) or pattern.starts_at
    end = parse_iso_date(payload.get("endDate")) or pattern.ends_at or rotor.year_cap(_today())
    start = max(start, pattern.starts_at)
    if pattern.ends_at is not None:
        end = min(end, pattern.ends_at)
    try:
        rotor.validate_window(start, end, _today(), cap_to_year=_cap_enabled())
    except rotor.RotationWindowError as exc:
        raise bad_request(str(exc)) from exc

    fresh, skipped = _expand(pattern, assignments, start, end)

    preview = bool(payload.get("preview"))
    if not preview:
        _store(pattern_id, pattern, fresh)
        logger.info(
            "Generated %d rotation shift(s) for pattern %s (%s..%s, %d skipped)",
            len(fresh),
            pattern_id,
            iso(start),
            iso(end),
            skipped,
        )
    return {
        "patternId": pattern_id,
        "preview": preview,
        "startDate": iso(start),
        "endDate": iso(end),
        "entries": [entry.to_payload() for entry in fresh],
        "skipped": skipped,
    }


def history(params: Mapping[str, Any]) -> List[Dict[str, Any]]:
    start = parse_iso_date(params.get("startDate"))
    end = parse_iso_date(params.get("endDate"))
    if start is None or end is None:
        raise bad_request("startDate and endDate are required")
    return rotation_dao.list_history(iso(start), iso(end), parse_id(params.get("teamId"), "teamId"))


def delete_history(team_id: Optional[int]) -> Dict[str, int]:
    if team_id is None:
        raise bad_request("teamId is required")
    counts = rotation_dao.delete_team_rotation(team_id)
    logger.info("Deleted rotation data for team %s: %s", team_id, counts)
    return counts
