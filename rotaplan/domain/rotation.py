"""Rotation pattern records."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from .dates import iso, parse_iso_date
from .shift import ShiftType, parse_shift_type, to_code


class PatternKind(str, Enum):
    ALTERNATE_FS = "alternate_fs"
    FIXED_N = "fixed_n"
    CUSTOM = "custom"


@dataclass(frozen=True)
class PatternConfig:
    skip_weekends: bool = True
    ignore_night_shift: bool = False
    shift_groups: Dict[int, ShiftType] = field(default_factory=dict)
    cycle_weeks: Optional[int] = None

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "skipWeekends": self.skip_weekends,
            "ignoreNightShift": self.ignore_night_shift,
            "shiftGroups": {str(emp_id): to_code(group) for emp_id, group in self.shift_groups.items()},
        }
        if self.cycle_weeks is not None:
            payload["cycleWeeks"] = self.cycle_weeks
        return payload

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "PatternConfig":
        groups: Dict[int, ShiftType] = {}
        raw_groups = payload.get("shiftGroups", payload.get("shift_groups")) or {}
        for emp_id, raw in raw_groups.items():
            shift_type = parse_shift_type(raw)
            if shift_type is None:
                raise ValueError(f"Unknown shift group {raw!r} for employee {emp_id}")
            groups[int(emp_id)] = shift_type
        cycle_weeks = payload.get("cycleWeeks", payload.get("cycle_weeks"))
        if cycle_weeks not in (None, ""):
            cycle_weeks = int(cycle_weeks)
            if cycle_weeks < 1:
                raise ValueError(f"cycleWeeks must be at least 1, got {cycle_weeks}")
        else:
            cycle_weeks = None
        return cls(
            skip_weekends=bool(payload.get("skipWeekends", payload.get("skip_weekends", True))),
            ignore_night_shift=bool(payload.get("ignoreNightShift", payload.get("ignore_night_shift", False))),
            shift_groups=groups,
            cycle_weeks=cycle_weeks,
        )


@dataclass(frozen=True)
class RotationPattern:
    kind: PatternKind
    starts_at: date
    config: PatternConfig = field(default_factory=PatternConfig)
    id: Optional[int] = None
    team_id: Optional[int] = None
    name: str = ""
    ends_at: Optional[date] = None

    def to_payload(self) -> Dict[str, Any]:
        return {
            "name": self.name or f"Rotation {iso(self.starts_at)}",
            "teamId": self.team_id,
            "patternType": self.kind.value,
            "patternConfig": self.config.to_payload(),
            "startsAt": iso(self.starts_at),
            "endsAt": iso(self.ends_at) if self.ends_at else None,
        }

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "RotationPattern":
        starts_at = parse_iso_date(payload.get("startsAt", payload.get("starts_at")))
        if starts_at is None:
            raise ValueError("Rotation pattern requires a valid startsAt date")
        team_id = payload.get("teamId", payload.get("team_id"))
        pattern_id = payload.get("id")
        return cls(
            id=int(pattern_id) if pattern_id is not None else None,
            team_id=int(team_id) if team_id not in (None, "") else None,
            name=str(payload.get("name") or ""),
            kind=PatternKind(payload.get("patternType", payload.get("pattern_type", PatternKind.CUSTOM.value))),
            config=PatternConfig.from_payload(payload.get("patternConfig", payload.get("pattern_config")) or {}),
            starts_at=starts_at,
            ends_at=parse_iso_date(payload.get("endsAt", payload.get("ends_at"))),
        )


@dataclass(frozen=True)
class RotationEntry:
    date: date
    shift_type: ShiftType
    employee_id: int
    status: str = "generated"

    def to_payload(self) -> Dict[str, Any]:
        return {
            "shiftDate": iso(self.date),
            "shiftType": to_code(self.shift_type),
            "userId": self.employee_id,
            "status": self.status,
        }


def normalize_history_row(row: Mapping[str, Any]) -> Optional[RotationEntry]:
    """Parse a history tuple from the rotation API; malformed rows yield ``None``."""

    day = parse_iso_date(row.get("shiftDate", row.get("shift_date")))
    shift_type = parse_shift_type(row.get("shiftType", row.get("shift_type")))
    employee_id = row.get("userId", row.get("user_id"))
    if day is None or shift_type is None or employee_id is None:
        return None
    return RotationEntry(
        date=day,
        shift_type=shift_type,
        employee_id=int(employee_id),
        status=str(row.get("status") or "generated"),
    )


__all__ = [
    "PatternConfig",
    "PatternKind",
    "RotationEntry",
    "RotationPattern",
    "normalize_history_row",
]
