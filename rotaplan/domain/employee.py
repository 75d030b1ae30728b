from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Mapping, Optional

from .dates import parse_iso_date


class AvailabilityStatus(str, Enum):
    AVAILABLE = "available"
    VACATION = "vacation"
    SICK = "sick"
    UNAVAILABLE = "unavailable"
    TRAINING = "training"
    OTHER = "other"


@dataclass(frozen=True)
class Employee:
    id: int
    first_name: str = ""
    last_name: str = ""
    username: str = ""
    availability_status: AvailabilityStatus = AvailabilityStatus.AVAILABLE
    availability_start: Optional[date] = None
    availability_end: Optional[date] = None
    availability_reason: Optional[str] = None
    team_id: Optional[int] = None
    department_id: Optional[int] = None

    @property
    def display_name(self) -> str:
        full_name = f"{self.first_name} {self.last_name}".strip()
        if full_name:
            return full_name
        return self.username or f"user_{self.id}"


def parse_availability_status(raw: object) -> AvailabilityStatus:
    """Resolve a raw status string.

    Composite values such as ``"available vacation"`` resolve to the second
    word; empty input means available; unknown words map to ``other``.
    """

    if isinstance(raw, AvailabilityStatus):
        return raw
    parts = str(raw or "").strip().lower().split()
    if not parts:
        return AvailabilityStatus.AVAILABLE
    word = parts[1] if len(parts) > 1 else parts[0]
    try:
        return AvailabilityStatus(word)
    except ValueError:
        return AvailabilityStatus.OTHER


def _pick(payload: Mapping[str, Any], *names: str) -> Any:
    for name in names:
        value = payload.get(name)
        if value is not None:
            return value
    return None


def _optional_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    return int(value)


def normalize_employee(payload: Mapping[str, Any]) -> Employee:
    """Build the canonical :class:`Employee` from either API field-name style."""

    reason = _pick(payload, "availability_reason", "availabilityReason", "availability_notes", "availabilityNotes")
    return Employee(
        id=int(payload["id"]),
        first_name=str(_pick(payload, "first_name", "firstName") or ""),
        last_name=str(_pick(payload, "last_name", "lastName") or ""),
        username=str(_pick(payload, "username", "email") or ""),
        availability_status=parse_availability_status(
            _pick(payload, "availability_status", "availabilityStatus")
        ),
        availability_start=parse_iso_date(_pick(payload, "availability_start", "availabilityStart")),
        availability_end=parse_iso_date(_pick(payload, "availability_end", "availabilityEnd")),
        availability_reason=str(reason) if reason else None,
        team_id=_optional_int(_pick(payload, "team_id", "teamId")),
        department_id=_optional_int(_pick(payload, "department_id", "departmentId")),
    )


__all__ = ["AvailabilityStatus", "Employee", "normalize_employee", "parse_availability_status"]
