"""Canonical shift type helpers."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple

__all__ = [
    "ShiftType",
    "ShiftSpec",
    "SHIFT_SPECS",
    "SHIFT_ORDER",
    "to_code",
    "from_code",
    "parse_shift_type",
    "spec_for",
]


class ShiftType(str, Enum):
    EARLY = "early"
    LATE = "late"
    NIGHT = "night"


@dataclass(frozen=True)
class ShiftSpec:
    shift_type: ShiftType
    code: str
    start: str
    end: str
    hours: int
    label: str


SHIFT_SPECS: Dict[ShiftType, ShiftSpec] = {
    ShiftType.EARLY: ShiftSpec(ShiftType.EARLY, "F", "06:00", "14:00", 8, "Early shift"),
    ShiftType.LATE: ShiftSpec(ShiftType.LATE, "S", "14:00", "22:00", 8, "Late shift"),
    ShiftType.NIGHT: ShiftSpec(ShiftType.NIGHT, "N", "22:00", "06:00", 8, "Night shift"),
}

SHIFT_ORDER: Tuple[ShiftType, ...] = (ShiftType.EARLY, ShiftType.LATE, ShiftType.NIGHT)

_CODE_TO_TYPE: Dict[str, ShiftType] = {spec.code: key for key, spec in SHIFT_SPECS.items()}


def _normalize(value: object) -> str:
    if isinstance(value, ShiftType):
        return value.value
    return str(value or "").strip().lower()


def to_code(shift_type: ShiftType) -> str:
    """Return the single-letter external code (``F``/``S``/``N``)."""

    return SHIFT_SPECS[shift_type].code


def from_code(code: str) -> ShiftType:
    """Map an external code back to a :class:`ShiftType`.

    Raises ``ValueError`` for unknown codes so the persistence boundary
    never invents a shift.
    """

    try:
        return _CODE_TO_TYPE[str(code).strip().upper()]
    except KeyError as exc:
        raise ValueError(f"Unknown shift code: {code!r}") from exc


def parse_shift_type(value: object) -> Optional[ShiftType]:
    """Accept a word (``early``) or a code (``F``); ``None`` for anything else."""

    normalized = _normalize(value)
    if not normalized:
        return None
    for shift_type in ShiftType:
        if shift_type.value == normalized:
            return shift_type
    return _CODE_TO_TYPE.get(normalized.upper())


def spec_for(shift_type: ShiftType) -> ShiftSpec:
    return SHIFT_SPECS[shift_type]
