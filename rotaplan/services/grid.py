"""Per-day, per-shift assignment container."""
from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from ..domain.dates import DateLike, iso, parse_day_key
from ..domain.shift import SHIFT_ORDER, ShiftType, parse_shift_type

Cell = Tuple[str, ShiftType]
Entry = Tuple[str, ShiftType, int]


def _cell_key(day: DateLike, shift: object) -> Optional[Cell]:
    parsed_day = parse_day_key(day)
    shift_type = parse_shift_type(shift)
    if parsed_day is None or shift_type is None:
        return None
    return iso(parsed_day), shift_type


def _unique(employee_ids: Iterable[int]) -> List[int]:
    seen: set[int] = set()
    result: List[int] = []
    for employee_id in employee_ids:
        value = int(employee_id)
        if value not in seen:
            seen.add(value)
            result.append(value)
    return result


class AssignmentGrid:
    """Mapping of ``YYYY-MM-DD`` to the employees on each shift of that day.

    The grid holds no business rules. Day keys are exactly ``YYYY-MM-DD``;
    invalid dates or shift keys read as empty and are ignored on write.
    """

    def __init__(self, entries: Iterable[Entry] | None = None) -> None:
        self._data: Dict[str, Dict[ShiftType, List[int]]] = {}
        if entries:
            self.load(entries)

    # -- Mapping-style access over days --------------------------------------------
    def __getitem__(self, key: str) -> Dict[ShiftType, List[int]]:
        parsed = parse_day_key(key)
        row = self._data.get(iso(parsed), {}) if parsed is not None else {}
        return {shift: list(row.get(shift, [])) for shift in SHIFT_ORDER}

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._data.keys()))

    def __len__(self) -> int:
        return len(self._data)

    # -- Cell access --------------------------------------------------------------
    def get(self, day: DateLike, shift: object) -> List[int]:
        key = _cell_key(day, shift)
        if key is None:
            return []
        return list(self._data.get(key[0], {}).get(key[1], []))

    def set(self, day: DateLike, shift: object, employee_ids: Iterable[int]) -> None:
        key = _cell_key(day, shift)
        if key is None:
            return
        date_key, shift_type = key
        values = _unique(employee_ids)
        row = self._data.setdefault(date_key, {})
        if values:
            row[shift_type] = values
        else:
            row.pop(shift_type, None)
            if not row:
                self._data.pop(date_key, None)

    def toggle(self, day: DateLike, shift: object, employee_id: int) -> bool:
        """Add the employee if absent, remove if present. Returns ``True`` when added."""

        current = self.get(day, shift)
        if int(employee_id) in current:
            current.remove(int(employee_id))
            self.set(day, shift, current)
            return False
        current.append(int(employee_id))
        self.set(day, shift, current)
        return _cell_key(day, shift) is not None

    def remove(self, day: DateLike, shift: object, employee_id: int) -> bool:
        current = self.get(day, shift)
        if int(employee_id) not in current:
            return False
        current.remove(int(employee_id))
        self.set(day, shift, current)
        return True

    def clear(self) -> None:
        self._data.clear()

    # -- Queries ------------------------------------------------------------------
    def shifts_of(self, employee_id: int, day: DateLike) -> List[ShiftType]:
        parsed = parse_day_key(day)
        if parsed is None:
            return []
        row = self._data.get(iso(parsed), {})
        return [shift for shift in SHIFT_ORDER if int(employee_id) in row.get(shift, ())]

    def entries(self) -> Iterator[Entry]:
        for date_key in sorted(self._data):
            row = self._data[date_key]
            for shift in SHIFT_ORDER:
                for employee_id in row.get(shift, ()):
                    yield date_key, shift, employee_id

    def load(self, entries: Iterable[Entry]) -> None:
        """Replace the grid contents; repeated loads never accumulate."""

        self.clear()
        for day, shift, employee_id in entries:
            current = self.get(day, shift)
            current.append(employee_id)
            self.set(day, shift, current)

    def is_empty(self) -> bool:
        return not self._data

    def as_dict(self) -> Dict[str, Dict[str, List[int]]]:
        return {
            date_key: {shift.value: list(ids) for shift, ids in row.items()}
            for date_key, row in sorted(self._data.items())
        }


__all__ = ["AssignmentGrid", "Entry"]
