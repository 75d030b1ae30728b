"""Data access helpers for employees."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from . import db

_COLUMNS = (
    "id, first_name, last_name, username, availability_status, availability_start, "
    "availability_end, availability_reason, team_id, department_id"
)


def _to_dict(row: Any) -> Dict[str, Any]:
    return {
        "id": int(row["id"]),
        "firstName": row["first_name"],
        "lastName": row["last_name"],
        "username": row["username"],
        "availabilityStatus": row["availability_status"],
        "availabilityStart": row["availability_start"],
        "availabilityEnd": row["availability_end"],
        "availabilityReason": row["availability_reason"],
        "teamId": row["team_id"],
        "departmentId": row["department_id"],
    }


def list_employees(team_id: Optional[int] = None, department_id: Optional[int] = None) -> List[Dict[str, Any]]:
    """Return active employees, narrowed to a team or department when given."""
    sql = f"SELECT {_COLUMNS} FROM employees WHERE is_active = 1"
    params: list[Any] = []
    if team_id is not None:
        sql += " AND team_id = ?"
        params.append(team_id)
    elif department_id is not None:
        sql += " AND department_id = ?"
        params.append(department_id)
    sql += " ORDER BY last_name COLLATE NOCASE, first_name COLLATE NOCASE"
    return [_to_dict(row) for row in db.query_all(sql, params)]


def existing_ids(employee_ids: List[int]) -> List[int]:
    if not employee_ids:
        return []
    placeholders = ", ".join("?" for _ in employee_ids)
    rows = db.query_all(f"SELECT id FROM employees WHERE id IN ({placeholders})", employee_ids)
    return [int(row["id"]) for row in rows]
