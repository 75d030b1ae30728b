"""Data access for weekly shift plans and their shifts."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

from . import db

_PLAN_COLUMNS = (
    "id, area_id, department_id, machine_id, team_id, start_date, end_date, name, notes, "
    "created_at, updated_at"
)


def _plan_dict(row: Any) -> Dict[str, Any]:
    return {
        "id": int(row["id"]),
        "areaId": row["area_id"],
        "departmentId": row["department_id"],
        "machineId": row["machine_id"],
        "teamId": row["team_id"],
        "startDate": row["start_date"],
        "endDate": row["end_date"],
        "name": row["name"],
        "notes": row["notes"],
        "createdAt": row["created_at"],
        "updatedAt": row["updated_at"],
    }


def find_plan(scope: Dict[str, Optional[int]], start_date: str, end_date: str) -> Optional[Dict[str, Any]]:
    """Return the plan whose scope matches exactly and whose week overlaps the range."""
    row = db.query_one(
        f"SELECT {_PLAN_COLUMNS} FROM shift_plans "
        "WHERE department_id IS ? AND team_id IS ? AND machine_id IS ? "
        "AND start_date <= ? AND end_date >= ? "
        "ORDER BY start_date DESC, id DESC LIMIT 1",
        (scope.get("departmentId"), scope.get("teamId"), scope.get("machineId"), end_date, start_date),
    )
    return _plan_dict(row) if row else None


def get_plan(plan_id: int) -> Optional[Dict[str, Any]]:
    row = db.query_one(f"SELECT {_PLAN_COLUMNS} FROM shift_plans WHERE id = ?", (plan_id,))
    return _plan_dict(row) if row else None


def list_shifts(plan_id: int) -> List[Dict[str, Any]]:
    rows = db.query_all(
        "SELECT id, user_id, date, type, start_time, end_time FROM plan_shifts "
        "WHERE plan_id = ? ORDER BY date, type, user_id",
        (plan_id,),
    )
    return [
        {
            "id": int(row["id"]),
            "userId": int(row["user_id"]),
            "date": row["date"],
            "type": row["type"],
            "startTime": row["start_time"],
            "endTime": row["end_time"],
        }
        for row in rows
    ]


def insert_plan(plan: Dict[str, Any]) -> int:
    cursor = db.execute(
        "INSERT INTO shift_plans(area_id, department_id, machine_id, team_id, start_date, end_date, name, notes) "
        "VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
        (
            plan.get("areaId"),
            plan["departmentId"],
            plan.get("machineId"),
            plan.get("teamId"),
            plan["startDate"],
            plan["endDate"],
            plan["name"],
            plan.get("notes") or "",
        ),
        commit=False,
    )
    return int(cursor.lastrowid)


def update_plan(plan_id: int, plan: Dict[str, Any]) -> None:
    db.execute(
        "UPDATE shift_plans SET name = ?, notes = ?, start_date = ?, end_date = ?, "
        "updated_at = CURRENT_TIMESTAMP WHERE id = ?",
        (plan["name"], plan.get("notes") or "", plan["startDate"], plan["endDate"], plan_id),
        commit=False,
    )


def replace_shifts(plan_id: int, shifts: Iterable[Dict[str, Any]]) -> List[int]:
    """Replace all shifts of a plan; the caller commits."""
    db.execute("DELETE FROM plan_shifts WHERE plan_id = ?", (plan_id,), commit=False)
    ids: List[int] = []
    for shift in shifts:
        cursor = db.execute(
            "INSERT INTO plan_shifts(plan_id, user_id, date, type, start_time, end_time) "
            "VALUES (?, ?, ?, ?, ?, ?)",
            (plan_id, shift["userId"], shift["date"], shift["type"], shift["startTime"], shift["endTime"]),
            commit=False,
        )
        ids.append(int(cursor.lastrowid))
    return ids


def delete_plan(plan_id: int) -> int:
    db.execute("DELETE FROM plan_shifts WHERE plan_id = ?", (plan_id,), commit=False)
    cursor = db.execute("DELETE FROM shift_plans WHERE id = ?", (plan_id,))
    return cursor.rowcount
