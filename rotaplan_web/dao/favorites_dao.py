"""Saved scope shortcuts."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from . import db


def _to_dict(row: Any) -> Dict[str, Any]:
    return {
        "id": int(row["id"]),
        "name": row["name"],
        "areaId": row["area_id"],
        "departmentId": row["department_id"],
        "machineId": row["machine_id"],
        "teamId": row["team_id"],
        "createdAt": row["created_at"],
    }


def list_favorites() -> List[Dict[str, Any]]:
    rows = db.query_all(
        "SELECT id, name, area_id, department_id, machine_id, team_id, created_at "
        "FROM favorites ORDER BY name COLLATE NOCASE"
    )
    return [_to_dict(row) for row in rows]


def get_favorite(favorite_id: int) -> Optional[Dict[str, Any]]:
    row = db.query_one(
        "SELECT id, name, area_id, department_id, machine_id, team_id, created_at FROM favorites WHERE id = ?",
        (favorite_id,),
    )
    return _to_dict(row) if row else None


def name_exists(name: str) -> bool:
    return db.query_one("SELECT 1 FROM favorites WHERE name = ? COLLATE NOCASE", (name,)) is not None


def insert_favorite(name: str, scope: Dict[str, Optional[int]]) -> int:
    cursor = db.execute(
        "INSERT INTO favorites(name, area_id, department_id, machine_id, team_id) VALUES (?, ?, ?, ?, ?)",
        (name, scope.get("areaId"), scope.get("departmentId"), scope.get("machineId"), scope.get("teamId")),
    )
    return int(cursor.lastrowid)


def delete_favorite(favorite_id: int) -> int:
    return db.execute("DELETE FROM favorites WHERE id = ?", (favorite_id,)).rowcount
