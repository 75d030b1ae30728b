"""Data access for rotation patterns, assignments and generated history."""

from __future__ import annotations

import json
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

from . import db

_PATTERN_COLUMNS = "id, name, team_id, pattern_type, config_json, starts_at, ends_at, is_active, created_at"


def _pattern_dict(row: Any) -> Dict[str, Any]:
    return {
        "id": int(row["id"]),
        "name": row["name"],
        "teamId": row["team_id"],
        "patternType": row["pattern_type"],
        "patternConfig": json.loads(row["config_json"]) if row["config_json"] else {},
        "startsAt": row["starts_at"],
        "endsAt": row["ends_at"],
        "isActive": bool(row["is_active"]),
        "createdAt": row["created_at"],
    }


def list_patterns(team_id: Optional[int] = None, *, active_only: bool = False) -> List[Dict[str, Any]]:
    sql = f"SELECT {_PATTERN_COLUMNS} FROM rotation_patterns"
    clauses: list[str] = []
    params: list[Any] = []
    if team_id is not None:
        clauses.append("team_id = ?")
        params.append(team_id)
    if active_only:
        clauses.append("is_active = 1")
    if clauses:
        sql += " WHERE " + " AND ".join(clauses)
    sql += " ORDER BY starts_at, id"
    return [_pattern_dict(row) for row in db.query_all(sql, params)]


def get_pattern(pattern_id: int) -> Optional[Dict[str, Any]]:
    row = db.query_one(f"SELECT {_PATTERN_COLUMNS} FROM rotation_patterns WHERE id = ?", (pattern_id,))
    return _pattern_dict(row) if row else None


def insert_pattern(pattern: Dict[str, Any]) -> int:
    cursor = db.execute(
        "INSERT INTO rotation_patterns(name, team_id, pattern_type, config_json, starts_at, ends_at, is_active) "
        "VALUES (?, ?, ?, ?, ?, ?, ?)",
        (
            pattern["name"],
            pattern.get("teamId"),
            pattern["patternType"],
            json.dumps(pattern.get("patternConfig") or {}, ensure_ascii=False),
            pattern["startsAt"],
            pattern.get("endsAt"),
            1 if pattern.get("isActive", True) else 0,
        ),
    )
    return int(cursor.lastrowid)


def update_pattern(pattern_id: int, pattern: Dict[str, Any]) -> int:
    cursor = db.execute(
        "UPDATE rotation_patterns SET name = ?, team_id = ?, pattern_type = ?, config_json = ?, "
        "starts_at = ?, ends_at = ?, is_active = ? WHERE id = ?",
        (
            pattern["name"],
            pattern.get("teamId"),
            pattern["patternType"],
            json.dumps(pattern.get("patternConfig") or {}, ensure_ascii=False),
            pattern["startsAt"],
            pattern.get("endsAt"),
            1 if pattern.get("isActive", True) else 0,
            pattern_id,
        ),
    )
    return cursor.rowcount


def delete_pattern(pattern_id: int) -> int:
    db.execute("DELETE FROM rotation_history WHERE pattern_id = ?", (pattern_id,), commit=False)
    db.execute("DELETE FROM rotation_assignments WHERE pattern_id = ?", (pattern_id,), commit=False)
    return db.execute("DELETE FROM rotation_patterns WHERE id = ?", (pattern_id,)).rowcount


# -- assignments ---------------------------------------------------------------


def list_assignments(pattern_id: int) -> List[Dict[str, Any]]:
    rows = db.query_all(
        "SELECT id, pattern_id, user_id, shift_group, starts_at, ends_at FROM rotation_assignments "
        "WHERE pattern_id = ? ORDER BY user_id",
        (pattern_id,),
    )
    return [
        {
            "id": int(row["id"]),
            "patternId": int(row["pattern_id"]),
            "userId": int(row["user_id"]),
            "shiftGroup": row["shift_group"],
            "startsAt": row["starts_at"],
            "endsAt": row["ends_at"],
        }
        for row in rows
    ]


def upsert_assignments(pattern_id: int, assignments: Iterable[Tuple[int, str, str, Optional[str]]]) -> None:
    db.executemany(
        "INSERT INTO rotation_assignments(pattern_id, user_id, shift_group, starts_at, ends_at) "
        "VALUES (?, ?, ?, ?, ?) "
        "ON CONFLICT(pattern_id, user_id) DO UPDATE SET shift_group=excluded.shift_group, "
        "starts_at=excluded.starts_at, ends_at=excluded.ends_at",
        [(pattern_id, user_id, group, starts_at, ends_at) for user_id, group, starts_at, ends_at in assignments],
    )


# -- history -------------------------------------------------------------------


def list_history(start_date: str, end_date: str, team_id: Optional[int] = None) -> List[Dict[str, Any]]:
    sql = (
        "SELECT id, pattern_id, team_id, user_id, shift_date, shift_type, status FROM rotation_history "
        "WHERE shift_date BETWEEN ? AND ?"
    )
    params: list[Any] = [start_date, end_date]
    if team_id is not None:
        sql += " AND team_id = ?"
        params.append(team_id)
    sql += " ORDER BY shift_date, user_id"
    return [
        {
            "id": int(row["id"]),
            "patternId": row["pattern_id"],
            "teamId": row["team_id"],
            "userId": int(row["user_id"]),
            "shiftDate": row["shift_date"],
            "shiftType": row["shift_type"],
            "status": row["status"],
        }
        for row in db.query_all(sql, params)
    ]


def existing_history_keys(user_ids: List[int], start_date: str, end_date: str) -> Set[Tuple[int, str]]:
    if not user_ids:
        return set()
    placeholders = ", ".join("?" for _ in user_ids)
    rows = db.query_all(
        f"SELECT user_id, shift_date FROM rotation_history WHERE user_id IN ({placeholders}) "
        "AND shift_date BETWEEN ? AND ?",
        [*user_ids, start_date, end_date],
    )
    return {(int(row["user_id"]), row["shift_date"]) for row in rows}


def history_span(pattern_id: int) -> Optional[Tuple[str, str]]:
    row = db.query_one(
        "SELECT MIN(shift_date) AS first_day, MAX(shift_date) AS last_day FROM rotation_history WHERE pattern_id = ?",
        (pattern_id,),
    )
    if row is None or row["first_day"] is None:
        return None
    return row["first_day"], row["last_day"]


def delete_pattern_history(pattern_id: int) -> int:
    return db.execute("DELETE FROM rotation_history WHERE pattern_id = ?", (pattern_id,)).rowcount


def delete_other_assignments(pattern_id: int, keep_user_ids: List[int]) -> int:
    if not keep_user_ids:
        return db.execute("DELETE FROM rotation_assignments WHERE pattern_id = ?", (pattern_id,)).rowcount
    placeholders = ", ".join("?" for _ in keep_user_ids)
    return db.execute(
        f"DELETE FROM rotation_assignments WHERE pattern_id = ? AND user_id NOT IN ({placeholders})",
        [pattern_id, *keep_user_ids],
    ).rowcount


def insert_history(rows: Iterable[Tuple[int, Optional[int], int, str, str, str]]) -> None:
    db.executemany(
        "INSERT INTO rotation_history(pattern_id, team_id, user_id, shift_date, shift_type, status) "
        "VALUES (?, ?, ?, ?, ?, ?)",
        list(rows),
    )


def delete_team_rotation(team_id: int) -> Dict[str, int]:
    """Remove history, assignments and patterns of a team; returns per-table counts."""
    history = db.execute("DELETE FROM rotation_history WHERE team_id = ?", (team_id,), commit=False).rowcount
    assignments = db.execute(
        "DELETE FROM rotation_assignments WHERE pattern_id IN "
        "(SELECT id FROM rotation_patterns WHERE team_id = ?)",
        (team_id,),
        commit=False,
    ).rowcount
    patterns = db.execute("DELETE FROM rotation_patterns WHERE team_id = ?", (team_id,)).rowcount
    return {"history": history, "assignments": assignments, "patterns": patterns}
