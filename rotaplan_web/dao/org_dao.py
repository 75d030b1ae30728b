"""Data access for the organizational hierarchy."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from . import db


def list_areas() -> List[Dict[str, Any]]:
    rows = db.query_all("SELECT id, name FROM areas ORDER BY name COLLATE NOCASE")
    return [{"id": int(row["id"]), "name": row["name"]} for row in rows]


def list_departments(area_id: Optional[int] = None) -> List[Dict[str, Any]]:
    sql = "SELECT id, name, area_id FROM departments"
    params: list[Any] = []
    if area_id is not None:
        sql += " WHERE area_id = ?"
        params.append(area_id)
    sql += " ORDER BY name COLLATE NOCASE"
    return [
        {"id": int(row["id"]), "name": row["name"], "areaId": row["area_id"]}
        for row in db.query_all(sql, params)
    ]


def list_machines(department_id: Optional[int] = None) -> List[Dict[str, Any]]:
    sql = (
        "SELECT m.id, m.name, m.department_id, d.area_id FROM machines m "
        "JOIN departments d ON d.id = m.department_id"
    )
    params: list[Any] = []
    if department_id is not None:
        sql += " WHERE m.department_id = ?"
        params.append(department_id)
    sql += " ORDER BY m.name COLLATE NOCASE"
    return [
        {
            "id": int(row["id"]),
            "name": row["name"],
            "departmentId": row["department_id"],
            "areaId": row["area_id"],
        }
        for row in db.query_all(sql, params)
    ]


def list_teams(department_id: Optional[int] = None, machine_id: Optional[int] = None) -> List[Dict[str, Any]]:
    sql = "SELECT id, name, department_id, machine_id FROM teams"
    clauses: list[str] = []
    params: list[Any] = []
    if department_id is not None:
        clauses.append("department_id = ?")
        params.append(department_id)
    if machine_id is not None:
        clauses.append("machine_id = ?")
        params.append(machine_id)
    if clauses:
        sql += " WHERE " + " AND ".join(clauses)
    sql += " ORDER BY name COLLATE NOCASE"
    return [
        {
            "id": int(row["id"]),
            "name": row["name"],
            "departmentId": row["department_id"],
            "machineId": row["machine_id"],
        }
        for row in db.query_all(sql, params)
    ]
