"""Key/value storage for planning preferences."""

from __future__ import annotations

import json
from typing import Any, Dict

from . import db


def read_preferences() -> Dict[str, Any]:
    rows = db.query_all("SELECT key, value_json FROM preferences ORDER BY key")
    return {str(row["key"]): json.loads(row["value_json"]) for row in rows}


def upsert_preference(key: str, value: Any) -> None:
    db.execute(
        "INSERT INTO preferences(key, value_json, updated_at) VALUES (?, ?, CURRENT_TIMESTAMP) "
        "ON CONFLICT(key) DO UPDATE SET value_json=excluded.value_json, updated_at=excluded.updated_at",
        (key, json.dumps(value, ensure_ascii=False)),
    )
