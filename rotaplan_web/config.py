"""Configuration defaults and settings-file loading."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict

import yaml

SETTINGS_ENV = "ROTAPLAN_SETTINGS"

DEFAULT_CONFIG: dict[str, Any] = {
    "SECRET_KEY": "dev",
    "JSON_SORT_KEYS": False,
    "AUTO_INIT_DB": True,
    "LOG_LEVEL": "INFO",
    # End dates of rotations may not pass 31 December of the current year.
    "ROTATION_YEAR_CAP": True,
    "PLANNING_DEFAULTS": {
        "autofill_enabled": False,
        "rotation_enabled": False,
        "fallback_enabled": False,
    },
}


def load_config(path: str | Path) -> Dict[str, Any]:
    """Read a JSON or YAML settings file into a mapping of config keys."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(path)
    with path.open("r", encoding="utf-8") as fh:
        if path.suffix.lower() in {".yaml", ".yml"}:
            data = yaml.safe_load(fh)
        else:
            data = json.load(fh)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: settings must be a mapping, got {type(data).__name__}")
    return {str(key).upper(): value for key, value in data.items()}


def settings_path(config: Dict[str, Any]) -> str | None:
    return os.environ.get(SETTINGS_ENV) or config.get("SETTINGS_FILE")
