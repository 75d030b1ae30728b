"""Planning preferences and saved scope shortcuts (favorites)."""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Mapping

from flask import current_app

from ..dao import favorites_dao, preferences_dao
from . import directory_service
from .errors import ServiceError, bad_request, conflict, not_found

logger = logging.getLogger(__name__)

KEY_PATTERN = re.compile(r"^[a-z][a-z0-9_]{0,63}$")


def get_preferences() -> Dict[str, Any]:
    """Stored preferences layered over ``PLANNING_DEFAULTS``."""
    preferences: Dict[str, Any] = dict(current_app.config.get("PLANNING_DEFAULTS") or {})
    preferences.update(preferences_dao.read_preferences())
    return preferences


def save_preference(key: str, value: Any) -> Dict[str, Any]:
    if not KEY_PATTERN.match(key):
        raise bad_request(f"Invalid preference key: {key!r}")
    preferences_dao.upsert_preference(key, value)
    logger.debug("Preference %s set to %r", key, value)
    return {"key": key, "value": value}


def save_preferences(payload: Mapping[str, Any]) -> Dict[str, Any]:
    if not isinstance(payload, Mapping):
        raise bad_request("JSON object expected")
    for key, value in payload.items():
        save_preference(str(key), value)
    return get_preferences()


def list_favorites() -> List[Dict[str, Any]]:
    return favorites_dao.list_favorites()


def get_favorite(favorite_id: int) -> Dict[str, Any]:
    favorite = favorites_dao.get_favorite(favorite_id)
    if favorite is None:
        raise not_found(f"Favorite {favorite_id} not found")
    return favorite


def create_favorite(payload: Mapping[str, Any]) -> Dict[str, Any]:
    if not isinstance(payload, Mapping):
        raise bad_request("JSON object expected")
    name = str(payload.get("name") or "").strip()
    if not name:
        raise bad_request("name is required")
    scope = directory_service.parse_scope(payload)
    check = directory_service.check_scope(scope)
    if not check.valid:
        raise ServiceError("INVALID_SCOPE", f"Invalid selection: {check.reason}", 400)
    if favorites_dao.name_exists(name):
        raise conflict("DUPLICATE", f"A favorite named '{name}' already exists")
    favorite_id = favorites_dao.insert_favorite(name, scope.as_params())
    logger.info("Saved favorite %s (%s)", favorite_id, name)
    return get_favorite(favorite_id)


def delete_favorite(favorite_id: int) -> None:
    if favorites_dao.delete_favorite(favorite_id) == 0:
        raise not_found(f"Favorite {favorite_id} not found")
