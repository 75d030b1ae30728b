from __future__ import annotations

from flask import Blueprint, jsonify, request

from ...services import preferences_service
from ...services.errors import bad_request

bp = Blueprint("preferences", __name__)


@bp.route("/api/preferences", methods=["GET"])
def get_preferences():
    return jsonify(preferences_service.get_preferences())


@bp.route("/api/preferences", methods=["PUT"])
def save_preferences():
    payload = request.get_json(force=True)
    return jsonify(preferences_service.save_preferences(payload))


@bp.route("/api/preferences/<key>", methods=["PUT"])
def save_preference(key: str):
    payload = request.get_json(force=True)
    if not isinstance(payload, dict) or "value" not in payload:
        raise bad_request("Body must be an object with a 'value' field")
    return jsonify(preferences_service.save_preference(key, payload["value"]))
