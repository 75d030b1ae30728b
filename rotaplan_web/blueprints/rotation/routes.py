from __future__ import annotations

from flask import Blueprint, jsonify, request

from ...services import rotation_service
from ...services.directory_service import parse_id

bp = Blueprint("rotation", __name__, url_prefix="/api/shifts/rotation")


@bp.route("/patterns", methods=["GET"])
def list_patterns():
    team_id = parse_id(request.args.get("teamId"), "teamId")
    active_only = request.args.get("active", "").lower() in {"1", "true", "yes"}
    return jsonify(rotation_service.list_patterns(team_id, active_only=active_only))


@bp.route("/patterns", methods=["POST"])
def create_pattern():
    payload = request.get_json(force=True)
    return jsonify(rotation_service.create_pattern(payload)), 201


@bp.route("/patterns/<int:pattern_id>", methods=["GET"])
def get_pattern(pattern_id: int):
    return jsonify(rotation_service.get_pattern(pattern_id))


@bp.route("/patterns/<int:pattern_id>", methods=["PUT"])
def update_pattern(pattern_id: int):
    payload = request.get_json(force=True)
    return jsonify(rotation_service.update_pattern(pattern_id, payload))


@bp.route("/patterns/<int:pattern_id>", methods=["DELETE"])
def delete_pattern(pattern_id: int):
    rotation_service.delete_pattern(pattern_id)
    return jsonify({"ok": True})


@bp.route("/assign", methods=["POST"])
def assign():
    payload = request.get_json(force=True)
    return jsonify(rotation_service.assign_employees(payload)), 201


@bp.route("/generate", methods=["POST"])
def generate():
    payload = request.get_json(force=True)
    result = rotation_service.generate(payload)
    return jsonify(result), 200 if result["preview"] else 201


@bp.route("/history", methods=["GET"])
def history():
    return jsonify(rotation_service.history(request.args))


@bp.route("/history", methods=["DELETE"])
def delete_history():
    team_id = parse_id(request.args.get("teamId"), "teamId")
    return jsonify({"deletedCounts": rotation_service.delete_history(team_id)})
