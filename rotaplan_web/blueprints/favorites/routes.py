from __future__ import annotations

from flask import Blueprint, jsonify, request

from ...services import preferences_service

bp = Blueprint("favorites", __name__, url_prefix="/api/shifts/favorites")


@bp.route("", methods=["GET"])
def list_favorites():
    return jsonify(preferences_service.list_favorites())


@bp.route("", methods=["POST"])
def create_favorite():
    payload = request.get_json(force=True)
    return jsonify(preferences_service.create_favorite(payload)), 201


@bp.route("/<int:favorite_id>", methods=["GET"])
def get_favorite(favorite_id: int):
    return jsonify(preferences_service.get_favorite(favorite_id))


@bp.route("/<int:favorite_id>", methods=["DELETE"])
def delete_favorite(favorite_id: int):
    preferences_service.delete_favorite(favorite_id)
    return jsonify({"ok": True})
