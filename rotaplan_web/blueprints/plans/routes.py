from __future__ import annotations

from flask import Blueprint, jsonify, request

from ...services import export_service, plan_service

bp = Blueprint("plans", __name__)


@bp.route("/api/shifts/plan", methods=["GET"])
def get_plan():
    return jsonify(plan_service.find_plan(request.args))


@bp.route("/api/shifts/plan", methods=["POST"])
def create_plan():
    payload = request.get_json(force=True)
    return jsonify(plan_service.create_plan(payload)), 201


@bp.route("/api/shifts/plan/<int:plan_id>", methods=["GET"])
def get_plan_by_id(plan_id: int):
    return jsonify(plan_service.get_plan(plan_id))


@bp.route("/api/shifts/plan/<int:plan_id>", methods=["PUT"])
def update_plan(plan_id: int):
    payload = request.get_json(force=True)
    return jsonify(plan_service.update_plan(plan_id, payload))


@bp.route("/api/shifts/plan/<int:plan_id>", methods=["DELETE"])
def delete_plan(plan_id: int):
    plan_service.delete_plan(plan_id)
    return jsonify({"ok": True})


@bp.route("/api/shifts/plan/<int:plan_id>/export.xlsx")
def export_plan(plan_id: int):
    stream, filename = export_service.export_plan(plan_id)
    return (stream.getvalue(), 200, {
        "Content-Type": export_service.XLSX_MIMETYPE,
        "Content-Disposition": f"attachment; filename={filename}",
    })
