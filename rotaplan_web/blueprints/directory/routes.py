from __future__ import annotations

from flask import Blueprint, jsonify, request

from ...services import directory_service
from ...services.directory_service import parse_id

bp = Blueprint("directory", __name__)


@bp.route("/api/areas", methods=["GET"])
def list_areas():
    return jsonify(directory_service.list_areas())


@bp.route("/api/departments", methods=["GET"])
def list_departments():
    return jsonify(directory_service.list_departments(parse_id(request.args.get("areaId"), "areaId")))


@bp.route("/api/machines", methods=["GET"])
def list_machines():
    department_id = parse_id(request.args.get("departmentId"), "departmentId")
    return jsonify(directory_service.list_machines(department_id))


@bp.route("/api/teams", methods=["GET"])
def list_teams():
    department_id = parse_id(request.args.get("departmentId"), "departmentId")
    machine_id = parse_id(request.args.get("machineId"), "machineId")
    return jsonify(directory_service.list_teams(department_id, machine_id))


@bp.route("/api/employees", methods=["GET"])
def list_employees():
    team_id = parse_id(request.args.get("teamId"), "teamId")
    department_id = parse_id(request.args.get("departmentId"), "departmentId")
    return jsonify(directory_service.list_employees(team_id, department_id))
