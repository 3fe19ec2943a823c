from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required
from studyhall.extensions import limiter
from studyhall.services.absences import (
    create_pre_absence, delete_pre_absence, list_pre_absences, sync_from_sheet,
)
from utils.audit import log_event
from utils.decorators import current_user, role_required

pre_absences_bp = Blueprint("pre_absences", __name__)


@pre_absences_bp.route("/", methods=["GET"])
@jwt_required()
def list_all():
    try:
        rows = list_pre_absences(request.args.get("date") or None)
    except ValueError:
        return jsonify({"error": "date must be YYYY-MM-DD"}), 400
    return jsonify({"pre_absences": [p.to_dict() for p in rows]}), 200


@pre_absences_bp.route("/", methods=["POST"])
@jwt_required()
@role_required("admin")
def create():
    data = request.get_json() or {}
    student_id = data.get("student_id")
    start_date = data.get("start_date")
    if not student_id or not start_date:
        return jsonify({"error": "student_id and start_date are required"}), 400

    try:
        pre_absence = create_pre_absence(
            student_id,
            start_date,
            data.get("end_date") or start_date,
            reason=data.get("reason"),
            absence_type=data.get("type") or "pre_absence",
        )
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    except LookupError as e:
        return jsonify({"error": str(e)}), 404

    return jsonify({"message": "Pre-absence registered", "pre_absence": pre_absence.to_dict()}), 201


@pre_absences_bp.route("/<int:pre_absence_id>", methods=["DELETE"])
@jwt_required()
@role_required("admin")
def delete(pre_absence_id):
    try:
        delete_pre_absence(pre_absence_id)
    except LookupError as e:
        return jsonify({"error": str(e)}), 404
    return jsonify({"message": "Pre-absence deleted"}), 200


@pre_absences_bp.route("/sync", methods=["POST"])
@jwt_required()
@role_required("admin")
@limiter.limit("5 per minute")
def sync():
    result = sync_from_sheet()
    log_event(
        "PRE_ABSENCE_SYNC",
        user_id=current_user().id,
        ip=request.remote_addr,
        description=f"imported {result['imported']}, skipped {result['skipped']}"
    )
    return jsonify(result), 200
