from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required
from studyhall.services.seat_layouts import ZONES
from studyhall.services.staff_schedule import (
    ALL_STAFF_NAMES, is_temporary_period, operating_dates, resolve_date,
    set_staff_assignment, staff_for_date, zone_recorder,
)
from utils.decorators import role_required

schedules_bp = Blueprint("schedules", __name__)


@schedules_bp.route("/", methods=["GET"])
@jwt_required()
def for_date():
    try:
        day = resolve_date(request.args.get("date"))
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    schedule = staff_for_date(day)
    return jsonify({
        "date": day.isoformat(),
        "staff": schedule,
        "recorders": {z["id"]: zone_recorder(schedule, z["id"]) for z in ZONES},
        "isTemporaryPeriod": is_temporary_period(day),
    }), 200


@schedules_bp.route("/dates", methods=["GET"])
@jwt_required()
def dates():
    return jsonify({"dates": operating_dates()}), 200


@schedules_bp.route("/staff", methods=["GET"])
@jwt_required()
def staff_names():
    return jsonify({"staff": ALL_STAFF_NAMES}), 200


@schedules_bp.route("/", methods=["PUT"])
@jwt_required()
@role_required("admin")
def assign():
    data = request.get_json() or {}
    try:
        day = resolve_date(data.get("date"))
        row = set_staff_assignment(day, data.get("grade"), data.get("staff"))
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    return jsonify({"message": "Schedule updated", "assignment": row.to_dict()}), 200
