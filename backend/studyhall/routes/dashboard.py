from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required
from studyhall.services.dashboard import (
    DayView, attendance_details, overall_stats, search_students, students_by_status, zone_summaries,
)
from studyhall.services.staff_schedule import (
    is_temporary_period, operating_dates, resolve_date, staff_for_date,
)
from utils.decorators import role_required

dashboard_bp = Blueprint('dashboard', __name__)


def _grade_arg():
    grade = request.args.get("grade", type=int)
    if grade not in (None, 1, 2):
        raise ValueError("grade must be 1 or 2")
    return grade


@dashboard_bp.route('/summary')
@jwt_required()
@role_required("admin")
def summary():
    try:
        view = DayView(resolve_date(request.args.get("date")))
        summaries = zone_summaries(view, _grade_arg())
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    return jsonify({
        "date": view.date_str,
        "zones": summaries,
        "overall": overall_stats(summaries),
        "staff": staff_for_date(view.day),
        "isTemporaryPeriod": is_temporary_period(view.day),
    })


@dashboard_bp.route('/students')
@jwt_required()
@role_required("admin")
def students():
    try:
        view = DayView(resolve_date(request.args.get("date")))
        rows = students_by_status(view, request.args.get("status", "all"), _grade_arg())
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    return jsonify({"date": view.date_str, "students": rows, "total": len(rows)})


@dashboard_bp.route('/zones/<zone_id>')
@jwt_required()
@role_required("admin")
def zone_details(zone_id):
    try:
        view = DayView(resolve_date(request.args.get("date")))
        rows = attendance_details(view, zone_id)
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    except LookupError as e:
        return jsonify({"error": str(e)}), 404

    return jsonify({"date": view.date_str, "zoneId": zone_id, "students": rows})


@dashboard_bp.route('/search')
@jwt_required()
def search():
    return jsonify({"results": search_students(request.args.get("name", ""))})


@dashboard_bp.route('/dates')
@jwt_required()
def dates():
    return jsonify({"dates": operating_dates()})
