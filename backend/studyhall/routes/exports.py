from flask import Blueprint, request, jsonify, send_file
from flask_jwt_extended import jwt_required
from studyhall.extensions import limiter
from studyhall.services.dashboard import DayView
from studyhall.services.exports import (
    absent_students_for_export, excel_export, export_to_clipboard, export_to_sheets,
    is_sheets_export_configured, sheet_name, students_with_notes,
)
from studyhall.services.staff_schedule import resolve_date
from utils.audit import log_event
from utils.decorators import current_user, role_required

exports_bp = Blueprint("exports", __name__)


def _view():
    data = request.get_json(silent=True) or {}
    return DayView(resolve_date(data.get("date") or request.args.get("date")))


@exports_bp.route("/absentees", methods=["GET"])
@jwt_required()
@role_required("admin")
def absentees():
    try:
        view = _view()
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    rows = absent_students_for_export(view)
    return jsonify({
        "date": view.date_str,
        "sheetName": sheet_name(view.day),
        "absentStudents": rows,
        "studentsWithNotes": students_with_notes(view),
        "sheetsConfigured": is_sheets_export_configured(),
    }), 200


@exports_bp.route("/clipboard", methods=["GET"])
@jwt_required()
@role_required("admin")
def clipboard():
    try:
        view = _view()
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    return jsonify({"text": export_to_clipboard(view.day, absent_students_for_export(view))}), 200


@exports_bp.route("/sheets", methods=["POST"])
@jwt_required()
@role_required("admin")
@limiter.limit("10 per minute")
def sheets():
    try:
        view = _view()
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    absentees = absent_students_for_export(view)
    result = export_to_sheets(view.day, absentees, students_with_notes(view))
    log_event(
        "SHEETS_EXPORT",
        user_id=current_user().id,
        ip=request.remote_addr,
        description=f"{view.date_str}: {result['message']}",
        level="INFO" if result["success"] else "ERROR"
    )
    return jsonify(result), 200 if result["success"] else 502


@exports_bp.route("/excel", methods=["GET"])
@jwt_required()
@role_required("admin")
def excel():
    try:
        view = _view()
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    return send_file(
        excel_export(view),
        mimetype="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        as_attachment=True,
        download_name=f"attendance_{view.date_str}.xlsx",
    )
