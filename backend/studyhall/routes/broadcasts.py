from flask import Blueprint, request, jsonify, current_app, Response
from flask_jwt_extended import jwt_required
from studyhall.extensions import limiter
from studyhall.services.dashboard import DayView
from studyhall.services.discord import build_report_message, send_discord_report
from studyhall.services.exports import absent_students_for_export, display_date
from studyhall.services.notices import get_notice
from studyhall.services.report_image import render_absentee_table
from studyhall.services.sms import (
    SmsError, all_categories_text, categorize_absentees, check_health, send_absent_sms, send_test_sms,
)
from studyhall.services.staff_schedule import resolve_date
from utils.audit import log_event
from utils.decorators import current_user, role_required

broadcasts_bp = Blueprint("broadcasts", __name__)


def _payload():
    return request.get_json(silent=True) or {}


def _view():
    return DayView(resolve_date(_payload().get("date") or request.args.get("date")))


def _flag(name):
    value = _payload().get(name, request.args.get(name))
    if isinstance(value, str):
        return value.lower() in ("1", "true", "yes")
    return bool(value)


@broadcasts_bp.route("/discord/preview", methods=["GET"])
@jwt_required()
@role_required("admin")
def discord_preview():
    try:
        view = _view()
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    png = render_absentee_table(
        display_date(view.day),
        absent_students_for_export(view),
        request.args.get("notice", get_notice(view.day)),
        font_path=current_app.config.get("REPORT_FONT_PATH"),
    )
    return Response(png, mimetype="image/png")


@broadcasts_bp.route("/discord", methods=["POST"])
@jwt_required()
@role_required("admin")
@limiter.limit("5 per minute")
def discord():
    try:
        view = _view()
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    data = _payload()
    absentees = absent_students_for_export(view)
    shown_date = display_date(view.day)
    message = data.get("message") or build_report_message(
        shown_date,
        len(absentees),
        current_app.config.get("SPREADSHEET_URL"),
        current_app.config.get("REPORT_RECIPIENT"),
    )
    notice = data.get("notice", get_notice(view.day))

    result = send_discord_report(message, shown_date, absentees, notice)
    log_event(
        "DISCORD_REPORT",
        user_id=current_user().id,
        ip=request.remote_addr,
        description=f"{view.date_str}: {len(absentees)} absentees" if result["success"] else result["error"],
        level="INFO" if result["success"] else "ERROR"
    )
    return jsonify(result), 200 if result["success"] else 502


@broadcasts_bp.route("/sms/categories", methods=["GET"])
@jwt_required()
@role_required("admin")
def sms_categories():
    try:
        view = _view()
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    categories = categorize_absentees(view, absent_students_for_export(view), _flag("exclude_pre_absence"))
    return jsonify({
        "date": view.date_str,
        "categories": categories,
        "text": all_categories_text(categories),
    }), 200


@broadcasts_bp.route("/sms", methods=["POST"])
@jwt_required()
@role_required("admin")
@limiter.limit("5 per minute")
def sms_send():
    data = _payload()
    students = data.get("students")
    if students is None:
        try:
            view = _view()
        except ValueError as e:
            return jsonify({"error": str(e)}), 400
        categories = categorize_absentees(view, absent_students_for_export(view), _flag("exclude_pre_absence"))
        students = categories["commute"] + categories["dorm_overnight"] + categories["dorm_no_overnight"]

    if not isinstance(students, list) or not all(isinstance(s, dict) and s.get("studentId") and s.get("name") for s in students):
        return jsonify({"error": "students must be a list of {studentId, name}"}), 400
    if not students:
        return jsonify({"error": "No students to notify"}), 400

    try:
        result = send_absent_sms(students)
    except SmsError as e:
        log_event("SMS_SEND_FAILED", user_id=current_user().id, ip=request.remote_addr, description=str(e), level="ERROR")
        return jsonify({"error": str(e)}), 502

    log_event("SMS_SENT", user_id=current_user().id, ip=request.remote_addr, description=f"{len(students)} students")
    return jsonify(result), 200


@broadcasts_bp.route("/sms/test", methods=["POST"])
@jwt_required()
@role_required("admin")
@limiter.limit("5 per minute")
def sms_test():
    try:
        result = send_test_sms()
    except SmsError as e:
        return jsonify({"error": str(e)}), 502
    return jsonify(result), 200


@broadcasts_bp.route("/sms/health", methods=["GET"])
@jwt_required()
@role_required("admin")
def sms_health():
    try:
        result = check_health()
    except SmsError as e:
        return jsonify({"error": str(e)}), 502
    return jsonify(result), 200
