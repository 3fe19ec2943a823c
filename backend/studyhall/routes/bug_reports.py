from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required
from studyhall.extensions import limiter
from studyhall.services.bug_reports import (
    clear_bug_reports, create_bug_report, delete_bug_report, list_bug_reports, mark_read, unread_count,
)
from utils.audit import log_event
from utils.decorators import role_required

bug_reports_bp = Blueprint("bug_reports", __name__)


@bug_reports_bp.route("/", methods=["POST"])
@limiter.limit("5 per minute")
def create():
    data = request.get_json() or {}
    try:
        report = create_bug_report(
            data.get("description"),
            data.get("error_info"),
            url=data.get("url"),
            user_agent=data.get("user_agent") or request.headers.get("User-Agent"),
        )
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    log_event("BUG_REPORTED", ip=request.remote_addr, description=report.id)
    return jsonify({"message": "Bug report received", "report": report.to_dict()}), 201


@bug_reports_bp.route("/", methods=["GET"])
@jwt_required()
@role_required("admin")
def list_all():
    reports = list_bug_reports()
    return jsonify({"reports": [r.to_dict() for r in reports], "unread": unread_count()}), 200


@bug_reports_bp.route("/unread-count", methods=["GET"])
@jwt_required()
@role_required("admin")
def unread():
    return jsonify({"unread": unread_count()}), 200


@bug_reports_bp.route("/<report_id>/read", methods=["POST"])
@jwt_required()
@role_required("admin")
def read(report_id):
    try:
        report = mark_read(report_id)
    except LookupError as e:
        return jsonify({"error": str(e)}), 404
    return jsonify({"report": report.to_dict()}), 200


@bug_reports_bp.route("/<report_id>", methods=["DELETE"])
@jwt_required()
@role_required("admin")
def delete(report_id):
    try:
        delete_bug_report(report_id)
    except LookupError as e:
        return jsonify({"error": str(e)}), 404
    return jsonify({"message": "Bug report deleted"}), 200


@bug_reports_bp.route("/", methods=["DELETE"])
@jwt_required()
@role_required("admin")
def clear():
    count = clear_bug_reports()
    return jsonify({"message": "Bug reports cleared", "deleted": count}), 200
