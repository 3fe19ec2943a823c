from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required
from studyhall.services.notices import delete_notice, get_notice, save_notice
from studyhall.services.staff_schedule import resolve_date
from utils.decorators import role_required

notices_bp = Blueprint("notices", __name__)


@notices_bp.route("/<date_str>", methods=["GET"])
@jwt_required()
def get(date_str):
    try:
        day = resolve_date(date_str)
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    return jsonify({"date": day.isoformat(), "text": get_notice(day)}), 200


@notices_bp.route("/<date_str>", methods=["PUT"])
@jwt_required()
@role_required("admin")
def save(date_str):
    data = request.get_json() or {}
    try:
        day = resolve_date(date_str)
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    notice = save_notice(day, data.get("text"))
    return jsonify({"date": day.isoformat(), "text": notice.text if notice else ""}), 200


@notices_bp.route("/<date_str>", methods=["DELETE"])
@jwt_required()
@role_required("admin")
def delete(date_str):
    try:
        day = resolve_date(date_str)
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    if not delete_notice(day):
        return jsonify({"error": "Notice not found"}), 404
    return jsonify({"message": "Notice deleted"}), 200
