from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required
from studyhall.models import SheetState
from studyhall.services.attendance import (
    get_sheet, mark_all_present, notes_for_date, save_sheet, seat_map, set_note, toggle_seat,
)
from studyhall.services.seat_layouts import ZONES, SEAT_LAYOUTS
from studyhall.services.staff_schedule import resolve_date, staff_for_date, zone_recorder
from utils.audit import log_event
from utils.checkin_window import checkin_window_guard, is_within_checkin_window, window_bounds
from utils.decorators import current_user, role_required

attendance_bp = Blueprint("attendance", __name__)


def _request_date():
    data = request.get_json(silent=True) or {}
    return resolve_date(data.get("date") or request.args.get("date"))


@attendance_bp.route("/", methods=["GET"])
@jwt_required()
def list_zones():
    return jsonify({"zones": [dict(z, layout=SEAT_LAYOUTS[z["id"]]) for z in ZONES]}), 200


@attendance_bp.route("/window", methods=["GET"])
@jwt_required()
def checkin_window():
    start, end = window_bounds()
    return jsonify({
        "start": start.strftime("%H:%M"),
        "end": end.strftime("%H:%M"),
        "open": is_within_checkin_window(),
    }), 200


@attendance_bp.route("/<zone_id>/seats", methods=["GET"])
@jwt_required()
def zone_seats(zone_id):
    try:
        day = _request_date()
        rows = seat_map(zone_id, day)
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    except LookupError as e:
        return jsonify({"error": str(e)}), 404

    sheet = get_sheet(zone_id, day)
    return jsonify({
        "zone_id": zone_id,
        "date": day.isoformat(),
        "rows": rows,
        "state": sheet.state.value if sheet else None,
        "recorded_by": sheet.recorded_by if sheet else None,
        "saved_at": sheet.saved_at.isoformat() if sheet and sheet.saved_at else None,
        "default_recorder": zone_recorder(staff_for_date(day), zone_id),
    }), 200


@attendance_bp.route("/<zone_id>/toggle", methods=["POST"])
@jwt_required()
@role_required("admin", "staff")
@checkin_window_guard()
def toggle(zone_id):
    data = request.get_json() or {}
    seat_id = data.get("seat_id")
    if not seat_id:
        return jsonify({"error": "seat_id is required"}), 400

    try:
        status = toggle_seat(zone_id, _request_date(), seat_id, staff_name=current_user().staff_name)
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    except LookupError as e:
        return jsonify({"error": str(e)}), 404

    return jsonify({"seat_id": seat_id, "status": status.value}), 200


@attendance_bp.route("/<zone_id>/save", methods=["POST"])
@jwt_required()
@role_required("admin", "staff")
@checkin_window_guard()
def save(zone_id):
    data = request.get_json() or {}
    records = data.get("records")
    if not isinstance(records, list):
        return jsonify({"error": "records must be a list"}), 400

    user = current_user()
    try:
        state = SheetState(data.get("state", "temp"))
        day = _request_date()
        recorded_by = data.get("recorded_by")
        if state is SheetState.saved and not recorded_by:
            recorded_by = user.staff_name
        sheet = save_sheet(zone_id, day, records, state=state, recorded_by=recorded_by, user_id=user.id)
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    except LookupError as e:
        return jsonify({"error": str(e)}), 404

    log_event(
        "SHEET_SAVED" if state is SheetState.saved else "SHEET_TEMP_SAVED",
        user_id=user.id,
        ip=request.remote_addr,
        description=f"{zone_id} {day.isoformat()} ({len(sheet.records)} records)"
    )
    return jsonify({"message": "Attendance saved", "sheet": sheet.to_dict()}), 200


@attendance_bp.route("/<zone_id>/mark-all-present", methods=["POST"])
@jwt_required()
@role_required("admin", "staff")
@checkin_window_guard()
def mark_all(zone_id):
    try:
        changed = mark_all_present(zone_id, _request_date(), staff_name=current_user().staff_name)
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    except LookupError as e:
        return jsonify({"error": str(e)}), 404

    return jsonify({"changed": changed}), 200


@attendance_bp.route("/notes", methods=["GET"])
@jwt_required()
def list_notes():
    try:
        day = _request_date()
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    return jsonify({"date": day.isoformat(), "notes": notes_for_date(day)}), 200


@attendance_bp.route("/notes", methods=["PUT"])
@jwt_required()
@role_required("admin", "staff")
def update_note():
    data = request.get_json() or {}
    seat_id = data.get("seat_id")
    if not seat_id:
        return jsonify({"error": "seat_id is required"}), 400

    try:
        note = set_note(_request_date(), seat_id, data.get("note"))
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    except LookupError as e:
        return jsonify({"error": str(e)}), 404

    return jsonify({"seat_id": seat_id, "note": note}), 200
