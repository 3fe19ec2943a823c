from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required
from studyhall.extensions import limiter
from studyhall.services import roster
from utils.audit import log_event
from utils.decorators import current_user, role_required
from utils.pagination import page_payload

students_bp = Blueprint("students", __name__)


@students_bp.route('/list', methods=['GET'])
@jwt_required()
def list_students():
    page = request.args.get("page", 1, type=int)
    per_page = request.args.get("per_page", 20, type=int)
    search_term = request.args.get("search", type=str)
    include_deleted = request.args.get("include_deleted", "false").lower() == "true"

    paginated = roster.list_students(search_term, page, per_page, include_deleted)
    return jsonify(page_payload(paginated, "students", lambda s: s.to_dict())), 200


@students_bp.route('/<student_id>', methods=['GET'])
@jwt_required()
def get_student(student_id):
    try:
        student = roster.get_student(student_id)
    except LookupError as e:
        return jsonify({"error": str(e)}), 404
    return jsonify(student.to_dict(include_related=True)), 200


@students_bp.route("/create", methods=["POST"])
@jwt_required()
@role_required("admin")
def create_student():
    data = request.get_json() or {}
    if not data.get("student_id") or not data.get("name"):
        return jsonify({"error": "Missing required fields"}), 400

    try:
        student = roster.create_student(
            data.get("student_id"),
            data.get("name"),
            residence_type=data.get("residence_type"),
            seat_id=data.get("seat_id"),
        )
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    except LookupError as e:
        return jsonify({"error": str(e)}), 404

    return jsonify({"message": "Student created successfully", "student": student.to_dict()}), 201


@students_bp.route('/update/<student_id>', methods=['PUT'])
@jwt_required()
@role_required("admin")
@limiter.limit("30 per minute")
def update_student(student_id):
    data = request.get_json() or {}
    try:
        student = roster.update_student(
            student_id,
            name=data.get("name"),
            residence_type=data.get("residence_type"),
        )
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    except LookupError as e:
        return jsonify({"error": str(e)}), 404

    return jsonify({"message": "Student updated successfully", "student": student.to_dict()}), 200


@students_bp.route('/<student_id>', methods=['DELETE'])
@jwt_required()
@role_required("admin")
def delete_student(student_id):
    try:
        roster.delete_student(student_id)
    except LookupError as e:
        return jsonify({"error": str(e)}), 404

    log_event("STUDENT_DELETED", user_id=current_user().id, ip=request.remote_addr, description=student_id)
    return jsonify({"message": "Student deleted"}), 200


@students_bp.route('/<student_id>/restore', methods=['POST'])
@jwt_required()
@role_required("admin")
def restore_student(student_id):
    try:
        student = roster.restore_student(student_id)
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    except LookupError as e:
        return jsonify({"error": str(e)}), 404
    return jsonify({"message": "Student restored", "student": student.to_dict()}), 200


@students_bp.route('/<student_id>/seat', methods=['PUT'])
@jwt_required()
@role_required("admin")
def assign_seat(student_id):
    data = request.get_json() or {}
    seat_id = data.get("seat_id")
    if not seat_id:
        return jsonify({"error": "seat_id is required"}), 400

    try:
        seat = roster.assign_seat(student_id, seat_id)
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    except LookupError as e:
        return jsonify({"error": str(e)}), 404
    return jsonify({"message": "Seat assigned", "seat": seat.to_dict()}), 200


@students_bp.route('/seats/<seat_id>', methods=['DELETE'])
@jwt_required()
@role_required("admin")
def unassign_seat(seat_id):
    try:
        seat = roster.unassign_seat(seat_id)
    except LookupError as e:
        return jsonify({"error": str(e)}), 404
    return jsonify({"message": "Seat released", "seat": seat.to_dict()}), 200


@students_bp.route('/upload', methods=['POST'])
@jwt_required()
@role_required("admin")
@limiter.limit("5 per minute")
def upload_roster():
    file = request.files.get("file")
    if not file or not file.filename:
        return jsonify({"error": "No file uploaded"}), 400
    if not roster.allowed_roster_file(file):
        return jsonify({"error": "Upload a .csv or .xlsx roster"}), 400

    try:
        frame = roster.read_roster(file)
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    result = roster.import_roster(frame)
    log_event(
        "ROSTER_IMPORTED",
        user_id=current_user().id,
        ip=request.remote_addr,
        description=f"created {result['created']}, updated {result['updated']}, errors {len(result['errors'])}"
    )
    return jsonify(result), 200
