"""Student roster: CRUD, seat assignment and bulk import from CSV/XLSX."""
import re
import magic
import pandas as pd
from studyhall.extensions import db
from studyhall.models import Seat, Student, ResidenceType
from utils.pagination import search_and_paginate

ROSTER_COLUMNS = ["student_id", "name", "seat_id", "residence_type"]
ALLOWED_EXTENSIONS = {"csv", "xlsx"}
ALLOWED_MIME_TYPES = {
    "text/csv",
    "text/plain",
    "application/csv",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "application/zip",
}
_STUDENT_ID = re.compile(r"^[1-3]\d{4}$")


def list_students(search=None, page=1, per_page=20, include_deleted=False):
    query = Student.query
    if not include_deleted:
        query = query.filter(Student.deleted == False)
    query = query.order_by(Student.id)
    return search_and_paginate(query, search, [Student.id, Student.name], page, per_page)


def get_student(student_id, include_deleted=False):
    student = db.session.get(Student, str(student_id))
    if not student or (student.deleted and not include_deleted):
        raise LookupError("Student not found")
    return student


def _residence(value):
    if value in (None, ""):
        return ResidenceType.commute
    try:
        return ResidenceType(str(value).strip().lower())
    except ValueError:
        raise ValueError("residence_type must be 'commute' or 'dorm'")


def _validate_id(student_id):
    student_id = str(student_id or "").strip()
    if not _STUDENT_ID.match(student_id):
        raise ValueError("student_id must be a 5-digit student number")
    return student_id


def create_student(student_id, name, residence_type=None, seat_id=None):
    student_id = _validate_id(student_id)
    name = (name or "").strip()
    if not name:
        raise ValueError("name is required")
    if db.session.get(Student, student_id):
        raise ValueError(f"Student {student_id} already exists")

    student = Student(
        id=student_id,
        name=name,
        grade=int(student_id[0]),
        residence_type=_residence(residence_type),
    )
    db.session.add(student)
    db.session.flush()
    if seat_id:
        _assign(student, seat_id)
    db.session.commit()
    return student


def update_student(student_id, name=None, residence_type=None):
    student = get_student(student_id)
    if name is not None:
        name = name.strip()
        if not name:
            raise ValueError("name cannot be empty")
        student.name = name
    if residence_type is not None:
        student.residence_type = _residence(residence_type)
    db.session.commit()
    return student


def delete_student(student_id):
    """Soft delete; the seat is released."""
    student = get_student(student_id)
    if student.seat:
        student.seat.student_id = None
    student.soft_delete()
    db.session.commit()
    return student


def restore_student(student_id):
    student = get_student(student_id, include_deleted=True)
    if not student.deleted:
        raise ValueError("Student is not deleted")
    student.restore()
    db.session.commit()
    return student


def _free_seat(seat_id, student_id):
    seat = db.session.get(Seat, seat_id)
    if not seat:
        raise LookupError(f"Seat {seat_id} not found")
    if seat.student_id and seat.student_id != student_id:
        raise ValueError(f"Seat {seat_id} is already taken by {seat.student_id}")
    return seat


def _assign(student, seat_id):
    seat = _free_seat(seat_id, student.id)
    current = Seat.query.filter_by(student_id=student.id).first()
    if current and current.id != seat.id:
        current.student_id = None
        db.session.flush()
    seat.student_id = student.id
    return seat


def assign_seat(student_id, seat_id):
    seat = _assign(get_student(student_id), seat_id)
    db.session.commit()
    return seat


def unassign_seat(seat_id):
    seat = db.session.get(Seat, seat_id)
    if not seat:
        raise LookupError(f"Seat {seat_id} not found")
    seat.student_id = None
    db.session.commit()
    return seat


def allowed_roster_file(file):
    filename_ok = "." in file.filename and file.filename.rsplit(".", 1)[1].lower() in ALLOWED_EXTENSIONS
    mime = magic.from_buffer(file.read(2048), mime=True)
    file.seek(0)
    return filename_ok and mime in ALLOWED_MIME_TYPES


def read_roster(file):
    """DataFrame with ROSTER_COLUMNS from an uploaded CSV or XLSX file."""
    if file.filename.lower().endswith(".xlsx"):
        frame = pd.read_excel(file.stream, dtype=str)
    else:
        frame = pd.read_csv(file.stream, dtype=str)

    frame.columns = [str(c).strip().lower() for c in frame.columns]
    missing = [c for c in ("student_id", "name") if c not in frame.columns]
    if missing:
        raise ValueError(f"Missing columns: {', '.join(missing)}")
    for column in ROSTER_COLUMNS:
        if column not in frame.columns:
            frame[column] = None
    return frame[ROSTER_COLUMNS].fillna("")


def _parse_row(row):
    student_id = _validate_id(row["student_id"])
    name = str(row["name"]).strip()
    if not name:
        raise ValueError("name is required")
    residence = _residence(row["residence_type"]) if row["residence_type"] else None
    seat_id = str(row["seat_id"]).strip()
    if seat_id:
        _free_seat(seat_id, student_id)
    return student_id, name, residence, seat_id


def import_roster(frame):
    """Creates or updates students row by row; returns counts and row errors.

    A row is checked in full before anything is written, so a rejected row
    leaves no trace.
    """
    created = updated = 0
    errors = []
    for index, row in frame.iterrows():
        line = index + 2  # header is line 1
        try:
            student_id, name, residence, seat_id = _parse_row(row)
        except (ValueError, LookupError) as e:
            errors.append({"line": line, "error": str(e)})
            continue

        student = db.session.get(Student, student_id)
        if student:
            student.name = name
            student.restore()
            if residence:
                student.residence_type = residence
            updated += 1
        else:
            student = Student(
                id=student_id,
                name=name,
                grade=int(student_id[0]),
                residence_type=residence or ResidenceType.commute,
            )
            db.session.add(student)
            created += 1
        db.session.flush()

        if seat_id:
            _assign(student, seat_id)
        db.session.flush()

    db.session.commit()
    return {"created": created, "updated": updated, "errors": errors}
