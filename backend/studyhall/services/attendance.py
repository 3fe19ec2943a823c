from datetime import datetime
from studyhall.extensions import db
from studyhall.models import (
    AttendanceSheet, AttendanceRecord, AttendanceStatus, SheetState,
    Seat, Student, StudentNote, Zone,
)
from .absences import as_date, pre_absence_lookup
from .seat_layouts import SEAT_LAYOUTS, ZONES, BREAK, is_seat_cell, iter_seat_positions

# unchecked -> present -> absent -> present ...
_NEXT_STATUS = {
    AttendanceStatus.unchecked: AttendanceStatus.present,
    AttendanceStatus.present: AttendanceStatus.absent,
    AttendanceStatus.absent: AttendanceStatus.present,
}


def seat_student_map(zone_id=None):
    """{seat_id: student dict | None} for all seats (or one zone's)."""
    query = Seat.query
    if zone_id:
        query = query.filter(Seat.zone_id == zone_id)

    result = {}
    for seat in query.all():
        student = seat.student
        if student is None or student.deleted:
            result[seat.id] = None
            continue
        result[seat.id] = {
            "student_id": student.id,
            "name": student.name,
            "grade": student.grade,
            "residence_type": student.residence_type.value,
            "seat_id": seat.id,
        }
    return result


def get_zone(zone_id):
    zone = db.session.get(Zone, zone_id)
    if not zone:
        raise LookupError(f"Zone {zone_id} not found")
    return zone


def get_sheet(zone_id, day):
    return AttendanceSheet.query.filter_by(zone_id=zone_id, date=as_date(day)).first()


def stored_records(zone_id, day):
    """{seat_id: record dict} from the zone's sheet, empty when nothing was stored."""
    sheet = get_sheet(zone_id, day)
    if not sheet:
        return {}
    return {r.seat_id: r.to_dict() for r in sheet.records}


def _assigned_seat(zone_id, seat_id):
    seat = db.session.get(Seat, seat_id)
    if not seat or seat.zone_id != zone_id:
        raise LookupError(f"Seat {seat_id} is not in zone {zone_id}")
    if not seat.is_assigned or seat.student.deleted:
        raise ValueError(f"Seat {seat_id} has no student assigned")
    return seat


def _get_or_create_sheet(zone_id, day):
    get_zone(zone_id)
    sheet = get_sheet(zone_id, day)
    if sheet is None:
        sheet = AttendanceSheet(zone_id=zone_id, date=as_date(day), state=SheetState.temp)
        db.session.add(sheet)
    return sheet


def toggle_seat(zone_id, day, seat_id, staff_name=None):
    """Advances one seat's status and returns the new status."""
    _assigned_seat(zone_id, seat_id)
    sheet = _get_or_create_sheet(zone_id, day)

    record = sheet.records_by_seat().get(seat_id)
    if record is None:
        record = AttendanceRecord(seat_id=seat_id, status=AttendanceStatus.present,
                                  staff_name=staff_name, is_modified=True)
        sheet.records.append(record)
    else:
        record.status = _NEXT_STATUS[record.status]
        record.staff_name = staff_name or record.staff_name
        record.is_modified = True

    db.session.commit()
    return record.status


def save_sheet(zone_id, day, records, state=SheetState.temp, recorded_by=None, user_id=None):
    """Overwrites a zone's records for the day.

    records: iterable of {"seat_id", "status", "note"?}. "unchecked" entries are
    dropped. A final (saved) sheet cannot be turned back into a draft.
    """
    state = SheetState(state) if not isinstance(state, SheetState) else state
    sheet = _get_or_create_sheet(zone_id, day)
    if sheet.state is SheetState.saved and state is SheetState.temp:
        raise ValueError(f"Attendance for zone {zone_id} on {sheet.date.isoformat()} is already submitted")
    if state is SheetState.saved and not (recorded_by or "").strip():
        raise ValueError("recorded_by is required to submit attendance")

    parsed = []
    seen = set()
    for item in records:
        if not isinstance(item, dict):
            raise ValueError("each record must be an object")
        seat_id = item.get("seat_id")
        try:
            status = AttendanceStatus(item.get("status"))
        except ValueError:
            raise ValueError(f"Invalid status for seat {seat_id}: {item.get('status')!r}")
        if seat_id in seen:
            raise ValueError(f"Seat {seat_id} appears more than once")
        seen.add(seat_id)
        _assigned_seat(zone_id, seat_id)
        if status is AttendanceStatus.unchecked:
            continue
        parsed.append((seat_id, status, (item.get("note") or "").strip() or None))

    sheet.records.clear()
    db.session.flush()
    for seat_id, status, note in parsed:
        sheet.records.append(AttendanceRecord(
            seat_id=seat_id, status=status, note=note,
            staff_name=recorded_by, is_modified=True,
        ))

    sheet.state = state
    if state is SheetState.saved:
        sheet.recorded_by = recorded_by.strip()
        sheet.recorded_by_user_id = user_id
        sheet.saved_at = datetime.utcnow()

    db.session.commit()
    return sheet


def mark_all_present(zone_id, day, staff_name=None):
    """Every assigned seat without a status becomes present. Returns how many changed."""
    sheet = _get_or_create_sheet(zone_id, day)
    existing = sheet.records_by_seat()
    changed = 0
    for seat_id, student in seat_student_map(zone_id).items():
        if student and seat_id not in existing:
            sheet.records.append(AttendanceRecord(seat_id=seat_id, status=AttendanceStatus.present,
                                                  staff_name=staff_name, is_modified=True))
            changed += 1
    db.session.commit()
    return changed


def notes_for_date(day):
    return {n.seat_id: n.note for n in StudentNote.query.filter_by(date=as_date(day)).all()}


def set_note(day, seat_id, note):
    """Stores a seat remark for the day. A blank note removes it."""
    if not db.session.get(Seat, seat_id):
        raise LookupError(f"Seat {seat_id} not found")
    day = as_date(day)
    existing = StudentNote.query.filter_by(date=day, seat_id=seat_id).first()
    note = (note or "").strip()

    if not note:
        if existing:
            db.session.delete(existing)
            db.session.commit()
        return None

    if existing:
        existing.note = note
    else:
        db.session.add(StudentNote(date=day, seat_id=seat_id, note=note))
    db.session.commit()
    return note


def seat_map(zone_id, day, records=None):
    """The zone layout with each desk resolved to its student and status."""
    get_zone(zone_id)
    day = as_date(day)
    records = stored_records(zone_id, day) if records is None else records
    students = seat_student_map(zone_id)
    pre_absent = pre_absence_lookup(day)
    notes = notes_for_date(day)

    rows = []
    for row in SEAT_LAYOUTS.get(zone_id, []):
        if row and row[0] == BREAK:
            rows.append([{"type": "break"}])
            continue
        cells = []
        for cell in row:
            if not is_seat_cell(cell):
                cells.append({"type": "spacer" if cell == "sp" else "empty"})
                continue
            student = students.get(cell)
            record = records.get(cell)
            cells.append({
                "type": "seat",
                "seat_id": cell,
                "is_assigned": student is not None,
                "student_id": student["student_id"] if student else None,
                "student_name": student["name"] if student else None,
                "status": record["status"] if (record and student) else "unchecked",
                "has_pre_absence": bool(student and student["student_id"] in pre_absent),
                "has_note": bool(notes.get(cell) or (record and record.get("note"))),
            })
        rows.append(cells)
    return rows


def student_by_id(student_id):
    student = db.session.get(Student, student_id)
    if not student or student.deleted:
        raise LookupError(f"Student {student_id} not found")
    return student


def ensure_zones_and_seats():
    """Creates any zone or seat from the fixed layouts that is not stored yet."""
    created = 0
    for position, zone in enumerate(ZONES):
        if not db.session.get(Zone, zone["id"]):
            db.session.add(Zone(id=zone["id"], name=zone["name"], grade=zone["grade"],
                                floor=zone["floor"], position=position))
        for seat_id, row, col in iter_seat_positions(zone["id"]):
            if not db.session.get(Seat, seat_id):
                db.session.add(Seat(id=seat_id, zone_id=zone["id"], row=row, col=col))
                created += 1
    db.session.flush()
    return created
