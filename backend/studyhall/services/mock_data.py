"""Deterministic demo data for the study hall.

Everything here is driven by a small linear congruential generator so that a
given seed (or a given calendar date) always produces the same students and
the same attendance.
"""
from datetime import datetime, date as date_cls
from studyhall.extensions import db
from studyhall.models import (
    AttendanceSheet, AttendanceRecord, AttendanceStatus, SheetState,
    Seat, Student, PreAbsence, ResidenceType, AbsenceType,
)
from .seat_layouts import ZONES, iter_seat_ids, zones_for_grade
from .staff_schedule import ALL_STAFF_NAMES, zone_recorder

STUDENT_SEED = 12345
ASSIGN_RATE = 0.80
PRE_ABSENCE_RATE = 0.10
SAMPLE_PRESENT_RATE = 0.9

SURNAMES = ["김", "이", "박", "최", "정", "강", "조", "윤", "장", "임",
            "한", "오", "서", "신", "권", "황", "안", "송", "류", "홍"]
GIVEN_NAMES = ["민준", "서준", "도윤", "예준", "시우", "하준", "주원", "지호", "지후", "준서",
               "서연", "서윤", "지우", "서현", "민서", "하은", "하윤", "윤서", "지민", "채원",
               "수빈", "지원", "다은", "은서", "예은", "수아", "지아", "소율", "예린", "시은"]
PRE_ABSENCE_REASONS = [
    "Family trip",
    "Hospital appointment",
    "Field trip application",
    "Family event",
    "University interview",
    "Overseas travel",
    "Scheduled surgery",
    "Exchange program",
    "Family matters",
    "Sports competition",
]

# Winter break demo window: weekdays fully checked, last day still in progress
MOCK_COMPLETED_DATES = [
    "2025-12-22", "2025-12-23", "2025-12-24", "2025-12-26",
    "2025-12-27", "2025-12-29", "2025-12-30",
]
MOCK_IN_PROGRESS_DATE = "2025-12-31"


class SeededRandom:
    """ANSI C LCG constants with 31-bit state.

    The step reproduces browser arithmetic: the product is a double (rounded
    past 2**53), truncated to 32 bits before masking. Demo rosters and sample
    days therefore match the ones the web front end generates.
    """

    MASK = 0x7FFFFFFF

    def __init__(self, seed):
        self.seed = int(seed)

    def random(self):
        x = int(float(self.seed) * 1103515245.0 + 12345.0) % 2**32
        self.seed = x & self.MASK
        return self.seed / self.MASK

    def choice(self, items):
        return items[int(self.random() * len(items)) % len(items)]


def date_seed(date_str):
    """Sum of the year, month and day parts, scaled. "2026-01-07" -> 2034 * 12345."""
    return sum(int(part) for part in str(date_str).split("-")) * 12345


def student_number(grade, class_num, number):
    return f"{grade}{class_num:02d}{number:02d}"


def generate_mock_students(seed=STUDENT_SEED, pre_absence_window=None):
    """Builds {seat_id: student dict | None} for every seat of every zone.

    Each seat gets a student with probability ASSIGN_RATE. The class number is
    the zone's position within its grade and students are numbered per zone.
    """
    rng = SeededRandom(seed)
    students = {}

    for grade in (1, 2):
        for zone_index, zone in enumerate(zones_for_grade(grade)):
            number = 0
            for seat_id in iter_seat_ids(zone["id"]):
                if rng.random() >= ASSIGN_RATE:
                    students[seat_id] = None
                    continue

                number += 1
                student = {
                    "student_id": student_number(grade, zone_index + 1, number),
                    "name": rng.choice(SURNAMES) + rng.choice(GIVEN_NAMES),
                    "seat_id": seat_id,
                    "grade": grade,
                    "residence_type": "dorm" if rng.random() < 0.5 else "commute",
                    "pre_absence": None,
                }
                if pre_absence_window and rng.random() < PRE_ABSENCE_RATE:
                    start, end = pre_absence_window
                    student["pre_absence"] = {
                        "reason": rng.choice(PRE_ABSENCE_REASONS),
                        "start_date": start,
                        "end_date": end,
                    }
                students[seat_id] = student

    return students


def completion_rates(dates, today):
    """Past operating dates are complete, today and later have not started."""
    today_key = today.isoformat() if isinstance(today, date_cls) else str(today)
    rates = {}
    for date_str in dates:
        rate = 1.0 if date_str < today_key else 0.0
        rates[date_str] = {z["id"]: rate for z in ZONES}
    return rates


def zone_recorders_for_date(schedule, rates):
    """Recorder name per zone, only for zones that have any progress."""
    recorders = {}
    if not schedule:
        return recorders
    for zone in ZONES:
        if rates.get(zone["id"], 0) > 0:
            name = zone_recorder(schedule, zone["id"])
            if name:
                recorders[zone["id"]] = name
    return recorders


def temp_save_zones(rates):
    return [zone_id for zone_id, rate in rates.items() if 0 < rate < 1.0]


def generate_sample_day(date_str, seat_students, rates):
    """Synthesizes {zone_id: {seat_id: record}} for a date.

    Only assigned seats are considered. A seat is checked with the zone's
    completion rate and checked seats are present 90% of the time.
    """
    rng = SeededRandom(date_seed(date_str))
    data = {}

    for zone in ZONES:
        rate = rates.get(zone["id"], 0)
        zone_records = {}
        for seat_id in iter_seat_ids(zone["id"]):
            if not seat_students.get(seat_id):
                continue
            if rng.random() < rate:
                status = "present" if rng.random() < SAMPLE_PRESENT_RATE else "absent"
                zone_records[seat_id] = {"status": status, "is_modified": True}
        data[zone["id"]] = zone_records

    return data


def generate_day_data(date_str, seat_students, is_pre_absent, complete_rate=1.0,
                      pre_absence_absent_rate=0.97, normal_absent_rate=0.05,
                      staff_names=None, skip_zones=()):
    """Saved-sheet payloads for one day: {zone_id: {"recorder": name, "records": {...}}}.

    Students with a pre-registered absence on the date are absent with
    pre_absence_absent_rate, everyone else with normal_absent_rate. Zones that
    do not complete (by complete_rate) produce nothing.
    """
    rng = SeededRandom(date_seed(date_str))
    staff_names = staff_names or ALL_STAFF_NAMES
    result = {}

    for zone in ZONES:
        if zone["id"] in skip_zones:
            continue
        staff_name = rng.choice(staff_names)
        should_complete = rng.random() < complete_rate
        records = {}

        for seat_id in iter_seat_ids(zone["id"]):
            student = seat_students.get(seat_id)
            if not student:
                continue
            if is_pre_absent(student["student_id"], date_str):
                absent = rng.random() < pre_absence_absent_rate
            else:
                absent = rng.random() < normal_absent_rate
            if should_complete:
                records[seat_id] = {
                    "status": "absent" if absent else "present",
                    "is_modified": True,
                    "staff_name": staff_name,
                }

        if records:
            result[zone["id"]] = {"recorder": staff_name, "records": records}

    return result


def generate_pre_absence_only_day(date_str, seat_students, is_pre_absent, staff_names=None, skip_zones=()):
    """Draft payloads where only the pre-absent students have been marked absent."""
    rng = SeededRandom(date_seed(date_str))
    staff_names = staff_names or ALL_STAFF_NAMES
    result = {}

    for zone in ZONES:
        if zone["id"] in skip_zones:
            continue
        staff_name = rng.choice(staff_names)
        records = {}
        for seat_id in iter_seat_ids(zone["id"]):
            student = seat_students.get(seat_id)
            if student and is_pre_absent(student["student_id"], date_str):
                records[seat_id] = {"status": "absent", "is_modified": True, "staff_name": staff_name}
        if records:
            result[zone["id"]] = {"recorder": staff_name, "records": records}

    return result


# --- persistence -----------------------------------------------------------

def seed_zones_and_students(seed=STUDENT_SEED, pre_absence_window=None):
    """Writes zones, seats and the generated roster. Existing rows are kept."""
    from .attendance import ensure_zones_and_seats

    ensure_zones_and_seats()

    created = 0
    for seat_id, data in generate_mock_students(seed, pre_absence_window).items():
        if not data or db.session.get(Student, data["student_id"]):
            continue
        student = Student(
            id=data["student_id"],
            name=data["name"],
            grade=data["grade"],
            residence_type=ResidenceType(data["residence_type"]),
        )
        db.session.add(student)
        seat = db.session.get(Seat, seat_id)
        if seat.student_id is None:
            seat.student_id = student.id
        if data["pre_absence"]:
            pa = data["pre_absence"]
            db.session.add(PreAbsence(
                student_id=student.id,
                start_date=date_cls.fromisoformat(pa["start_date"]),
                end_date=date_cls.fromisoformat(pa["end_date"]),
                reason=pa["reason"],
                type=AbsenceType.pre_absence,
            ))
        created += 1

    db.session.commit()
    return created


def _persist_payloads(day, payloads, state):
    for zone_id, payload in payloads.items():
        sheet = AttendanceSheet(
            zone_id=zone_id,
            date=day,
            state=state,
            recorded_by=payload["recorder"] if state is SheetState.saved else None,
            saved_at=datetime.utcnow() if state is SheetState.saved else None,
        )
        for seat_id, rec in payload["records"].items():
            sheet.records.append(AttendanceRecord(
                seat_id=seat_id,
                status=AttendanceStatus(rec["status"]),
                staff_name=rec.get("staff_name"),
                is_modified=rec.get("is_modified", True),
            ))
        db.session.add(sheet)


def is_mock_data_initialized(marker_date=MOCK_COMPLETED_DATES[-1], marker_zone="4A"):
    day = date_cls.fromisoformat(marker_date)
    return AttendanceSheet.query.filter_by(zone_id=marker_zone, date=day,
                                           state=SheetState.saved).first() is not None


def initialize_mock_data(completed_dates=None, in_progress_date=MOCK_IN_PROGRESS_DATE):
    """Fills the demo window with saved sheets, plus a draft-only last day.

    Zones that already have a sheet for a date are left untouched.
    """
    from .absences import is_pre_absent_on_date
    from .attendance import seat_student_map

    completed_dates = completed_dates or MOCK_COMPLETED_DATES
    seat_students = seat_student_map()
    written = 0

    for date_str in completed_dates:
        day = date_cls.fromisoformat(date_str)
        existing = {s.zone_id for s in AttendanceSheet.query.filter_by(date=day).all()}
        payloads = generate_day_data(date_str, seat_students, is_pre_absent_on_date, skip_zones=existing)
        _persist_payloads(day, payloads, SheetState.saved)
        written += len(payloads)

    if in_progress_date:
        day = date_cls.fromisoformat(in_progress_date)
        existing = {s.zone_id for s in AttendanceSheet.query.filter_by(date=day).all()}
        payloads = generate_pre_absence_only_day(in_progress_date, seat_students,
                                                 is_pre_absent_on_date, skip_zones=existing)
        _persist_payloads(day, payloads, SheetState.temp)
        written += len(payloads)

    db.session.commit()
    return written
