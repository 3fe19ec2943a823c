from flask import current_app
from studyhall.models import AttendanceSheet, SheetState, Student
from .absences import as_date, pre_absence_lookup
from .attendance import seat_student_map, notes_for_date
from .mock_data import completion_rates, generate_sample_day, temp_save_zones, zone_recorders_for_date
from .seat_layouts import ZONES, ZONES_BY_ID, iter_seat_ids, zone_of_seat
from .staff_schedule import operating_dates, staff_for_date, today_local

STATUS_FILTERS = ("all", "present", "absent", "unchecked")


class DayView:
    """Everything the dashboard needs for one date, resolved once.

    Per zone the data comes from the stored sheet when there is one; otherwise
    from generated sample data when mock data is enabled and the date is an
    operating date; otherwise the zone is empty.
    """

    def __init__(self, day):
        self.day = as_date(day)
        self.date_str = self.day.isoformat()
        self.students = seat_student_map()
        self.pre_absent = pre_absence_lookup(self.day)
        self.notes = notes_for_date(self.day)
        self.zone_records = {}
        self.temp_zones = []
        self.recorders = {}
        self._resolve()

    def _resolve(self):
        sheets = {s.zone_id: s for s in AttendanceSheet.query.filter_by(date=self.day).all()}

        sample = None
        sample_rates = {}
        if current_app.config.get("MOCK_DATA_ENABLED") and self.date_str in operating_dates():
            sample_rates = completion_rates([self.date_str], today_local())[self.date_str]
            sample = generate_sample_day(self.date_str, self.students, sample_rates)
            sample_recorders = zone_recorders_for_date(staff_for_date(self.day), sample_rates)
            sample_temp = temp_save_zones(sample_rates)

        for zone in ZONES:
            zone_id = zone["id"]
            sheet = sheets.get(zone_id)
            if sheet is not None:
                self.zone_records[zone_id] = {r.seat_id: r.to_dict() for r in sheet.records}
                if sheet.state is SheetState.temp:
                    self.temp_zones.append(zone_id)
                elif sheet.recorded_by:
                    self.recorders[zone_id] = sheet.recorded_by
            elif sample is not None:
                self.zone_records[zone_id] = sample.get(zone_id, {})
                if zone_id in sample_temp:
                    self.temp_zones.append(zone_id)
                if zone_id in sample_recorders:
                    self.recorders[zone_id] = sample_recorders[zone_id]
            else:
                self.zone_records[zone_id] = {}

    def status_of(self, zone_id, seat_id):
        record = self.zone_records.get(zone_id, {}).get(seat_id)
        return record["status"] if record else "unchecked"

    def record_of(self, zone_id, seat_id):
        return self.zone_records.get(zone_id, {}).get(seat_id)

    def assigned_seats(self, zone_id):
        """(seat_id, student) for every occupied desk, in layout order."""
        for seat_id in iter_seat_ids(zone_id):
            student = self.students.get(seat_id)
            if student:
                yield seat_id, student


def completion_rate(present, absent, total):
    return round((present + absent) / total * 100) if total > 0 else 0


def completion_color(rate):
    if rate >= 100:
        return "green"
    if rate >= 50:
        return "amber"
    if rate > 0:
        return "orange"
    return "gray"


def zone_summaries(view, grade=None):
    summaries = []
    for zone in ZONES:
        if grade and zone["grade"] != grade:
            continue
        total = present = absent = 0
        for seat_id, _ in view.assigned_seats(zone["id"]):
            total += 1
            status = view.status_of(zone["id"], seat_id)
            if status == "present":
                present += 1
            elif status == "absent":
                absent += 1

        rate = completion_rate(present, absent, total)
        summaries.append({
            "zoneId": zone["id"],
            "zoneName": zone["name"],
            "grade": zone["grade"],
            "present": present,
            "absent": absent,
            "unchecked": max(0, total - present - absent),
            "total": total,
            "completionRate": rate,
            "completionColor": completion_color(rate),
            "hasTempSave": zone["id"] in view.temp_zones,
            "recordedBy": view.recorders.get(zone["id"]),
        })
    return summaries


def overall_stats(summaries):
    stats = {"totalStudents": 0, "present": 0, "absent": 0, "unchecked": 0}
    for zone in summaries:
        stats["totalStudents"] += zone["total"]
        stats["present"] += zone["present"]
        stats["absent"] += zone["absent"]
        stats["unchecked"] += zone["unchecked"]
    stats["completionRate"] = completion_rate(stats["present"], stats["absent"], stats["totalStudents"])
    return stats


def _detail(view, zone, seat_id, student):
    pre = view.pre_absent.get(student["student_id"])
    return {
        "seatId": seat_id,
        "studentId": student["student_id"],
        "studentName": student["name"],
        "status": view.status_of(zone["id"], seat_id),
        "zoneId": zone["id"],
        "zoneName": zone["name"],
        "hasPreAbsence": pre is not None,
        "preAbsenceReason": pre["reason"] if pre else None,
    }


def attendance_details(view, zone_id):
    zone = ZONES_BY_ID.get(zone_id)
    if not zone:
        raise LookupError(f"Zone {zone_id} not found")
    return [_detail(view, zone, seat_id, student) for seat_id, student in view.assigned_seats(zone_id)]


def students_by_status(view, status="all", grade=None):
    if status not in STATUS_FILTERS:
        raise ValueError(f"status must be one of {', '.join(STATUS_FILTERS)}")
    rows = []
    for zone in ZONES:
        if grade and zone["grade"] != grade:
            continue
        for seat_id, student in view.assigned_seats(zone["id"]):
            row = _detail(view, zone, seat_id, student)
            if status == "all" or row["status"] == status:
                rows.append(row)
    return rows


def search_students(name):
    """Students whose name contains the query, with where they sit."""
    name = (name or "").strip()
    if not name:
        return []

    results = []
    students = Student.query.filter(Student.deleted == False, Student.name.contains(name)).order_by(Student.id).all()
    for student in students:
        seat_id = student.seat.id if student.seat else None
        zone_id = zone_of_seat(seat_id) if seat_id else ""
        zone = ZONES_BY_ID.get(zone_id)
        results.append({
            "student": student.to_dict(),
            "zoneId": zone_id,
            "zoneName": zone["name"] if zone else zone_id,
        })
    return results
