import requests
from flask import current_app
from .seat_layouts import ZONES


class SmsError(Exception):
    pass


def _base_url():
    url = current_app.config.get("SMS_API_URL")
    if not url:
        raise SmsError("SMS relay is not configured")
    return url.rstrip("/")


def _request(method, path, fallback_error, **kwargs):
    try:
        response = requests.request(
            method,
            f"{_base_url()}{path}",
            timeout=current_app.config.get("HTTP_TIMEOUT_SECONDS", 15),
            **kwargs,
        )
    except requests.RequestException as e:
        raise SmsError(f"{fallback_error}: {e}") from e

    try:
        body = response.json()
    except ValueError:
        body = None
    if not isinstance(body, dict):
        body = None

    if not response.ok:
        raise SmsError((body or {}).get("error") or fallback_error)
    if body is None:
        raise SmsError(f"{fallback_error}: invalid response")
    return body


def send_absent_sms(students):
    """students: [{"studentId", "name"}]"""
    body = {"absentStudents": [{"studentId": s["studentId"], "name": s["name"]} for s in students]}
    return _request("POST", "/api/send-absent-sms", "Failed to send SMS", json=body)


def send_test_sms():
    return _request("POST", "/api/test-sms", "Failed to send test SMS")


def check_health():
    return _request("GET", "/health", "SMS relay is unreachable")


def categorize_absentees(view, absentees, exclude_pre_absence=False):
    """Splits absentees by who gets notified.

    commute: student and parent; dorm_overnight: parent only (the student is
    on approved overnight leave); dorm_no_overnight: student only.
    exclude_pre_absence leaves pre-registered absences out of the commute and
    dorm_no_overnight groups.
    """
    grade_by_zone = {z["id"]: z["grade"] for z in ZONES}
    students_by_seat = {seat_id: s for seat_id, s in view.students.items() if s}

    commute, dorm_overnight, dorm_no_overnight = [], [], []
    for absentee in absentees:
        student = students_by_seat.get(absentee["seatId"])
        if not student:
            continue
        pre = view.pre_absent.get(student["student_id"])
        entry = {
            "studentId": student["student_id"],
            "name": student["name"],
            "seatId": absentee["seatId"],
            "grade": grade_by_zone.get(absentee["seatId"][:2]),
            "isPreAbsence": pre is not None,
        }
        if student["residence_type"] == "commute":
            commute.append(entry)
        elif pre and pre["type"] == "overnight":
            dorm_overnight.append(entry)
        else:
            dorm_no_overnight.append(entry)

    if exclude_pre_absence:
        commute = [s for s in commute if not s["isPreAbsence"]]
        dorm_no_overnight = [s for s in dorm_no_overnight if not s["isPreAbsence"]]

    return {
        "commute": commute,
        "dorm_overnight": dorm_overnight,
        "dorm_no_overnight": dorm_no_overnight,
    }


CATEGORY_HEADINGS = {
    "commute": "[Commuters - student + parent]",
    "dorm_overnight": "[Dorm, overnight leave - parent only]",
    "dorm_no_overnight": "[Dorm, no overnight leave - student only]",
}


def category_text(students):
    return "\n".join(f"{s['studentId']} {s['name']}" for s in students)


def all_categories_text(categories):
    blocks = []
    for key, heading in CATEGORY_HEADINGS.items():
        students = categories.get(key) or []
        if students:
            blocks.append(heading + "\n" + category_text(students))
    return "\n\n".join(blocks)
