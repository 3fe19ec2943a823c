from datetime import date as date_cls, datetime
from zoneinfo import ZoneInfo
from flask import current_app
from studyhall.extensions import db
from studyhall.models import StaffAssignment

# Winter break temporary rotation
TEMP_STAFF_SCHEDULE = {
    "2025-12-22": {"grade1": ["김종규", "이건우"], "grade2": ["조민경", "노예원"]},
    "2025-12-23": {"grade1": ["이예진", "홍선영"], "grade2": ["장보경", "김솔"]},
    "2025-12-24": {"grade1": ["홍승민", "조현정"], "grade2": ["강현수", "민수정"]},
    "2025-12-25": {"grade1": ["박한비", "서률지"], "grade2": ["정수빈", "김종규"]},
    "2025-12-26": {"grade1": ["이건우", "조민경"], "grade2": ["노예원", "이예진"]},
    "2025-12-29": {"grade1": ["서률지", "정수빈"], "grade2": ["김종규", "이건우"]},
    "2025-12-30": {"grade1": ["조민경", "노예원"], "grade2": ["이예진", "홍선영"]},
    "2025-12-31": {"grade1": ["장보경", "김솔"], "grade2": ["홍승민", "조현정"]},
    "2026-01-01": {"grade1": ["강현수", "민수정"], "grade2": ["박한비", "서률지"]},
    "2026-01-02": {"grade1": ["정수빈", "김종규"], "grade2": ["이건우", "조민경"]},
}

# Regular rotation for the January term
FIXED_STAFF_SCHEDULE = {
    "2026-01-07": {"grade1": ["이예진", "조현정"], "grade2": ["강현수", "김종규"]},
    "2026-01-08": {"grade1": ["홍선영", "홍승민"], "grade2": ["민수정", "정수빈"]},
    "2026-01-09": {"grade1": ["장보경", "김솔"], "grade2": ["박한비", "서률지"]},
    "2026-01-12": {"grade1": ["노예원", "조민경"], "grade2": ["홍선영", "강현수"]},
    "2026-01-13": {"grade1": ["이건우", "장보경"], "grade2": ["김솔", "박한비"]},
    "2026-01-14": {"grade1": ["이예진", "조현정"], "grade2": ["민수정", "홍승민"]},
    "2026-01-15": {"grade1": ["서률지", "정수빈"], "grade2": ["김종규", "이건우"]},
    "2026-01-16": {"grade1": ["홍승민", "홍선영"], "grade2": ["조민경", "노예원"]},
    "2026-01-19": {"grade1": ["장보경", "박한비"], "grade2": ["서률지", "이예진"]},
    "2026-01-20": {"grade1": ["이건우", "김종규"], "grade2": ["김솔", "조현정"]},
    "2026-01-21": {"grade1": ["강현수", "민수정"], "grade2": ["홍선영", "장보경"]},
    "2026-01-22": {"grade1": ["정수빈", "조현정"], "grade2": ["노예원", "조민경"]},
    "2026-01-23": {"grade1": ["김솔", "강현수"], "grade2": ["이예진", "서률지"]},
    "2026-01-26": {"grade1": ["민수정", "김종규"], "grade2": ["홍승민", "정수빈"]},
    "2026-01-27": {"grade1": ["박한비", "홍선영"], "grade2": ["조민경", "노예원"]},
    "2026-01-28": {"grade1": ["이예진", "서률지"], "grade2": ["장보경", "박한비"]},
    "2026-01-29": {"grade1": ["노예원", "김종규"], "grade2": ["강현수", "이건우"]},
    "2026-01-30": {"grade1": ["민수정", "조현정"], "grade2": ["정수빈", "박한비"]},
    "2026-02-02": {"grade1": ["홍승민", "조민경"], "grade2": ["서률지", "강현수"]},
    "2026-02-03": {"grade1": ["민수정", "김솔"], "grade2": ["정수빈", "이건우"]},
}

DATE_STAFF_SCHEDULE = {**TEMP_STAFF_SCHEDULE, **FIXED_STAFF_SCHEDULE}

ALL_STAFF_NAMES = sorted({
    name
    for day in DATE_STAFF_SCHEDULE.values()
    for pair in day.values()
    for name in pair
})


def _key(day):
    return day.isoformat() if isinstance(day, date_cls) else str(day)


def today_local():
    """Today's date in the study hall's timezone."""
    tz = ZoneInfo(current_app.config.get("TIMEZONE", "Asia/Seoul"))
    return datetime.now(tz).date()


def staff_for_date(day):
    """Returns {"grade1": [a, b] | None, "grade2": [a, b] | None}.

    Rows stored in the staff_assignments table take precedence over the
    built-in rotation.
    """
    key = _key(day)
    builtin = DATE_STAFF_SCHEDULE.get(key, {})
    result = {
        "grade1": list(builtin["grade1"]) if "grade1" in builtin else None,
        "grade2": list(builtin["grade2"]) if "grade2" in builtin else None,
    }

    schedule_date = day if isinstance(day, date_cls) else date_cls.fromisoformat(key)
    for row in StaffAssignment.query.filter_by(schedule_date=schedule_date).all():
        result[f"grade{row.grade}"] = [row.staff_name_1, row.staff_name_2]

    return result


def today_staff():
    return staff_for_date(today_local())


def operating_dates():
    stored = {
        row.schedule_date.isoformat()
        for row in StaffAssignment.query.with_entities(StaffAssignment.schedule_date).distinct()
    }
    return sorted(set(DATE_STAFF_SCHEDULE) | stored)


def is_temporary_period(day):
    key = _key(day)
    return key in TEMP_STAFF_SCHEDULE and key not in FIXED_STAFF_SCHEDULE


def zone_recorder(schedule, zone_id):
    """A/B zones are covered by the first staff member of the grade, C/D by the second."""
    grade_key = "grade1" if zone_id.startswith("4") else "grade2"
    pair = (schedule or {}).get(grade_key)
    if not pair:
        return None
    return pair[0] if zone_id[-1] in ("A", "B") else pair[1]


def resolve_date(value=None):
    """Parses a YYYY-MM-DD request value; missing means today."""
    if not value:
        return today_local()
    try:
        return date_cls.fromisoformat(str(value))
    except ValueError:
        raise ValueError("date must be YYYY-MM-DD")


def set_staff_assignment(day, grade, staff_names):
    """Stores the two staff members covering a grade on a date."""
    if grade not in (1, 2):
        raise ValueError("grade must be 1 or 2")
    names = [(n or "").strip() for n in (staff_names or [])]
    if len(names) != 2 or not all(names):
        raise ValueError("exactly two staff names are required")

    day = day if isinstance(day, date_cls) else date_cls.fromisoformat(str(day))
    row = StaffAssignment.query.filter_by(schedule_date=day, grade=grade).first()
    if row is None:
        row = StaffAssignment(schedule_date=day, grade=grade)
        db.session.add(row)
    row.staff_name_1, row.staff_name_2 = names
    db.session.commit()
    return row
