import re
import time
from datetime import date as date_cls, datetime
import requests
from flask import current_app
from studyhall.extensions import db
from studyhall.models import PreAbsence, Student, AbsenceType

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_TRAILING_ZONE_NAME = re.compile(r"\s*\([^)]*\)\s*$")


def as_date(value):
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date_cls):
        return value
    return date_cls.fromisoformat(str(value))


def normalize_date(value):
    """Coerces spreadsheet date cells to YYYY-MM-DD.

    Apps Script serializes Date cells as JS Date strings such as
    "Wed Jan 07 2026 00:00:00 GMT+0900 (Korean Standard Time)". The trailing
    zone name is dropped and the calendar date in the given offset is kept.
    Unparseable values become "".
    """
    if not value:
        return ""
    value = str(value).strip()
    if _ISO_DATE.match(value):
        return value

    cleaned = _TRAILING_ZONE_NAME.sub("", value)
    for fmt in ("%a %b %d %Y %H:%M:%S GMT%z", "%a %b %d %Y %H:%M:%S", "%Y-%m-%dT%H:%M:%S.%f%z", "%Y-%m-%dT%H:%M:%S%z"):
        try:
            return datetime.strptime(cleaned.replace("Z", "+0000"), fmt).date().isoformat()
        except ValueError:
            continue

    current_app.logger.warning("normalize_date: failed to parse %r", value)
    return ""


def _covering(day):
    return PreAbsence.query.filter(PreAbsence.start_date <= day, PreAbsence.end_date >= day)


def is_pre_absent_on_date(student_id, day):
    day = as_date(day)
    return _covering(day).filter(PreAbsence.student_id == student_id).first() is not None


def _info(pre_absence):
    return {
        "reason": pre_absence.reason or "",
        "type": pre_absence.type.value,
        "type_label": pre_absence.type.label,
        "start_date": pre_absence.start_date.isoformat(),
        "end_date": pre_absence.end_date.isoformat(),
    }


def get_pre_absence_info(student_id, day):
    day = as_date(day)
    pre_absence = (
        _covering(day)
        .filter(PreAbsence.student_id == student_id)
        .order_by(PreAbsence.created_at.desc(), PreAbsence.id.desc())
        .first()
    )
    return _info(pre_absence) if pre_absence else None


def pre_absence_lookup(day):
    """{student_id: info} for everyone with a pre-registered absence on the day."""
    day = as_date(day)
    lookup = {}
    for pre_absence in _covering(day).order_by(PreAbsence.created_at, PreAbsence.id).all():
        lookup[pre_absence.student_id] = _info(pre_absence)
    return lookup


def create_pre_absence(student_id, start_date, end_date, reason=None, absence_type=AbsenceType.pre_absence, source="manual"):
    if not db.session.get(Student, student_id):
        raise LookupError(f"Student {student_id} not found")
    start_date, end_date = as_date(start_date), as_date(end_date)
    if end_date < start_date:
        raise ValueError("end_date must not be before start_date")

    pre_absence = PreAbsence(
        student_id=student_id,
        start_date=start_date,
        end_date=end_date,
        reason=(reason or "").strip() or None,
        type=AbsenceType.parse(absence_type),
        source=source,
    )
    db.session.add(pre_absence)
    db.session.commit()
    return pre_absence


class AbsenceSheetClient:
    """Reads pre-absence / overnight-leave rows from the Apps Script web app.

    Results are cached for cache_seconds. When a fetch fails the last good
    result is returned, or an empty list if there never was one.
    """

    def __init__(self, url, cache_seconds=300, timeout=15):
        self.url = url
        self.cache_seconds = cache_seconds
        self.timeout = timeout
        self._cached = None
        self._cached_at = 0.0

    def refresh_cache(self):
        self._cached = None
        self._cached_at = 0.0

    def fetch(self):
        now = time.monotonic()
        if self._cached is not None and (now - self._cached_at) < self.cache_seconds:
            return self._cached

        try:
            response = requests.get(self.url, timeout=self.timeout)
            response.raise_for_status()
            raw = response.json()
            entries = [
                {
                    "studentId": str(entry.get("studentId", "")).strip(),
                    "name": entry.get("name", ""),
                    "type": entry.get("type", ""),
                    "startDate": normalize_date(entry.get("startDate")),
                    "endDate": normalize_date(entry.get("endDate")),
                    "reason": entry.get("reason", "") or "",
                }
                for entry in raw
            ]
        except (requests.RequestException, ValueError, TypeError, AttributeError) as e:
            current_app.logger.error("[AbsenceService] Error fetching data: %s", e)
            return self._cached if self._cached is not None else []

        self._cached = entries
        self._cached_at = now
        current_app.logger.info("[AbsenceService] Loaded %d entries from spreadsheet", len(entries))
        return entries


_clients = {}


def get_sheet_client():
    url = current_app.config.get("ABSENCE_SHEET_URL")
    if not url:
        return None
    client = _clients.get(url)
    if client is None:
        client = AbsenceSheetClient(
            url,
            cache_seconds=current_app.config.get("ABSENCE_CACHE_SECONDS", 300),
            timeout=current_app.config.get("HTTP_TIMEOUT_SECONDS", 15),
        )
        _clients[url] = client
    return client


def refresh_cache():
    client = get_sheet_client()
    if client:
        client.refresh_cache()


def fetch_absence_data():
    client = get_sheet_client()
    return client.fetch() if client else []


def _is_overnight(entry):
    try:
        return AbsenceType.parse(entry.get("type")) is AbsenceType.overnight
    except ValueError:
        return False


def pre_absences_map(entries=None):
    """{studentId: {reason, startDate, endDate, type}} keyed by student number."""
    entries = fetch_absence_data() if entries is None else entries
    result = {}
    for entry in entries:
        reason = entry.get("reason") or ""
        if _is_overnight(entry):
            reason = f"overnight ({reason})" if reason else "overnight"
        result[entry["studentId"]] = {
            "reason": reason,
            "startDate": entry["startDate"],
            "endDate": entry["endDate"],
            "type": entry.get("type"),
        }
    return result


def absent_students_on_date(date_str, entries=None):
    entries = fetch_absence_data() if entries is None else entries
    return [e for e in entries if e["startDate"] and e["startDate"] <= date_str <= e["endDate"]]


def is_overnight_leave_on_date(student_id, date_str, entries=None):
    entries = fetch_absence_data() if entries is None else entries
    return any(
        e["studentId"] == student_id and _is_overnight(e) and e["startDate"] <= date_str <= e["endDate"]
        for e in entries
        if e["startDate"]
    )


def sync_from_sheet():
    """Replaces the spreadsheet-sourced pre-absences with a fresh fetch.

    Rows with unknown students, unknown types or unparseable dates are skipped.
    """
    refresh_cache()
    entries = fetch_absence_data()

    PreAbsence.query.filter_by(source="sheet").delete()
    imported, skipped = 0, 0
    for entry in entries:
        if not entry["startDate"] or not entry["endDate"] or not db.session.get(Student, entry["studentId"]):
            skipped += 1
            continue
        try:
            absence_type = AbsenceType.parse(entry.get("type") or AbsenceType.pre_absence.value)
        except ValueError:
            skipped += 1
            continue
        db.session.add(PreAbsence(
            student_id=entry["studentId"],
            start_date=date_cls.fromisoformat(entry["startDate"]),
            end_date=date_cls.fromisoformat(entry["endDate"]),
            reason=entry.get("reason") or None,
            type=absence_type,
            source="sheet",
        ))
        imported += 1

    db.session.commit()
    return {"imported": imported, "skipped": skipped}


def list_pre_absences(day=None):
    query = PreAbsence.query
    if day is not None:
        query = _covering(as_date(day))
    return query.order_by(PreAbsence.start_date, PreAbsence.student_id).all()


def delete_pre_absence(pre_absence_id):
    pre_absence = db.session.get(PreAbsence, pre_absence_id)
    if not pre_absence:
        raise LookupError("Pre-absence not found")
    db.session.delete(pre_absence)
    db.session.commit()
