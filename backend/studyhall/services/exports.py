from io import BytesIO
import pandas as pd
import requests
from flask import current_app
from .dashboard import zone_summaries
from .seat_layouts import ZONES

WEEKDAYS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]


def _pre_absence_part(pre):
    if pre["reason"]:
        return f"[{pre['type_label']}] {pre['reason']}"
    return f"[{pre['type_label']}]"


def absent_students_for_export(view):
    """Absent students across all zones, sorted by seat.

    The note joins, in order, the pre-absence tag, the day's seat remark and
    the remark typed on the attendance record.
    """
    result = []
    for zone in ZONES:
        for seat_id, student in view.assigned_seats(zone["id"]):
            record = view.record_of(zone["id"], seat_id)
            if not record or record["status"] != "absent":
                continue

            parts = []
            pre = view.pre_absent.get(student["student_id"])
            if pre:
                parts.append(_pre_absence_part(pre))
            if view.notes.get(seat_id):
                parts.append(view.notes[seat_id])
            if record.get("note"):
                parts.append(record["note"])

            result.append({
                "seatId": seat_id,
                "studentId": student["student_id"],
                "name": student["name"],
                "note": " / ".join(parts),
                "grade": zone["grade"],
            })

    result.sort(key=lambda s: s["seatId"])
    return result


def students_with_notes(view):
    result = []
    for zone in ZONES:
        for seat_id, student in view.assigned_seats(zone["id"]):
            record = view.record_of(zone["id"], seat_id) or {}
            note = view.notes.get(seat_id) or record.get("note")
            if note:
                result.append({
                    "seatId": seat_id,
                    "name": student["name"],
                    "note": note,
                    "grade": zone["grade"],
                    "status": record.get("status", "unchecked"),
                })
    result.sort(key=lambda s: s["seatId"])
    return result


def sheet_name(day):
    return f"{day.month}/{day.day}"


def display_date(day):
    return f"{day.month}/{day.day} ({WEEKDAYS[day.weekday()]})"


def export_to_clipboard(day, absentees):
    """Tab separated text that pastes straight into the attendance spreadsheet."""
    lines = [f"{sheet_name(day)} study hall absentees: {len(absentees)}"]
    for grade in (1, 2):
        rows = [s for s in absentees if s["grade"] == grade]
        if not rows:
            continue
        lines.append("")
        lines.append(f"[Grade {grade}] {len(rows)}")
        for s in rows:
            lines.append(f"{s['seatId']}\t{s['name']}\t{s['note']}".rstrip())
    return "\n".join(lines)


def is_sheets_export_configured():
    return bool(current_app.config.get("SHEETS_EXPORT_URL"))


def export_to_sheets(day, absentees, with_notes):
    """POSTs the day's absentees to the Apps Script export endpoint.

    Always returns {"success", "message", "sheetUrl"}; failures are reported
    in the payload rather than raised.
    """
    url = current_app.config.get("SHEETS_EXPORT_URL")
    if not url:
        return {"success": False, "message": "Spreadsheet export is not configured.", "sheetUrl": None}

    payload = {
        "date": day.isoformat(),
        "sheetName": sheet_name(day),
        "absentStudents": absentees,
        "studentsWithNotes": with_notes,
    }
    try:
        response = requests.post(url, json=payload, timeout=current_app.config.get("HTTP_TIMEOUT_SECONDS", 15))
        response.raise_for_status()
        body = response.json()
    except (requests.RequestException, ValueError) as e:
        current_app.logger.error("Sheets export failed: %s", e)
        return {"success": False, "message": f"Export failed: {e}", "sheetUrl": None}

    if not isinstance(body, dict):
        current_app.logger.error("Sheets export returned %r", body)
        return {"success": False, "message": "Export failed: unexpected response", "sheetUrl": None}

    success = bool(body.get("success"))
    message = body.get("message") or (
        f"Saved {len(absentees)} absentees to sheet '{sheet_name(day)}'." if success else "Export failed."
    )
    return {
        "success": success,
        "message": message,
        "sheetUrl": body.get("sheetUrl") or current_app.config.get("SPREADSHEET_URL") or None,
    }


def excel_export(view):
    """Workbook with the absentee list and the per-zone summary."""
    absentees = pd.DataFrame(
        absent_students_for_export(view),
        columns=["seatId", "studentId", "name", "grade", "note"],
    )
    summary = pd.DataFrame(
        zone_summaries(view),
        columns=["zoneId", "zoneName", "grade", "present", "absent", "unchecked",
                 "total", "completionRate", "recordedBy"],
    )

    buffer = BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        absentees.to_excel(writer, sheet_name="Absentees", index=False)
        summary.to_excel(writer, sheet_name="Zones", index=False)
    buffer.seek(0)
    return buffer
