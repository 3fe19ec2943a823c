import pytest

from conftest import DAY
from studyhall.extensions import db
from studyhall.models import AttendanceStatus, SheetState, Student
from studyhall.services.absences import create_pre_absence
from studyhall.services.attendance import (
    get_sheet, mark_all_present, notes_for_date, save_sheet, seat_map, seat_student_map,
    set_note, stored_records, toggle_seat,
)


def test_seat_student_map(seeded):
    students = seat_student_map("4A")

    assert students["4A001"]["name"] == "김민준"
    assert students["4A002"]["residence_type"] == "dorm"
    assert students["4A004"] is None
    assert "3A001" not in students


def test_deleted_student_frees_the_seat_in_the_map(seeded):
    db.session.get(Student, "10103").soft_delete()
    db.session.commit()

    assert seat_student_map("4A")["4A003"] is None


def test_toggle_cycles_status(seeded):
    assert toggle_seat("4A", DAY, "4A001") is AttendanceStatus.present
    assert toggle_seat("4A", DAY, "4A001") is AttendanceStatus.absent
    assert toggle_seat("4A", DAY, "4A001", staff_name="김종규") is AttendanceStatus.present

    record = stored_records("4A", DAY)["4A001"]
    assert record["staff_name"] == "김종규"
    assert record["is_modified"] is True
    assert get_sheet("4A", DAY).state is SheetState.temp


def test_toggle_rejects_unassigned_and_foreign_seats(seeded):
    with pytest.raises(ValueError):
        toggle_seat("4A", DAY, "4A010")
    with pytest.raises(LookupError):
        toggle_seat("4A", DAY, "3A001")
    with pytest.raises(LookupError):
        toggle_seat("9Z", DAY, "9Z001")


def test_save_sheet_overwrites_records(seeded):
    save_sheet("4A", DAY, [
        {"seat_id": "4A001", "status": "present"},
        {"seat_id": "4A002", "status": "absent", "note": "  called parent "},
    ])
    save_sheet("4A", DAY, [
        {"seat_id": "4A002", "status": "present"},
        {"seat_id": "4A003", "status": "unchecked"},
    ])

    records = stored_records("4A", DAY)
    assert list(records) == ["4A002"]
    assert records["4A002"]["status"] == "present"


def test_final_save_stamps_recorder(seeded):
    save_sheet("4A", DAY, [{"seat_id": "4A002", "status": "absent", "note": " called parent "}])
    sheet = save_sheet("4A", DAY, [{"seat_id": "4A002", "status": "absent", "note": " called parent "}],
                       state=SheetState.saved, recorded_by="김종규", user_id=seeded["staff"].id)

    assert sheet.state is SheetState.saved
    assert sheet.recorded_by == "김종규"
    assert sheet.saved_at is not None
    assert stored_records("4A", DAY)["4A002"]["note"] == "called parent"


def test_saved_sheet_is_not_downgraded(seeded):
    save_sheet("4A", DAY, [], state="saved", recorded_by="김종규")

    with pytest.raises(ValueError):
        save_sheet("4A", DAY, [{"seat_id": "4A001", "status": "present"}], state="temp")
    # a second final save is allowed
    save_sheet("4A", DAY, [{"seat_id": "4A001", "status": "present"}], state="saved", recorded_by="이건우")
    assert get_sheet("4A", DAY).recorded_by == "이건우"


def test_save_sheet_validation(seeded):
    with pytest.raises(ValueError):
        save_sheet("4A", DAY, [], state="saved")
    with pytest.raises(ValueError):
        save_sheet("4A", DAY, [{"seat_id": "4A001", "status": "late"}])
    with pytest.raises(ValueError):
        save_sheet("4A", DAY, [{"seat_id": "4A001", "status": "present"},
                               {"seat_id": "4A001", "status": "absent"}])
    with pytest.raises(ValueError):
        save_sheet("4A", DAY, [{"seat_id": "4A004", "status": "present"}])
    with pytest.raises(ValueError, match="must be an object"):
        save_sheet("4A", DAY, ["4A001"])


def test_mark_all_present_only_fills_unchecked(seeded):
    toggle_seat("4A", DAY, "4A001")
    toggle_seat("4A", DAY, "4A001")

    assert mark_all_present("4A", DAY) == 2
    records = stored_records("4A", DAY)
    assert records["4A001"]["status"] == "absent"
    assert records["4A002"]["status"] == "present"
    assert mark_all_present("4A", DAY) == 0


def test_notes(seeded):
    assert set_note(DAY, "4A001", "  late bus ") == "late bus"
    assert notes_for_date(DAY) == {"4A001": "late bus"}

    set_note(DAY, "4A001", "left early")
    assert notes_for_date(DAY) == {"4A001": "left early"}

    assert set_note(DAY, "4A001", "   ") is None
    assert notes_for_date(DAY) == {}

    with pytest.raises(LookupError):
        set_note(DAY, "9Z001", "x")


def test_seat_map_cells(seeded):
    create_pre_absence("10102", DAY, DAY, reason="Hospital")
    set_note(DAY, "4A003", "late bus")
    toggle_seat("4A", DAY, "4A001")

    rows = seat_map("4A", DAY)
    cells = {c["seat_id"]: c for row in rows for c in row if c["type"] == "seat"}

    assert cells["4A001"]["status"] == "present"
    assert cells["4A001"]["student_name"] == "김민준"
    assert cells["4A002"]["has_pre_absence"] is True
    assert cells["4A003"]["has_note"] is True
    assert cells["4A004"]["is_assigned"] is False
    assert rows[0][4] == {"type": "spacer"}
    assert rows[3] == [{"type": "break"}]
