from datetime import date

import pytest
import requests

from conftest import DAY, FakeResponse
from studyhall.models import AbsenceType, PreAbsence
from studyhall.services import absences
from studyhall.services.absences import (
    AbsenceSheetClient, absent_students_on_date, create_pre_absence, get_pre_absence_info,
    is_overnight_leave_on_date, is_pre_absent_on_date, normalize_date, pre_absence_lookup,
    pre_absences_map, sync_from_sheet,
)

SHEET_ROWS = [
    {"studentId": "10101", "name": "김민준", "type": "사전결석", "startDate": "2026-01-05",
     "endDate": "2026-01-09", "reason": "Family trip"},
    {"studentId": "10102", "name": "이서준", "type": "외박",
     "startDate": "Wed Jan 07 2026 00:00:00 GMT+0900 (Korean Standard Time)",
     "endDate": "Wed Jan 07 2026 00:00:00 GMT+0900 (Korean Standard Time)", "reason": ""},
]


def test_normalize_date(app):
    assert normalize_date("2026-01-07") == "2026-01-07"
    assert normalize_date("Wed Jan 07 2026 00:00:00 GMT+0900 (Korean Standard Time)") == "2026-01-07"
    assert normalize_date("") == ""
    assert normalize_date(None) == ""
    assert normalize_date("next tuesday") == ""


def test_sheet_client_caches_results(app, monkeypatch):
    calls = []

    def fake_get(url, timeout):
        calls.append(url)
        return FakeResponse(SHEET_ROWS)

    monkeypatch.setattr(absences.requests, "get", fake_get)
    client = AbsenceSheetClient("https://sheet.example/exec", cache_seconds=300)

    first = client.fetch()
    second = client.fetch()

    assert len(calls) == 1
    assert first is second
    assert first[1]["startDate"] == "2026-01-07"

    client.refresh_cache()
    client.fetch()
    assert len(calls) == 2


def test_sheet_client_falls_back_to_stale_cache(app, monkeypatch):
    responses = [FakeResponse(SHEET_ROWS), requests.ConnectionError("down")]

    def fake_get(url, timeout):
        result = responses.pop(0)
        if isinstance(result, Exception):
            raise result
        return result

    monkeypatch.setattr(absences.requests, "get", fake_get)
    client = AbsenceSheetClient("https://sheet.example/exec", cache_seconds=0)

    assert len(client.fetch()) == 2
    assert len(client.fetch()) == 2


def test_sheet_client_returns_empty_without_cache(app, monkeypatch):
    def fake_get(url, timeout):
        return FakeResponse({"error": "bad"}, status_code=500)

    monkeypatch.setattr(absences.requests, "get", fake_get)

    assert AbsenceSheetClient("https://sheet.example/exec").fetch() == []


def test_fetch_without_configured_sheet(app):
    assert absences.fetch_absence_data() == []


def test_pre_absences_map_labels_overnight():
    entries = [dict(r, startDate="2026-01-07", endDate="2026-01-07") for r in SHEET_ROWS]
    entries[1]["reason"] = "home visit"

    mapped = pre_absences_map(entries)

    assert mapped["10101"]["reason"] == "Family trip"
    assert mapped["10102"]["reason"] == "overnight (home visit)"


def test_date_filters_over_sheet_entries():
    entries = [
        {"studentId": "10101", "type": "사전결석", "startDate": "2026-01-05", "endDate": "2026-01-09", "reason": ""},
        {"studentId": "10102", "type": "외박", "startDate": "2026-01-07", "endDate": "2026-01-07", "reason": ""},
        {"studentId": "10103", "type": "외박", "startDate": "", "endDate": "", "reason": ""},
    ]

    assert [e["studentId"] for e in absent_students_on_date("2026-01-07", entries)] == ["10101", "10102"]
    assert [e["studentId"] for e in absent_students_on_date("2026-01-08", entries)] == ["10101"]
    assert is_overnight_leave_on_date("10102", "2026-01-07", entries)
    assert not is_overnight_leave_on_date("10101", "2026-01-07", entries)
    assert not is_overnight_leave_on_date("10103", "2026-01-07", entries)


def test_create_pre_absence_and_lookup(seeded):
    create_pre_absence("10101", "2026-01-05", "2026-01-09", reason="Family trip")
    create_pre_absence("10102", DAY, DAY, absence_type="외박")

    assert is_pre_absent_on_date("10101", DAY)
    assert not is_pre_absent_on_date("10101", date(2026, 1, 10))

    lookup = pre_absence_lookup(DAY)
    assert lookup["10101"]["type_label"] == "pre-absence"
    assert lookup["10102"]["type"] == "overnight"
    assert get_pre_absence_info("10103", DAY) is None


def test_newest_pre_absence_wins(seeded):
    create_pre_absence("10101", "2026-01-01", "2026-01-31", reason="Old")
    create_pre_absence("10101", DAY, DAY, reason="New")

    assert get_pre_absence_info("10101", DAY)["reason"] == "New"
    assert pre_absence_lookup(DAY)["10101"]["reason"] == "New"


def test_create_pre_absence_validation(seeded):
    with pytest.raises(LookupError):
        create_pre_absence("19999", DAY, DAY)
    with pytest.raises(ValueError):
        create_pre_absence("10101", "2026-01-09", "2026-01-05")
    with pytest.raises(ValueError):
        create_pre_absence("10101", DAY, DAY, absence_type="holiday")


def test_sync_from_sheet_replaces_sheet_rows(seeded, monkeypatch):
    create_pre_absence("10103", DAY, DAY, reason="manual entry")
    entries = [
        {"studentId": "10101", "type": "사전결석", "startDate": "2026-01-05", "endDate": "2026-01-09", "reason": "Trip"},
        {"studentId": "19999", "type": "사전결석", "startDate": "2026-01-05", "endDate": "2026-01-09", "reason": ""},
        {"studentId": "10102", "type": "외박", "startDate": "", "endDate": "", "reason": ""},
    ]
    monkeypatch.setattr(absences, "fetch_absence_data", lambda: entries)

    assert sync_from_sheet() == {"imported": 1, "skipped": 2}
    assert sync_from_sheet() == {"imported": 1, "skipped": 2}

    assert PreAbsence.query.filter_by(source="sheet").count() == 1
    assert PreAbsence.query.filter_by(source="manual").count() == 1
    assert PreAbsence.query.filter_by(source="sheet").first().type is AbsenceType.pre_absence
