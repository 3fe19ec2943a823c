from datetime import datetime

from conftest import FakeResponse
from studyhall.services import sms
from utils import checkin_window


def test_health(client):
    assert client.get("/health").get_json() == {"status": "ok"}


def test_register_login_me_logout(client, admin_headers):
    resp = client.post("/auth/register", json={"username": "staff2", "password": "pw12345", "display_name": "이건우"},
                       headers=admin_headers)
    assert resp.status_code == 201
    assert resp.get_json()["user"]["role"] == "staff"

    resp = client.post("/auth/login", json={"username": "staff2", "password": "wrong"})
    assert resp.status_code == 401

    resp = client.post("/auth/login", json={"username": "staff2", "password": "pw12345"})
    assert resp.status_code == 200
    assert client.get_cookie("access_token_cookie") is not None

    me = client.get("/auth/me")
    assert me.status_code == 200
    assert me.get_json()["staff_name"] == "이건우"

    assert client.post("/auth/logout").status_code == 200
    assert client.get_cookie("access_token_cookie") is None


def test_register_validation(client, admin_headers):
    def register(body):
        return client.post("/auth/register", json=body, headers=admin_headers).status_code

    assert register({"username": "x"}) == 400
    assert register({"username": "admin", "password": "pw"}) == 400
    assert register({"username": "new", "password": "pw", "role": "root"}) == 400


def test_register_needs_an_admin(client, staff_headers):
    body = {"username": "mallory", "password": "pw12345", "role": "admin"}

    assert client.post("/auth/register", json=body).status_code == 401
    assert client.post("/auth/register", json=body, headers=staff_headers).status_code == 403
    assert client.post("/auth/login", json={"username": "mallory", "password": "pw12345"}).status_code == 401


def test_revoked_token_is_rejected(client, admin_headers):
    assert client.post("/auth/logout", headers=admin_headers).status_code == 200
    assert client.get("/auth/me", headers=admin_headers).status_code == 401


def test_zone_seat_map(client, staff_headers):
    resp = client.get("/zones/4A/seats?date=2026-01-07", headers=staff_headers)

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["state"] is None
    assert body["rows"][0][0]["seat_id"] == "4A001"
    assert client.get("/zones/9Z/seats", headers=staff_headers).status_code == 404
    assert client.get("/zones/4A/seats?date=bad", headers=staff_headers).status_code == 400


def test_checkin_flow(client, staff_headers, admin_headers):
    resp = client.post("/zones/4A/toggle", json={"date": "2026-01-07", "seat_id": "4A001"}, headers=staff_headers)
    assert resp.get_json() == {"seat_id": "4A001", "status": "present"}

    resp = client.post("/zones/4A/mark-all-present", json={"date": "2026-01-07"}, headers=staff_headers)
    assert resp.get_json() == {"changed": 2}

    resp = client.post("/zones/4A/save", headers=staff_headers, json={
        "date": "2026-01-07",
        "state": "saved",
        "records": [
            {"seat_id": "4A001", "status": "present"},
            {"seat_id": "4A002", "status": "absent", "note": "called parent"},
            {"seat_id": "4A003", "status": "present"},
        ],
    })
    assert resp.status_code == 200
    assert resp.get_json()["sheet"]["recorded_by"] == "김종규"

    resp = client.post("/zones/4A/save", headers=staff_headers,
                       json={"date": "2026-01-07", "state": "temp", "records": []})
    assert resp.status_code == 400

    summary = client.get("/dashboard/summary?date=2026-01-07", headers=admin_headers).get_json()
    zone = next(z for z in summary["zones"] if z["zoneId"] == "4A")
    assert (zone["present"], zone["absent"], zone["completionRate"]) == (2, 1, 100)
    assert summary["overall"]["totalStudents"] == 4

    absent = client.get("/dashboard/students?date=2026-01-07&status=absent", headers=admin_headers).get_json()
    assert [s["studentId"] for s in absent["students"]] == ["10102"]

    text = client.get("/exports/clipboard?date=2026-01-07", headers=admin_headers).get_json()["text"]
    assert "4A002\t이서준\tcalled parent" in text


def test_save_requires_record_list(client, staff_headers):
    resp = client.post("/zones/4A/save", json={"records": "nope"}, headers=staff_headers)

    assert resp.status_code == 400

    resp = client.post("/zones/4A/save", json={"records": ["4A001"]}, headers=staff_headers)

    assert resp.status_code == 400
    assert resp.get_json() == {"error": "each record must be an object"}


def test_dashboard_is_admin_only(client, staff_headers, admin_headers):
    assert client.get("/dashboard/summary", headers=staff_headers).status_code == 403
    assert client.get("/dashboard/summary").status_code == 401
    assert client.get("/dashboard/summary?grade=3", headers=admin_headers).status_code == 400
    assert client.get("/dashboard/summary", headers=admin_headers).status_code == 200


def test_checkin_window_blocks_staff_but_not_admin(app, client, staff_headers, admin_headers, monkeypatch):
    app.config["CHECKIN_WINDOW_ENFORCED"] = True
    monkeypatch.setattr(checkin_window, "is_within_checkin_window", lambda now=None: False)
    payload = {"date": "2026-01-07", "seat_id": "4A001"}

    resp = client.post("/zones/4A/toggle", json=payload, headers=staff_headers)
    assert resp.status_code == 403
    assert "06:30" in resp.get_json()["error"]

    assert client.post("/zones/4A/toggle", json=payload, headers=admin_headers).status_code == 200


def test_window_bounds(app):
    assert checkin_window.is_within_checkin_window(datetime(2026, 1, 7, 6, 30))
    assert checkin_window.is_within_checkin_window(datetime(2026, 1, 7, 9, 30, 59))
    assert not checkin_window.is_within_checkin_window(datetime(2026, 1, 7, 9, 31))
    assert not checkin_window.is_within_checkin_window(datetime(2026, 1, 7, 6, 29))


def test_notes_and_notices(client, staff_headers, admin_headers):
    resp = client.put("/zones/notes", json={"date": "2026-01-07", "seat_id": "4A001", "note": "late bus"},
                      headers=staff_headers)
    assert resp.get_json() == {"seat_id": "4A001", "note": "late bus"}
    notes = client.get("/zones/notes?date=2026-01-07", headers=staff_headers).get_json()
    assert notes["notes"] == {"4A001": "late bus"}

    assert client.put("/notices/2026-01-07", json={"text": "Exam week"}, headers=staff_headers).status_code == 403
    client.put("/notices/2026-01-07", json={"text": " Exam week "}, headers=admin_headers)
    assert client.get("/notices/2026-01-07", headers=staff_headers).get_json()["text"] == "Exam week"
    assert client.delete("/notices/2026-01-07", headers=admin_headers).status_code == 200
    assert client.delete("/notices/2026-01-07", headers=admin_headers).status_code == 404


def test_pre_absence_endpoints(client, admin_headers):
    resp = client.post("/pre-absences/", headers=admin_headers, json={
        "student_id": "10101", "start_date": "2026-01-05", "end_date": "2026-01-09", "reason": "Trip",
    })
    assert resp.status_code == 201
    pre_id = resp.get_json()["pre_absence"]["id"]

    listed = client.get("/pre-absences/?date=2026-01-07", headers=admin_headers).get_json()
    assert [p["id"] for p in listed["pre_absences"]] == [pre_id]

    bad = client.post("/pre-absences/", headers=admin_headers,
                      json={"student_id": "10101", "start_date": "2026-01-09", "end_date": "2026-01-05"})
    assert bad.status_code == 400
    missing = client.post("/pre-absences/", headers=admin_headers, json={"student_id": "19999", "start_date": "2026-01-09"})
    assert missing.status_code == 404

    assert client.delete(f"/pre-absences/{pre_id}", headers=admin_headers).status_code == 200
    assert client.delete(f"/pre-absences/{pre_id}", headers=admin_headers).status_code == 404


def test_schedule_endpoints(client, admin_headers, staff_headers):
    day = client.get("/schedules/?date=2025-12-22", headers=staff_headers).get_json()
    assert day["staff"]["grade1"] == ["김종규", "이건우"]
    assert day["recorders"]["4C"] == "이건우"
    assert day["isTemporaryPeriod"] is True

    resp = client.put("/schedules/", headers=admin_headers,
                      json={"date": "2026-03-03", "grade": 1, "staff": ["김종규", "홍선영"]})
    assert resp.status_code == 200
    assert "2026-03-03" in client.get("/schedules/dates", headers=staff_headers).get_json()["dates"]

    bad = client.put("/schedules/", headers=admin_headers, json={"date": "2026-03-03", "grade": 1, "staff": ["one"]})
    assert bad.status_code == 400


def test_bug_report_endpoints(client, admin_headers):
    assert client.post("/bug-reports/", json={}).status_code == 400
    created = client.post("/bug-reports/", json={"description": "button does nothing", "url": "/admin"})
    assert created.status_code == 201
    report_id = created.get_json()["report"]["id"]

    assert client.get("/bug-reports/unread-count", headers=admin_headers).get_json() == {"unread": 1}
    client.post(f"/bug-reports/{report_id}/read", headers=admin_headers)
    listed = client.get("/bug-reports/", headers=admin_headers).get_json()
    assert listed["unread"] == 0
    assert listed["reports"][0]["is_read"] is True

    assert client.delete("/bug-reports/", headers=admin_headers).get_json()["deleted"] == 1


def test_student_endpoints(client, admin_headers, staff_headers):
    resp = client.post("/students/create", headers=admin_headers,
                       json={"student_id": "10104", "name": "정하준", "seat_id": "4A004"})
    assert resp.status_code == 201
    assert client.post("/students/create", headers=staff_headers,
                       json={"student_id": "10105", "name": "x"}).status_code == 403

    listed = client.get("/students/list?search=정", headers=staff_headers).get_json()
    assert [s["id"] for s in listed["students"]] == ["10104"]

    assert client.put("/students/10104/seat", json={"seat_id": "4A001"}, headers=admin_headers).status_code == 400
    assert client.put("/students/10104/seat", json={"seat_id": "4A005"}, headers=admin_headers).status_code == 200
    assert client.delete("/students/10104", headers=admin_headers).status_code == 200
    assert client.get("/students/10104", headers=admin_headers).status_code == 404
    assert client.post("/students/10104/restore", headers=admin_headers).status_code == 200


def test_roster_upload(client, admin_headers, monkeypatch):
    from io import BytesIO
    from studyhall.services import roster
    monkeypatch.setattr(roster.magic, "from_buffer", lambda data, mime: "text/csv")
    csv = "student_id,name,seat_id,residence_type\n10104,정하준,4A004,dorm\n".encode("utf-8")

    resp = client.post("/students/upload", headers=admin_headers,
                       data={"file": (BytesIO(csv), "roster.csv")}, content_type="multipart/form-data")

    assert resp.status_code == 200
    assert resp.get_json() == {"created": 1, "updated": 0, "errors": []}


def test_export_endpoints(client, admin_headers):
    resp = client.get("/exports/absentees?date=2026-01-07", headers=admin_headers).get_json()
    assert resp["sheetName"] == "1/7"
    assert resp["sheetsConfigured"] is False

    sheets = client.post("/exports/sheets", json={"date": "2026-01-07"}, headers=admin_headers)
    assert sheets.status_code == 502
    assert sheets.get_json()["success"] is False

    excel = client.get("/exports/excel?date=2026-01-07", headers=admin_headers)
    assert excel.status_code == 200
    assert excel.data[:2] == b"PK"


def test_broadcast_endpoints(app, client, admin_headers, monkeypatch):
    preview = client.get("/broadcasts/discord/preview?date=2026-01-07", headers=admin_headers)
    assert preview.mimetype == "image/png"

    resp = client.post("/broadcasts/discord", json={"date": "2026-01-07"}, headers=admin_headers)
    assert resp.status_code == 502

    client.post("/zones/4A/save", headers=admin_headers, json={
        "date": "2026-01-07", "records": [{"seat_id": "4A002", "status": "absent"}],
    })
    categories = client.get("/broadcasts/sms/categories?date=2026-01-07", headers=admin_headers).get_json()
    assert [s["studentId"] for s in categories["categories"]["dorm_no_overnight"]] == ["10102"]

    app.config["SMS_API_URL"] = "https://sms.example"
    sent = {}

    def fake_request(method, url, timeout, **kwargs):
        sent.update(url=url, json=kwargs.get("json"))
        return FakeResponse({"mode": "test", "message": "ok"})

    monkeypatch.setattr(sms.requests, "request", fake_request)
    resp = client.post("/broadcasts/sms", json={"date": "2026-01-07"}, headers=admin_headers)
    assert resp.status_code == 200
    assert sent["json"] == {"absentStudents": [{"studentId": "10102", "name": "이서준"}]}

    empty = client.post("/broadcasts/sms", json={"students": []}, headers=admin_headers)
    assert empty.status_code == 400


def test_failed_login_is_audited(app, client, seeded):
    client.post("/auth/login", json={"username": "admin", "password": "wrong"})

    with open(app.config["AUDIT_LOG_FILE"], encoding="utf-8") as fh:
        lines = fh.read().splitlines()
    assert lines[-1].startswith("[")
    assert "[WARNING] LOGIN_FAILED" in lines[-1]
