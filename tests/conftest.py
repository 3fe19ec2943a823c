from datetime import date

import pytest
from flask_jwt_extended import create_access_token

from studyhall import create_app
from studyhall.config import TestConfig
from studyhall.extensions import db
from studyhall.models import Role, Seat, Student, User, ResidenceType
from studyhall.services import absences
from studyhall.services.attendance import ensure_zones_and_seats

DAY = date(2026, 1, 7)

STUDENTS = [
    # student_id, name, residence, seat
    ("10101", "김민준", ResidenceType.commute, "4A001"),
    ("10102", "이서준", ResidenceType.dorm, "4A002"),
    ("10103", "박도윤", ResidenceType.dorm, "4A003"),
    ("20101", "최서연", ResidenceType.commute, "3A001"),
]


class FakeResponse:
    def __init__(self, payload=None, status_code=200):
        self._payload = payload
        self.status_code = status_code

    @property
    def ok(self):
        return 200 <= self.status_code < 300

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload

    def raise_for_status(self):
        import requests
        if not self.ok:
            raise requests.HTTPError(f"{self.status_code} error")


@pytest.fixture
def app(tmp_path):
    class Config(TestConfig):
        AUDIT_LOG_FILE = str(tmp_path / "audit.log")

    app = create_app(Config)
    absences._clients.clear()
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def seeded(app):
    ensure_zones_and_seats()
    for role_name in ("admin", "staff"):
        db.session.add(Role(name=role_name))
    db.session.flush()

    admin = User(username="admin", display_name="Admin", role_id=Role.query.filter_by(name="admin").first().id)
    admin.set_password("adminpass")
    staff = User(username="staff1", display_name="김종규", role_id=Role.query.filter_by(name="staff").first().id)
    staff.set_password("staffpass")
    db.session.add_all([admin, staff])

    for student_id, name, residence, seat_id in STUDENTS:
        db.session.add(Student(id=student_id, name=name, grade=int(student_id[0]), residence_type=residence))
        db.session.flush()
        db.session.get(Seat, seat_id).student_id = student_id

    db.session.commit()
    return {"admin": admin, "staff": staff}


def _headers(user):
    return {"Authorization": f"Bearer {create_access_token(identity=str(user.id))}"}


@pytest.fixture
def admin_headers(seeded):
    return _headers(seeded["admin"])


@pytest.fixture
def staff_headers(seeded):
    return _headers(seeded["staff"])
