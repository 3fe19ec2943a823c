import os
from studyhall.extensions import db
from studyhall.models import User
from studyhall.services.accounts import ROLES, get_or_create_role
from studyhall.services.attendance import ensure_zones_and_seats
from studyhall.services.mock_data import initialize_mock_data, seed_zones_and_students


def seed_roles():
    for role_name in ROLES:
        get_or_create_role(role_name)
    db.session.commit()


def seed_user(username, password, role_name, display_name=None):
    user = User.query.filter_by(username=username).first()
    if user:
        return user
    user = User(username=username, display_name=display_name, role_id=get_or_create_role(role_name).id)
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    return user


def seed_base():
    """Roles, the default admin account and the fixed zone layouts."""
    seed_roles()
    seed_user("admin", os.getenv("ADMIN_PASSWORD", "change-me-admin"), "admin", "Administrator")
    ensure_zones_and_seats()
    db.session.commit()


def seed_demo(with_attendance=True):
    """Base data plus a generated roster and, optionally, the demo attendance window."""
    seed_base()
    seed_user("staff", os.getenv("STAFF_PASSWORD", "change-me-staff"), "staff", "Study Hall Staff")
    students = seed_zones_and_students()
    sheets = initialize_mock_data() if with_attendance else 0
    return {"students": students, "sheets": sheets}
