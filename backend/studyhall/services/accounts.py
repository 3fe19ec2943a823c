"""Staff and admin accounts, and revocation of their tokens."""
import re
from datetime import datetime
from studyhall.extensions import db
from studyhall.models import Role, TokenBlocklist, User

ROLES = ("admin", "staff")
_USERNAME = re.compile(r"^[\w.@+-]{3,}$")


def _check_credentials(username, password):
    if not username or not password:
        raise ValueError("Username and password are required")
    if not _USERNAME.match(username):
        raise ValueError("Invalid username format")


def get_or_create_role(name):
    role = Role.query.filter_by(name=name).first()
    if not role:
        role = Role(name=name)
        db.session.add(role)
        db.session.flush()
    return role


def register_account(username, password, role_name="staff", display_name=None):
    username = (username or "").strip()
    role_name = (role_name or "staff").strip().lower()
    _check_credentials(username, password)
    if role_name not in ROLES:
        raise ValueError(f"Role '{role_name}' not found")
    if User.query.filter_by(username=username).first():
        raise ValueError("Username already exists")

    user = User(
        username=username,
        display_name=(display_name or "").strip() or None,
        role_id=get_or_create_role(role_name).id,
    )
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    return user


def authenticate(username, password):
    """The active user for these credentials, or None."""
    username = (username or "").strip()
    _check_credentials(username, password)
    user = User.query.filter_by(username=username, deleted=False).first()
    if user and user.check_password(password):
        return user
    return None


def revoke_token(claims, user_id):
    db.session.add(TokenBlocklist(
        jti=claims["jti"],
        token_type=claims.get("type", "access"),
        user_id=int(user_id),
        expires_at=datetime.fromtimestamp(claims["exp"]),
    ))
    db.session.commit()


def is_token_revoked(jti):
    return db.session.query(TokenBlocklist.id).filter_by(jti=jti).first() is not None
