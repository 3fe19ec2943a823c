import pytest

from studyhall.models import TokenBlocklist
from studyhall.services.accounts import authenticate, is_token_revoked, register_account, revoke_token


def test_register_defaults_to_staff(seeded):
    user = register_account(" staff2 ", "pw12345", role_name=None, display_name=" 이건우 ")

    assert user.username == "staff2"
    assert user.role.name == "staff"
    assert user.staff_name == "이건우"


def test_register_creates_missing_role(app):
    user = register_account("first.admin", "pw12345", role_name="Admin")

    assert user.role.name == "admin"


def test_register_rejects_bad_input(seeded):
    with pytest.raises(ValueError, match="required"):
        register_account("staff2", "")
    with pytest.raises(ValueError, match="format"):
        register_account("a b", "pw12345")
    with pytest.raises(ValueError, match="not found"):
        register_account("staff2", "pw12345", role_name="janitor")
    with pytest.raises(ValueError, match="exists"):
        register_account("staff1", "pw12345")


def test_authenticate(seeded):
    register_account("staff2", "pw12345")

    assert authenticate("staff2", "pw12345").username == "staff2"
    assert authenticate("staff2", "nope") is None
    assert authenticate("ghost", "pw12345") is None


def test_revoke_token(seeded):
    revoke_token({"jti": "abc", "type": "refresh", "exp": 1767744000}, "1")

    assert is_token_revoked("abc")
    assert not is_token_revoked("other")
    assert TokenBlocklist.query.filter_by(jti="abc").first().token_type == "refresh"
