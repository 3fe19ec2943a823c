from functools import wraps
from flask import jsonify
from flask_jwt_extended import get_jwt_identity
from studyhall.extensions import db
from studyhall.models import User


def current_user():
    """The active User behind the request's JWT, or None."""
    identity = get_jwt_identity()
    if not identity:
        return None
    user = db.session.get(User, int(identity))
    return None if user is None or user.deleted else user


def role_required(*roles):
    """
    Lets the request through only for users holding one of roles.
    Stack it under @jwt_required():

        @jwt_required()
        @role_required("admin", "staff")
    """
    roles = {role.lower() for role in roles}

    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            user = current_user()
            if user is None:
                return jsonify({"error": "Login required"}), 401
            if (user.role_name or "").lower() not in roles:
                return jsonify({"error": f"Requires role: {', '.join(sorted(roles))}"}), 403
            return fn(*args, **kwargs)
        return wrapper
    return decorator
