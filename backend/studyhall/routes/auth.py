from flask import Blueprint, request, jsonify, current_app, make_response
from flask_jwt_extended import (
    create_access_token, create_refresh_token, jwt_required,
    get_jwt_identity, get_jwt
)
from studyhall.extensions import limiter
from studyhall.services.accounts import authenticate, register_account, revoke_token
from utils.audit import log_event
from utils.decorators import current_user, role_required

auth_bp = Blueprint('auth', __name__)

ACCESS_COOKIE = ("access_token_cookie", "/")
REFRESH_COOKIE = ("refresh_token_cookie", "/auth/refresh")


def _attach(response, cookie, token, lifetime):
    name, path = cookie
    response.set_cookie(
        name, token,
        max_age=int(lifetime.total_seconds()),
        httponly=True,
        secure=current_app.config["JWT_COOKIE_SECURE"],
        samesite=current_app.config["JWT_COOKIE_SAMESITE"],
        path=path,
    )


def _attach_access(response, user):
    lifetime = current_app.config["JWT_ACCESS_TOKEN_EXPIRES"]
    token = create_access_token(
        identity=str(user.id),
        expires_delta=lifetime,
        additional_claims={"role": user.role_name},
    )
    _attach(response, ACCESS_COOKIE, token, lifetime)


@auth_bp.route('/register', methods=['POST'])
@jwt_required()
@role_required("admin")
@limiter.limit("5 per minute", override_defaults=False)
def register():
    """Admins create staff and admin accounts; the first admin comes from `manage.py seed`."""
    data = request.get_json() or {}
    try:
        user = register_account(
            data.get("username"),
            data.get("password"),
            role_name=data.get("role"),
            display_name=data.get("display_name"),
        )
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    log_event("USER_REGISTERED", user_id=current_user().id, ip=request.remote_addr,
              description=f"{user.username} ({user.role_name})")
    return jsonify({"message": "User created", "user": user.to_dict()}), 201


@auth_bp.route('/login', methods=['POST'])
@limiter.limit("5 per minute", override_defaults=False)
def login():
    data = request.get_json() or {}
    username = (data.get("username") or "").strip()
    try:
        user = authenticate(username, data.get("password"))
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    if not user:
        log_event("LOGIN_FAILED", ip=request.remote_addr, description=username, level="WARNING")
        return jsonify({"error": "Invalid username or password"}), 401

    response = make_response(jsonify({"message": "Login successful", "user": user.to_dict()}))
    _attach_access(response, user)
    lifetime = current_app.config["JWT_REFRESH_TOKEN_EXPIRES"]
    _attach(response, REFRESH_COOKIE, create_refresh_token(identity=str(user.id), expires_delta=lifetime), lifetime)

    log_event("LOGIN_SUCCESS", user_id=user.id, ip=request.remote_addr, description=username)
    return response


@auth_bp.route('/me', methods=['GET'])
@jwt_required()
def me():
    user = current_user()
    if not user:
        return jsonify({"error": "User not found"}), 404
    return jsonify(dict(user.to_dict(), staff_name=user.staff_name)), 200


@auth_bp.route('/refresh', methods=['POST'])
@jwt_required(refresh=True, locations=["cookies"])
def refresh():
    user = current_user()
    if not user:
        return jsonify({"error": "User not found"}), 404

    response = make_response(jsonify({"message": "Token refreshed"}))
    _attach_access(response, user)
    return response


@auth_bp.route("/logout", methods=["POST"])
@jwt_required()
def logout():
    user_id = get_jwt_identity()
    revoke_token(get_jwt(), user_id)

    response = make_response(jsonify({"message": "Logged out"}))
    for name, path in (ACCESS_COOKIE, REFRESH_COOKIE):
        response.delete_cookie(name, path=path)

    log_event("LOGOUT", user_id=user_id, ip=request.remote_addr)
    return response
