from datetime import datetime
from flask import request, jsonify
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError


def _identity():
    try:
        verify_jwt_in_request(optional=True)
    except (JWTExtendedException, PyJWTError):
        return None
    return get_jwt_identity()


def log_rate_limit_violation(request_limit):
    """Flask-Limiter on_breach hook: stores the breach in AuditLog and answers 429."""
    from studyhall.extensions import db
    from studyhall.models import AuditLog

    user_id = _identity()
    db.session.add(AuditLog(
        user_id=int(user_id) if user_id else None,
        action=f"RATE_LIMIT_EXCEEDED: {request.method} {request.path}",
        ip_address=request.remote_addr,
        timestamp=datetime.utcnow(),
    ))
    db.session.commit()

    response = jsonify({"error": "Too many requests, try again shortly", "limit": str(request_limit.limit)})
    response.status_code = 429
    return response
