from datetime import datetime, time
from functools import wraps
from zoneinfo import ZoneInfo
from flask import current_app, jsonify
from utils.decorators import current_user

BYPASS_ROLES = ("admin",)


def _parse_hhmm(value):
    hour, minute = value.split(":")
    return time(int(hour), int(minute))


def window_bounds():
    return (
        _parse_hhmm(current_app.config.get("CHECKIN_WINDOW_START", "06:30")),
        _parse_hhmm(current_app.config.get("CHECKIN_WINDOW_END", "09:30")),
    )


def is_within_checkin_window(now=None):
    """now: an aware or naive datetime in the study hall's timezone."""
    if now is None:
        now = datetime.now(ZoneInfo(current_app.config.get("TIMEZONE", "Asia/Seoul")))
    start, end = window_bounds()
    return start <= now.time().replace(second=0, microsecond=0) <= end


def checkin_window_guard():
    """Blocks attendance writes outside the daily check-in window. Admins bypass it."""
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            if not current_app.config.get("CHECKIN_WINDOW_ENFORCED", True):
                return fn(*args, **kwargs)

            user = current_user()
            if user and user.role_name in BYPASS_ROLES:
                return fn(*args, **kwargs)

            if not is_within_checkin_window():
                start, end = window_bounds()
                return jsonify({
                    "error": f"Check-in is open from {start.strftime('%H:%M')} to {end.strftime('%H:%M')}"
                }), 403

            return fn(*args, **kwargs)
        return wrapper
    return decorator
