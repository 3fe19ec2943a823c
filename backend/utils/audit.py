import logging
import os
from datetime import datetime
from flask import current_app, has_app_context

DEFAULT_AUDIT_LOG_FILE = os.path.join("logs", "audit.log")


def log_event(event_type, user_id=None, ip=None, description=None, level="INFO"):
    """
    Appends one line to the audit log (AUDIT_LOG_FILE) and mirrors it to the
    app logger at the same level.

    Parameters:
        event_type (str): e.g. LOGIN_SUCCESS, SHEET_SAVED, SMS_SENT
        user_id (int|None): acting user, if any
        ip (str|None): client address
        description (str|None): free text
        level (str): INFO, WARNING or ERROR
    """
    log_file = DEFAULT_AUDIT_LOG_FILE
    if has_app_context():
        log_file = current_app.config.get("AUDIT_LOG_FILE", DEFAULT_AUDIT_LOG_FILE)
    if os.path.dirname(log_file):
        os.makedirs(os.path.dirname(log_file), exist_ok=True)

    line = (
        f"{event_type} | user={user_id or '-'} | ip={ip or '-'} | {description or ''}"
    ).rstrip(" |")
    with open(log_file, "a", encoding="utf-8") as fh:
        fh.write(f"[{datetime.utcnow():%Y-%m-%d %H:%M:%S}] [{level.upper()}] {line}\n")

    if has_app_context():
        current_app.logger.log(logging.getLevelName(level.upper()), line)
