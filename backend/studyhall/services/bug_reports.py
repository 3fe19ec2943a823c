import time
from datetime import datetime
from studyhall.extensions import db
from studyhall.models import BugReport

MAX_REPORTS = 100
NO_DESCRIPTION = "(no description)"
NO_ERROR_INFO = "(no error info)"


def create_bug_report(description, error_info, url=None, user_agent=None):
    description = (description or "").strip()
    error_info = (error_info or "").strip()
    if not description and not error_info:
        raise ValueError("Enter a description or error details")

    report = BugReport(
        id=f"bug_{int(time.time() * 1000)}",
        timestamp=datetime.utcnow(),
        url=url,
        description=description or NO_DESCRIPTION,
        error_info=error_info or NO_ERROR_INFO,
        user_agent=user_agent,
    )
    # Two reports inside the same millisecond would collide on the id.
    while db.session.get(BugReport, report.id):
        report.id = f"{report.id}_1"

    db.session.add(report)
    db.session.flush()
    _prune()
    db.session.commit()
    return report


def _prune():
    stale = (
        BugReport.query.order_by(BugReport.timestamp.desc(), BugReport.id.desc())
        .offset(MAX_REPORTS)
        .all()
    )
    for report in stale:
        db.session.delete(report)


def list_bug_reports():
    return BugReport.query.order_by(BugReport.timestamp.desc(), BugReport.id.desc()).all()


def unread_count():
    return BugReport.query.filter_by(is_read=False).count()


def _get(report_id):
    report = db.session.get(BugReport, report_id)
    if not report:
        raise LookupError("Bug report not found")
    return report


def mark_read(report_id):
    report = _get(report_id)
    report.is_read = True
    db.session.commit()
    return report


def delete_bug_report(report_id):
    db.session.delete(_get(report_id))
    db.session.commit()


def clear_bug_reports():
    count = BugReport.query.delete()
    db.session.commit()
    return count
