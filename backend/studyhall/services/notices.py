from studyhall.extensions import db
from studyhall.models import Notice
from .absences import as_date


def get_notice(day):
    notice = db.session.get(Notice, as_date(day))
    return notice.text if notice else ""


def save_notice(day, text):
    """Stores the trimmed notice for day; blank text removes it."""
    day = as_date(day)
    text = (text or "").strip()
    notice = db.session.get(Notice, day)

    if not text:
        if notice:
            db.session.delete(notice)
            db.session.commit()
        return None

    if notice:
        notice.text = text
    else:
        notice = Notice(date=day, text=text)
        db.session.add(notice)
    db.session.commit()
    return notice


def delete_notice(day):
    notice = db.session.get(Notice, as_date(day))
    if not notice:
        return False
    db.session.delete(notice)
    db.session.commit()
    return True
