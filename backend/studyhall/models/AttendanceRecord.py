from datetime import datetime
from studyhall.extensions import db
from .base import AttendanceStatus, SheetState

class AttendanceSheet(db.Model):
    """One zone's check-in for one date. Temp sheets are drafts; saved sheets are final."""
    __tablename__ = 'attendance_sheets'

    id = db.Column(db.Integer, primary_key=True)
    zone_id = db.Column(db.String(4), db.ForeignKey('zones.id'), nullable=False)
    date = db.Column(db.Date, nullable=False, index=True)
    state = db.Column(db.Enum(SheetState), nullable=False, default=SheetState.temp)
    recorded_by = db.Column(db.String(80), nullable=True)
    recorded_by_user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)
    saved_at = db.Column(db.DateTime, nullable=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    zone = db.relationship('Zone', back_populates='sheets')
    records = db.relationship('AttendanceRecord', back_populates='sheet', lazy=True, cascade="all, delete-orphan")

    __table_args__ = (
        db.UniqueConstraint('zone_id', 'date', name='uq_zone_date'),
    )

    def records_by_seat(self):
        return {r.seat_id: r for r in self.records}

    def to_dict(self):
        return {
            "id": self.id,
            "zone_id": self.zone_id,
            "date": self.date.isoformat(),
            "state": self.state.value,
            "recorded_by": self.recorded_by,
            "saved_at": self.saved_at.isoformat() if self.saved_at else None,
            "records": [r.to_dict() for r in self.records],
        }


class AttendanceRecord(db.Model):
    __tablename__ = 'attendance_records'

    id = db.Column(db.Integer, primary_key=True)
    sheet_id = db.Column(db.Integer, db.ForeignKey('attendance_sheets.id'), nullable=False)
    seat_id = db.Column(db.String(10), db.ForeignKey('seats.id'), nullable=False)
    status = db.Column(db.Enum(AttendanceStatus), nullable=False)
    note = db.Column(db.String(255), nullable=True)
    staff_name = db.Column(db.String(80), nullable=True)
    is_modified = db.Column(db.Boolean, default=True, nullable=False)

    sheet = db.relationship('AttendanceSheet', back_populates='records')

    __table_args__ = (
        db.UniqueConstraint('sheet_id', 'seat_id', name='uq_sheet_seat'),
    )

    def to_dict(self):
        return {
            "seat_id": self.seat_id,
            "status": self.status.value,
            "note": self.note,
            "staff_name": self.staff_name,
            "is_modified": self.is_modified,
        }
