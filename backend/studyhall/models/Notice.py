from datetime import datetime
from studyhall.extensions import db

class Notice(db.Model):
    __tablename__ = 'notices'

    date = db.Column(db.Date, primary_key=True)
    text = db.Column(db.Text, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class StudentNote(db.Model):
    __tablename__ = 'student_notes'

    id = db.Column(db.Integer, primary_key=True)
    date = db.Column(db.Date, nullable=False, index=True)
    seat_id = db.Column(db.String(10), db.ForeignKey('seats.id'), nullable=False)
    note = db.Column(db.String(255), nullable=False)

    __table_args__ = (
        db.UniqueConstraint('date', 'seat_id', name='uq_note_date_seat'),
    )
