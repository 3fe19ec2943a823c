from datetime import datetime
from studyhall.extensions import db
from .base import AbsenceType

class PreAbsence(db.Model):
    __tablename__ = 'pre_absences'

    id = db.Column(db.Integer, primary_key=True)
    student_id = db.Column(db.String(10), db.ForeignKey('students.id'), nullable=False, index=True)
    start_date = db.Column(db.Date, nullable=False)
    end_date = db.Column(db.Date, nullable=False)
    reason = db.Column(db.String(255), nullable=True)
    type = db.Column(db.Enum(AbsenceType), nullable=False, default=AbsenceType.pre_absence)
    source = db.Column(db.String(20), nullable=False, default="manual")  # "manual" or "sheet"
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    student = db.relationship('Student', back_populates='pre_absences')

    def covers(self, day):
        return self.start_date <= day <= self.end_date

    def to_dict(self):
        return {
            "id": self.id,
            "student_id": self.student_id,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "reason": self.reason,
            "type": self.type.value,
            "source": self.source,
        }
