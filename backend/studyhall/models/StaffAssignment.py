from studyhall.extensions import db

class StaffAssignment(db.Model):
    __tablename__ = 'staff_assignments'

    id = db.Column(db.Integer, primary_key=True)
    schedule_date = db.Column(db.Date, nullable=False, index=True)
    grade = db.Column(db.Integer, nullable=False)
    staff_name_1 = db.Column(db.String(80), nullable=False)
    staff_name_2 = db.Column(db.String(80), nullable=False)

    __table_args__ = (
        db.UniqueConstraint('schedule_date', 'grade', name='uq_schedule_date_grade'),
    )

    def to_dict(self):
        return {
            "schedule_date": self.schedule_date.isoformat(),
            "grade": self.grade,
            "staff_name_1": self.staff_name_1,
            "staff_name_2": self.staff_name_2,
        }
