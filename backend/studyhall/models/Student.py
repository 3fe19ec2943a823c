from studyhall.extensions import db
from .base import SoftDeleteMixin, ResidenceType

class Student(db.Model, SoftDeleteMixin):
    __tablename__ = 'students'

    id = db.Column(db.String(10), primary_key=True)  # 5-digit student number, e.g. "10101"
    name = db.Column(db.String(100), nullable=False, index=True)
    grade = db.Column(db.Integer, nullable=False, index=True)
    residence_type = db.Column(db.Enum(ResidenceType), nullable=False, default=ResidenceType.commute)

    seat = db.relationship('Seat', back_populates='student', uselist=False)
    pre_absences = db.relationship('PreAbsence', back_populates='student', lazy=True, cascade="all, delete-orphan")

    def to_dict(self, include_related=False):
        data = {
            "id": self.id,
            "name": self.name,
            "grade": self.grade,
            "residence_type": self.residence_type.value if self.residence_type else None,
            "seat_id": self.seat.id if self.seat else None,
        }

        if include_related:
            data["pre_absences"] = [p.to_dict() for p in self.pre_absences]

        return data
