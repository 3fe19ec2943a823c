from studyhall.extensions import db

class Zone(db.Model):
    __tablename__ = 'zones'

    id = db.Column(db.String(4), primary_key=True)  # e.g. "4A"
    name = db.Column(db.String(80), nullable=False)
    grade = db.Column(db.Integer, nullable=False, index=True)
    floor = db.Column(db.Integer, nullable=False)
    position = db.Column(db.Integer, nullable=False, default=0)

    seats = db.relationship('Seat', back_populates='zone', lazy=True, order_by='Seat.id')
    sheets = db.relationship('AttendanceSheet', back_populates='zone', lazy=True)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "grade": self.grade,
            "floor": self.floor,
        }


class Seat(db.Model):
    __tablename__ = 'seats'

    id = db.Column(db.String(10), primary_key=True)  # e.g. "4A001"
    zone_id = db.Column(db.String(4), db.ForeignKey('zones.id'), nullable=False, index=True)
    row = db.Column(db.Integer, nullable=False)
    col = db.Column(db.Integer, nullable=False)
    student_id = db.Column(db.String(10), db.ForeignKey('students.id'), nullable=True, unique=True)

    zone = db.relationship('Zone', back_populates='seats')
    student = db.relationship('Student', back_populates='seat')

    @property
    def is_assigned(self):
        return self.student_id is not None

    def to_dict(self):
        return {
            "id": self.id,
            "zone_id": self.zone_id,
            "row": self.row,
            "col": self.col,
            "student_id": self.student_id,
        }
