from datetime import datetime
from studyhall.extensions import db
import enum

class SoftDeleteMixin:
    deleted = db.Column(db.Boolean, default=False, nullable=False)
    deleted_at = db.Column(db.DateTime)

    def soft_delete(self):
        self.deleted = True
        self.deleted_at = datetime.utcnow()

    def restore(self):
        self.deleted = False
        self.deleted_at = None

class AttendanceStatus(enum.Enum):
    present = "present"
    absent = "absent"
    unchecked = "unchecked"

class SheetState(enum.Enum):
    temp = "temp"
    saved = "saved"

class ResidenceType(enum.Enum):
    commute = "commute"
    dorm = "dorm"

class AbsenceType(enum.Enum):
    pre_absence = "pre_absence"
    overnight = "overnight"

    @classmethod
    def parse(cls, value):
        """Accepts enum values as well as the labels used in the absence spreadsheet."""
        labels = {"사전결석": cls.pre_absence, "외박": cls.overnight}
        if isinstance(value, cls):
            return value
        if value in labels:
            return labels[value]
        return cls(value)

    @property
    def label(self):
        return "overnight" if self is AbsenceType.overnight else "pre-absence"
