from .User import User, Role, TokenBlocklist
from .Zone import Zone, Seat
from .Student import Student
from .AttendanceRecord import AttendanceSheet, AttendanceRecord
from .PreAbsence import PreAbsence
from .StaffAssignment import StaffAssignment
from .Notice import Notice, StudentNote
from .BugReport import BugReport
from .AuditLog import AuditLog
from .base import SoftDeleteMixin, AttendanceStatus, SheetState, ResidenceType, AbsenceType
