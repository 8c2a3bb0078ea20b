from exam_attendance.aggregator import aggregate, find_orphan_examinations
from exam_attendance.models import (
    AttendanceRecord,
    DuplicateKeyError,
    Examination,
    Student,
    Subject,
)

__all__ = [
    "aggregate",
    "find_orphan_examinations",
    "AttendanceRecord",
    "DuplicateKeyError",
    "Examination",
    "Student",
    "Subject",
]
