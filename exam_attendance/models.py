# exam_attendance/models.py
from __future__ import annotations

from typing import Iterable, List, NamedTuple

from pyspark.sql.types import StructType, StructField, StringType, LongType


class Student(NamedTuple):
    student_id: int
    student_name: str


class Subject(NamedTuple):
    subject_name: str


class Examination(NamedTuple):
    student_id: int
    subject_name: str


class AttendanceRecord(NamedTuple):
    student_id: int
    student_name: str
    subject_name: str
    attended_exams: int


OUTPUT_COLUMNS = list(AttendanceRecord._fields)

# Explicit schemas: never let Spark infer ids as strings from CSV
STUDENT_SCHEMA = StructType([
    StructField("student_id", LongType(), False),
    StructField("student_name", StringType(), True),
])

SUBJECT_SCHEMA = StructType([
    StructField("subject_name", StringType(), False),
])

EXAMINATION_SCHEMA = StructType([
    StructField("student_id", LongType(), True),
    StructField("subject_name", StringType(), True),
])

ATTENDANCE_SCHEMA = StructType([
    StructField("student_id", LongType(), False),
    StructField("student_name", StringType(), True),
    StructField("subject_name", StringType(), False),
    StructField("attended_exams", LongType(), False),
])


class DuplicateKeyError(ValueError):
    """A dimension table repeats a key that must be unique."""

    def __init__(self, table: str, key: str, duplicates: Iterable):
        self.table = table
        self.key = key
        # null keys sort last; None and str are not comparable
        self.duplicates = sorted(duplicates, key=lambda v: (v is None, v))
        shown = ", ".join(repr(d) for d in self.duplicates[:10])
        super().__init__(f"{table}.{key} must be unique, duplicated: {shown}")


def coerce_rows(cls, rows: Iterable) -> List:
    """
    Accept the named tuple itself, a plain tuple in field order or a dict
    keyed by field name. Extra dict keys are ignored.
    """
    out = []
    for r in rows:
        if isinstance(r, cls):
            out.append(r)
        elif isinstance(r, dict):
            out.append(cls(**{f: r[f] for f in cls._fields}))
        else:
            out.append(cls(*r))
    return out


def check_unique(table: str, key: str, values: Iterable) -> None:
    seen = set()
    dups = set()
    for v in values:
        if v in seen:
            dups.add(v)
        seen.add(v)
    if dups:
        raise DuplicateKeyError(table, key, dups)
