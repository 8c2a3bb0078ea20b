# exam_attendance/aggregator.py
"""
Reference kernel: (students, subjects, examinations) -> attendance report.

Four stages:
- tally: one pass over examinations, (student_id, subject_name) -> count
- enumerate: students x subjects, every pair exactly once
- reconcile: left join of the pairs against the tally, missing -> 0
- project & order: sort by (student_id, subject_name)
"""
from __future__ import annotations

from collections import Counter
from typing import Iterable, List, Sequence, Tuple

from exam_attendance.models import (
    AttendanceRecord,
    Examination,
    Student,
    Subject,
    check_unique,
    coerce_rows,
)


def tally_examinations(examinations: Iterable[Examination]) -> Counter:
    return Counter((e.student_id, e.subject_name) for e in examinations)


def sort_key(r: AttendanceRecord) -> Tuple[int, str]:
    return r.student_id, r.subject_name


def aggregate(
    students: Sequence,
    subjects: Sequence,
    examinations: Sequence,
) -> List[AttendanceRecord]:
    students = coerce_rows(Student, students)
    subjects = coerce_rows(Subject, subjects)
    examinations = coerce_rows(Examination, examinations)

    check_unique("students", "student_id", (s.student_id for s in students))
    check_unique("subjects", "subject_name", (j.subject_name for j in subjects))

    tally = tally_examinations(examinations)

    # Counter returns 0 for a missing key, so the reconcile step never yields None
    report = [
        AttendanceRecord(
            student_id=s.student_id,
            student_name=s.student_name,
            subject_name=j.subject_name,
            attended_exams=tally[(s.student_id, j.subject_name)],
        )
        for s in students
        for j in subjects
    ]
    report.sort(key=sort_key)
    return report


def find_orphan_examinations(
    students: Sequence,
    subjects: Sequence,
    examinations: Sequence,
) -> List[Examination]:
    """Examination rows that match no (student, subject) pair and are ignored."""
    student_ids = {s.student_id for s in coerce_rows(Student, students)}
    subject_names = {j.subject_name for j in coerce_rows(Subject, subjects)}
    return [
        e for e in coerce_rows(Examination, examinations)
        if e.student_id not in student_ids or e.subject_name not in subject_names
    ]
