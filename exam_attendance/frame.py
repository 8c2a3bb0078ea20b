# exam_attendance/frame.py
from __future__ import annotations

from typing import List, Sequence, Tuple

import pandas as pd

from exam_attendance.models import (
    OUTPUT_COLUMNS,
    AttendanceRecord,
    DuplicateKeyError,
    Examination,
    Student,
    Subject,
    coerce_rows,
)

KEY = ["student_id", "subject_name"]

STUDENT_DTYPES = {"student_id": "int64", "student_name": "object"}
SUBJECT_DTYPES = {"subject_name": "object"}
EXAMINATION_DTYPES = {"student_id": "int64", "subject_name": "object"}


def _frame(rows: list, columns: list, dtypes: dict) -> pd.DataFrame:
    return pd.DataFrame(rows, columns=columns).astype(dtypes)


def frames_from_records(
    students: Sequence,
    subjects: Sequence,
    examinations: Sequence,
) -> Tuple[pd.DataFrame, pd.DataFrame, pd.DataFrame]:
    return (
        _frame(coerce_rows(Student, students), list(Student._fields), STUDENT_DTYPES),
        _frame(coerce_rows(Subject, subjects), list(Subject._fields), SUBJECT_DTYPES),
        _frame(coerce_rows(Examination, examinations), list(Examination._fields), EXAMINATION_DTYPES),
    )


def _check_unique(df: pd.DataFrame, table: str, key: str) -> None:
    dup = df.loc[df[key].duplicated(), key]
    if not dup.empty:
        raise DuplicateKeyError(table, key, set(dup.tolist()))


def aggregate_frame(
    students: pd.DataFrame,
    subjects: pd.DataFrame,
    examinations: pd.DataFrame,
) -> pd.DataFrame:
    _check_unique(students, "students", "student_id")
    _check_unique(subjects, "subjects", "subject_name")

    # 1) tally
    tally = (
        examinations[KEY]
        .astype(EXAMINATION_DTYPES)
        .groupby(KEY)
        .size()
        .rename("attended_exams")
        .reset_index()
        .astype(EXAMINATION_DTYPES)
    )

    # 2) enumerate
    pairs = students[["student_id", "student_name"]].merge(
        subjects[["subject_name"]], how="cross"
    )

    # 3) reconcile: null means zero
    res = pairs.merge(tally, on=KEY, how="left")
    res["attended_exams"] = res["attended_exams"].fillna(0).astype("int64")

    # 4) project & order; (student_id, subject_name) is unique per row
    return (
        res[OUTPUT_COLUMNS]
        .sort_values(KEY, kind="mergesort")
        .reset_index(drop=True)
    )


def to_records(df: pd.DataFrame) -> List[AttendanceRecord]:
    return [
        AttendanceRecord(int(r.student_id), r.student_name, r.subject_name, int(r.attended_exams))
        for r in df[OUTPUT_COLUMNS].itertuples(index=False)
    ]


def aggregate_records(
    students: Sequence,
    subjects: Sequence,
    examinations: Sequence,
) -> List[AttendanceRecord]:
    return to_records(aggregate_frame(*frames_from_records(students, subjects, examinations)))
