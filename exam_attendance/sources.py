# exam_attendance/sources.py
"""
Loaders for the three input tables. The aggregation itself never does I/O;
everything here belongs to the surrounding program.
"""
from __future__ import annotations

import os
from typing import List, Tuple

import pandas as pd
from pyspark.sql import DataFrame, SparkSession
from pyspark.sql.types import StringType, StructType

from exam_attendance import config
from exam_attendance.frame import EXAMINATION_DTYPES, STUDENT_DTYPES, SUBJECT_DTYPES
from exam_attendance.models import (
    EXAMINATION_SCHEMA,
    STUDENT_SCHEMA,
    SUBJECT_SCHEMA,
    Examination,
    Student,
    Subject,
)


def table_paths(data_dir: str = config.DATA_DIR) -> Tuple[str, str, str]:
    return (
        os.path.join(data_dir, config.STUDENTS_FILE),
        os.path.join(data_dir, config.SUBJECTS_FILE),
        os.path.join(data_dir, config.EXAMINATIONS_FILE),
    )


def _require(path: str) -> str:
    if not os.path.exists(path):
        raise FileNotFoundError(f"input table not found: {path}")
    return path


def read_frames(data_dir: str = config.DATA_DIR) -> Tuple[pd.DataFrame, pd.DataFrame, pd.DataFrame]:
    students_p, subjects_p, exams_p = (_require(p) for p in table_paths(data_dir))
    return (
        pd.read_csv(students_p, dtype=STUDENT_DTYPES, keep_default_na=False),
        pd.read_csv(subjects_p, dtype=SUBJECT_DTYPES, keep_default_na=False),
        pd.read_csv(exams_p, dtype=EXAMINATION_DTYPES, keep_default_na=False),
    )


def read_records(data_dir: str = config.DATA_DIR) -> Tuple[List[Student], List[Subject], List[Examination]]:
    students, subjects, exams = read_frames(data_dir)
    return (
        [Student(int(r.student_id), r.student_name) for r in students.itertuples(index=False)],
        [Subject(r.subject_name) for r in subjects.itertuples(index=False)],
        [Examination(int(r.student_id), r.subject_name) for r in exams.itertuples(index=False)],
    )


def _read_csv(spark: SparkSession, path: str, schema: StructType) -> DataFrame:
    df = (
        spark.read
        .option("header", "true")
        # match the header against the schema instead of applying it by position
        .option("enforceSchema", "false")
        .schema(schema)
        .csv(path)
    )
    # an unquoted empty field always parses as null; pandas keeps it as ""
    strings = [f.name for f in schema.fields if isinstance(f.dataType, StringType)]
    return df.fillna("", subset=strings)


def read_spark_tables(spark: SparkSession, data_dir: str = config.DATA_DIR) -> Tuple[DataFrame, DataFrame, DataFrame]:
    students_p, subjects_p, exams_p = (_require(p) for p in table_paths(data_dir))
    return (
        _read_csv(spark, students_p, STUDENT_SCHEMA),
        _read_csv(spark, subjects_p, SUBJECT_SCHEMA),
        _read_csv(spark, exams_p, EXAMINATION_SCHEMA),
    )
