# exam_attendance/spark_jobs.py
from __future__ import annotations

import os
import shutil
from typing import List, NamedTuple, Optional, Sequence

from pyspark.sql import DataFrame, SparkSession
from pyspark.sql.functions import broadcast, col, count, lit

from exam_attendance import config
from exam_attendance.gov_utils import log_job_run, new_run_id, snapshot_schema
from exam_attendance.models import (
    EXAMINATION_SCHEMA,
    OUTPUT_COLUMNS,
    STUDENT_SCHEMA,
    SUBJECT_SCHEMA,
    AttendanceRecord,
    DuplicateKeyError,
    Examination,
    Student,
    Subject,
    coerce_rows,
)
from exam_attendance.sources import read_spark_tables

KEY = ["student_id", "subject_name"]

ATTENDANCE_SQL = """
SELECT
    s.student_id,
    s.student_name,
    sub.subject_name,
    COALESCE(e.attended_exams, 0) AS attended_exams
FROM students s
CROSS JOIN subjects sub
LEFT JOIN (
    SELECT student_id, subject_name, COUNT(*) AS attended_exams
    FROM examinations
    GROUP BY student_id, subject_name
) e
    ON s.student_id = e.student_id
   AND sub.subject_name = e.subject_name
ORDER BY s.student_id, sub.subject_name
"""


class JobResult(NamedTuple):
    run_id: str
    input_rows: int
    output_rows: int
    dq_failed_rows: int


def build_spark(app_name: str = config.JOB_NAME, master: Optional[str] = None) -> SparkSession:
    spark = (
        SparkSession.builder
        .appName(app_name)
        .master(master or config.SPARK_MASTER)
        .config("spark.sql.shuffle.partitions", config.SHUFFLE_PARTITIONS)
        # cross join is intentional: students x subjects
        .config("spark.sql.crossJoin.enabled", "true")
        .getOrCreate()
    )
    spark.sparkContext.setLogLevel(config.SPARK_LOG_LEVEL)
    return spark


def create_tables(spark: SparkSession, students: Sequence, subjects: Sequence, examinations: Sequence):
    return (
        spark.createDataFrame(coerce_rows(Student, students), schema=STUDENT_SCHEMA),
        spark.createDataFrame(coerce_rows(Subject, subjects), schema=SUBJECT_SCHEMA),
        spark.createDataFrame(coerce_rows(Examination, examinations), schema=EXAMINATION_SCHEMA),
    )


# ============ DQ ============
def find_duplicate_keys(df: DataFrame, key: str) -> list:
    dups = df.groupBy(key).count().where(col("count") > 1).select(key).collect()
    return [r[key] for r in dups]


def check_dimension_keys(students: DataFrame, subjects: DataFrame) -> None:
    for table, df, key in (("students", students, "student_id"), ("subjects", subjects, "subject_name")):
        dups = find_duplicate_keys(df, key)
        if dups:
            raise DuplicateKeyError(table, key, dups)


def find_orphan_examinations(students: DataFrame, subjects: DataFrame, examinations: DataFrame) -> DataFrame:
    """
    Exam rows whose student_id or subject_name is unknown: they never match
    an enumerated pair, so the aggregation ignores them.
    """
    s = students.select("student_id").withColumn("_s", lit(1))
    j = subjects.select("subject_name").withColumn("_j", lit(1))
    return (
        examinations
        .join(broadcast(s), "student_id", "left")
        .join(broadcast(j), "subject_name", "left")
        .where(col("_s").isNull() | col("_j").isNull())
        .select("student_id", "subject_name")
    )


# ============ Aggregation ============
def aggregate_df(students: DataFrame, subjects: DataFrame, examinations: DataFrame) -> DataFrame:
    # 1) tally
    tally = (
        examinations
        .groupBy(*KEY)
        .agg(count("*").alias("attended_exams"))
    )

    # 2) enumerate: subjects dim is tiny -> broadcast
    pairs = students.select("student_id", "student_name").crossJoin(broadcast(subjects.select("subject_name")))

    # 3) reconcile: null means zero
    res = (
        pairs
        .join(tally, KEY, "left")
        .fillna(0, subset=["attended_exams"])
        .withColumn("attended_exams", col("attended_exams").cast("long"))
    )

    # 4) project & order
    return res.select(*OUTPUT_COLUMNS).orderBy(*KEY)


def aggregate_sql(spark: SparkSession, students: DataFrame, subjects: DataFrame, examinations: DataFrame) -> DataFrame:
    students.createOrReplaceTempView("students")
    subjects.createOrReplaceTempView("subjects")
    examinations.createOrReplaceTempView("examinations")
    return spark.sql(ATTENDANCE_SQL).withColumn("attended_exams", col("attended_exams").cast("long"))


def collect_records(df: DataFrame) -> List[AttendanceRecord]:
    return [
        AttendanceRecord(r["student_id"], r["student_name"], r["subject_name"], r["attended_exams"])
        for r in df.select(*OUTPUT_COLUMNS).collect()
    ]


# ============ Batch job ============
def run_job(
    spark: SparkSession,
    data_dir: str = config.DATA_DIR,
    output_path: str = config.OUTPUT_PATH,
    gov_dir: str = config.GOV_DIR,
    engine: str = "spark",
    job_name: str = config.JOB_NAME,
) -> JobResult:
    if engine not in ("spark", "sql"):
        raise ValueError(f"unsupported spark engine: {engine}")

    run_id = new_run_id()
    input_rows = 0
    dq_failed = 0

    try:
        students, subjects, exams = read_spark_tables(spark, data_dir)
        input_rows = exams.count()

        # DQ: duplicate dimension keys are fatal, orphan exams are only counted
        check_dimension_keys(students, subjects)
        dq_failed = find_orphan_examinations(students, subjects, exams).count()

        if engine == "sql":
            res = aggregate_sql(spark, students, subjects, exams)
        else:
            res = aggregate_df(students, subjects, exams)

        snapshot_schema(spark, res, "gold.exam_attendance", output_path, gov_dir=gov_dir)

        # clean target so reruns never mix layouts
        if os.path.exists(output_path):
            shutil.rmtree(output_path)
        os.makedirs(os.path.dirname(os.path.abspath(output_path)), exist_ok=True)

        res.write.mode("overwrite").parquet(output_path)

        # count AFTER write by reading the written dataset
        output_rows = spark.read.parquet(output_path).count()

        log_job_run(
            spark=spark,
            run_id=run_id,
            job_name=job_name,
            source_path=data_dir,
            target_path=output_path,
            input_rows=input_rows,
            output_rows=output_rows,
            dq_failed_rows=dq_failed,
            status="SUCCESS",
            error_message="",
            gov_dir=gov_dir,
        )
        print(f"✅ {job_name} done. run_id={run_id} input_rows={input_rows} "
              f"output_rows={output_rows} dq_failed={dq_failed}")
        return JobResult(run_id, input_rows, output_rows, dq_failed)

    except Exception as e:
        log_job_run(
            spark=spark,
            run_id=run_id,
            job_name=job_name,
            source_path=data_dir,
            target_path=output_path,
            input_rows=input_rows,
            output_rows=0,
            dq_failed_rows=dq_failed,
            status="FAILED",
            error_message=str(e),
            gov_dir=gov_dir,
        )
        raise
