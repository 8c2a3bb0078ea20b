# exam_attendance/gov_utils.py
import json
import os
import uuid

from pyspark.sql import DataFrame, SparkSession
from pyspark.sql import functions as F
from pyspark.sql.types import StructType, StructField, StringType, LongType, TimestampType

from exam_attendance import config

# Explicit schemas (createDataFrame on dicts would infer ints as long/str unpredictably)
JOB_RUN_SCHEMA = StructType([
    StructField("run_id", StringType(), False),
    StructField("job_name", StringType(), False),
    StructField("git_commit", StringType(), True),
    StructField("source_path", StringType(), True),
    StructField("target_path", StringType(), True),
    StructField("input_rows", LongType(), True),
    StructField("output_rows", LongType(), True),
    StructField("dq_failed_rows", LongType(), True),
    StructField("status", StringType(), True),
    StructField("error_message", StringType(), True),
    StructField("ts", TimestampType(), True),
])

SCHEMA_SNAP_SCHEMA = StructType([
    StructField("dataset_name", StringType(), False),
    StructField("dataset_path", StringType(), True),
    StructField("schema_json", StringType(), True),
    StructField("ts", TimestampType(), True),
])


def new_run_id() -> str:
    return str(uuid.uuid4())


def get_git_commit() -> str:
    return config.GIT_COMMIT


def job_runs_path(gov_dir: str = config.GOV_DIR) -> str:
    return os.path.join(gov_dir, "job_runs")


def schema_registry_path(gov_dir: str = config.GOV_DIR) -> str:
    return os.path.join(gov_dir, "schema_registry")


def log_job_run(
    spark: SparkSession,
    run_id: str,
    job_name: str,
    source_path: str,
    target_path: str,
    input_rows: int,
    output_rows: int,
    dq_failed_rows: int = 0,
    status: str = "SUCCESS",
    error_message: str = "",
    gov_dir: str = config.GOV_DIR,
) -> None:
    rows = [(
        str(run_id),
        str(job_name),
        get_git_commit(),
        str(source_path) if source_path is not None else None,
        str(target_path) if target_path is not None else None,
        int(input_rows),
        int(output_rows),
        int(dq_failed_rows),
        status,
        (error_message or "")[:1000],
        None,
    )]
    df = spark.createDataFrame(rows, schema=JOB_RUN_SCHEMA).withColumn("ts", F.current_timestamp())
    df.write.mode("append").parquet(job_runs_path(gov_dir))


def snapshot_schema(
    spark: SparkSession,
    df: DataFrame,
    dataset_name: str,
    dataset_path: str,
    gov_dir: str = config.GOV_DIR,
) -> None:
    """
    Minimal schema registry: dataset, path, schema_json, time
    """
    fields = [{"name": f.name, "type": str(f.dataType), "nullable": bool(f.nullable)} for f in df.schema.fields]
    snap = spark.createDataFrame(
        [(dataset_name, dataset_path, json.dumps(fields, ensure_ascii=False), None)],
        schema=SCHEMA_SNAP_SCHEMA,
    ).withColumn("ts", F.current_timestamp())
    snap.write.mode("append").parquet(schema_registry_path(gov_dir))
