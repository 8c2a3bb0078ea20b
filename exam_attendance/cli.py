# exam_attendance/cli.py
import argparse
import sys

import pandas as pd

from exam_attendance import config
from exam_attendance.aggregator import aggregate, find_orphan_examinations
from exam_attendance.frame import aggregate_frame
from exam_attendance.models import OUTPUT_COLUMNS, DuplicateKeyError
from exam_attendance.sources import read_frames, read_records


def run_local(engine: str, data_dir: str) -> pd.DataFrame:
    if engine == "pandas":
        return aggregate_frame(*read_frames(data_dir))

    students, subjects, exams = read_records(data_dir)
    report = aggregate(students, subjects, exams)
    orphans = find_orphan_examinations(students, subjects, exams)
    if orphans:
        print(f"ℹ️ ignored {len(orphans)} examination rows with unknown student/subject")
    return pd.DataFrame(report, columns=OUTPUT_COLUMNS)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="exam-attendance",
        description="Count attended exams for every (student, subject) pair",
    )
    ap.add_argument("--engine", choices=config.ENGINES, default=config.ENGINE)
    ap.add_argument("--data-dir", default=config.DATA_DIR)
    ap.add_argument("--output", default=None,
                    help="python/pandas: CSV file to write; spark/sql: parquet dir (default from config)")
    ap.add_argument("--gov-dir", default=config.GOV_DIR)
    ap.add_argument("--limit", type=int, default=20, help="rows to show")
    return ap


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    print(f"[config] engine={args.engine}, data_dir={args.data_dir}")

    try:
        if args.engine in ("spark", "sql"):
            # local import: JVM start-up only when a Spark engine is chosen
            from exam_attendance.spark_jobs import build_spark, run_job

            output = args.output or config.OUTPUT_PATH
            spark = build_spark()
            try:
                run_job(spark, args.data_dir, output, args.gov_dir, engine=args.engine)
                spark.read.parquet(output).orderBy("student_id", "subject_name").show(args.limit, truncate=False)
            finally:
                spark.stop()
        else:
            report = run_local(args.engine, args.data_dir)
            print(report.head(args.limit).to_string(index=False))
            print(f"rows = {len(report)}")
            if args.output:
                report.to_csv(args.output, index=False)
                print("Wrote:", args.output)
    except (DuplicateKeyError, FileNotFoundError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    return 0


if __name__ == "__main__":
    sys.exit(main())
