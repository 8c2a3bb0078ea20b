# exam_attendance/config.py
import os

# ===== Paths =====
DATA_DIR = os.getenv("EXAM_DATA_DIR", "data/raw/exam_attendance")
OUTPUT_PATH = os.getenv("EXAM_OUTPUT_PATH", "data/gold/exam_attendance")
GOV_DIR = os.getenv("EXAM_GOV_DIR", "data/gov")

STUDENTS_FILE = "students.csv"
SUBJECTS_FILE = "subjects.csv"
EXAMINATIONS_FILE = "examinations.csv"

# ===== Engine =====
ENGINES = ("python", "pandas", "spark", "sql")
ENGINE = os.getenv("EXAM_ENGINE", "python").lower()

# ===== Spark =====
SPARK_MASTER = os.getenv("SPARK_MASTER", "local[*]")
SHUFFLE_PARTITIONS = os.getenv("SPARK_SHUFFLE_PARTITIONS", "50")
SPARK_LOG_LEVEL = os.getenv("SPARK_LOG_LEVEL", "WARN")

JOB_NAME = "gold_exam_attendance"

# ===== Governance =====
GIT_COMMIT = os.getenv("GIT_COMMIT", "unknown")
