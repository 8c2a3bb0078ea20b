import os
import shutil

import pytest

from exam_attendance.models import Examination, Student, Subject


@pytest.fixture
def students():
    return [Student(1, "Alice"), Student(2, "Bob")]


@pytest.fixture
def subjects():
    return [Subject("Math"), Subject("Physics")]


@pytest.fixture
def examinations():
    return [Examination(1, "Math"), Examination(1, "Math"), Examination(2, "Math")]


@pytest.fixture
def expected_report():
    return [
        (1, "Alice", "Math", 2),
        (1, "Alice", "Physics", 0),
        (2, "Bob", "Math", 1),
        (2, "Bob", "Physics", 0),
    ]


@pytest.fixture(scope="session")
def spark():
    if shutil.which("java") is None and not os.getenv("JAVA_HOME"):
        pytest.skip("Spark needs a JVM")

    from pyspark.sql import SparkSession

    spark = (
        SparkSession.builder
        .master("local[1]")
        .appName("exam-attendance-tests")
        .config("spark.sql.shuffle.partitions", "2")
        .config("spark.ui.enabled", "false")
        .getOrCreate()
    )
    spark.sparkContext.setLogLevel("ERROR")
    yield spark
    spark.stop()
