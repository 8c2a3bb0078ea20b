import pandas as pd
import pytest

from exam_attendance.cli import main
from exam_attendance.prepare_data import write_tables


@pytest.fixture
def data_dir(tmp_path, students, subjects, examinations):
    d = tmp_path / "raw"
    write_tables(str(d), students, subjects, examinations + [(9, "Math")])
    return str(d)


@pytest.mark.parametrize("engine", ["python", "pandas"])
def test_cli_local_engines(data_dir, tmp_path, capsys, engine, expected_report):
    out = tmp_path / "report.csv"

    assert main(["--engine", engine, "--data-dir", data_dir, "--output", str(out)]) == 0

    stdout = capsys.readouterr().out
    assert "rows = 4" in stdout
    assert "Alice" in stdout
    report = pd.read_csv(out)
    assert [tuple(r) for r in report.itertuples(index=False)] == expected_report


def test_cli_python_reports_ignored_rows(data_dir, capsys):
    main(["--engine", "python", "--data-dir", data_dir])
    assert "ignored 1 examination rows" in capsys.readouterr().out


def test_cli_missing_input(tmp_path, capsys):
    assert main(["--engine", "python", "--data-dir", str(tmp_path / "nope")]) == 2
    assert "input table not found" in capsys.readouterr().err


def test_cli_duplicate_keys(tmp_path, subjects, capsys):
    write_tables(str(tmp_path), [(1, "Alice"), (1, "Alicia")], subjects, [])
    assert main(["--engine", "pandas", "--data-dir", str(tmp_path)]) == 2
    assert "students.student_id must be unique" in capsys.readouterr().err


def test_cli_rejects_unknown_engine():
    with pytest.raises(SystemExit):
        main(["--engine", "duckdb"])


def test_cli_spark_engine(spark, data_dir, tmp_path, monkeypatch, capsys):
    import exam_attendance.spark_jobs as spark_jobs

    # reuse the session fixture; cli stops whatever build_spark returns
    monkeypatch.setattr(spark_jobs, "build_spark", lambda: _NoStop(spark))
    out = str(tmp_path / "gold")

    assert main(["--engine", "sql", "--data-dir", data_dir, "--output", out,
                 "--gov-dir", str(tmp_path / "gov")]) == 0
    assert "output_rows=4 dq_failed=1" in capsys.readouterr().out


class _NoStop:
    def __init__(self, spark):
        self._spark = spark

    def __getattr__(self, name):
        return getattr(self._spark, name)

    def stop(self):
        pass
