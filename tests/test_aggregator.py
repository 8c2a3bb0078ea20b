import itertools
import random

import pytest

from exam_attendance import aggregate, find_orphan_examinations
from exam_attendance.models import AttendanceRecord, DuplicateKeyError, Examination


def test_worked_example(students, subjects, examinations, expected_report):
    assert aggregate(students, subjects, examinations) == expected_report


def test_accepts_plain_tuples_and_dicts(expected_report):
    report = aggregate(
        [(2, "Bob"), {"student_id": 1, "student_name": "Alice"}],
        [("Physics",), ("Math",)],
        [(1, "Math"), (2, "Math"), (1, "Math")],
    )
    assert report == expected_report
    assert all(isinstance(r, AttendanceRecord) for r in report)


def test_empty_examinations_defaults_to_zero(students, subjects):
    report = aggregate(students, subjects, [])
    assert len(report) == 4
    assert [r.attended_exams for r in report] == [0, 0, 0, 0]


@pytest.mark.parametrize("empty", ["students", "subjects"])
def test_empty_dimension_gives_empty_report(students, subjects, examinations, empty):
    if empty == "students":
        students = []
    else:
        subjects = []
    assert aggregate(students, subjects, examinations) == []


def test_cardinality_and_counts_on_random_input():
    rnd = random.Random(3)
    students = [(i, f"s{i}") for i in rnd.sample(range(1, 100), 12)]
    subjects = [(name,) for name in ["Art", "Bio", "Chem", "Math", "Zoo"]]
    exams = [(rnd.randint(1, 100), rnd.choice(["Art", "Bio", "Chem", "Math", "Zoo", "Gym"])) for _ in range(300)]

    report = aggregate(students, subjects, exams)

    assert len(report) == len(students) * len(subjects)
    keys = [(r.student_id, r.subject_name) for r in report]
    assert len(set(keys)) == len(keys)
    assert set(keys) == {(s[0], j[0]) for s, j in itertools.product(students, subjects)}
    for r in report:
        assert r.attended_exams == sum(1 for e in exams if e == (r.student_id, r.subject_name))
    assert keys == sorted(keys)


def test_input_order_does_not_change_output(students, subjects, examinations):
    baseline = aggregate(students, subjects, examinations)
    rnd = random.Random(11)
    for _ in range(5):
        s, j, e = list(students), list(subjects), list(examinations)
        rnd.shuffle(s)
        rnd.shuffle(j)
        rnd.shuffle(e)
        assert aggregate(s, j, e) == baseline


def test_repeated_calls_are_identical_and_inputs_untouched(students, subjects, examinations):
    before = (list(students), list(subjects), list(examinations))
    first = aggregate(students, subjects, examinations)
    second = aggregate(students, subjects, examinations)
    assert first == second
    assert first is not second
    assert (students, subjects, examinations) == before


def test_student_id_sorts_numerically():
    report = aggregate([(10, "Ten"), (9, "Nine")], [("b",), ("a",)], [])
    assert [(r.student_id, r.subject_name) for r in report] == [(9, "a"), (9, "b"), (10, "a"), (10, "b")]


def test_orphan_examinations_are_ignored(students, subjects):
    exams = [(1, "Math"), (3, "Math"), (1, "Art")]
    report = aggregate(students, subjects, exams)
    assert sum(r.attended_exams for r in report) == 1
    assert find_orphan_examinations(students, subjects, exams) == [
        Examination(3, "Math"),
        Examination(1, "Art"),
    ]


def test_duplicate_student_id_raises(subjects):
    with pytest.raises(DuplicateKeyError) as exc:
        aggregate([(1, "Alice"), (1, "Alicia")], subjects, [])
    assert exc.value.table == "students"
    assert exc.value.key == "student_id"
    assert exc.value.duplicates == [1]


def test_duplicate_subject_raises(students):
    with pytest.raises(ValueError, match="subjects.subject_name"):
        aggregate(students, [("Math",), ("Math",)], [])


def test_duplicate_null_and_string_subjects_raise_duplicate_key_error():
    with pytest.raises(DuplicateKeyError) as exc:
        aggregate([(1, "a")], [(None,), (None,), ("x",), ("x",)], [])
    assert exc.value.duplicates == ["x", None]


def test_duplicate_ids_listed_numerically(subjects):
    with pytest.raises(DuplicateKeyError) as exc:
        aggregate([(10, "a"), (10, "b"), (9, "c"), (9, "d")], subjects, [])
    assert exc.value.duplicates == [9, 10]
