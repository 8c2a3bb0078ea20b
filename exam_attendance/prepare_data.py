# exam_attendance/prepare_data.py
import argparse
import os
import random

import pandas as pd
from faker import Faker

from exam_attendance import config
from exam_attendance.models import Examination, Student, Subject
from exam_attendance.sources import table_paths

DEFAULT_SUBJECTS = ["Math", "Physics", "Chemistry", "Biology", "Literature", "History", "Programming"]

HOT_STUDENT = 1


def generate_tables(
    n_students: int = 200,
    subjects=None,
    n_exams: int = 2_000,
    seed: int = 7,
    orphan_ratio: float = 0.02,
    hot_ratio: float = 0.25,
):
    """
    Deterministic sample tables for a given seed:
    - student names from Faker
    - skew: hot_ratio of exams go to student_id=HOT_STUDENT
    - orphan_ratio of exams reference a student_id that does not exist
    """
    subjects = list(DEFAULT_SUBJECTS if subjects is None else subjects)
    fake = Faker()
    fake.seed_instance(seed)
    rnd = random.Random(seed)

    students = [Student(i, fake.name()) for i in range(1, n_students + 1)]
    subject_rows = [Subject(name) for name in subjects]

    exams = []
    if students and subjects:
        for _ in range(n_exams):
            r = rnd.random()
            if r < orphan_ratio:
                student_id = n_students + rnd.randint(1, 1_000)
            elif r < orphan_ratio + hot_ratio:
                student_id = HOT_STUDENT
            else:
                student_id = rnd.randint(1, n_students)
            exams.append(Examination(student_id, rnd.choice(subjects)))

    return students, subject_rows, exams


def write_tables(data_dir: str, students, subjects, examinations) -> None:
    os.makedirs(data_dir, exist_ok=True)
    students_p, subjects_p, exams_p = table_paths(data_dir)
    pd.DataFrame(students, columns=list(Student._fields)).to_csv(students_p, index=False)
    pd.DataFrame(subjects, columns=list(Subject._fields)).to_csv(subjects_p, index=False)
    pd.DataFrame(examinations, columns=list(Examination._fields)).to_csv(exams_p, index=False)


def main(argv=None):
    ap = argparse.ArgumentParser(description="Generate sample students/subjects/examinations CSVs")
    ap.add_argument("--data-dir", default=config.DATA_DIR)
    ap.add_argument("--students", type=int, default=200)
    ap.add_argument("--exams", type=int, default=2_000)
    ap.add_argument("--subjects", default=",".join(DEFAULT_SUBJECTS))
    ap.add_argument("--orphan-ratio", type=float, default=0.02)
    ap.add_argument("--hot-ratio", type=float, default=0.25)
    ap.add_argument("--seed", type=int, default=7)
    args = ap.parse_args(argv)

    subjects = [s.strip() for s in args.subjects.split(",") if s.strip()]
    students, subject_rows, exams = generate_tables(
        n_students=args.students,
        subjects=subjects,
        n_exams=args.exams,
        seed=args.seed,
        orphan_ratio=args.orphan_ratio,
        hot_ratio=args.hot_ratio,
    )
    write_tables(args.data_dir, students, subject_rows, exams)

    print(f"✔ students written: {len(students)}")
    print(f"✔ subjects written: {len(subject_rows)}")
    print(f"✔ examinations written: {len(exams)} -> {args.data_dir}")


if __name__ == "__main__":
    main()
