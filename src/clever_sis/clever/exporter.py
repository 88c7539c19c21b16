"""
CSV export of roster records in Clever's SFTP schema.

Three files, always rewritten in full:

  students.csv     Student_id, First_name, Last_name, Email, Grade, Status
  sections.csv     Course_number, Course_name, Teacher_email, Period, Section_id
  enrollments.csv  Section_id, Student_id

The header names are Clever's, not ours. The column sources are fixed:
instructor goes out as Teacher_email without any email check, room goes out
as Section_id, and an enrollment's Section_id is the class's room, falling
back to its course_code when the room is empty.
"""
import csv
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Tuple

from clever_sis.db.store import RecordStore
from clever_sis.services.classes import ClassService
from clever_sis.services.users import UserService

logger = logging.getLogger(__name__)

# (CSV header, record attribute)
STUDENT_COLUMNS: List[Tuple[str, str]] = [
    ("Student_id", "student_id"),
    ("First_name", "first_name"),
    ("Last_name", "last_name"),
    ("Email", "email"),
    ("Grade", "grade"),
    ("Status", "status"),
]

SECTION_COLUMNS: List[Tuple[str, str]] = [
    ("Course_number", "course_code"),
    ("Course_name", "name"),
    ("Teacher_email", "instructor"),
    ("Period", "schedule"),
    ("Section_id", "room"),
]

ENROLLMENT_HEADERS = ["Section_id", "Student_id"]


class CsvExporter:
    """Materializes current store state into the three Clever CSV files."""

    def __init__(self, store: RecordStore, csv_dir: Path):
        self.users = UserService(store)
        self.classes = ClassService(store)
        self.csv_dir = Path(csv_dir)

    def export(self) -> Dict[str, Path]:
        """
        Write students, sections and enrollments CSVs.

        Returns:
            Ordered mapping of logical name → written path.
        """
        self.csv_dir.mkdir(parents=True, exist_ok=True)

        users = self.users.list_users()
        classes = self.classes.list_classes()

        enrollment_rows = []
        for cls in classes:
            section_id = cls.room or cls.course_code
            for enrollment in self.classes.get_enrollments(cls.id):
                enrollment_rows.append([section_id, enrollment.student_id])

        paths = {
            "students": self.csv_dir / "students.csv",
            "sections": self.csv_dir / "sections.csv",
            "enrollments": self.csv_dir / "enrollments.csv",
        }
        _write_csv(
            paths["students"],
            [h for h, _ in STUDENT_COLUMNS],
            ([getattr(u, attr) for _, attr in STUDENT_COLUMNS] for u in users),
        )
        _write_csv(
            paths["sections"],
            [h for h, _ in SECTION_COLUMNS],
            ([getattr(c, attr) for _, attr in SECTION_COLUMNS] for c in classes),
        )
        _write_csv(paths["enrollments"], ENROLLMENT_HEADERS, enrollment_rows)

        logger.info(
            "Exported %d students, %d sections, %d enrollments to %s",
            len(users), len(classes), len(enrollment_rows), self.csv_dir,
        )
        return paths


def _write_csv(path: Path, headers: List[str], rows: Iterable[List]) -> None:
    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f, lineterminator="\n")
        writer.writerow(headers)
        writer.writerows(rows)
