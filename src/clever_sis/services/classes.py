"""Class section and enrollment operations."""
import logging
import re
from typing import Any, Dict, List, Optional

from clever_sis.db.store import CLASSES, ENROLLMENTS, RecordStore
from clever_sis.errors import ValidationError
from clever_sis.models.records import ClassRecord, EnrollmentRecord, utcnow

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("name", "course_code")
IMMUTABLE_FIELDS = {"id", "created_at"}
DEFAULT_CAPACITY = 30
DUPLICATE_MESSAGE = "Class with this course_code already exists"

_LEADING_INT = re.compile(r"\s*[+-]?\d+")


def parse_capacity(value: Any) -> int:
    """
    Read the leading integer of a capacity value ("24", 24, "12.5", "12 seats").

    Missing, zero or non-numeric values become DEFAULT_CAPACITY.
    """
    if value is None or isinstance(value, bool):
        return DEFAULT_CAPACITY
    match = _LEADING_INT.match(str(value))
    if not match:
        return DEFAULT_CAPACITY
    return int(match.group(0)) or DEFAULT_CAPACITY


class ClassService:
    def __init__(self, store: RecordStore):
        self.store = store

    # ─── Classes ──────────────────────────────────────────────────────────────

    def list_classes(self) -> List[ClassRecord]:
        return [ClassRecord.model_validate(r) for r in self.store.load(CLASSES)]

    def get_class(self, class_id: str) -> Optional[ClassRecord]:
        for raw in self.store.load(CLASSES):
            if raw.get("id") == class_id:
                return ClassRecord.model_validate(raw)
        return None

    def count_classes(self) -> int:
        return len(self.store.load(CLASSES))

    def create_class(self, data: Dict[str, Any]) -> ClassRecord:
        """
        Validate and append a new class.

        Raises:
            ValidationError: if name/course_code is empty or course_code is taken.
        """
        if not all(data.get(f) for f in REQUIRED_FIELDS):
            raise ValidationError(
                f"Missing required fields: {', '.join(REQUIRED_FIELDS)}"
            )

        with self.store.edit(CLASSES) as classes:
            if any(c.get("course_code") == data["course_code"] for c in classes):
                raise ValidationError(DUPLICATE_MESSAGE)

            record = ClassRecord(
                name=data["name"],
                course_code=data["course_code"],
                description=data.get("description") or "",
                instructor=data.get("instructor") or "",
                schedule=data.get("schedule") or "",
                room=data.get("room") or "",
                capacity=parse_capacity(data.get("capacity")),
                status=data.get("status") or "active",
            )
            classes.append(record.model_dump(mode="json"))

        logger.info("Created class %s (course_code=%s)", record.id, record.course_code)
        return record

    def update_class(self, class_id: str, data: Dict[str, Any]) -> Optional[ClassRecord]:
        """
        Shallow-merge the supplied fields over an existing class.

        Returns:
            The updated record, or None if no class has this id.

        Raises:
            ValidationError: if name/course_code is blanked or course_code
                changes to one already in use.
        """
        changes = {
            k: v for k, v in data.items()
            if v is not None and k not in IMMUTABLE_FIELDS
        }
        blanked = [f for f in REQUIRED_FIELDS if f in changes and not changes[f]]
        if blanked:
            raise ValidationError(f"Missing required fields: {', '.join(blanked)}")
        if "capacity" in changes:
            changes["capacity"] = parse_capacity(changes["capacity"])

        with self.store.edit(CLASSES) as classes:
            index = next(
                (i for i, c in enumerate(classes) if c.get("id") == class_id), None
            )
            if index is None:
                return None

            if "course_code" in changes:
                new_key = changes["course_code"]
                if any(
                    c.get("course_code") == new_key
                    for i, c in enumerate(classes) if i != index
                ):
                    raise ValidationError(DUPLICATE_MESSAGE)

            merged = {**classes[index], **changes, "updated_at": utcnow()}
            record = ClassRecord.model_validate(merged)
            classes[index] = record.model_dump(mode="json")

        return record

    def delete_class(self, class_id: str) -> bool:
        """Delete a class and, before it, every enrollment that references it."""
        # Lock order: classes, then enrollments.
        with self.store.edit(CLASSES) as classes:
            index = next(
                (i for i, c in enumerate(classes) if c.get("id") == class_id), None
            )
            if index is None:
                return False

            with self.store.edit(ENROLLMENTS) as enrollments:
                before = len(enrollments)
                enrollments[:] = [e for e in enrollments if e.get("class_id") != class_id]
                removed = before - len(enrollments)

            del classes[index]

        logger.info("Deleted class %s and %d enrollment(s)", class_id, removed)
        return True

    # ─── Enrollments ──────────────────────────────────────────────────────────

    def get_enrollments(self, class_id: str) -> List[EnrollmentRecord]:
        return [
            EnrollmentRecord.model_validate(e)
            for e in self.store.load(ENROLLMENTS)
            if e.get("class_id") == class_id
        ]

    def add_student(self, class_id: str, student_id: str) -> Optional[EnrollmentRecord]:
        """
        Enroll a student (by student_id) in a class.

        Returns:
            The new enrollment, or None if the class does not exist.

        Raises:
            ValidationError: if student_id is empty or the pair is already enrolled.
        """
        if not student_id:
            raise ValidationError("Missing required fields: student_id")

        with self.store.edit(CLASSES) as classes:
            if not any(c.get("id") == class_id for c in classes):
                return None

            with self.store.edit(ENROLLMENTS) as enrollments:
                if any(
                    e.get("class_id") == class_id and e.get("student_id") == student_id
                    for e in enrollments
                ):
                    raise ValidationError("Student is already enrolled in this class")

                enrollment = EnrollmentRecord(class_id=class_id, student_id=student_id)
                enrollments.append(enrollment.model_dump(mode="json"))

        return enrollment

    def remove_student(self, class_id: str, student_id: str) -> bool:
        with self.store.edit(ENROLLMENTS) as enrollments:
            index = next(
                (
                    i for i, e in enumerate(enrollments)
                    if e.get("class_id") == class_id and e.get("student_id") == student_id
                ),
                None,
            )
            if index is None:
                return False
            del enrollments[index]
        return True
