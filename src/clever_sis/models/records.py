"""Roster record models: students, class sections and enrollments."""
import uuid
from datetime import datetime, timezone

from pydantic import field_validator
from sqlmodel import Field, SQLModel


def _new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def numbers_as_text(value):
    """JSON numbers become strings; anything else is left for normal validation."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


class UserRecord(SQLModel):
    """One student. student_id is the business key shared with Clever."""

    id: str = Field(default_factory=_new_id)
    student_id: str
    first_name: str
    last_name: str
    email: str = ""
    grade: str = ""
    status: str = "active"  # "active", "inactive"; free-form in practice
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @field_validator("grade", mode="before")
    @classmethod
    def _grade_as_text(cls, value):
        # grades arrive as 9 or "9" depending on the client
        return "" if value is None else str(value)


class ClassRecord(SQLModel):
    """One class section. course_code is the business key."""

    id: str = Field(default_factory=_new_id)
    course_code: str
    name: str
    description: str = ""
    instructor: str = ""  # exported verbatim as Teacher_email
    schedule: str = ""  # exported as Period
    room: str = ""  # exported as Section_id
    capacity: int = 30
    status: str = "active"
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class EnrollmentRecord(SQLModel):
    """Links a class (by internal id) to a student (by student_id, not internal id)."""

    id: str = Field(default_factory=_new_id)
    class_id: str
    student_id: str
    enrolled_at: datetime = Field(default_factory=utcnow)
    status: str = "active"
