"""Class CRUD and enrollment routes."""
from typing import List, Optional, Union

from fastapi import APIRouter, Depends, HTTPException
from pydantic import AliasChoices, BaseModel, Field, field_validator

from clever_sis.api.deps import get_class_service
from clever_sis.errors import ValidationError
from clever_sis.models.records import ClassRecord, EnrollmentRecord, numbers_as_text
from clever_sis.services.classes import ClassService

router = APIRouter()


TEXT_FIELDS = ("name", "course_code", "description", "instructor", "schedule", "room", "status")


class ClassPayload(BaseModel):
    name: Optional[str] = None
    course_code: Optional[str] = None
    description: Optional[str] = None
    instructor: Optional[str] = None
    schedule: Optional[str] = None
    room: Optional[str] = None
    capacity: Optional[Union[int, str]] = None
    status: Optional[str] = None

    @field_validator(*TEXT_FIELDS, "capacity", mode="before")
    @classmethod
    def _numbers_as_text(cls, value):
        # e.g. room 101, course_code 2040, capacity 12.5 (parse_capacity reads the int)
        return numbers_as_text(value)


class EnrollmentRequest(BaseModel):
    student_id: str = Field(validation_alias=AliasChoices("student_id", "studentId"))

    @field_validator("student_id", mode="before")
    @classmethod
    def _numbers_as_text(cls, value):
        return numbers_as_text(value)


@router.get("/", response_model=List[ClassRecord])
def list_classes(classes: ClassService = Depends(get_class_service)):
    return classes.list_classes()


@router.get("/{class_id}", response_model=ClassRecord)
def get_class(class_id: str, classes: ClassService = Depends(get_class_service)):
    record = classes.get_class(class_id)
    if not record:
        raise HTTPException(status_code=404, detail="Class not found")
    return record


@router.post("/", response_model=ClassRecord, status_code=201)
def create_class(body: ClassPayload, classes: ClassService = Depends(get_class_service)):
    try:
        return classes.create_class(body.model_dump(exclude_unset=True))
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@router.put("/{class_id}", response_model=ClassRecord)
def update_class(
    class_id: str,
    body: ClassPayload,
    classes: ClassService = Depends(get_class_service),
):
    try:
        record = classes.update_class(class_id, body.model_dump(exclude_unset=True))
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    if not record:
        raise HTTPException(status_code=404, detail="Class not found")
    return record


@router.delete("/{class_id}")
def delete_class(class_id: str, classes: ClassService = Depends(get_class_service)):
    if not classes.delete_class(class_id):
        raise HTTPException(status_code=404, detail="Class not found")
    return {"message": "Class deleted successfully"}


# ─── Enrollments ──────────────────────────────────────────────────────────────

@router.get("/{class_id}/enrollments", response_model=List[EnrollmentRecord])
def list_enrollments(class_id: str, classes: ClassService = Depends(get_class_service)):
    if not classes.get_class(class_id):
        raise HTTPException(status_code=404, detail="Class not found")
    return classes.get_enrollments(class_id)


@router.post("/{class_id}/enrollments", response_model=EnrollmentRecord, status_code=201)
def add_enrollment(
    class_id: str,
    body: EnrollmentRequest,
    classes: ClassService = Depends(get_class_service),
):
    try:
        enrollment = classes.add_student(class_id, body.student_id)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    if not enrollment:
        raise HTTPException(status_code=404, detail="Class not found")
    return enrollment


@router.delete("/{class_id}/enrollments/{student_id}")
def remove_enrollment(
    class_id: str,
    student_id: str,
    classes: ClassService = Depends(get_class_service),
):
    if not classes.remove_student(class_id, student_id):
        raise HTTPException(status_code=404, detail="Enrollment not found")
    return {"message": "Student removed from class successfully"}
