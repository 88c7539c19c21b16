"""Student CRUD and search routes."""
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, field_validator

from clever_sis.api.deps import get_user_service
from clever_sis.errors import ValidationError
from clever_sis.models.records import UserRecord, numbers_as_text
from clever_sis.services.users import UserService

router = APIRouter()


class UserPayload(BaseModel):
    # All optional: the service reports missing required fields itself (400, not 422).
    student_id: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    grade: Optional[str] = None
    status: Optional[str] = None

    @field_validator("*", mode="before")
    @classmethod
    def _numbers_as_text(cls, value):
        # student_id 1001 and grade 9 arrive as JSON numbers from some clients
        return numbers_as_text(value)


@router.get("/", response_model=List[UserRecord])
def list_users(users: UserService = Depends(get_user_service)):
    return users.list_users()


@router.get("/search/{query}", response_model=List[UserRecord])
def search_users(query: str, users: UserService = Depends(get_user_service)):
    return users.search_users(query)


@router.get("/{user_id}", response_model=UserRecord)
def get_user(user_id: str, users: UserService = Depends(get_user_service)):
    user = users.get_user(user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.post("/", response_model=UserRecord, status_code=201)
def create_user(body: UserPayload, users: UserService = Depends(get_user_service)):
    try:
        return users.create_user(body.model_dump(exclude_unset=True))
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@router.put("/{user_id}", response_model=UserRecord)
def update_user(
    user_id: str,
    body: UserPayload,
    users: UserService = Depends(get_user_service),
):
    try:
        user = users.update_user(user_id, body.model_dump(exclude_unset=True))
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.delete("/{user_id}")
def delete_user(user_id: str, users: UserService = Depends(get_user_service)):
    if not users.delete_user(user_id):
        raise HTTPException(status_code=404, detail="User not found")
    return {"message": "User deleted successfully"}
