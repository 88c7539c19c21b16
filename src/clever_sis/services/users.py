"""Student record operations built on the store's load-mutate-save cycle."""
import logging
from typing import Any, Dict, List, Optional

from clever_sis.db.store import USERS, RecordStore
from clever_sis.errors import ValidationError
from clever_sis.models.records import UserRecord, utcnow

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("student_id", "first_name", "last_name")
IMMUTABLE_FIELDS = {"id", "created_at"}
DUPLICATE_MESSAGE = "User with this student_id already exists"


class UserService:
    def __init__(self, store: RecordStore):
        self.store = store

    def list_users(self) -> List[UserRecord]:
        return [UserRecord.model_validate(r) for r in self.store.load(USERS)]

    def get_user(self, user_id: str) -> Optional[UserRecord]:
        for raw in self.store.load(USERS):
            if raw.get("id") == user_id:
                return UserRecord.model_validate(raw)
        return None

    def count_users(self) -> int:
        return len(self.store.load(USERS))

    def create_user(self, data: Dict[str, Any]) -> UserRecord:
        """
        Validate and append a new student.

        Raises:
            ValidationError: if a required field is empty or student_id is taken.
        """
        if not all(data.get(f) for f in REQUIRED_FIELDS):
            raise ValidationError(
                f"Missing required fields: {', '.join(REQUIRED_FIELDS)}"
            )

        with self.store.edit(USERS) as users:
            if any(u.get("student_id") == data["student_id"] for u in users):
                raise ValidationError(DUPLICATE_MESSAGE)

            user = UserRecord(
                student_id=data["student_id"],
                first_name=data["first_name"],
                last_name=data["last_name"],
                email=data.get("email") or "",
                grade=data.get("grade") or "",
                status=data.get("status") or "active",
            )
            users.append(user.model_dump(mode="json"))

        logger.info("Created user %s (student_id=%s)", user.id, user.student_id)
        return user

    def update_user(self, user_id: str, data: Dict[str, Any]) -> Optional[UserRecord]:
        """
        Shallow-merge the supplied fields over an existing student.

        Returns:
            The updated record, or None if no user has this id.

        Raises:
            ValidationError: if a required field is blanked or student_id
                changes to one already in use.
        """
        changes = {
            k: v for k, v in data.items()
            if v is not None and k not in IMMUTABLE_FIELDS
        }
        blanked = [f for f in REQUIRED_FIELDS if f in changes and not changes[f]]
        if blanked:
            raise ValidationError(f"Missing required fields: {', '.join(blanked)}")

        with self.store.edit(USERS) as users:
            index = next(
                (i for i, u in enumerate(users) if u.get("id") == user_id), None
            )
            if index is None:
                return None

            if "student_id" in changes:
                new_key = changes["student_id"]
                if any(
                    u.get("student_id") == new_key
                    for i, u in enumerate(users) if i != index
                ):
                    raise ValidationError(DUPLICATE_MESSAGE)

            merged = {**users[index], **changes, "updated_at": utcnow()}
            user = UserRecord.model_validate(merged)
            users[index] = user.model_dump(mode="json")

        return user

    def delete_user(self, user_id: str) -> bool:
        with self.store.edit(USERS) as users:
            index = next(
                (i for i, u in enumerate(users) if u.get("id") == user_id), None
            )
            if index is None:
                return False
            del users[index]

        logger.info("Deleted user %s", user_id)
        return True

    def search_users(self, query: str) -> List[UserRecord]:
        """Case-insensitive substring match on name, student_id and email."""
        term = query.lower()
        matches = []
        for user in self.list_users():
            haystack = [user.first_name, user.last_name, user.student_id]
            if user.email:
                haystack.append(user.email)
            if any(term in field.lower() for field in haystack):
                matches.append(user)
        return matches
