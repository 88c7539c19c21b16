"""FastAPI dependencies: per-app store, services, credentials and the admin guard."""
from typing import Any, Dict

from fastapi import Depends, HTTPException, Request

from clever_sis.auth.credentials import CredentialStore
from clever_sis.clever.sync_service import CleverSyncService
from clever_sis.db.store import RecordStore
from clever_sis.services.classes import ClassService
from clever_sis.services.users import UserService


def get_store(request: Request) -> RecordStore:
    return request.app.state.store


def get_credentials(request: Request) -> CredentialStore:
    return request.app.state.credentials


def get_sync_service(request: Request) -> CleverSyncService:
    return request.app.state.sync_service


def get_user_service(store: RecordStore = Depends(get_store)) -> UserService:
    return UserService(store)


def get_class_service(store: RecordStore = Depends(get_store)) -> ClassService:
    return ClassService(store)


def require_admin(request: Request) -> Dict[str, Any]:
    """Return the logged-in session user or answer 401."""
    user = request.session.get("user")
    if not user:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return user
