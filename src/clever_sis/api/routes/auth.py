"""Admin login, logout and password change."""
import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import AliasChoices, BaseModel, Field

from clever_sis.api.deps import get_credentials
from clever_sis.auth.credentials import CredentialStore

logger = logging.getLogger(__name__)

router = APIRouter()


class LoginRequest(BaseModel):
    username: str
    password: str


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(
        validation_alias=AliasChoices("current_password", "currentPassword")
    )
    new_password: str = Field(
        min_length=1, validation_alias=AliasChoices("new_password", "newPassword")
    )


@router.post("/login")
def login(
    body: LoginRequest,
    request: Request,
    credentials: CredentialStore = Depends(get_credentials),
):
    account = credentials.authenticate(body.username, body.password)
    if account is None:
        logger.warning("Failed login for %r", body.username)
        raise HTTPException(status_code=401, detail="Invalid username or password")
    request.session["user"] = account.session_payload()
    return {"message": "Logged in", "user": request.session["user"]}


@router.post("/logout")
def logout(request: Request):
    request.session.clear()
    return {"message": "Logged out"}


@router.post("/change-password")
def change_password(
    body: ChangePasswordRequest,
    request: Request,
    credentials: CredentialStore = Depends(get_credentials),
):
    user = request.session.get("user")
    if not user:
        raise HTTPException(status_code=401, detail="Not authenticated")
    if not credentials.change_password(user["id"], body.current_password, body.new_password):
        raise HTTPException(status_code=400, detail="Current password is incorrect")
    return {"success": True, "message": "Password changed successfully"}
