"""
Admin credential store.

Built once at startup from ADMIN_USERNAME / ADMIN_PASSWORD and handed to the
auth routes through the application state. Passwords are kept only as bcrypt
hashes; a changed password lives in memory until the process restarts.
"""
import threading
from dataclasses import dataclass
from typing import Dict, Optional

import bcrypt

from clever_sis.config import Settings


@dataclass
class AdminAccount:
    id: int
    username: str
    password_hash: bytes
    role: str = "admin"

    def session_payload(self) -> Dict:
        """What gets stored in the signed session cookie. Never the hash."""
        return {"id": self.id, "username": self.username, "role": self.role}


def hash_password(password: str) -> bytes:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt())


def check_password(password: str, password_hash: bytes) -> bool:
    return bcrypt.checkpw(password.encode("utf-8"), password_hash)


class CredentialStore:
    """
    In-memory admin accounts.

    Usage:
        credentials = CredentialStore.from_settings(settings)
        account = credentials.authenticate("admin", "secret")  # → AdminAccount | None
    """

    def __init__(self):
        self._accounts: Dict[int, AdminAccount] = {}
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: Settings) -> "CredentialStore":
        store = cls()
        store.add(settings.admin_username, settings.admin_password)
        return store

    def add(self, username: str, password: str, role: str = "admin") -> AdminAccount:
        with self._lock:
            account = AdminAccount(
                id=len(self._accounts) + 1,
                username=username,
                password_hash=hash_password(password),
                role=role,
            )
            self._accounts[account.id] = account
        return account

    def get(self, account_id: int) -> Optional[AdminAccount]:
        return self._accounts.get(account_id)

    def authenticate(self, username: str, password: str) -> Optional[AdminAccount]:
        for account in self._accounts.values():
            if account.username == username and check_password(password, account.password_hash):
                return account
        return None

    def change_password(self, account_id: int, current: str, new: str) -> bool:
        """Replace the password if `current` matches. Returns False otherwise."""
        with self._lock:
            account = self.get(account_id)
            if account is None or not check_password(current, account.password_hash):
                return False
            account.password_hash = hash_password(new)
        return True
