"""Shared test fixtures."""
from unittest.mock import AsyncMock

import pytest

from clever_sis.config import Settings
from clever_sis.db.store import RecordStore
from clever_sis.services.classes import ClassService
from clever_sis.services.users import UserService

ADMIN_PASSWORD = "s3cret-pass"  # matches the admin_password passed to Settings


@pytest.fixture(name="settings")
def settings_fixture(tmp_path) -> Settings:
    """Settings pointing at a throwaway data dir. Never reads the real .env."""
    return Settings(
        _env_file=None,
        data_dir=tmp_path / "data",
        sftp_host="sftp.example.test",
        sftp_username="district",
        sftp_password="pw",
        admin_username="admin",
        admin_password=ADMIN_PASSWORD,
        session_secret="test-secret",
    )


@pytest.fixture(name="store")
def store_fixture(settings) -> RecordStore:
    return RecordStore(settings.data_dir)


@pytest.fixture(name="user_service")
def user_service_fixture(store) -> UserService:
    return UserService(store)


@pytest.fixture(name="class_service")
def class_service_fixture(store) -> ClassService:
    return ClassService(store)


@pytest.fixture(name="mock_client")
def mock_client_fixture():
    """Stands in for SftpClient; upload echoes the logical names it was given."""
    client = AsyncMock()
    client.test_connection = AsyncMock(return_value=None)
    client.upload = AsyncMock(side_effect=lambda files: list(files))
    client.download = AsyncMock(return_value=["students.csv"])
    return client
