"""Sync audit log model."""
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from sqlmodel import SQLModel


class SyncType(str, Enum):
    CONNECTION_TEST = "connection_test"
    UPLOAD = "upload"
    DOWNLOAD = "download"
    SYNC_START = "sync_start"
    SYNC_COMPLETE = "sync_complete"


class SyncStatus(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    IN_PROGRESS = "in_progress"


class SyncLogEntry(SQLModel):
    """Records each sync attempt for audit and debugging. Never mutated once written."""

    id: str  # milliseconds since epoch, strictly increasing
    timestamp: datetime
    type: SyncType
    status: SyncStatus
    message: str
    files_uploaded: Optional[List[str]] = None
    files_downloaded: Optional[List[str]] = None
    details: Optional[Dict[str, Any]] = None
