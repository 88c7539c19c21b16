"""
Append-only history of sync attempts, newest first.

Stored as the sync_log collection. Only the most recent MAX_ENTRIES entries
are kept; older ones are evicted on every append.
"""
import time
from typing import Any, Dict, List, Optional

from clever_sis.db.store import SYNC_LOG, RecordStore
from clever_sis.models.records import utcnow
from clever_sis.models.sync import SyncLogEntry, SyncStatus, SyncType

MAX_ENTRIES = 100


class SyncLog:
    """Owns the sync_log collection; nothing else writes to it."""

    def __init__(self, store: RecordStore, max_entries: int = MAX_ENTRIES):
        self.store = store
        self.max_entries = max_entries

    def record(
        self,
        type: SyncType,
        status: SyncStatus,
        message: str,
        **extra: Any,
    ) -> SyncLogEntry:
        """
        Append one entry.

        Args:
            type: What was attempted.
            status: Outcome (or in_progress for a start marker).
            message: Human-readable summary.
            **extra: files_uploaded, files_downloaded or details.
        """
        with self.store.edit(SYNC_LOG) as log:
            entry = SyncLogEntry(
                id=self._next_id(log),
                timestamp=utcnow(),
                type=type,
                status=status,
                message=message,
                **extra,
            )
            log.insert(0, entry.model_dump(mode="json", exclude_none=True))
            del log[self.max_entries:]
        return entry

    def status(self) -> Dict[str, Any]:
        """Status, message and timestamp of the latest entry, or status 'never'."""
        log = self.store.load(SYNC_LOG)
        if not log:
            return {"status": "never", "message": "No sync has been performed yet"}
        last = log[0]
        return {
            "status": last["status"],
            "message": last["message"],
            "timestamp": last["timestamp"],
        }

    def history(self) -> List[SyncLogEntry]:
        return [SyncLogEntry.model_validate(e) for e in self.store.load(SYNC_LOG)]

    def last_sync_time(self) -> Optional[str]:
        log = self.store.load(SYNC_LOG)
        return log[0]["timestamp"] if log else None

    @staticmethod
    def _next_id(log: List[Dict[str, Any]]) -> str:
        now_ms = int(time.time() * 1000)
        if log:
            # Two entries in the same millisecond still get distinct, ordered ids.
            now_ms = max(now_ms, int(log[0]["id"]) + 1)
        return str(now_ms)
