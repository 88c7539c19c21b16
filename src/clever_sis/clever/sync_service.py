"""
CleverSyncService: orchestrates export and SFTP transfer with Clever.

Flow for a full sync (trigger_sync):
  1. Record sync_start (status="in_progress")
  2. testing:   open and close an SFTP session
  3. uploading: export students/sections/enrollments CSVs → upload them
  4. Record sync_complete (status="success", details=upload result)

On any exception: record sync_complete (status="error"), mark the run failed
at the stage it reached, and re-raise.

Upload and download can also be run on their own. Every operation records
its own entry in the sync log, success or error, before returning/raising.
Download only fetches files; their contents are not processed. Store and CSV
work runs in the thread pool, like the SFTP calls.
"""
import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

from clever_sis.clever.client import SftpClient
from clever_sis.clever.exporter import CsvExporter
from clever_sis.clever.sync_log import SyncLog
from clever_sis.config import Settings
from clever_sis.db.store import RecordStore
from clever_sis.errors import TransferError
from clever_sis.models.sync import SyncStatus, SyncType

logger = logging.getLogger(__name__)


class SyncState(str, Enum):
    IDLE = "idle"
    TESTING = "testing"
    UPLOADING = "uploading"
    DONE = "done"
    FAILED = "failed"


@dataclass
class SyncRun:
    """State of one trigger_sync() call."""

    state: SyncState = SyncState.IDLE
    failed_stage: Optional[SyncState] = None
    message: Optional[str] = None


class CleverSyncService:
    """Runs connection tests, uploads, downloads and full syncs against Clever."""

    def __init__(self, client, store: RecordStore, csv_dir: Path):
        """
        Args:
            client: SftpClient instance (or AsyncMock in tests).
            store: RecordStore holding the roster and the sync log.
            csv_dir: Where exported and downloaded CSVs are written.
        """
        self.client = client
        self.store = store
        self.csv_dir = Path(csv_dir)
        self.exporter = CsvExporter(store, self.csv_dir)
        self.log = SyncLog(store)
        self.last_run = SyncRun()

    @classmethod
    def from_settings(cls, settings: Settings, store: RecordStore) -> "CleverSyncService":
        return cls(
            client=SftpClient.from_settings(settings),
            store=store,
            csv_dir=settings.csv_dir,
        )

    async def _in_thread(self, fn, *args, **kwargs):
        """Run blocking store/CSV work in the thread pool."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, lambda: fn(*args, **kwargs))

    async def _record(self, type: SyncType, status: SyncStatus, message: str, **extra):
        return await self._in_thread(self.log.record, type, status, message, **extra)

    async def test_connection(self) -> Dict[str, Any]:
        """
        Raises:
            TransferError: "Connection failed: ..." (after recording the error).
        """
        try:
            await self.client.test_connection()
        except Exception as exc:
            await self._record(
                SyncType.CONNECTION_TEST,
                SyncStatus.ERROR,
                f"SFTP connection failed: {exc}",
            )
            raise TransferError(f"Connection failed: {exc}") from exc

        await self._record(
            SyncType.CONNECTION_TEST,
            SyncStatus.SUCCESS,
            "SFTP connection test successful",
        )
        return {"success": True, "message": "Connection successful"}

    async def upload(self) -> Dict[str, Any]:
        """
        Export fresh CSVs and upload them.

        Raises:
            TransferError: "Upload failed: ..." (after recording the error).
        """
        try:
            files = await self._in_thread(self.exporter.export)
            uploaded = await self.client.upload(files)
        except Exception as exc:
            await self._record(SyncType.UPLOAD, SyncStatus.ERROR, f"Upload failed: {exc}")
            raise TransferError(f"Upload failed: {exc}") from exc

        await self._record(
            SyncType.UPLOAD,
            SyncStatus.SUCCESS,
            "Successfully uploaded CSV files to Clever",
            files_uploaded=uploaded,
        )
        logger.info("Uploaded %s to Clever", ", ".join(uploaded))
        return {"success": True, "message": "Upload successful", "files": uploaded}

    async def download(self) -> Dict[str, Any]:
        """
        Fetch every remote CSV into csv_dir as downloaded_<name>.

        Raises:
            TransferError: "Download failed: ..." (after recording the error).
        """
        try:
            downloaded = await self.client.download(self.csv_dir)
        except Exception as exc:
            await self._record(SyncType.DOWNLOAD, SyncStatus.ERROR, f"Download failed: {exc}")
            raise TransferError(f"Download failed: {exc}") from exc

        await self._record(
            SyncType.DOWNLOAD,
            SyncStatus.SUCCESS,
            "Successfully downloaded files from Clever",
            files_downloaded=downloaded,
        )
        logger.info("Downloaded %d file(s) from Clever", len(downloaded))
        return {"success": True, "message": "Download successful", "files": downloaded}

    async def trigger_sync(self) -> Dict[str, Any]:
        """
        Full sync: test connection, then export and upload. Does not download.

        Progress is tracked on self.last_run.

        Raises:
            TransferError: from whichever stage failed.
        """
        run = self.last_run = SyncRun()
        await self._record(
            SyncType.SYNC_START, SyncStatus.IN_PROGRESS, "Starting full sync process"
        )
        logger.info("Full sync starting")

        try:
            run.state = SyncState.TESTING
            await self.test_connection()

            run.state = SyncState.UPLOADING
            upload_result = await self.upload()

        except Exception as exc:
            run.failed_stage = run.state
            run.state = SyncState.FAILED
            run.message = str(exc)
            await self._record(
                SyncType.SYNC_COMPLETE, SyncStatus.ERROR, f"Sync failed: {exc}"
            )
            logger.error("Full sync failed while %s: %s", run.failed_stage.value, exc)
            raise

        run.state = SyncState.DONE
        run.message = "Full sync completed successfully"
        await self._record(
            SyncType.SYNC_COMPLETE,
            SyncStatus.SUCCESS,
            run.message,
            details=upload_result,
        )
        logger.info("Full sync complete")
        return {"success": True, "message": "Sync completed successfully"}
