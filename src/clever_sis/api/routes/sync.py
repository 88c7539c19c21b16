"""Clever sync trigger, transfer and status routes."""
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from clever_sis.api.deps import get_sync_service
from clever_sis.clever.sync_service import CleverSyncService
from clever_sis.errors import TransferError
from clever_sis.models.sync import SyncLogEntry

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/status")
def sync_status(service: CleverSyncService = Depends(get_sync_service)):
    """Status of the most recent sync log entry, or status 'never'."""
    return service.log.status()


@router.get("/history", response_model=List[SyncLogEntry], response_model_exclude_none=True)
def sync_history(service: CleverSyncService = Depends(get_sync_service)):
    """Up to the last 100 sync log entries, newest first."""
    return service.log.history()


@router.post("/trigger")
async def trigger_sync(service: CleverSyncService = Depends(get_sync_service)):
    """Run a full sync (test connection, export, upload) and wait for it."""
    try:
        return await service.trigger_sync()
    except TransferError:
        logger.exception("Trigger sync error")
        raise HTTPException(status_code=500, detail="Failed to trigger sync")


@router.post("/upload")
async def upload(service: CleverSyncService = Depends(get_sync_service)):
    try:
        return await service.upload()
    except TransferError:
        logger.exception("Upload sync error")
        raise HTTPException(status_code=500, detail="Failed to upload to Clever")


@router.post("/download")
async def download(service: CleverSyncService = Depends(get_sync_service)):
    try:
        return await service.download()
    except TransferError:
        logger.exception("Download sync error")
        raise HTTPException(status_code=500, detail="Failed to download from Clever")


@router.get("/test-connection")
async def test_connection(service: CleverSyncService = Depends(get_sync_service)):
    try:
        return await service.test_connection()
    except TransferError:
        logger.exception("Test connection error")
        raise HTTPException(status_code=500, detail="Connection test failed")
