"""
APScheduler job for the daily roster sync.

Sync is normally triggered from the admin API. When SYNC_HOUR is set, the
app lifespan also starts this scheduler so a full sync runs every day at
SYNC_HOUR:00 UTC without anyone pressing the button.
"""
import logging
from datetime import datetime, timezone

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from clever_sis.config import Settings

logger = logging.getLogger(__name__)


def build_scheduler(settings: Settings, service) -> AsyncIOScheduler:
    """
    Create and configure the APScheduler.

    Args:
        settings: Application settings; sync_hour=None registers no job.
        service: CleverSyncService the job runs trigger_sync() on.

    Returns:
        Configured AsyncIOScheduler (not yet started).
    """
    scheduler = AsyncIOScheduler(timezone="UTC")

    if settings.sync_hour is not None:
        scheduler.add_job(
            _scheduled_sync,
            trigger="cron",
            hour=settings.sync_hour,
            minute=0,
            id="scheduled_sync",
            replace_existing=True,
            kwargs={"service": service},
        )

    return scheduler


async def _scheduled_sync(service) -> None:
    """
    Scheduled job: full sync (test connection, export, upload).

    Failures are already recorded in the sync log by the service; here they
    are only logged so the scheduler keeps running.
    """
    logger.info("Scheduled sync starting at %s", datetime.now(timezone.utc).isoformat())
    try:
        await service.trigger_sync()
    except Exception as exc:
        logger.error("Scheduled sync failed: %s", exc)
