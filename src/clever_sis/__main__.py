"""
Main entrypoint.

Usage:
    python -m clever_sis            # serve the admin API (uvicorn) on HOST:PORT
    python -m clever_sis serve      # same
    python -m clever_sis sync       # one full sync, for cron; exit code 1 on failure
    uvicorn --factory clever_sis.api.main:create_app --port 3000
"""
import asyncio
import logging
import sys

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(name)s %(levelname)s %(message)s",
)
logger = logging.getLogger(__name__)


def _run_server() -> None:
    import uvicorn

    from clever_sis.config import get_settings

    settings = get_settings()
    logger.info("Clever SIS admin API on http://%s:%d", settings.host, settings.port)
    uvicorn.run(
        "clever_sis.api.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
    )


async def _run_sync() -> int:
    from clever_sis.clever.sync_service import CleverSyncService
    from clever_sis.config import get_settings
    from clever_sis.db.store import RecordStore
    from clever_sis.errors import StorageError, TransferError

    settings = get_settings()
    service = CleverSyncService.from_settings(settings, RecordStore(settings.data_dir))
    try:
        result = await service.trigger_sync()
    except (TransferError, StorageError) as exc:
        logger.error("Sync failed: %s", exc)
        return 1
    logger.info(result["message"])
    return 0


if __name__ == "__main__":
    command = sys.argv[1] if len(sys.argv) > 1 else "serve"
    if command == "sync":
        sys.exit(asyncio.run(_run_sync()))
    elif command == "serve":
        _run_server()
    else:
        print(f"Unknown command: {command!r} (expected 'serve' or 'sync')")
        sys.exit(2)
