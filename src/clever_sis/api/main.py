"""FastAPI application factory."""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware

from clever_sis.api.deps import require_admin
from clever_sis.api.routes import auth, classes, dashboard, sync as sync_routes, users
from clever_sis.auth.credentials import CredentialStore
from clever_sis.clever.sync_service import CleverSyncService
from clever_sis.config import Settings, get_settings
from clever_sis.db.store import RecordStore
from clever_sis.errors import StorageError
from clever_sis.scheduler.jobs import build_scheduler

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build and return the FastAPI app.

    Args:
        settings: Defaults to get_settings() (environment / .env).
    """
    settings = settings or get_settings()

    store = RecordStore(settings.data_dir)
    sync_service = CleverSyncService.from_settings(settings, store)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        scheduler = build_scheduler(settings, app.state.sync_service)
        if scheduler.get_jobs():
            scheduler.start()
            logger.info("Scheduler started (daily sync at %02d:00 UTC)", settings.sync_hour)
        yield
        if scheduler.running:
            scheduler.shutdown()

    app = FastAPI(
        title="Clever SIS API",
        description="Student and class administration with Clever roster sync",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.store = store
    app.state.credentials = CredentialStore.from_settings(settings)
    app.state.sync_service = sync_service

    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_secret,
        max_age=settings.session_max_age,
        https_only=settings.session_https_only,
    )

    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError):
        logger.error("Storage error on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        # Malformed bodies answer 400 with one readable message, like service validation.
        first = exc.errors()[0]
        field = ".".join(str(part) for part in first["loc"] if part != "body")
        message = f"Invalid {field}: {first['msg']}" if field else f"Invalid request: {first['msg']}"
        return JSONResponse(status_code=400, content={"detail": message})

    admin = [Depends(require_admin)]
    app.include_router(auth.router, prefix="/auth", tags=["auth"])
    app.include_router(users.router, prefix="/api/users", tags=["users"], dependencies=admin)
    app.include_router(classes.router, prefix="/api/classes", tags=["classes"], dependencies=admin)
    app.include_router(sync_routes.router, prefix="/api/sync", tags=["sync"], dependencies=admin)
    app.include_router(dashboard.router, prefix="/api/dashboard", tags=["dashboard"], dependencies=admin)

    return app
