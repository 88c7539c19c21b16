"""Dashboard summary: record counts and the latest sync outcome."""
from fastapi import APIRouter, Depends

from clever_sis.api.deps import get_class_service, get_sync_service, get_user_service
from clever_sis.clever.sync_service import CleverSyncService
from clever_sis.services.classes import ClassService
from clever_sis.services.users import UserService

router = APIRouter()


@router.get("/")
def dashboard(
    users: UserService = Depends(get_user_service),
    classes: ClassService = Depends(get_class_service),
    service: CleverSyncService = Depends(get_sync_service),
):
    return {
        "total_users": users.count_users(),
        "total_classes": classes.count_classes(),
        "last_sync": service.log.last_sync_time(),
        "sync_status": service.log.status(),
    }
