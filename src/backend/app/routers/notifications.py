"""GET /api/v1/notifications — recent client notifications, oldest first."""

from fastapi import APIRouter, Depends

from app.dependencies import get_notifier
from app.ploi.notifier import MemoryNotifier
from app.schemas.panel import Notification

router = APIRouter(prefix="/api/v1", tags=["notifications"])


@router.get("/notifications", response_model=list[Notification])
async def list_notifications(notifier: MemoryNotifier = Depends(get_notifier)) -> list[Notification]:
    return notifier.recent()
