from fastapi import APIRouter

from notification_service.infrastructure.notifications import notification_manager

router = APIRouter()


@router.get("/health")
async def health() -> dict[str, object]:
    return {
        "status": "ok",
        "connected_users": len(notification_manager.connected_users()),
    }
