"""Notification inbox endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.auth import CurrentUser, get_current_user
from src.db.database import get_session
from src.domains.notifications.service import (
    NotificationOut,
    list_notifications,
    mark_all_as_read,
    mark_as_read,
)

router = APIRouter(prefix="/api/v1/notifications", tags=["notifications"])


@router.get("")
async def get_notifications(
    user: CurrentUser = Depends(get_current_user),  # noqa: B008
    session: AsyncSession = Depends(get_session),  # noqa: B008
) -> dict:
    notifications = await list_notifications(session, user.id)
    items = [NotificationOut.model_validate(n).model_dump(mode="json") for n in notifications]
    return {
        "items": items,
        "total": len(items),
        "unread_count": sum(1 for n in notifications if not n.read),
    }


@router.post("/read-all")
async def read_all_notifications(
    user: CurrentUser = Depends(get_current_user),  # noqa: B008
    session: AsyncSession = Depends(get_session),  # noqa: B008
) -> dict:
    updated = await mark_all_as_read(session, user.id)
    return {"success": True, "updated": updated}


@router.post("/{notification_id}/read")
async def read_notification(
    notification_id: UUID,
    user: CurrentUser = Depends(get_current_user),  # noqa: B008
    session: AsyncSession = Depends(get_session),  # noqa: B008
) -> dict:
    await mark_as_read(session, user.id, str(notification_id))
    return {"success": True, "id": str(notification_id)}
