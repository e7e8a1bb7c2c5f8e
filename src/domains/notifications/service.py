"""In-app notifications: listing and read state."""

from datetime import datetime

import structlog
from pydantic import BaseModel, ConfigDict
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.db.models import Notification

logger = structlog.get_logger()


class NotificationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    description: str
    read: bool
    created_at: datetime | None = None


async def list_notifications(session: AsyncSession, user_id: str) -> list[Notification]:
    stmt = (
        select(Notification)
        .where(Notification.user_id == user_id)
        .order_by(Notification.created_at.desc())
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def mark_as_read(session: AsyncSession, user_id: str, notification_id: str) -> None:
    """Raises LookupError if the notification does not belong to the caller."""
    stmt = (
        update(Notification)
        .where(Notification.id == notification_id, Notification.user_id == user_id)
        .values(read=True)
    )
    result = await session.execute(stmt)
    if not result.rowcount:
        await session.rollback()
        raise LookupError(f"Notification {notification_id} not found")
    await session.commit()


async def mark_all_as_read(session: AsyncSession, user_id: str) -> int:
    stmt = (
        update(Notification)
        .where(Notification.user_id == user_id, Notification.read.is_(False))
        .values(read=True)
    )
    result = await session.execute(stmt)
    await session.commit()
    updated = result.rowcount or 0
    logger.info("notifications_marked_read", user_id=user_id, count=updated)
    return updated
