"""User and notification settings endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.auth import CurrentUser, get_current_user
from src.db.database import get_session
from src.domains.settings.models import NotificationSettingsUpdate, UserSettingsUpdate
from src.domains.settings.service import (
    get_notification_settings,
    get_user_settings,
    update_notification_settings,
    update_user_settings,
)

router = APIRouter(prefix="/api/v1/settings", tags=["settings"])


@router.get("")
async def read_user_settings(
    user: CurrentUser = Depends(get_current_user),  # noqa: B008
    session: AsyncSession = Depends(get_session),  # noqa: B008
) -> dict:
    settings = await get_user_settings(session, user.id)
    return settings.model_dump(mode="json", by_alias=True)


@router.put("")
async def write_user_settings(
    update: UserSettingsUpdate,
    user: CurrentUser = Depends(get_current_user),  # noqa: B008
    session: AsyncSession = Depends(get_session),  # noqa: B008
) -> dict:
    settings = await update_user_settings(session, user.id, update)
    return settings.model_dump(mode="json", by_alias=True)


@router.get("/notifications")
async def read_notification_settings(
    user: CurrentUser = Depends(get_current_user),  # noqa: B008
    session: AsyncSession = Depends(get_session),  # noqa: B008
) -> dict:
    settings = await get_notification_settings(session, user.id)
    return settings.model_dump(mode="json")


@router.put("/notifications")
async def write_notification_settings(
    update: NotificationSettingsUpdate,
    user: CurrentUser = Depends(get_current_user),  # noqa: B008
    session: AsyncSession = Depends(get_session),  # noqa: B008
) -> dict:
    settings = await update_notification_settings(session, user.id, update)
    return settings.model_dump(mode="json")
