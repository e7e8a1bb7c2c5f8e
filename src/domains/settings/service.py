"""Read and upsert per-user settings rows."""

from datetime import UTC, datetime

import structlog
from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from src.db.models import NotificationSettings, UserSettings
from src.domains.settings.models import (
    NotificationSettingsModel,
    NotificationSettingsUpdate,
    UserSettingsModel,
    UserSettingsUpdate,
)

logger = structlog.get_logger()

USER_SETTINGS_SECTIONS = (
    "notification_preferences",
    "security_settings",
    "display_preferences",
    "api_preferences",
)


def _user_settings_from_row(row: UserSettings | None) -> UserSettingsModel:
    if row is None:
        return UserSettingsModel()
    data = {
        section: getattr(row, section)
        for section in USER_SETTINGS_SECTIONS
        if getattr(row, section)
    }
    return UserSettingsModel(**data, updated_at=row.updated_at)


def _notification_settings_from_row(
    row: NotificationSettings | None,
) -> NotificationSettingsModel:
    if row is None:
        return NotificationSettingsModel()
    defaults = NotificationSettingsModel()
    return NotificationSettingsModel(
        alert_types=row.alert_types or defaults.alert_types,
        email_notifications=(
            row.email_notifications
            if row.email_notifications is not None
            else defaults.email_notifications
        ),
        push_notifications=(
            row.push_notifications
            if row.push_notifications is not None
            else defaults.push_notifications
        ),
        webhook_url=row.webhook_url or None,
        updated_at=row.updated_at,
    )


async def get_user_settings(session: AsyncSession, user_id: str) -> UserSettingsModel:
    """Stored settings, or the defaults when the user never saved any."""
    result = await session.execute(select(UserSettings).where(UserSettings.user_id == user_id))
    return _user_settings_from_row(result.scalars().first())


async def update_user_settings(
    session: AsyncSession, user_id: str, update: UserSettingsUpdate
) -> UserSettingsModel:
    current = await get_user_settings(session, user_id)
    data = current.model_dump(by_alias=True, exclude={"updated_at"})
    for section in USER_SETTINGS_SECTIONS:
        value = getattr(update, section)
        if value is not None:
            data[section] = value.model_dump(by_alias=True)
    merged = UserSettingsModel.model_validate(data)

    values = {
        section: getattr(merged, section).model_dump(by_alias=True)
        for section in USER_SETTINGS_SECTIONS
    }
    now = datetime.now(UTC)
    stmt = pg_insert(UserSettings).values(user_id=user_id, updated_at=now, **values)
    stmt = stmt.on_conflict_do_update(
        index_elements=[UserSettings.user_id],
        set_={**values, "updated_at": now},
    )
    await session.execute(stmt)
    await session.commit()
    logger.info("user_settings_updated", user_id=user_id, sections=sorted(update.model_fields_set))

    merged.updated_at = now
    return merged


async def get_notification_settings(
    session: AsyncSession, user_id: str
) -> NotificationSettingsModel:
    result = await session.execute(
        select(NotificationSettings).where(NotificationSettings.user_id == user_id)
    )
    return _notification_settings_from_row(result.scalars().first())


async def update_notification_settings(
    session: AsyncSession, user_id: str, update: NotificationSettingsUpdate
) -> NotificationSettingsModel:
    current = await get_notification_settings(session, user_id)
    changes = update.model_dump(mode="json", exclude_unset=True)
    merged = NotificationSettingsModel.model_validate(
        {**current.model_dump(exclude={"updated_at"}), **changes}
    )

    values = merged.model_dump(exclude={"updated_at"})
    now = datetime.now(UTC)
    stmt = pg_insert(NotificationSettings).values(user_id=user_id, updated_at=now, **values)
    stmt = stmt.on_conflict_do_update(
        index_elements=[NotificationSettings.user_id],
        set_={**values, "updated_at": now},
    )
    await session.execute(stmt)
    await session.commit()
    logger.info("notification_settings_updated", user_id=user_id, fields=sorted(changes))

    merged.updated_at = now
    return merged
