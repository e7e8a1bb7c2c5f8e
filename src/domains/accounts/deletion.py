"""Permanent deletion of a user's account and every row it owns."""

import structlog
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.db.models import (
    ApiKey,
    ApiUsage,
    DeveloperProfile,
    Notification,
    NotificationSettings,
    SubscriptionUsage,
    Transaction,
    UserSettings,
)
from src.domains.accounts.auth_admin import AuthAdminClient
from src.shared.exceptions import PersistenceError, UpstreamServiceError

logger = structlog.get_logger()

# Children before parents. api_usage is handled separately through api_keys.
USER_OWNED_TABLES = (
    ApiKey,
    Notification,
    NotificationSettings,
    Transaction,
    SubscriptionUsage,
    UserSettings,
    DeveloperProfile,
)


async def _delete_api_usage(session: AsyncSession, user_id: str) -> None:
    result = await session.execute(select(ApiKey.id).where(ApiKey.user_id == user_id))
    api_key_ids = list(result.scalars().all())
    if not api_key_ids:
        return
    await session.execute(delete(ApiUsage).where(ApiUsage.api_key_id.in_(api_key_ids)))


async def delete_user_data(session: AsyncSession, user_id: str) -> list[str]:
    """Delete the user's rows table by table.

    Each table runs in its own savepoint so one failure does not abort the
    rest. Returns the names of the tables that could not be cleared.
    """
    failed: list[str] = []

    try:
        async with session.begin_nested():
            await _delete_api_usage(session, user_id)
    except SQLAlchemyError as exc:
        logger.error("account_delete_table_failed", table="api_usage", error=str(exc))
        failed.append("api_usage")

    for model in USER_OWNED_TABLES:
        table = model.__tablename__
        try:
            async with session.begin_nested():
                await session.execute(delete(model).where(model.user_id == user_id))
        except SQLAlchemyError as exc:
            logger.error("account_delete_table_failed", table=table, error=str(exc))
            failed.append(table)

    try:
        await session.commit()
    except SQLAlchemyError as exc:
        await session.rollback()
        raise PersistenceError("Failed to delete user data", details=str(exc)) from exc

    return failed


async def delete_account(
    session: AsyncSession, user_id: str, auth_admin: AuthAdminClient
) -> None:
    logger.info("account_deletion_started", user_id=user_id)

    failed = await delete_user_data(session, user_id)
    if failed:
        logger.warning("account_deletion_partial", user_id=user_id, failed_tables=failed)

    try:
        await auth_admin.delete_user(user_id)
    except UpstreamServiceError as exc:
        raise PersistenceError("Failed to delete user account", details=str(exc)) from exc

    logger.info("account_deletion_completed", user_id=user_id)
