"""Subscription usage for the current billing period."""

import calendar
from datetime import UTC, date, datetime, time

import structlog
from pydantic import BaseModel, ConfigDict
from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from src.config import settings
from src.db.models import ApiKey, DeveloperProfile, RelayLog, SubscriptionUsage
from src.domains.billing.plans import DEFAULT_PLAN, PLAN_FEATURES, UNLIMITED, get_plan

logger = structlog.get_logger()


class SubscriptionUsageOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str | None = None
    user_id: str | None = None
    plan_type: str
    api_calls_used: int
    api_calls_limit: int
    transactions_processed: int = 0
    billing_period_start: date
    billing_period_end: date
    overage_charges: float = 0.0


class UsageSummary(BaseModel):
    api_calls_used: int
    api_calls_limit: int
    transactions_processed: int
    subscription_plan: str
    usage_percentage: float


def billing_period(today: date) -> tuple[date, date]:
    """First and last day of the calendar month containing ``today``."""
    last_day = calendar.monthrange(today.year, today.month)[1]
    return today.replace(day=1), today.replace(day=last_day)


def usage_percentage(used: int, limit: int) -> float:
    if limit == UNLIMITED:
        return 0.0
    limit = limit or settings.default_api_calls_limit
    return (used / limit) * 100


async def get_current_subscription_usage(
    session: AsyncSession, user_id: str, today: date | None = None
) -> SubscriptionUsage:
    """Current month's usage row, created on the free plan if missing."""
    start, end = billing_period(today or datetime.now(UTC).date())

    stmt = (
        select(SubscriptionUsage)
        .where(
            SubscriptionUsage.user_id == user_id,
            SubscriptionUsage.billing_period_start >= start,
            SubscriptionUsage.billing_period_end <= end,
        )
        .order_by(SubscriptionUsage.billing_period_start.desc())
    )
    result = await session.execute(stmt)
    usage = result.scalars().first()
    if usage:
        return usage

    # a concurrent first request may have created the row already
    insert_stmt = (
        pg_insert(SubscriptionUsage)
        .values(
            user_id=user_id,
            plan_type=DEFAULT_PLAN,
            api_calls_used=0,
            api_calls_limit=get_plan(DEFAULT_PLAN).api_calls,
            transactions_processed=0,
            billing_period_start=start,
            billing_period_end=end,
            overage_charges=0.0,
        )
        .on_conflict_do_nothing(constraint="uq_subscription_usage_period")
    )
    await session.execute(insert_stmt)
    await session.commit()
    logger.info("subscription_usage_created", user_id=user_id, period_start=start.isoformat())

    result = await session.execute(stmt)
    return result.scalars().first()


async def get_billing_history(session: AsyncSession, user_id: str) -> list[SubscriptionUsage]:
    stmt = (
        select(SubscriptionUsage)
        .where(SubscriptionUsage.user_id == user_id)
        .order_by(SubscriptionUsage.billing_period_start.desc())
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def _relay_calls_since(session: AsyncSession, user_id: str, since: datetime) -> int:
    keys = await session.execute(
        select(ApiKey.partner_id).where(ApiKey.user_id == user_id, ApiKey.partner_id.is_not(None))
    )
    partner_ids = [p for p in keys.scalars().all() if p]
    if not partner_ids:
        return 0

    count = await session.execute(
        select(func.count(RelayLog.id)).where(
            RelayLog.created_at >= since,
            RelayLog.partner_id.in_(partner_ids),
        )
    )
    return count.scalar() or 0


async def get_usage_summary(
    session: AsyncSession, user_id: str, today: date | None = None
) -> UsageSummary:
    """Usage for the running month as shown on the dashboard.

    Without a stored usage row, calls are counted from relay logs of the
    user's partner ids and the limit comes from the developer profile.
    """
    start, _ = billing_period(today or datetime.now(UTC).date())

    usage_result = await session.execute(
        select(SubscriptionUsage).where(
            SubscriptionUsage.user_id == user_id,
            SubscriptionUsage.billing_period_start == start,
        )
    )
    usage = usage_result.scalars().first()

    profile_result = await session.execute(
        select(DeveloperProfile).where(DeveloperProfile.user_id == user_id)
    )
    profile = profile_result.scalars().first()

    if usage:
        used = usage.api_calls_used or 0
        limit = usage.api_calls_limit or settings.default_api_calls_limit
        processed = usage.transactions_processed or 0
    else:
        since = datetime.combine(start, time.min, tzinfo=UTC)
        used = await _relay_calls_since(session, user_id, since)
        limit = (profile.monthly_request_limit if profile else None) or (
            settings.default_api_calls_limit
        )
        processed = used

    plan = (profile.api_usage_plan if profile else None) or DEFAULT_PLAN
    return UsageSummary(
        api_calls_used=used,
        api_calls_limit=limit,
        transactions_processed=processed,
        subscription_plan=plan,
        usage_percentage=usage_percentage(used, limit),
    )


async def get_billing_overview(session: AsyncSession, user_id: str) -> dict:
    usage = await get_current_subscription_usage(session, user_id)
    plan_id = usage.plan_type if usage.plan_type in PLAN_FEATURES else DEFAULT_PLAN
    return {
        "plan": get_plan(plan_id).to_dict(plan_id),
        "usage": {
            "api_calls": usage.api_calls_used,
            "api_limit": usage.api_calls_limit,
            "usage_percentage": usage_percentage(usage.api_calls_used, usage.api_calls_limit),
        },
        "overage_charges": usage.overage_charges,
        "billing_period": {
            "start": usage.billing_period_start.isoformat(),
            "end": usage.billing_period_end.isoformat(),
        },
        "status": "active",
    }
