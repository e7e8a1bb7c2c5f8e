"""Billing and subscription usage endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.auth import CurrentUser, get_current_user
from src.db.database import get_session
from src.domains.billing.plans import PLAN_FEATURES
from src.domains.billing.usage import (
    SubscriptionUsageOut,
    UsageSummary,
    get_billing_history,
    get_billing_overview,
    get_current_subscription_usage,
    get_usage_summary,
)

router = APIRouter(prefix="/api/v1/billing", tags=["billing"])


@router.get("/plans")
async def list_plans() -> dict:
    return {"items": [plan.to_dict(plan_id) for plan_id, plan in PLAN_FEATURES.items()]}


@router.get("/usage", response_model=SubscriptionUsageOut)
async def current_usage(
    user: CurrentUser = Depends(get_current_user),  # noqa: B008
    session: AsyncSession = Depends(get_session),  # noqa: B008
) -> SubscriptionUsageOut:
    usage = await get_current_subscription_usage(session, user.id)
    return SubscriptionUsageOut.model_validate(usage)


@router.get("/history")
async def billing_history(
    user: CurrentUser = Depends(get_current_user),  # noqa: B008
    session: AsyncSession = Depends(get_session),  # noqa: B008
) -> dict:
    history = await get_billing_history(session, user.id)
    items = [SubscriptionUsageOut.model_validate(u).model_dump(mode="json") for u in history]
    return {"items": items, "total": len(items)}


@router.get("/summary", response_model=UsageSummary)
async def usage_summary(
    user: CurrentUser = Depends(get_current_user),  # noqa: B008
    session: AsyncSession = Depends(get_session),  # noqa: B008
) -> UsageSummary:
    """Usage gauge for the running month."""
    return await get_usage_summary(session, user.id)


@router.get("/overview")
async def billing_overview(
    user: CurrentUser = Depends(get_current_user),  # noqa: B008
    session: AsyncSession = Depends(get_session),  # noqa: B008
) -> dict:
    return await get_billing_overview(session, user.id)
