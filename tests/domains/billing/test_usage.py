"""Tests for plans, billing periods and usage tracking."""

from datetime import date

import pytest
from sqlalchemy.dialects import postgresql

from src.db.models import DeveloperProfile, SubscriptionUsage
from src.domains.billing.plans import PLAN_FEATURES, get_plan
from src.domains.billing.usage import (
    billing_period,
    get_billing_overview,
    get_current_subscription_usage,
    get_usage_summary,
    usage_percentage,
)
from tests.conftest import USER_ID, mock_result

TODAY = date(2024, 2, 10)


def _usage(**overrides) -> SubscriptionUsage:
    values = {
        "id": "550e8400-e29b-41d4-a716-446655440000",
        "user_id": USER_ID,
        "plan_type": "starter",
        "api_calls_used": 2500,
        "api_calls_limit": 10000,
        "transactions_processed": 2400,
        "billing_period_start": date(2024, 2, 1),
        "billing_period_end": date(2024, 2, 29),
        "overage_charges": 0.0,
    }
    values.update(overrides)
    return SubscriptionUsage(**values)


class TestPlans:
    def test_catalogue(self):
        assert set(PLAN_FEATURES) == {"free", "starter", "pro", "enterprise"}
        assert PLAN_FEATURES["pro"].name == "Professional"
        assert PLAN_FEATURES["starter"].price == 29

    def test_enterprise_is_unlimited(self):
        plan = PLAN_FEATURES["enterprise"]
        assert plan.is_unlimited
        assert plan.to_dict("enterprise")["api_calls"] == "Unlimited"

    def test_to_dict(self):
        data = PLAN_FEATURES["free"].to_dict("free")
        assert data["id"] == "free"
        assert data["api_calls"] == 1000
        assert "Email support" in data["features"]

    def test_unknown_plan_falls_back_to_free(self):
        assert get_plan("platinum") is PLAN_FEATURES["free"]
        assert get_plan(None) is PLAN_FEATURES["free"]


class TestBillingPeriod:
    def test_leap_february(self):
        assert billing_period(TODAY) == (date(2024, 2, 1), date(2024, 2, 29))

    def test_december(self):
        assert billing_period(date(2023, 12, 31)) == (date(2023, 12, 1), date(2023, 12, 31))


class TestUsagePercentage:
    def test_regular(self):
        assert usage_percentage(250, 1000) == 25.0

    def test_unlimited(self):
        assert usage_percentage(10**6, -1) == 0.0

    def test_zero_limit_uses_default(self):
        assert usage_percentage(10, 0) == 1.0


class TestCurrentSubscriptionUsage:
    @pytest.mark.asyncio
    async def test_returns_existing_row(self, mock_db_session):
        existing = _usage()
        mock_db_session.execute.return_value = mock_result(first=existing)

        usage = await get_current_subscription_usage(mock_db_session, USER_ID, today=TODAY)

        assert usage is existing
        mock_db_session.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_creates_free_row_when_missing(self, mock_db_session):
        created = _usage(plan_type="free", api_calls_used=0, api_calls_limit=1000)
        mock_db_session.execute.side_effect = [
            mock_result(first=None),
            mock_result(),
            mock_result(first=created),
        ]

        usage = await get_current_subscription_usage(mock_db_session, USER_ID, today=TODAY)

        assert usage is created
        mock_db_session.add.assert_not_called()
        mock_db_session.commit.assert_awaited_once()

        insert_stmt = mock_db_session.execute.await_args_list[1].args[0]
        compiled = insert_stmt.compile(dialect=postgresql.dialect())
        sql = str(compiled)
        assert sql.startswith("INSERT INTO subscription_usage")
        assert "ON CONFLICT ON CONSTRAINT uq_subscription_usage_period DO NOTHING" in sql
        assert compiled.params["plan_type"] == "free"
        assert compiled.params["api_calls_limit"] == 1000
        assert compiled.params["billing_period_start"] == date(2024, 2, 1)
        assert compiled.params["billing_period_end"] == date(2024, 2, 29)

    @pytest.mark.asyncio
    async def test_concurrent_creation_returns_existing_row(self, mock_db_session):
        winner = _usage(plan_type="free")
        mock_db_session.execute.side_effect = [
            mock_result(first=None),
            mock_result(rowcount=0),
            mock_result(first=winner),
        ]

        usage = await get_current_subscription_usage(mock_db_session, USER_ID, today=TODAY)

        assert usage is winner
        assert mock_db_session.execute.await_count == 3


class TestUsageSummary:
    @pytest.mark.asyncio
    async def test_from_stored_usage(self, mock_db_session):
        profile = DeveloperProfile(user_id=USER_ID, api_usage_plan="starter")
        mock_db_session.execute.side_effect = [
            mock_result(first=_usage()),
            mock_result(first=profile),
        ]

        summary = await get_usage_summary(mock_db_session, USER_ID, today=TODAY)

        assert summary.api_calls_used == 2500
        assert summary.api_calls_limit == 10000
        assert summary.usage_percentage == 25.0
        assert summary.subscription_plan == "starter"

    @pytest.mark.asyncio
    async def test_counts_relay_calls_without_usage_row(self, mock_db_session):
        profile = DeveloperProfile(
            user_id=USER_ID, api_usage_plan="pro", monthly_request_limit=5000
        )
        mock_db_session.execute.side_effect = [
            mock_result(first=None),
            mock_result(first=profile),
            mock_result(all_rows=["partner-1", "partner-2"]),
            mock_result(scalar=250),
        ]

        summary = await get_usage_summary(mock_db_session, USER_ID, today=TODAY)

        assert summary.api_calls_used == 250
        assert summary.transactions_processed == 250
        assert summary.api_calls_limit == 5000
        assert summary.usage_percentage == 5.0
        assert summary.subscription_plan == "pro"

    @pytest.mark.asyncio
    async def test_no_profile_no_keys(self, mock_db_session):
        mock_db_session.execute.side_effect = [
            mock_result(first=None),
            mock_result(first=None),
            mock_result(all_rows=[]),
        ]

        summary = await get_usage_summary(mock_db_session, USER_ID, today=TODAY)

        assert summary.api_calls_used == 0
        assert summary.api_calls_limit == 1000
        assert summary.subscription_plan == "free"
        assert mock_db_session.execute.await_count == 3


class TestBillingOverview:
    @pytest.mark.asyncio
    async def test_overview(self, mock_db_session):
        mock_db_session.execute.return_value = mock_result(first=_usage())

        overview = await get_billing_overview(mock_db_session, USER_ID)

        assert overview["plan"]["id"] == "starter"
        assert overview["plan"]["name"] == "Starter"
        assert overview["usage"]["usage_percentage"] == 25.0
        assert overview["billing_period"] == {"start": "2024-02-01", "end": "2024-02-29"}

    @pytest.mark.asyncio
    async def test_unknown_plan_type_shown_as_free(self, mock_db_session):
        mock_db_session.execute.return_value = mock_result(first=_usage(plan_type="legacy"))

        overview = await get_billing_overview(mock_db_session, USER_ID)

        assert overview["plan"]["id"] == "free"
