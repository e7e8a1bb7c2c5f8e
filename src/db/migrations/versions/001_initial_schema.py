"""Create dashboard tables and the geographic risk aggregate.

Revision ID: 001
Revises:
Create Date: 2026-10-19
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _uuid_pk() -> sa.Column:
    return sa.Column(
        "id",
        postgresql.UUID(as_uuid=False),
        primary_key=True,
        server_default=sa.text("gen_random_uuid()"),
    )


def _created_at() -> sa.Column:
    return sa.Column(
        "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
    )


def upgrade() -> None:
    op.create_table(
        "developer_profiles",
        _uuid_pk(),
        sa.Column("user_id", postgresql.UUID(as_uuid=False), nullable=False, unique=True),
        sa.Column("partner_id", sa.String(), nullable=True, unique=True),
        sa.Column("company_name", sa.String(), nullable=True),
        sa.Column("api_usage_plan", sa.String(), nullable=False, server_default="free"),
        sa.Column("monthly_request_limit", sa.Integer(), nullable=False, server_default="1000"),
        _created_at(),
    )
    op.create_index(
        op.f("ix_developer_profiles_user_id"), "developer_profiles", ["user_id"]
    )

    op.create_table(
        "api_keys",
        _uuid_pk(),
        sa.Column("user_id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("name", sa.String(), nullable=True),
        sa.Column("key_hash", sa.String(), nullable=False, unique=True),
        sa.Column("partner_id", sa.String(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        _created_at(),
    )
    op.create_index(op.f("ix_api_keys_user_id"), "api_keys", ["user_id"])
    op.create_index(op.f("ix_api_keys_key_hash"), "api_keys", ["key_hash"])
    op.create_index(op.f("ix_api_keys_partner_id"), "api_keys", ["partner_id"])

    op.create_table(
        "api_usage",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column(
            "api_key_id",
            postgresql.UUID(as_uuid=False),
            sa.ForeignKey("api_keys.id"),
            nullable=False,
        ),
        sa.Column("endpoint", sa.String(), nullable=True),
        sa.Column("status_code", sa.Integer(), nullable=True),
        _created_at(),
    )
    op.create_index(op.f("ix_api_usage_api_key_id"), "api_usage", ["api_key_id"])

    op.create_table(
        "transactions",
        _uuid_pk(),
        sa.Column("user_id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("tx_hash", sa.String(), nullable=True),
        sa.Column("from_address", sa.String(), nullable=False),
        sa.Column("to_address", sa.String(), nullable=False),
        sa.Column("amount", sa.Float(), nullable=True, server_default="0"),
        sa.Column("currency", sa.String(), nullable=True, server_default="ETH"),
        sa.Column("blockchain", sa.String(), nullable=True, server_default="ethereum"),
        sa.Column("status", sa.String(), nullable=False, server_default="pending"),
        sa.Column("risk_score", sa.Float(), nullable=True, server_default="0"),
        sa.Column("risk_level", sa.String(), nullable=True),
        sa.Column("customer_name", sa.String(), nullable=True),
        sa.Column("customer_id", sa.String(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("geo_data", postgresql.JSONB(), nullable=True),
        sa.Column("gas_price", sa.Float(), nullable=True),
        _created_at(),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True
        ),
    )
    op.create_index(op.f("ix_transactions_user_id"), "transactions", ["user_id"])
    op.create_index(op.f("ix_transactions_tx_hash"), "transactions", ["tx_hash"])
    op.create_index(op.f("ix_transactions_status"), "transactions", ["status"])
    op.create_index(op.f("ix_transactions_created_at"), "transactions", ["created_at"])

    op.create_table(
        "relay_logs",
        _uuid_pk(),
        sa.Column("partner_id", sa.String(), nullable=True),
        sa.Column("from_address", sa.String(), nullable=True),
        sa.Column("to_address", sa.String(), nullable=True),
        sa.Column("decision", sa.String(), nullable=True),
        sa.Column("risk_score", sa.Float(), nullable=True),
        sa.Column("ip_address", sa.String(), nullable=True),
        _created_at(),
    )
    op.create_index(op.f("ix_relay_logs_partner_id"), "relay_logs", ["partner_id"])
    op.create_index(op.f("ix_relay_logs_created_at"), "relay_logs", ["created_at"])

    op.create_table(
        "notifications",
        _uuid_pk(),
        sa.Column("user_id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("read", sa.Boolean(), nullable=False, server_default=sa.false()),
        _created_at(),
    )
    op.create_index(op.f("ix_notifications_user_id"), "notifications", ["user_id"])

    op.create_table(
        "notification_settings",
        _uuid_pk(),
        sa.Column("user_id", postgresql.UUID(as_uuid=False), nullable=False, unique=True),
        sa.Column(
            "alert_types", postgresql.JSONB(), nullable=False, server_default=sa.text("'[]'")
        ),
        sa.Column("email_notifications", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("push_notifications", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("webhook_url", sa.String(), nullable=True),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
    )
    op.create_index(
        op.f("ix_notification_settings_user_id"), "notification_settings", ["user_id"]
    )

    op.create_table(
        "user_settings",
        _uuid_pk(),
        sa.Column("user_id", postgresql.UUID(as_uuid=False), nullable=False, unique=True),
        sa.Column(
            "notification_preferences",
            postgresql.JSONB(),
            nullable=False,
            server_default=sa.text("'{}'"),
        ),
        sa.Column(
            "security_settings", postgresql.JSONB(), nullable=False, server_default=sa.text("'{}'")
        ),
        sa.Column(
            "display_preferences",
            postgresql.JSONB(),
            nullable=False,
            server_default=sa.text("'{}'"),
        ),
        sa.Column(
            "api_preferences", postgresql.JSONB(), nullable=False, server_default=sa.text("'{}'")
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
    )
    op.create_index(op.f("ix_user_settings_user_id"), "user_settings", ["user_id"])

    op.create_table(
        "subscription_usage",
        _uuid_pk(),
        sa.Column("user_id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("plan_type", sa.String(), nullable=False, server_default="free"),
        sa.Column("api_calls_used", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("api_calls_limit", sa.Integer(), nullable=False, server_default="1000"),
        sa.Column("transactions_processed", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("billing_period_start", sa.Date(), nullable=False),
        sa.Column("billing_period_end", sa.Date(), nullable=False),
        sa.Column("overage_charges", sa.Float(), nullable=False, server_default="0"),
        _created_at(),
        sa.UniqueConstraint(
            "user_id", "billing_period_start", name="uq_subscription_usage_period"
        ),
    )
    op.create_index(op.f("ix_subscription_usage_user_id"), "subscription_usage", ["user_id"])

    op.create_table(
        "geographic_risk_data",
        _uuid_pk(),
        sa.Column("country", sa.String(), nullable=False),
        sa.Column("region", sa.String(), nullable=True),
        sa.Column("city", sa.String(), nullable=True),
        sa.Column("latitude", sa.Float(), nullable=True),
        sa.Column("longitude", sa.Float(), nullable=True),
        sa.Column("risk_score_avg", sa.Float(), nullable=False, server_default="0"),
        sa.Column("total_transactions", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("blocked_transactions", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("allowed_transactions", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "last_updated", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
        sa.UniqueConstraint(
            "country",
            "region",
            "city",
            name="uq_geographic_risk_location",
            postgresql_nulls_not_distinct=True,
        ),
    )
    op.create_index(
        op.f("ix_geographic_risk_data_country"), "geographic_risk_data", ["country"]
    )


def downgrade() -> None:
    op.drop_table("geographic_risk_data")
    op.drop_table("subscription_usage")
    op.drop_table("user_settings")
    op.drop_table("notification_settings")
    op.drop_table("notifications")
    op.drop_table("relay_logs")
    op.drop_table("transactions")
    op.drop_table("api_usage")
    op.drop_table("api_keys")
    op.drop_table("developer_profiles")
