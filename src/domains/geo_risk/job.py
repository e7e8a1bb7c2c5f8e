"""Geographic risk aggregation job and heatmap query."""

from datetime import UTC, datetime, timedelta

import structlog
from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from src.config import settings
from src.db.models import GeographicRiskData, RelayLog, Transaction
from src.domains.geo_risk.aggregation import aggregate_locations, marker_radius, risk_band
from src.domains.geo_risk.models import AggregationResult, GeographicRiskPoint

logger = structlog.get_logger()

_UPDATABLE_COLUMNS = (
    "latitude",
    "longitude",
    "risk_score_avg",
    "total_transactions",
    "blocked_transactions",
    "allowed_transactions",
    "last_updated",
)

# asyncpg caps a statement at 32767 bind parameters; each row binds ten
UPSERT_BATCH_SIZE = 1000


async def _fetch_window(
    session: AsyncSession, since: datetime
) -> tuple[list[RelayLog], list[Transaction]]:
    relay_result = await session.execute(select(RelayLog).where(RelayLog.created_at >= since))
    relay_logs = list(relay_result.scalars().all())

    tx_result = await session.execute(
        select(Transaction).where(
            Transaction.geo_data.is_not(None),
            Transaction.created_at >= since,
        )
    )
    transactions = list(tx_result.scalars().all())
    return relay_logs, transactions


def _upsert(rows: list[dict]):
    stmt = pg_insert(GeographicRiskData).values(rows)
    return stmt.on_conflict_do_update(
        constraint="uq_geographic_risk_location",
        set_={col: stmt.excluded[col] for col in _UPDATABLE_COLUMNS},
    )


async def run_geographic_risk_aggregation(
    session: AsyncSession,
    window_days: int | None = None,
    now: datetime | None = None,
) -> AggregationResult:
    """Rebuild geographic_risk_data from the last ``window_days`` of activity.

    Rows not refreshed by this run are deleted and the rest upserted on
    (country, region, city) in batches, all in one transaction. An empty
    window leaves the table untouched.
    """
    window_days = window_days or settings.geo_aggregation_window_days
    now = now or datetime.now(UTC)
    since = now - timedelta(days=window_days)

    logger.info("geo_aggregation_started", window_days=window_days, since=since.isoformat())

    relay_logs, transactions = await _fetch_window(session, since)
    logger.info(
        "geo_aggregation_fetched",
        relay_logs=len(relay_logs),
        transactions=len(transactions),
    )

    buckets = aggregate_locations(relay_logs, transactions)
    rows = [b.to_row(last_updated=now) for b in buckets]
    logger.info("geo_aggregation_grouped", locations=len(rows))

    if rows:
        try:
            await session.execute(
                delete(GeographicRiskData).where(GeographicRiskData.last_updated < now)
            )
            for start in range(0, len(rows), UPSERT_BATCH_SIZE):
                await session.execute(_upsert(rows[start : start + UPSERT_BATCH_SIZE]))
            await session.commit()
        except Exception:
            await session.rollback()
            logger.exception("geo_aggregation_write_failed", locations=len(rows))
            raise
        logger.info("geo_aggregation_written", locations=len(rows))

    total = sum(r["total_transactions"] for r in rows)
    return AggregationResult(
        message=f"Processed {len(rows)} locations",
        locationsProcessed=len(rows),
        totalTransactions=total,
    )


async def list_geographic_risk(session: AsyncSession) -> list[GeographicRiskPoint]:
    """Aggregated locations that can be placed on the map."""
    stmt = select(GeographicRiskData).where(
        GeographicRiskData.latitude.is_not(None),
        GeographicRiskData.longitude.is_not(None),
    )
    result = await session.execute(stmt)
    return [
        GeographicRiskPoint(
            id=row.id,
            country=row.country,
            region=row.region,
            city=row.city,
            latitude=row.latitude,
            longitude=row.longitude,
            risk_score_avg=row.risk_score_avg,
            total_transactions=row.total_transactions,
            blocked_transactions=row.blocked_transactions,
            allowed_transactions=row.allowed_transactions,
            last_updated=row.last_updated,
            risk_band=risk_band(row.risk_score_avg),
            marker_radius=marker_radius(row.total_transactions),
        )
        for row in result.scalars().all()
    ]
