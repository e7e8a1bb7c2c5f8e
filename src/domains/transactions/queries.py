"""Caller-scoped transaction queries."""

from datetime import UTC, datetime, timedelta

from sqlalchemy import Select, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.db.models import Transaction
from src.domains.transactions.models import (
    DateRange,
    FeedTransaction,
    RiskFilter,
    RiskLevel,
    TransactionFilter,
    TransactionStats,
)

# (lower inclusive, upper exclusive); None leaves that side open
RISK_FILTER_BOUNDS: dict[RiskFilter, tuple[float | None, float | None]] = {
    RiskFilter.HIGH: (70, None),
    RiskFilter.MEDIUM: (40, 70),
    RiskFilter.LOW: (None, 40),
}

RISK_LEVEL_BOUNDS: dict[RiskLevel, tuple[float | None, float | None]] = {
    RiskLevel.CRITICAL: (90, None),
    RiskLevel.HIGH: (70, 90),
    RiskLevel.MEDIUM: (40, 70),
    RiskLevel.LOW: (None, 40),
}

DATE_RANGE_DAYS: dict[DateRange, int] = {
    DateRange.LAST_7_DAYS: 7,
    DateRange.LAST_30_DAYS: 30,
    DateRange.LAST_90_DAYS: 90,
}

SEARCH_COLUMNS = (
    Transaction.customer_name,
    Transaction.customer_id,
    Transaction.description,
    Transaction.from_address,
    Transaction.to_address,
)

HIGH_RISK_SCORE = 70

LIKE_ESCAPE = "/"


def escape_like(text: str) -> str:
    """Make ``text`` match literally inside a LIKE pattern."""
    for char in (LIKE_ESCAPE, "%", "_"):
        text = text.replace(char, LIKE_ESCAPE + char)
    return text


def _apply_risk_bounds(stmt: Select, bounds: tuple[float | None, float | None]) -> Select:
    lower, upper = bounds
    if lower is not None:
        stmt = stmt.where(Transaction.risk_score >= lower)
    if upper is not None:
        stmt = stmt.where(or_(Transaction.risk_score < upper, Transaction.risk_score.is_(None)))
    return stmt


def build_transaction_query(
    user_id: str, filters: TransactionFilter, now: datetime | None = None
) -> Select:
    stmt = select(Transaction).where(Transaction.user_id == user_id)

    if filters.search:
        pattern = f"%{escape_like(filters.search)}%"
        stmt = stmt.where(
            or_(*(col.ilike(pattern, escape=LIKE_ESCAPE) for col in SEARCH_COLUMNS))
        )
    if filters.status:
        stmt = stmt.where(Transaction.status == filters.status)
    if filters.blockchain:
        stmt = stmt.where(Transaction.blockchain == filters.blockchain)
    if filters.risk:
        stmt = _apply_risk_bounds(stmt, RISK_FILTER_BOUNDS[filters.risk])
    if filters.risk_level:
        stmt = _apply_risk_bounds(stmt, RISK_LEVEL_BOUNDS[filters.risk_level])

    if filters.date_range == DateRange.CUSTOM_RANGE:
        if filters.start_date:
            stmt = stmt.where(Transaction.created_at >= filters.start_date)
        if filters.end_date:
            stmt = stmt.where(Transaction.created_at <= filters.end_date)
    elif filters.date_range:
        now = now or datetime.now(UTC)
        since = now - timedelta(days=DATE_RANGE_DAYS[filters.date_range])
        stmt = stmt.where(Transaction.created_at >= since)

    return stmt.order_by(Transaction.created_at.desc())


async def list_transactions(
    session: AsyncSession, user_id: str, filters: TransactionFilter
) -> list[Transaction]:
    stmt = build_transaction_query(user_id, filters).limit(filters.limit).offset(filters.offset)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def transaction_stats(
    session: AsyncSession, user_id: str, filters: TransactionFilter
) -> TransactionStats:
    """Totals over every transaction matching ``filters``, not just one page."""
    stmt = (
        build_transaction_query(user_id, filters)
        .with_only_columns(
            func.count(Transaction.id),
            func.coalesce(func.sum(Transaction.amount), 0),
            func.count(Transaction.id).filter(Transaction.status == "flagged"),
            func.count(Transaction.id).filter(
                func.coalesce(Transaction.risk_score, 0) >= HIGH_RISK_SCORE
            ),
        )
        .order_by(None)
    )
    result = await session.execute(stmt)
    total, amount, flagged, high_risk = result.one()
    return TransactionStats(
        total_transactions=total or 0,
        total_amount=round(float(amount or 0), 8),
        flagged=flagged or 0,
        high_risk=high_risk or 0,
    )


async def transactions_for_export(
    session: AsyncSession, user_id: str, filters: TransactionFilter
) -> list[Transaction]:
    """Every transaction matching ``filters``; pagination is ignored."""
    result = await session.execute(build_transaction_query(user_id, filters))
    return list(result.scalars().all())


def risk_label(risk_score: float) -> str:
    if risk_score >= 80:
        return "High Risk"
    if risk_score >= 60:
        return "Medium Risk"
    return "Low Risk"


async def recent_transactions(
    session: AsyncSession, user_id: str, limit: int
) -> list[FeedTransaction]:
    stmt = (
        select(Transaction)
        .where(Transaction.user_id == user_id)
        .order_by(Transaction.created_at.desc())
        .limit(limit)
    )
    result = await session.execute(stmt)
    feed = []
    for tx in result.scalars().all():
        item = FeedTransaction.model_validate(
            {**_as_dict(tx), "risk_label": risk_label(tx.risk_score or 0)}
        )
        feed.append(item)
    return feed


def _as_dict(tx: Transaction) -> dict:
    return {col.key: getattr(tx, col.key) for col in Transaction.__table__.columns}
