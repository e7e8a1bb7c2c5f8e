"""Transaction listing, live feed and CSV export."""

from datetime import UTC, datetime

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.auth import CurrentUser, get_current_user
from src.config import settings
from src.db.database import get_session
from src.domains.transactions.export import export_filename, transactions_to_csv
from src.domains.transactions.models import FeedTransaction, TransactionFilter, TransactionOut
from src.domains.transactions.queries import (
    list_transactions,
    recent_transactions,
    transaction_stats,
    transactions_for_export,
)

logger = structlog.get_logger()
router = APIRouter(prefix="/api/v1/transactions", tags=["transactions"])


@router.get("")
async def get_transactions(
    filters: TransactionFilter = Depends(),  # noqa: B008
    user: CurrentUser = Depends(get_current_user),  # noqa: B008
    session: AsyncSession = Depends(get_session),  # noqa: B008
) -> dict:
    """Caller's transactions, newest first, with stats over the whole filtered set."""
    transactions = await list_transactions(session, user.id, filters)
    stats = await transaction_stats(session, user.id, filters)
    return {
        "items": [
            TransactionOut.model_validate(tx).model_dump(mode="json") for tx in transactions
        ],
        "stats": stats.model_dump(),
        "limit": filters.limit,
        "offset": filters.offset,
    }


@router.get("/recent", response_model=list[FeedTransaction])
async def get_recent_transactions(
    user: CurrentUser = Depends(get_current_user),  # noqa: B008
    session: AsyncSession = Depends(get_session),  # noqa: B008
) -> list[FeedTransaction]:
    return await recent_transactions(session, user.id, settings.recent_transactions_limit)


@router.get("/export")
async def export_transactions(
    filters: TransactionFilter = Depends(),  # noqa: B008
    user: CurrentUser = Depends(get_current_user),  # noqa: B008
    session: AsyncSession = Depends(get_session),  # noqa: B008
) -> Response:
    transactions = await transactions_for_export(session, user.id, filters)
    filename = export_filename(datetime.now(UTC))
    logger.info("transactions_exported", user_id=user.id, rows=len(transactions))
    return Response(
        content=transactions_to_csv(transactions),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
