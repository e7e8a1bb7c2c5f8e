"""Geographic risk heatmap data and the aggregation trigger."""

import structlog
from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.auth import CurrentUser, get_current_user
from src.db.database import get_session
from src.domains.geo_risk.job import list_geographic_risk, run_geographic_risk_aggregation
from src.domains.geo_risk.models import (
    AggregationRequest,
    AggregationResult,
    GeographicRiskPoint,
)

logger = structlog.get_logger()
router = APIRouter(prefix="/api/v1", tags=["geographic-risk"])


@router.get("/geographic-risk", response_model=list[GeographicRiskPoint])
async def geographic_risk(
    user: CurrentUser = Depends(get_current_user),  # noqa: B008
    session: AsyncSession = Depends(get_session),  # noqa: B008
) -> list[GeographicRiskPoint]:
    """Aggregated locations with coordinates, ready for map markers."""
    return await list_geographic_risk(session)


@router.post("/jobs/geographic-risk", response_model=AggregationResult)
async def trigger_geographic_risk_aggregation(
    request: AggregationRequest | None = Body(default=None),  # noqa: B008
    user: CurrentUser = Depends(get_current_user),  # noqa: B008
    session: AsyncSession = Depends(get_session),  # noqa: B008
) -> AggregationResult:
    """Run the aggregation now instead of waiting for the scheduled run."""
    window_days = request.window_days if request else None
    logger.info("geo_aggregation_triggered", user_id=user.id, window_days=window_days)
    return await run_geographic_risk_aggregation(session, window_days=window_days)
