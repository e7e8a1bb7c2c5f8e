"""Run the geographic risk aggregation once, outside the API.

Meant for a scheduler (cron, a hosted cron trigger) that calls it on an
interval.
"""

import argparse
import asyncio

from src.config import settings
from src.db.database import async_session_factory, engine
from src.domains.geo_risk.job import run_geographic_risk_aggregation
from src.domains.geo_risk.models import AggregationResult
from src.shared.logging import setup_logging


async def run(window_days: int | None) -> AggregationResult:
    try:
        async with async_session_factory() as session:
            return await run_geographic_risk_aggregation(session, window_days=window_days)
    finally:
        await engine.dispose()


def main():
    parser = argparse.ArgumentParser(
        description="Rebuild the geographic risk aggregate from recent activity",
        prog="python -m src.domains.geo_risk.cli",
    )
    parser.add_argument(
        "--window-days",
        type=int,
        default=None,
        help=f"Days of history to aggregate (default {settings.geo_aggregation_window_days})",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=settings.log_level,
        help="Log level for the run",
    )

    args = parser.parse_args()
    if args.window_days is not None and args.window_days < 1:
        parser.error("--window-days must be at least 1")

    setup_logging(args.log_level)
    result = asyncio.run(run(args.window_days))
    print(result.model_dump_json())


if __name__ == "__main__":
    main()
