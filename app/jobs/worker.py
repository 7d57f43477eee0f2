"""
Weekly aggregation worker.

    weekly-aggregation-worker [WEEK_START WEEK_END]

Dates are ISO formatted (2024-03-04). Without them the configured week, or
the seven days ending today, is aggregated. Scheduling is left to the
platform that starts the worker.
"""

import asyncio
import sys
from datetime import date

from app.config import settings
from app.features.weekly_aggregation.domain.models import BatchResult
from app.features.weekly_aggregation.jobs.weekly_aggregation_job import run_weekly_aggregation
from app.infrastructure.observability.logging import get_logger, setup_logging

logger = get_logger(__name__)

USAGE = "usage: weekly-aggregation-worker [WEEK_START WEEK_END]"


def parse_week_args(args: list[str]) -> tuple[date | None, date | None]:
    if not args:
        return None, None
    if len(args) != 2:
        raise ValueError(USAGE)
    return date.fromisoformat(args[0]), date.fromisoformat(args[1])


async def run_worker(week_start: date | None = None, week_end: date | None = None) -> BatchResult:
    logger.info("Starting weekly aggregation worker", week_start=week_start, week_end=week_end)
    result = await run_weekly_aggregation(week_start, week_end)
    logger.info(
        "Weekly aggregation worker finished",
        succeeded=len(result.succeeded),
        failed=len(result.failed),
        cancelled=len(result.cancelled),
    )
    return result


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint."""
    setup_logging(log_level=settings.LOG_LEVEL)
    week_start, week_end = parse_week_args(sys.argv[1:] if argv is None else argv)
    asyncio.run(run_worker(week_start, week_end))


if __name__ == "__main__":
    main()
