"""
Weekly aggregation job.

One-shot run over a single report week: opens the certification store,
aggregates every requested (or active) user and reports how many users have
enough data for a weekly report. When to run is decided by the external
scheduler that starts the worker.
"""

from collections.abc import Iterable
from datetime import date

from app.config import settings
from app.db.pool import DatabasePoolManager
from app.infrastructure.observability.logging import get_logger

from ..domain.models import BatchResult
from ..pipeline.window import WeekValidator, current_week_window
from ..repository.record_fetcher import PostgresRecordFetcher
from ..services.batch_orchestrator import BatchOptions, BatchOrchestrator, CancellationToken

logger = get_logger(__name__)


def resolve_week(week_start: date | None = None, week_end: date | None = None) -> tuple[date, date]:
    """Pick the report week: explicit arguments, then settings, then the week ending today."""
    if week_start is not None and week_end is not None:
        return week_start, week_end
    if week_start is not None or week_end is not None:
        raise ValueError("week_start and week_end must be provided together")

    configured = settings.configured_week()
    if configured:
        return configured

    window = current_week_window(timezone=settings.AGGREGATION_TIMEZONE)
    return window.start_date, window.end_date


async def run_weekly_aggregation(
    week_start: date | None = None,
    week_end: date | None = None,
    user_ids: Iterable[str] | None = None,
    *,
    pool: DatabasePoolManager | None = None,
    cancellation: CancellationToken | None = None,
) -> BatchResult:
    week_start, week_end = resolve_week(week_start, week_end)
    # Fail before touching the database
    WeekValidator(settings.AGGREGATION_TIMEZONE).validate(week_start, week_end)

    logger.info(
        "Weekly aggregation job started",
        week_start=week_start.isoformat(),
        week_end=week_end.isoformat(),
        timezone=settings.AGGREGATION_TIMEZONE,
    )

    owns_pool = pool is None
    pool = pool or DatabasePoolManager()
    if owns_pool:
        await pool.initialize()

    try:
        orchestrator = BatchOrchestrator(
            PostgresRecordFetcher(pool), timezone=settings.AGGREGATION_TIMEZONE
        )
        options = BatchOptions.from_settings()

        if user_ids is None:
            result = await orchestrator.aggregate_active_users(
                week_start, week_end, options=options, cancellation=cancellation
            )
        else:
            result = await orchestrator.aggregate_batch(
                user_ids, week_start, week_end, options=options, cancellation=cancellation
            )
    finally:
        if owns_pool:
            await pool.close()

    logger.info(
        "Weekly aggregation job complete",
        week_start=week_start.isoformat(),
        succeeded=len(result.succeeded),
        eligible=len(result.eligible()),
        failed=len(result.failed),
        cancelled=len(result.cancelled),
    )
    return result
