"""
Weekly aggregation feature package.

This vertical slice keeps every layer of the weekly certification
aggregation co-located (domain models, pure pipeline transforms, the
record repository, services and jobs) so the flow from raw certifications
to report-ready aggregates can be read in one place.
"""

# Re-export the primary building blocks for easy access.
from .domain import BatchResult, UserWeekAggregate, WeeklyStats  # noqa: F401
from .jobs.weekly_aggregation_job import run_weekly_aggregation  # noqa: F401
from .repository.record_fetcher import PostgresRecordFetcher, RecordFetcher  # noqa: F401
from .services.batch_orchestrator import (  # noqa: F401
    BatchOptions,
    BatchOrchestrator,
    CancellationToken,
)
from .services.user_aggregation_service import UserAggregationService  # noqa: F401
