"""
Single-user weekly aggregation.

Composes the pipeline for one user: validate the window, fetch the week's
certifications, sanitize and localize each record, compute the weekly
stats, check the minimum-data requirement and resolve the nickname.
"""

from __future__ import annotations

from datetime import date, datetime

from app.infrastructure.observability.logging import get_logger

from ..domain.errors import AggregationError, FetchError, ValidationError
from ..domain.models import ProcessedRecord, RawRecord, UserWeekAggregate
from ..pipeline.sanitizer import ContentSanitizer
from ..pipeline.stats import StatsAggregator, day_of_week
from ..pipeline.window import WeekValidator, WeekWindow, to_local_datetime
from ..repository.record_fetcher import RecordFetcher

logger = get_logger(__name__)

DEFAULT_MINIMUM_RECORD_COUNT = 3
DEFAULT_MINIMUM_DISTINCT_DAYS = 3


class UserAggregationService:
    def __init__(
        self,
        fetcher: RecordFetcher,
        *,
        sanitizer: ContentSanitizer | None = None,
        stats_aggregator: StatsAggregator | None = None,
        validator: WeekValidator | None = None,
        minimum_record_count: int = DEFAULT_MINIMUM_RECORD_COUNT,
        minimum_distinct_days: int = DEFAULT_MINIMUM_DISTINCT_DAYS,
    ):
        self.fetcher = fetcher
        self.sanitizer = sanitizer or ContentSanitizer()
        self.stats_aggregator = stats_aggregator or StatsAggregator()
        self.validator = validator or WeekValidator()
        self.minimum_record_count = minimum_record_count
        self.minimum_distinct_days = minimum_distinct_days

    async def aggregate_user(
        self,
        user_id: str,
        week_start: date | datetime,
        week_end: date | datetime,
    ) -> UserWeekAggregate:
        """
        Aggregate one user's certifications for a week.

        Raises:
            AggregationError: wrapping the ValidationError or FetchError that
                stopped the run. No partial aggregate is produced.
        """
        logger.info(
            "Starting user data aggregation",
            user_id=user_id,
            week_start=str(week_start),
            week_end=str(week_end),
        )

        try:
            window = self.validator.validate(week_start, week_end)
            raw_records = await self.fetcher.fetch_by_user_and_window(
                user_id, window.starts_at, window.ends_at
            )
        except (ValidationError, FetchError) as e:
            logger.error(
                "Failed to aggregate user week data",
                user_id=user_id,
                week_start=str(week_start),
                week_end=str(week_end),
                error=e.message,
                error_type=type(e).__name__,
            )
            raise AggregationError(user_id, e) from e

        logger.debug("Fetched certifications for user", user_id=user_id, count=len(raw_records))

        processed = [self._process(record, window) for record in raw_records]
        stats = self.stats_aggregator.aggregate(processed, window.start_date)
        has_minimum_data = self.has_minimum_data(processed)
        nickname = await self._resolve_nickname(user_id, raw_records)

        logger.info(
            "User data aggregation completed",
            user_id=user_id,
            total_count=stats.total_count,
            has_minimum_data=has_minimum_data,
            consistency_score=stats.consistency_score,
        )

        return UserWeekAggregate(
            user_id=user_id,
            nickname=nickname,
            week_start=window.start_date,
            week_end=window.end_date,
            processed_records=processed,
            stats=stats,
            has_minimum_data=has_minimum_data,
        )

    def has_minimum_data(self, records: list[ProcessedRecord]) -> bool:
        if len(records) < self.minimum_record_count:
            return False
        distinct_days = {record.local_date for record in records}
        return len(distinct_days) >= self.minimum_distinct_days

    def _process(self, record: RawRecord, window: WeekWindow) -> ProcessedRecord:
        created_at = to_local_datetime(record.created_at, window.timezone)
        return ProcessedRecord(
            id=record.id,
            kind=record.kind,
            content=record.content,
            sanitized_content=self.sanitizer.sanitize(record.content),
            created_at=created_at,
            day_of_week=day_of_week(created_at.date()),
        )

    async def _resolve_nickname(self, user_id: str, records: list[RawRecord]) -> str:
        if records and (records[0].nickname or "").strip():
            return records[0].nickname
        return await self.fetcher.fetch_nickname(user_id)
