"""
Multi-user weekly aggregation.

Runs UserAggregationService over many users in fixed-size groups. Users in
a group are aggregated concurrently, a short pause separates groups to
bound the request rate against the certification store, and every
per-user failure is collected instead of aborting the run.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable, Iterable, Mapping
from datetime import date, datetime
from typing import Any
from zoneinfo import ZoneInfo

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.config import settings
from app.infrastructure.observability.logging import get_logger, log_batch_summary

from ..domain.errors import AggregationError
from ..domain.models import BatchFailure, BatchResult, ErrorKind, UserWeekAggregate
from ..pipeline.categorizer import ExerciseCategorizer
from ..pipeline.sanitizer import TRUNCATION_MARKER, ContentSanitizer
from ..pipeline.stats import StatsAggregator
from ..pipeline.window import WEEK_LENGTH_DAYS, WeekValidator
from ..repository.record_fetcher import RecordFetcher
from .user_aggregation_service import UserAggregationService

logger = get_logger(__name__)

MAX_LOGGED_FAILURES = 5

Sleep = Callable[[float], Awaitable[Any]]


class BatchOptions(BaseModel):
    """Tuning knobs for one batch run. Accepts snake_case or camelCase keys."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    group_size: int = Field(default=10, ge=1)
    inter_group_delay_ms: int = Field(default=100, ge=0)
    minimum_record_count: int = Field(default=3, ge=1)
    minimum_distinct_days: int = Field(default=3, ge=1, le=WEEK_LENGTH_DAYS)
    max_content_length: int = Field(default=500, gt=len(TRUNCATION_MARKER))

    @classmethod
    def from_settings(cls) -> BatchOptions:
        return cls(
            group_size=settings.AGGREGATION_GROUP_SIZE,
            inter_group_delay_ms=settings.AGGREGATION_INTER_GROUP_DELAY_MS,
            minimum_record_count=settings.AGGREGATION_MINIMUM_RECORD_COUNT,
            minimum_distinct_days=settings.AGGREGATION_MINIMUM_DISTINCT_DAYS,
            max_content_length=settings.AGGREGATION_MAX_CONTENT_LENGTH,
        )


class CancellationToken:
    """Signals a running batch to stop launching new groups."""

    def __init__(self):
        self._event = asyncio.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


class BatchOrchestrator:
    def __init__(
        self,
        fetcher: RecordFetcher,
        *,
        timezone: ZoneInfo | str | None = None,
        categorizer: ExerciseCategorizer | None = None,
        sleep: Sleep = asyncio.sleep,
    ):
        self.fetcher = fetcher
        self.validator = WeekValidator(timezone)
        self.categorizer = categorizer or ExerciseCategorizer()
        self._sleep = sleep

    async def aggregate_batch(
        self,
        user_ids: Iterable[str],
        week_start: date | datetime,
        week_end: date | datetime,
        options: BatchOptions | Mapping[str, Any] | None = None,
        cancellation: CancellationToken | None = None,
    ) -> BatchResult:
        """
        Aggregate every user in ``user_ids`` for the given week.

        Individual failures end up in ``BatchResult.failed``; users whose
        group was never launched because of cancellation end up in
        ``BatchResult.cancelled``. Only invalid options fail the call.
        """
        options = self._resolve_options(options)
        user_ids = list(user_ids)
        service = self._build_service(options)

        group_size = options.group_size
        groups = [user_ids[i : i + group_size] for i in range(0, len(user_ids), group_size)]
        result = BatchResult()
        start_time = time.time()

        logger.info(
            "Starting batch user data aggregation",
            user_count=len(user_ids),
            group_count=len(groups),
            group_size=group_size,
            week_start=str(week_start),
            week_end=str(week_end),
        )

        for group_index, group in enumerate(groups):
            if group_index > 0 and options.inter_group_delay_ms > 0:
                await self._sleep(options.inter_group_delay_ms / 1000)

            if cancellation is not None and cancellation.cancelled:
                remaining = [user_id for pending in groups[group_index:] for user_id in pending]
                result.cancelled.extend(remaining)
                logger.warning(
                    "Batch aggregation cancelled",
                    completed_groups=group_index,
                    remaining_users=len(remaining),
                )
                break

            logger.debug(
                "Processing group",
                group_number=group_index + 1,
                group_size=len(group),
                total_groups=len(groups),
            )
            result.group_count += 1

            outcomes = await asyncio.gather(
                *(self._aggregate_one(service, user_id, week_start, week_end) for user_id in group)
            )
            for outcome in outcomes:
                if isinstance(outcome, BatchFailure):
                    result.failed.append(outcome)
                else:
                    result.succeeded.append(outcome)

        if result.failed:
            logger.warning(
                "Some users failed during batch aggregation",
                error_count=len(result.failed),
                errors=[
                    {"user_id": f.user_id, "error_kind": f.error_kind.value, "message": f.message}
                    for f in result.failed[:MAX_LOGGED_FAILURES]
                ],
            )

        log_batch_summary(
            job="weekly_aggregation",
            total_users=len(user_ids),
            succeeded=len(result.succeeded),
            failed=len(result.failed),
            cancelled=len(result.cancelled),
            duration_ms=(time.time() - start_time) * 1000,
        )

        return result

    async def aggregate_active_users(
        self,
        week_start: date | datetime,
        week_end: date | datetime,
        options: BatchOptions | Mapping[str, Any] | None = None,
        cancellation: CancellationToken | None = None,
    ) -> BatchResult:
        """
        Aggregate everyone with at least one certification in the week.

        Raises:
            ValidationError: the window is malformed.
            FetchError: the active population could not be listed.
        """
        options = self._resolve_options(options)
        window = self.validator.validate(week_start, week_end)
        user_ids = await self.fetcher.list_user_ids_active_in_window(
            window.starts_at, window.ends_at
        )
        logger.info("Found users with certifications", user_count=len(user_ids))
        return await self.aggregate_batch(
            user_ids, week_start, week_end, options=options, cancellation=cancellation
        )

    async def _aggregate_one(
        self,
        service: UserAggregationService,
        user_id: str,
        week_start: date | datetime,
        week_end: date | datetime,
    ) -> UserWeekAggregate | BatchFailure:
        try:
            return await service.aggregate_user(user_id, week_start, week_end)
        except AggregationError as e:
            return BatchFailure(user_id=user_id, error_kind=e.error_kind, message=e.message)
        except Exception as e:
            logger.exception("Unexpected error aggregating user", user_id=user_id)
            return BatchFailure(user_id=user_id, error_kind=ErrorKind.UNKNOWN, message=str(e))

    def _build_service(self, options: BatchOptions) -> UserAggregationService:
        return UserAggregationService(
            self.fetcher,
            sanitizer=ContentSanitizer(max_length=options.max_content_length),
            stats_aggregator=StatsAggregator(self.categorizer),
            validator=self.validator,
            minimum_record_count=options.minimum_record_count,
            minimum_distinct_days=options.minimum_distinct_days,
        )

    @staticmethod
    def _resolve_options(options: BatchOptions | Mapping[str, Any] | None) -> BatchOptions:
        if options is None:
            return BatchOptions.from_settings()
        if isinstance(options, BatchOptions):
            return options
        if isinstance(options, Mapping):
            return BatchOptions.model_validate(dict(options))
        raise TypeError(f"options must be BatchOptions or a mapping, got {type(options).__name__}")
