"""
Domain models for the weekly aggregation feature.

Plain dataclasses shared by the repository, pipeline and service layers.
Only small derived properties live here; the aggregation logic itself
sits in the pipeline package.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum


class CertificationKind(str, Enum):
    """Stored values of the certification ``type`` column."""

    EXERCISE = "운동"
    DIET = "식단"


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    FETCH = "fetch"
    UNKNOWN = "unknown"


@dataclass(slots=True, frozen=True)
class RawRecord:
    """A certification row exactly as the store returned it."""

    id: str
    user_id: str
    nickname: str
    created_at: datetime
    kind: CertificationKind
    content: str
    photo_ref: str


@dataclass(slots=True)
class ProcessedRecord:
    """A certification converted to local time with its content sanitized."""

    id: str
    kind: CertificationKind
    content: str  # raw text, kept for in-process analysis only
    sanitized_content: str  # safe to hand across the trust boundary
    created_at: datetime
    day_of_week: int  # 0 = Sunday ... 6 = Saturday

    @property
    def local_date(self) -> date:
        return self.created_at.date()


@dataclass(slots=True)
class DailyCounts:
    exercise_count: int = 0
    diet_count: int = 0

    @property
    def total(self) -> int:
        return self.exercise_count + self.diet_count


@dataclass(slots=True)
class WeeklyStats:
    total_count: int
    exercise_day_count: int
    diet_day_count: int
    exercise_category_counts: dict[str, int]
    consistency_score: int
    daily_breakdown: dict[str, DailyCounts]


@dataclass(slots=True)
class UserWeekAggregate:
    """Output unit consumed by the report generator."""

    user_id: str
    nickname: str
    week_start: date
    week_end: date
    processed_records: list[ProcessedRecord]
    stats: WeeklyStats
    has_minimum_data: bool


@dataclass(slots=True)
class BatchFailure:
    user_id: str
    error_kind: ErrorKind
    message: str


@dataclass(slots=True)
class BatchResult:
    succeeded: list[UserWeekAggregate] = field(default_factory=list)
    failed: list[BatchFailure] = field(default_factory=list)
    cancelled: list[str] = field(default_factory=list)  # never launched
    group_count: int = 0

    def eligible(self) -> list[UserWeekAggregate]:
        """Aggregates with enough data to generate a report from."""
        return [aggregate for aggregate in self.succeeded if aggregate.has_minimum_data]
