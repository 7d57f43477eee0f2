"""
Domain subpackage for the weekly aggregation feature.
"""

from .errors import AggregationError, FetchError, ValidationError, WeeklyAggregationError
from .models import (
    BatchFailure,
    BatchResult,
    CertificationKind,
    DailyCounts,
    ErrorKind,
    ProcessedRecord,
    RawRecord,
    UserWeekAggregate,
    WeeklyStats,
)

__all__ = [
    "AggregationError",
    "BatchFailure",
    "BatchResult",
    "CertificationKind",
    "DailyCounts",
    "ErrorKind",
    "FetchError",
    "ProcessedRecord",
    "RawRecord",
    "UserWeekAggregate",
    "ValidationError",
    "WeeklyAggregationError",
    "WeeklyStats",
]
