"""
Weekly statistics for one user's processed certifications.

Turns the records of a single week into the WeeklyStats summary the report
generator consumes: per-kind distinct-day counts, exercise category counts,
a zero-filled seven-day breakdown and the consistency score.
"""

from __future__ import annotations

import math
from collections import Counter
from collections.abc import Iterable
from datetime import date

from ..domain.models import CertificationKind, DailyCounts, ProcessedRecord, WeeklyStats
from .categorizer import ExerciseCategorizer
from .window import WEEK_LENGTH_DAYS, week_days

# Indexed by day_of_week (0 = Sunday)
DAY_NAMES = ("일", "월", "화", "수", "목", "금", "토")


def day_of_week(day: date) -> int:
    """Sunday-based weekday index (0 = Sunday ... 6 = Saturday)."""
    return (day.weekday() + 1) % 7


def day_label(day: date) -> str:
    """Breakdown key for a calendar day, e.g. ``3/4(월)``."""
    return f"{day.month}/{day.day}({DAY_NAMES[day_of_week(day)]})"


def consistency_score(active_days: int) -> int:
    """Share of the week with at least one certification, 0-100, rounded half up."""
    return math.floor(active_days * 100 / WEEK_LENGTH_DAYS + 0.5)


class StatsAggregator:
    def __init__(self, categorizer: ExerciseCategorizer | None = None):
        self.categorizer = categorizer or ExerciseCategorizer()

    def aggregate(self, records: Iterable[ProcessedRecord], week_start: date) -> WeeklyStats:
        records = list(records)
        exercise_records = [r for r in records if r.kind == CertificationKind.EXERCISE]
        diet_records = [r for r in records if r.kind == CertificationKind.DIET]

        category_counts = Counter(
            self.categorizer.categorize(record.content) for record in exercise_records
        )

        days = week_days(week_start)
        daily_breakdown = {day_label(day): DailyCounts() for day in days}
        in_week = set(days)

        for record in records:
            if record.local_date not in in_week:
                # The fetch contract should prevent this; such records are not counted per day.
                continue
            counts = daily_breakdown[day_label(record.local_date)]
            if record.kind == CertificationKind.EXERCISE:
                counts.exercise_count += 1
            else:
                counts.diet_count += 1

        return WeeklyStats(
            total_count=len(records),
            exercise_day_count=_distinct_days(exercise_records, in_week),
            diet_day_count=_distinct_days(diet_records, in_week),
            exercise_category_counts=dict(category_counts),
            consistency_score=consistency_score(_distinct_days(records, in_week)),
            daily_breakdown=daily_breakdown,
        )


def _distinct_days(records: list[ProcessedRecord], in_week: set[date]) -> int:
    return len({record.local_date for record in records if record.local_date in in_week})
