"""
Pure transforms of the weekly aggregation pipeline.

Nothing in this package performs I/O; the services layer feeds it records
fetched through the repository.
"""

from .categorizer import DEFAULT_EXERCISE_TAXONOMY, OTHER_CATEGORY, ExerciseCategorizer
from .sanitizer import DEFAULT_REDACTION_PATTERNS, ContentSanitizer
from .stats import StatsAggregator, day_label, day_of_week
from .window import WeekValidator, WeekWindow, current_week_window, week_days

__all__ = [
    "ContentSanitizer",
    "DEFAULT_EXERCISE_TAXONOMY",
    "DEFAULT_REDACTION_PATTERNS",
    "ExerciseCategorizer",
    "OTHER_CATEGORY",
    "StatsAggregator",
    "WeekValidator",
    "WeekWindow",
    "current_week_window",
    "day_label",
    "day_of_week",
    "week_days",
]
