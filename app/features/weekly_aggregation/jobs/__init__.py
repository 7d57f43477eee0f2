"""
Job entrypoints for the weekly aggregation feature.
"""

from .weekly_aggregation_job import resolve_week, run_weekly_aggregation

__all__ = ["resolve_week", "run_weekly_aggregation"]
