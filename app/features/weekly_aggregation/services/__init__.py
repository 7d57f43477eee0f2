"""
Service layer for the weekly aggregation feature.

UserAggregationService handles a single user; BatchOrchestrator fans it
out over a user population.
"""

from .batch_orchestrator import BatchOptions, BatchOrchestrator, CancellationToken
from .user_aggregation_service import UserAggregationService

__all__ = [
    "BatchOptions",
    "BatchOrchestrator",
    "CancellationToken",
    "UserAggregationService",
]
