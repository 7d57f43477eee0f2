"""
Repository subpackage for the weekly aggregation feature.
"""

from .record_fetcher import UNKNOWN_NICKNAME, PostgresRecordFetcher, RecordFetcher

__all__ = ["PostgresRecordFetcher", "RecordFetcher", "UNKNOWN_NICKNAME"]
