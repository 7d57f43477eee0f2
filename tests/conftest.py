import asyncio
from datetime import datetime

import pytest

from app.features.weekly_aggregation.domain.errors import FetchError
from app.features.weekly_aggregation.domain.models import RawRecord
from app.features.weekly_aggregation.repository.record_fetcher import UNKNOWN_NICKNAME


class FakeRecordFetcher:
    def __init__(self, records: dict[str, list[RawRecord]] | None = None):
        self.records: dict[str, list[RawRecord]] = records or {}
        self.nicknames: dict[str, str] = {}
        self.failing_users: set[str] = set()
        self.fetch_calls: list[tuple[str, datetime, datetime]] = []
        self.nickname_calls: list[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def fetch_by_user_and_window(
        self, user_id: str, starts_at: datetime, ends_at: datetime
    ) -> list[RawRecord]:
        self.fetch_calls.append((user_id, starts_at, ends_at))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            # Yield so concurrently launched users overlap
            await asyncio.sleep(0)
            if user_id in self.failing_users:
                raise FetchError("Failed to fetch certifications from database")
            rows = [
                r for r in self.records.get(user_id, []) if starts_at <= r.created_at <= ends_at
            ]
            return sorted(rows, key=lambda r: r.created_at)
        finally:
            self.in_flight -= 1

    async def list_user_ids_active_in_window(
        self, starts_at: datetime, ends_at: datetime
    ) -> list[str]:
        return [
            user_id
            for user_id, rows in self.records.items()
            if any(starts_at <= r.created_at <= ends_at for r in rows)
        ]

    async def fetch_nickname(self, user_id: str) -> str:
        self.nickname_calls.append(user_id)
        return self.nicknames.get(user_id, UNKNOWN_NICKNAME)


@pytest.fixture
def fake_fetcher():
    return FakeRecordFetcher()


class RecordingSleep:
    def __init__(self):
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def recording_sleep():
    return RecordingSleep()
