from datetime import date, datetime

import pytest

from app.config import settings
from app.features.weekly_aggregation.domain.errors import ValidationError
from app.features.weekly_aggregation.jobs import weekly_aggregation_job as job
from tests.factories import SEOUL, WEEK_END, WEEK_START, make_record

MODULE = "app.features.weekly_aggregation.jobs.weekly_aggregation_job"


class FakePool:
    def __init__(self):
        self.initialized = False
        self.closed = False

    async def initialize(self):
        self.initialized = True

    async def close(self):
        self.closed = True


@pytest.fixture
def no_pacing(monkeypatch):
    monkeypatch.setattr(settings, "AGGREGATION_INTER_GROUP_DELAY_MS", 0)


@pytest.fixture
def use_fake_fetcher(monkeypatch, fake_fetcher):
    monkeypatch.setattr(f"{MODULE}.PostgresRecordFetcher", lambda pool: fake_fetcher)
    return fake_fetcher


def test_resolve_week_prefers_explicit_dates():
    assert job.resolve_week(WEEK_START, WEEK_END) == (WEEK_START, WEEK_END)


def test_resolve_week_requires_both_dates():
    with pytest.raises(ValueError):
        job.resolve_week(WEEK_START, None)


def test_resolve_week_uses_configured_window(monkeypatch):
    monkeypatch.setattr(settings, "AGGREGATION_WEEK_START", WEEK_START)
    monkeypatch.setattr(settings, "AGGREGATION_WEEK_END", WEEK_END)

    assert job.resolve_week() == (WEEK_START, WEEK_END)


def test_resolve_week_defaults_to_week_ending_today(monkeypatch):
    monkeypatch.setattr(settings, "AGGREGATION_WEEK_START", None)
    monkeypatch.setattr(settings, "AGGREGATION_WEEK_END", None)

    start, end = job.resolve_week()

    assert (end - start).days == 6
    assert end == datetime.now(SEOUL).date()


@pytest.mark.asyncio
async def test_job_aggregates_active_users(monkeypatch, no_pacing, use_fake_fetcher):
    use_fake_fetcher.records["user-1"] = [
        make_record(day_offset=offset) for offset in (0, 1, 2)
    ]
    use_fake_fetcher.records["user-2"] = [make_record(user_id="user-2", day_offset=3)]
    pool = FakePool()
    monkeypatch.setattr(f"{MODULE}.DatabasePoolManager", lambda: pool)

    result = await job.run_weekly_aggregation(WEEK_START, WEEK_END)

    assert sorted(a.user_id for a in result.succeeded) == ["user-1", "user-2"]
    assert [a.user_id for a in result.eligible()] == ["user-1"]
    assert pool.initialized and pool.closed


@pytest.mark.asyncio
async def test_job_with_explicit_users_and_injected_pool(no_pacing, use_fake_fetcher):
    use_fake_fetcher.failing_users.add("broken")
    pool = FakePool()

    result = await job.run_weekly_aggregation(
        WEEK_START, WEEK_END, user_ids=["broken", "quiet"], pool=pool
    )

    assert [f.user_id for f in result.failed] == ["broken"]
    assert [a.user_id for a in result.succeeded] == ["quiet"]
    # Injected pools are owned by the caller
    assert not pool.initialized and not pool.closed


@pytest.mark.asyncio
async def test_job_rejects_bad_window_before_opening_pool(monkeypatch):
    pool = FakePool()
    monkeypatch.setattr(f"{MODULE}.DatabasePoolManager", lambda: pool)

    with pytest.raises(ValidationError):
        await job.run_weekly_aggregation(WEEK_START, date(2024, 3, 12))

    assert not pool.initialized
