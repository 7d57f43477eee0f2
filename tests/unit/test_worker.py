from datetime import date
from unittest.mock import AsyncMock

import pytest

from app.features.weekly_aggregation.domain.models import BatchFailure, BatchResult, ErrorKind
from app.jobs import worker
from tests.factories import WEEK_END, WEEK_START


def test_parse_week_args_defaults_to_none():
    assert worker.parse_week_args([]) == (None, None)


def test_parse_week_args_reads_iso_dates():
    assert worker.parse_week_args(["2024-03-04", "2024-03-10"]) == (WEEK_START, WEEK_END)


@pytest.mark.parametrize("args", [["2024-03-04"], ["2024-03-04", "2024-03-10", "extra"]])
def test_parse_week_args_requires_both_dates(args):
    with pytest.raises(ValueError, match="usage"):
        worker.parse_week_args(args)


def test_parse_week_args_rejects_malformed_date():
    with pytest.raises(ValueError):
        worker.parse_week_args(["2024-03-04", "next sunday"])


@pytest.mark.asyncio
async def test_run_worker_runs_weekly_aggregation(monkeypatch):
    expected = BatchResult(
        failed=[BatchFailure(user_id="user-1", error_kind=ErrorKind.FETCH, message="boom")]
    )
    job = AsyncMock(return_value=expected)
    monkeypatch.setattr(worker, "run_weekly_aggregation", job)

    result = await worker.run_worker(WEEK_START, WEEK_END)

    assert result is expected
    job.assert_awaited_once_with(WEEK_START, WEEK_END)


def test_main_passes_cli_week_to_the_job(monkeypatch):
    job = AsyncMock(return_value=BatchResult())
    monkeypatch.setattr(worker, "run_weekly_aggregation", job)
    monkeypatch.setattr(worker, "setup_logging", lambda log_level: None)

    worker.main(["2024-03-04", "2024-03-10"])

    job.assert_awaited_once_with(date(2024, 3, 4), date(2024, 3, 10))
