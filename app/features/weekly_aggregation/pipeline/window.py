"""
Week window validation.

A report week is seven consecutive calendar days in the aggregation
timezone. Everything downstream (fetch bounds, day labels, distinct-day
counts) is derived from the validated WeekWindow rather than from the
caller's raw inputs.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta
from zoneinfo import ZoneInfo

from app.config import settings

from ..domain.errors import ValidationError

WEEK_LENGTH_DAYS = 7


def resolve_timezone(timezone: ZoneInfo | str | None = None) -> ZoneInfo:
    if isinstance(timezone, ZoneInfo):
        return timezone
    return ZoneInfo(timezone or settings.AGGREGATION_TIMEZONE)


def to_local_datetime(value: datetime, timezone: ZoneInfo) -> datetime:
    """Convert a stored timestamp to the aggregation timezone (naive means UTC)."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(timezone)


def week_days(start_date: date) -> list[date]:
    """The seven calendar days of the week starting on start_date."""
    return [start_date + timedelta(days=offset) for offset in range(WEEK_LENGTH_DAYS)]


@dataclass(slots=True, frozen=True)
class WeekWindow:
    start_date: date
    end_date: date
    timezone: ZoneInfo

    @property
    def starts_at(self) -> datetime:
        return datetime.combine(self.start_date, time.min, tzinfo=self.timezone)

    @property
    def ends_at(self) -> datetime:
        return datetime.combine(self.end_date, time.max, tzinfo=self.timezone)


class WeekValidator:
    """Rejects malformed windows before anything is fetched."""

    def __init__(self, timezone: ZoneInfo | str | None = None):
        self.timezone = resolve_timezone(timezone)

    def validate(self, week_start: date | datetime, week_end: date | datetime) -> WeekWindow:
        start_date = self._calendar_date(week_start, "week_start")
        end_date = self._calendar_date(week_end, "week_end")

        if start_date >= end_date:
            raise ValidationError("Week start date must be before end date")

        span_days = (end_date - start_date).days
        if span_days != WEEK_LENGTH_DAYS - 1:
            raise ValidationError(
                f"Week range must be exactly {WEEK_LENGTH_DAYS} days "
                f"({WEEK_LENGTH_DAYS - 1} days difference), got {span_days}"
            )

        return WeekWindow(start_date=start_date, end_date=end_date, timezone=self.timezone)

    def _calendar_date(self, value: object, name: str) -> date:
        # datetime is a date subclass, so check it first
        if isinstance(value, datetime):
            if value.tzinfo is None:
                return value.date()
            return value.astimezone(self.timezone).date()
        if isinstance(value, date):
            return value
        raise ValidationError(f"Invalid date parameter: {name}={value!r}")


def current_week_window(
    now: datetime | None = None, timezone: ZoneInfo | str | None = None
) -> WeekWindow:
    """The seven days ending today, which is what a scheduled run analyzes."""
    tz = resolve_timezone(timezone)
    now = now.astimezone(tz) if now else datetime.now(tz)
    end_date = now.date()
    start_date = end_date - timedelta(days=WEEK_LENGTH_DAYS - 1)
    return WeekWindow(start_date=start_date, end_date=end_date, timezone=tz)
