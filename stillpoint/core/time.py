from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from stillpoint.core.config import get_settings


def as_utc(value: datetime) -> datetime:
    """Returns an aware UTC datetime; naive values are assumed to already be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def activity_local_date(moment: datetime, *, tz_name: str | None = None) -> date:
    """Converts an activity timestamp to the calendar date it counts for."""
    resolved_tz = tz_name or get_settings().activity_timezone
    return as_utc(moment).astimezone(ZoneInfo(resolved_tz)).date()


def week_start(local_date: date) -> date:
    """Returns Monday of the ISO week containing local_date."""
    return local_date - timedelta(days=local_date.weekday())


def month_start(local_date: date) -> date:
    return local_date.replace(day=1)


def local_day_start_utc(local_date: date, *, tz_name: str | None = None) -> datetime:
    resolved_tz = tz_name or get_settings().activity_timezone
    local_midnight = datetime(local_date.year, local_date.month, local_date.day, tzinfo=ZoneInfo(resolved_tz))
    return local_midnight.astimezone(timezone.utc)
