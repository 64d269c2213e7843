"""Time utilities (configured local timezone)."""

import calendar
from datetime import date, datetime
from zoneinfo import ZoneInfo

from autoledger.config import settings


def local_tz() -> ZoneInfo:
    return ZoneInfo(settings.TIMEZONE)


def now_local_naive() -> datetime:
    """
    Current time in the configured timezone, returned as naive datetime for DB storage.
    """
    return datetime.now(local_tz()).replace(tzinfo=None)


def today_local() -> date:
    """Calendar date in the configured timezone (the runner's notion of 'today')."""
    return datetime.now(local_tz()).date()


def add_months(value: date, months: int) -> date:
    """Shift a date by whole months, clamping the day to the target month's length."""
    month_index = value.year * 12 + (value.month - 1) + months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)
