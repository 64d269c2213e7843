"""
CALENDAR ENGINE
Recurrence rule -> ordered occurrence dates

RESPONSIBILITIES:
- Expand weekly / monthly / yearly cadences over a date window
- Clamp month days to the month length (31 -> 28/29/30)
- Reject structurally invalid cadences

RULES:
- Pure: no I/O, no clock, no state
- Window is inclusive on both ends, output ascending
- Empty window (from > to) yields [] and is not an error
- Weekly anchors use 0 = Sunday ... 6 = Saturday
- Monthly/yearly steps re-clamp from the anchor each period, never from
  the previous (possibly clamped) date
"""

import calendar
from datetime import date, timedelta
from typing import List, Optional, Union

from autoledger.domain.errors import ConfigurationError
from autoledger.domain.models import CadenceType


# Longest gap between two occurrences of any supported cadence (+1 day)
NEXT_OCCURRENCE_HORIZON_DAYS = 367


def _coerce_cadence(cadence_type: Union[CadenceType, str]) -> CadenceType:
    try:
        return CadenceType(cadence_type)
    except ValueError:
        raise ConfigurationError(f"Unknown cadence type: {cadence_type!r}") from None


def _validate_int(value, name: str, low: int, high: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f"{name} must be an integer, got {value!r}")
    if not low <= value <= high:
        raise ConfigurationError(f"{name} must be within {low}-{high}, got {value}")
    return value


def validate_cadence(
    cadence_type: Union[CadenceType, str],
    anchor_day: int,
    anchor_month: Optional[int] = None,
) -> CadenceType:
    """
    Validate a cadence definition

    Returns:
        The cadence as CadenceType

    Raises:
        ConfigurationError: unknown cadence or anchor out of range
    """
    cadence = _coerce_cadence(cadence_type)
    if cadence == CadenceType.WEEKLY:
        _validate_int(anchor_day, "anchor_day (weekday)", 0, 6)
    else:
        _validate_int(anchor_day, "anchor_day (day of month)", 1, 31)
    if cadence == CadenceType.YEARLY:
        if anchor_month is None:
            raise ConfigurationError("yearly cadence requires anchor_month")
        _validate_int(anchor_month, "anchor_month", 1, 12)
    return cadence


def sunday_based_weekday(value: date) -> int:
    """Weekday index with 0 = Sunday"""
    return (value.weekday() + 1) % 7


def _clamped_day(month_index: int, anchor_day: int) -> date:
    year, month0 = divmod(month_index, 12)
    last_day = calendar.monthrange(year, month0 + 1)[1]
    return date(year, month0 + 1, min(anchor_day, last_day))


def _weekly(anchor_day: int, from_date: date, to_date: date) -> List[date]:
    offset = (anchor_day - sunday_based_weekday(from_date)) % 7
    current = from_date + timedelta(days=offset)
    dates = []
    while current <= to_date:
        dates.append(current)
        current += timedelta(days=7)
    return dates


def _stepped_months(
    anchor_day: int,
    first_month_index: int,
    step: int,
    from_date: date,
    to_date: date,
) -> List[date]:
    month_index = first_month_index
    if _clamped_day(month_index, anchor_day) < from_date:
        month_index += step

    dates = []
    current = _clamped_day(month_index, anchor_day)
    while current <= to_date:
        dates.append(current)
        month_index += step
        current = _clamped_day(month_index, anchor_day)
    return dates


def occurrences(
    cadence_type: Union[CadenceType, str],
    anchor_day: int,
    from_date: date,
    to_date: date,
    anchor_month: Optional[int] = None,
) -> List[date]:
    """
    Expand a cadence over [from_date, to_date]

    Args:
        cadence_type: weekly, monthly or yearly
        anchor_day: weekday (0=Sunday..6) for weekly, day of month (1-31) otherwise
        from_date: first date of the window (inclusive)
        to_date: last date of the window (inclusive)
        anchor_month: month of year (1-12), yearly only

    Returns:
        Ascending list of occurrence dates

    Raises:
        ConfigurationError: invalid cadence definition
    """
    cadence = validate_cadence(cadence_type, anchor_day, anchor_month)

    if from_date > to_date:
        return []

    if cadence == CadenceType.WEEKLY:
        return _weekly(anchor_day, from_date, to_date)

    if cadence == CadenceType.MONTHLY:
        first = from_date.year * 12 + (from_date.month - 1)
        return _stepped_months(anchor_day, first, 1, from_date, to_date)

    first = from_date.year * 12 + (anchor_month - 1)
    return _stepped_months(anchor_day, first, 12, from_date, to_date)


def next_occurrence(
    cadence_type: Union[CadenceType, str],
    anchor_day: int,
    after: date,
    anchor_month: Optional[int] = None,
) -> Optional[date]:
    """First occurrence strictly after `after` (advisory next execution date)"""
    start = after + timedelta(days=1)
    upcoming = occurrences(
        cadence_type,
        anchor_day,
        start,
        start + timedelta(days=NEXT_OCCURRENCE_HORIZON_DAYS),
        anchor_month=anchor_month,
    )
    return upcoming[0] if upcoming else None
