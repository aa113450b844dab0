"""
Date calculation utilities: business day adjustment, business day stepping
and end-of-month handling.

The functions only need an object with an ``is_business_day(date)`` method,
so they serve rule-based, union and QuantLib-backed calendars alike.
"""

from __future__ import annotations

import calendar as _cal
from datetime import date, datetime, timedelta
from typing import Protocol, Union

from fincore.conventions.types import BusinessDayAdjustment

_ONE_DAY = timedelta(days=1)


class SupportsBusinessDays(Protocol):
    def is_business_day(self, dt: date) -> bool:
        ...


def _as_date(dt: Union[date, datetime]) -> date:
    return dt.date() if isinstance(dt, datetime) else dt


def _roll(dt: date, calendar: SupportsBusinessDays, step: timedelta) -> date:
    while not calendar.is_business_day(dt):
        dt += step
    return dt


def adjust_date(
    dt: Union[date, datetime],
    adjustment: BusinessDayAdjustment,
    calendar: SupportsBusinessDays,
) -> date:
    """Apply business day adjustment to a date."""
    dt = _as_date(dt)

    if adjustment == BusinessDayAdjustment.NO_ADJUSTMENT:
        return dt

    elif adjustment == BusinessDayAdjustment.FOLLOWING:
        return _roll(dt, calendar, _ONE_DAY)

    elif adjustment == BusinessDayAdjustment.PRECEDING:
        return _roll(dt, calendar, -_ONE_DAY)

    elif adjustment == BusinessDayAdjustment.MODIFIED_FOLLOWING:
        adjusted = _roll(dt, calendar, _ONE_DAY)
        # If month changed, use preceding instead
        if adjusted.month != dt.month:
            adjusted = _roll(dt, calendar, -_ONE_DAY)
        return adjusted

    elif adjustment == BusinessDayAdjustment.MODIFIED_PRECEDING:
        adjusted = _roll(dt, calendar, -_ONE_DAY)
        # If month changed, use following instead
        if adjusted.month != dt.month:
            adjusted = _roll(dt, calendar, _ONE_DAY)
        return adjusted

    else:
        raise ValueError(f"Unknown business day adjustment: {adjustment}")


def next_business_day(dt: Union[date, datetime], calendar: SupportsBusinessDays) -> date:
    """First business day strictly after ``dt``."""
    return _roll(_as_date(dt) + _ONE_DAY, calendar, _ONE_DAY)


def prev_business_day(dt: Union[date, datetime], calendar: SupportsBusinessDays) -> date:
    """Last business day strictly before ``dt``."""
    return _roll(_as_date(dt) - _ONE_DAY, calendar, -_ONE_DAY)


def add_business_days(
    start_date: Union[date, datetime], days: int, calendar: SupportsBusinessDays
) -> date:
    """Move ``days`` business days forward (or backward when negative).

    With ``days == 0`` a non-business start rolls forward to the next
    business day.
    """
    current = _as_date(start_date)
    if days == 0:
        return _roll(current, calendar, _ONE_DAY)
    step = _ONE_DAY if days > 0 else -_ONE_DAY
    remaining = abs(days)
    while remaining > 0:
        current += step
        if calendar.is_business_day(current):
            remaining -= 1
    return current


def business_days_between(
    start: Union[date, datetime],
    end: Union[date, datetime],
    calendar: SupportsBusinessDays,
) -> int:
    """Count business days between two dates (exclusive of start, inclusive of end)."""
    current = _as_date(start)
    end = _as_date(end)
    count = 0
    while current < end:
        current += _ONE_DAY
        if calendar.is_business_day(current):
            count += 1
    return count


def get_month_end(year: int, month: int) -> date:
    """Get the last calendar day of a given month."""
    return date(year, month, _cal.monthrange(year, month)[1])


def is_end_of_month(dt: Union[date, datetime]) -> bool:
    """Check if date is end of month."""
    dt = _as_date(dt)
    return dt == get_month_end(dt.year, dt.month)


def apply_end_of_month_rule(
    dt: Union[date, datetime], months_to_add: int, apply_eom_rule: bool = True
) -> date:
    """Add months to a date, keeping month-end dates on month ends if requested."""
    dt = _as_date(dt)

    total = dt.year * 12 + (dt.month - 1) + months_to_add
    new_year, new_month = divmod(total, 12)
    new_month += 1

    if apply_eom_rule and is_end_of_month(dt):
        return get_month_end(new_year, new_month)

    # Day doesn't exist in target month (e.g., Jan 31 -> Feb 31): use month end
    return date(new_year, new_month, min(dt.day, _cal.monthrange(new_year, new_month)[1]))
