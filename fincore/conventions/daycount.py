"""Day count conventions.

Each convention maps a date pair to a year fraction:

- ACT/360 and ACT/365F divide actual days by a fixed denominator and are
  additive over adjacent intervals.
- ACT/ACT ISDA splits the interval at each year boundary and divides each
  segment by the length (365 or 366) of its own calendar year.
- 30E/360 and 30/360 US clamp day-of-month values before counting. Their
  fractions are *not* additive across month-end clamp boundaries.
"""

from __future__ import annotations

import calendar
from datetime import date, datetime
from enum import Enum
from typing import Callable, Dict, Union

from fincore.exceptions import InvalidDateRange, UnknownConvention

DayCountFunc = Callable[[date, date], float]


def _as_date(dt: Union[date, datetime]) -> date:
    """Convert datetime to date if needed."""
    return dt.date() if isinstance(dt, datetime) else dt


def _days_in_year(year: int) -> int:
    return 366 if calendar.isleap(year) else 365


def _is_last_of_february(dt: date) -> bool:
    return dt.month == 2 and dt.day == calendar.monthrange(dt.year, 2)[1]


def _thirty_360(y1: int, m1: int, d1: int, y2: int, m2: int, d2: int) -> float:
    return (360 * (y2 - y1) + 30 * (m2 - m1) + (d2 - d1)) / 360.0


def _act_360(start: date, end: date) -> float:
    return (end - start).days / 360.0


def _act_365f(start: date, end: date) -> float:
    """Return the ACT/365F year fraction between two dates.

    Follows the convention:
        yearfrac(d1, d2) = ActualDays(d1, d2) / 365
    """
    return (end - start).days / 365.0


def _act_act_isda(start: date, end: date) -> float:
    if start.year == end.year:
        return (end - start).days / _days_in_year(start.year)
    total = 0.0
    current = start
    while current.year < end.year:
        year_end = date(current.year + 1, 1, 1)
        total += (year_end - current).days / _days_in_year(current.year)
        current = year_end
    return total + (end - current).days / _days_in_year(end.year)


def _thirty_360_eu(start: date, end: date) -> float:
    d1 = min(start.day, 30)
    d2 = min(end.day, 30)
    return _thirty_360(start.year, start.month, d1, end.year, end.month, d2)


def _thirty_360_us(start: date, end: date) -> float:
    d1, d2 = start.day, end.day
    if _is_last_of_february(start):
        if _is_last_of_february(end):
            d2 = 30
        d1 = 30
    if d2 == 31 and d1 >= 30:
        d2 = 30
    if d1 == 31:
        d1 = 30
    return _thirty_360(start.year, start.month, d1, end.year, end.month, d2)


class DayCountConvention(Enum):
    """Supported day count conventions."""

    ACT_360 = "ACT/360"
    ACT_365F = "ACT/365F"
    ACT_ACT_ISDA = "ACT/ACT ISDA"
    THIRTY_360_US = "30/360 US"
    THIRTY_360_EU = "30E/360"

    def year_fraction(
        self, start: Union[date, datetime], end: Union[date, datetime]
    ) -> float:
        """Year fraction between ``start`` and ``end`` (``end >= start``)."""
        start, end = _as_date(start), _as_date(end)
        if end < start:
            raise InvalidDateRange(f"{self.value}: end {end} is before start {start}")
        return _FRACTIONS[self](start, end)

    fraction = year_fraction

    def day_count(
        self, start: Union[date, datetime], end: Union[date, datetime]
    ) -> int:
        """Day count numerator: 30/360 days for the 30/360 family, actual days otherwise."""
        if self in (DayCountConvention.THIRTY_360_US, DayCountConvention.THIRTY_360_EU):
            return int(round(self.year_fraction(start, end) * 360))
        start, end = _as_date(start), _as_date(end)
        if end < start:
            raise InvalidDateRange(f"{self.value}: end {end} is before start {start}")
        return (end - start).days

    @classmethod
    def from_name(cls, name: Union[str, "DayCountConvention"]) -> "DayCountConvention":
        """Get a day count convention by name."""
        if isinstance(name, DayCountConvention):
            return name
        name_upper = name.upper().strip()
        if name_upper not in DAY_COUNT_CONVENTIONS:
            raise UnknownConvention(
                f"Unknown day count convention: {name}. "
                f"Available: {list(DAY_COUNT_CONVENTIONS.keys())}"
            )
        return DAY_COUNT_CONVENTIONS[name_upper]

    def __str__(self) -> str:
        return self.value


_FRACTIONS: Dict[DayCountConvention, DayCountFunc] = {
    DayCountConvention.ACT_360: _act_360,
    DayCountConvention.ACT_365F: _act_365f,
    DayCountConvention.ACT_ACT_ISDA: _act_act_isda,
    DayCountConvention.THIRTY_360_US: _thirty_360_us,
    DayCountConvention.THIRTY_360_EU: _thirty_360_eu,
}

# Pre-defined day count convention instances
ACT_360 = DayCountConvention.ACT_360
ACT_365F = DayCountConvention.ACT_365F
ACT_ACT = DayCountConvention.ACT_ACT_ISDA
THIRTY_360U = DayCountConvention.THIRTY_360_US
THIRTY_360E = DayCountConvention.THIRTY_360_EU

# Registry
DAY_COUNT_CONVENTIONS: Dict[str, DayCountConvention] = {
    "ACT/360": ACT_360,
    "ACTUAL/360": ACT_360,
    "ACT/365F": ACT_365F,
    "ACT/365": ACT_365F,
    "ACTUAL/365F": ACT_365F,
    "ACT/365 FIXED": ACT_365F,
    "ACT/ACT": ACT_ACT,
    "ACTUAL/ACTUAL": ACT_ACT,
    "ACT/ACT ISDA": ACT_ACT,
    "30/360": THIRTY_360U,
    "30U/360": THIRTY_360U,
    "30/360 US": THIRTY_360U,
    "30/360 AMERICAN": THIRTY_360U,
    "30E/360": THIRTY_360E,
    "30/360E": THIRTY_360E,
    "30/360 EUROPEAN": THIRTY_360E,
}


def get_day_count_convention(name: str) -> DayCountConvention:
    """Get a day count convention by name."""
    return DayCountConvention.from_name(name)
