"""Signed calendar tenors such as ``3M`` or ``-5Y``.

Periods are calendar-only: adding one never looks at business days. Any
business-day adjustment happens downstream, in the calendar.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Union

from dateutil.relativedelta import relativedelta

from fincore.conventions.types import TimeUnit
from fincore.exceptions import InvalidPeriodFormat

_PERIOD_RE = re.compile(r"^([+-]?)(\d+)([DWMY])$")


@dataclass(frozen=True)
class Period:
    """A signed count of days, weeks, months or years."""

    count: int
    unit: TimeUnit

    @classmethod
    def parse(cls, text: str) -> "Period":
        """Parse a tenor string, e.g. ``"3M"``, ``"-5Y"`` or ``"+10D"``."""
        if not isinstance(text, str):
            raise InvalidPeriodFormat(f"Period must be given as a string, got {text!r}")
        match = _PERIOD_RE.match(text.strip().upper())
        if match is None:
            raise InvalidPeriodFormat(f"Invalid period: {text!r}")
        sign, digits, unit = match.groups()
        count = int(digits)
        if sign == "-":
            count = -count
        return cls(count, TimeUnit(unit))

    def __str__(self) -> str:
        return f"{self.count}{self.unit.value}"

    def __neg__(self) -> "Period":
        return Period(-self.count, self.unit)

    def __mul__(self, factor: int) -> "Period":
        if not isinstance(factor, int):
            return NotImplemented
        return Period(self.count * factor, self.unit)

    __rmul__ = __mul__

    def in_months(self) -> int:
        """Length in months; only defined for month and year periods."""
        if self.unit == TimeUnit.MONTH:
            return self.count
        if self.unit == TimeUnit.YEAR:
            return 12 * self.count
        raise ValueError(f"Period {self} has no whole-month length")

    def add_to(self, dt: Union[date, datetime]) -> date:
        """Shift ``dt`` by this period.

        Month and year periods clamp the day to the end of the target month
        (Jan 31 + 1M is Feb 28 or Feb 29).
        """
        if isinstance(dt, datetime):
            dt = dt.date()
        if self.unit == TimeUnit.DAY:
            return dt + timedelta(days=self.count)
        if self.unit == TimeUnit.WEEK:
            return dt + timedelta(days=7 * self.count)
        if self.unit == TimeUnit.MONTH:
            return dt + relativedelta(months=self.count)
        return dt + relativedelta(years=self.count)

    def sub_from(self, dt: Union[date, datetime]) -> date:
        """Shift ``dt`` backwards by this period."""
        return (-self).add_to(dt)


def parse_period(text: str) -> Period:
    """Convenience alias for :meth:`Period.parse`."""
    return Period.parse(text)


def tenor_to_months(tenor: str) -> int:
    """Convert tenor string (e.g., '3M', '2Y') to number of months."""
    return Period.parse(tenor).in_months()
