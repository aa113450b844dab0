"""Market conventions: enums and day count conventions.

Calendars live in ``fincore.conventions.calendars``.
"""

from .daycount import DayCountConvention, get_day_count_convention
from .types import (
    BusinessDayAdjustment,
    Frequency,
    StubPolicy,
    TimeUnit,
    Weekday,
    WeekendShift,
)

__all__ = [
    "DayCountConvention",
    "get_day_count_convention",
    "BusinessDayAdjustment",
    "Frequency",
    "StubPolicy",
    "TimeUnit",
    "Weekday",
    "WeekendShift",
]
