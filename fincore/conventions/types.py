"""
Basic types and enums used across the calendar and scheduling system.
"""

from enum import Enum


class TimeUnit(Enum):
    """Units of a calendar tenor."""

    DAY = "D"
    WEEK = "W"
    MONTH = "M"
    YEAR = "Y"


class Frequency(Enum):
    """Common payment frequencies, in periods per year."""

    ANNUAL = 1
    SEMIANNUAL = 2
    QUARTERLY = 4
    MONTHLY = 12


class BusinessDayAdjustment(Enum):
    """Business day adjustment rules."""

    NO_ADJUSTMENT = "NO_ADJUSTMENT"
    FOLLOWING = "FOLLOWING"
    MODIFIED_FOLLOWING = "MODIFIED_FOLLOWING"
    PRECEDING = "PRECEDING"
    MODIFIED_PRECEDING = "MODIFIED_PRECEDING"


class StubPolicy(Enum):
    """Where an irregular period goes when the dates don't divide evenly."""

    SHORT_FRONT = "SHORT_FRONT"
    LONG_FRONT = "LONG_FRONT"
    SHORT_BACK = "SHORT_BACK"
    LONG_BACK = "LONG_BACK"


class WeekendShift(Enum):
    """How an observed holiday moves when it falls on a weekend."""

    FORWARD = "FORWARD"  # next weekday
    BACKWARD = "BACKWARD"  # previous weekday
    NEAREST = "NEAREST"  # Saturday -> Friday, Sunday -> Monday


class Weekday(Enum):
    """Weekdays numbered as in ``date.weekday()``."""

    MONDAY = 0
    TUESDAY = 1
    WEDNESDAY = 2
    THURSDAY = 3
    FRIDAY = 4
    SATURDAY = 5
    SUNDAY = 6
