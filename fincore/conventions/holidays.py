"""
Holiday rules.

A calendar is built from a closed set of rule kinds. Each rule, asked for a
year, produces zero or one concrete date. Rules are frozen dataclasses, so
they compare by value and round-trip through plain dicts (and hence JSON).

Recurring rules accept an optional validity window (``first_year`` /
``last_year``) and ``skip_years`` for years in which the holiday was moved
by proclamation; the replacement day is then given as a ``Singular`` rule.
"""

from __future__ import annotations

import calendar as _cal
from dataclasses import dataclass
from datetime import date, timedelta
from typing import AbstractSet, Any, ClassVar, Dict, Optional, Tuple, Union

from dateutil.easter import easter

from fincore.conventions.types import WeekendShift, Weekday
from fincore.utils.date import to_date

DEFAULT_WEEKEND = frozenset({Weekday.SATURDAY.value, Weekday.SUNDAY.value})

_ONE_DAY = timedelta(days=1)


class _YearWindow:
    """Validity window shared by all recurring rules."""

    first_year: Optional[int]
    last_year: Optional[int]
    skip_years: Tuple[int, ...]

    def applies_to(self, year: int) -> bool:
        if self.first_year is not None and year < self.first_year:
            return False
        if self.last_year is not None and year > self.last_year:
            return False
        return year not in self.skip_years

    def _window_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        if self.first_year is not None:
            out["first_year"] = self.first_year
        if self.last_year is not None:
            out["last_year"] = self.last_year
        if self.skip_years:
            out["skip_years"] = list(self.skip_years)
        return out


def _check_month_day(month: int, day: int) -> None:
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month: {month}")
    # 2000 is a leap year, so Feb 29 is accepted here
    if not 1 <= day <= _cal.monthrange(2000, month)[1]:
        raise ValueError(f"Invalid day {day} for month {month}")


@dataclass(frozen=True)
class FixedDate(_YearWindow):
    """Same month and day every year (Feb 29 only occurs in leap years)."""

    kind: ClassVar[str] = "fixed_date"

    month: int
    day: int
    first_year: Optional[int] = None
    last_year: Optional[int] = None
    skip_years: Tuple[int, ...] = ()

    def __post_init__(self):
        _check_month_day(self.month, self.day)
        object.__setattr__(self, "skip_years", tuple(self.skip_years))

    def in_year(self, year: int, weekend: AbstractSet[int] = DEFAULT_WEEKEND) -> Optional[date]:
        if not self.applies_to(year):
            return None
        if self.day > _cal.monthrange(year, self.month)[1]:
            return None
        return date(year, self.month, self.day)

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "month": self.month, "day": self.day, **self._window_dict()}


@dataclass(frozen=True)
class FixedDateObserved(_YearWindow):
    """Fixed date that is observed on a weekday when it falls on a weekend.

    The observed day may fall in the neighbouring year (e.g. Jan 1 on a
    Saturday observed on Dec 31 with ``WeekendShift.NEAREST``).
    """

    kind: ClassVar[str] = "fixed_date_observed"

    month: int
    day: int
    shift: WeekendShift = WeekendShift.FORWARD
    first_year: Optional[int] = None
    last_year: Optional[int] = None
    skip_years: Tuple[int, ...] = ()

    def __post_init__(self):
        _check_month_day(self.month, self.day)
        object.__setattr__(self, "shift", WeekendShift(self.shift))
        object.__setattr__(self, "skip_years", tuple(self.skip_years))

    def nominal_date(self, year: int) -> Optional[date]:
        if not self.applies_to(year):
            return None
        if self.day > _cal.monthrange(year, self.month)[1]:
            return None
        return date(year, self.month, self.day)

    def _direction(self, nominal: date, weekend: AbstractSet[int]) -> timedelta:
        if self.shift == WeekendShift.FORWARD:
            return _ONE_DAY
        if self.shift == WeekendShift.BACKWARD:
            return -_ONE_DAY
        # NEAREST: whichever weekday is closer, forward on a tie
        back = forward = nominal
        while True:
            back -= _ONE_DAY
            forward += _ONE_DAY
            if forward.weekday() not in weekend:
                return _ONE_DAY
            if back.weekday() not in weekend:
                return -_ONE_DAY

    def in_year(
        self,
        year: int,
        weekend: AbstractSet[int] = DEFAULT_WEEKEND,
        taken: AbstractSet[date] = frozenset(),
    ) -> Optional[date]:
        """Observed date for ``year``.

        A shifted observation also steps over dates in ``taken`` (holidays
        already claimed by other rules), so two weekend holidays in a row get
        two distinct substitute days.
        """
        nominal = self.nominal_date(year)
        if nominal is None or nominal.weekday() not in weekend:
            return nominal
        step = self._direction(nominal, weekend)
        observed = nominal + step
        while observed.weekday() in weekend or observed in taken:
            observed += step
        return observed

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "month": self.month,
            "day": self.day,
            "shift": self.shift.value,
            **self._window_dict(),
        }


@dataclass(frozen=True)
class NthWeekdayOfMonth(_YearWindow):
    """The n-th given weekday of a month; negative ``nth`` counts from the end.

    ``nth=-1`` is the last such weekday. A fifth occurrence that doesn't exist
    in a given month yields no date.
    """

    kind: ClassVar[str] = "nth_weekday"

    month: int
    weekday: Weekday
    nth: int
    first_year: Optional[int] = None
    last_year: Optional[int] = None
    skip_years: Tuple[int, ...] = ()

    def __post_init__(self):
        if not 1 <= self.month <= 12:
            raise ValueError(f"Invalid month: {self.month}")
        if self.nth == 0 or abs(self.nth) > 5:
            raise ValueError(f"nth must be in 1..5 or -5..-1, got {self.nth}")
        weekday = self.weekday
        if isinstance(weekday, str):
            weekday = Weekday[weekday.upper()]
        object.__setattr__(self, "weekday", Weekday(weekday))
        object.__setattr__(self, "skip_years", tuple(self.skip_years))

    def in_year(self, year: int, weekend: AbstractSet[int] = DEFAULT_WEEKEND) -> Optional[date]:
        if not self.applies_to(year):
            return None
        last_day = _cal.monthrange(year, self.month)[1]
        target = self.weekday.value
        if self.nth > 0:
            first = date(year, self.month, 1)
            day = 1 + (target - first.weekday()) % 7 + 7 * (self.nth - 1)
            if day > last_day:
                return None
        else:
            last = date(year, self.month, last_day)
            day = last_day - (last.weekday() - target) % 7 - 7 * (-self.nth - 1)
            if day < 1:
                return None
        return date(year, self.month, day)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "month": self.month,
            "weekday": self.weekday.name,
            "nth": self.nth,
            **self._window_dict(),
        }


@dataclass(frozen=True)
class EasterOffset(_YearWindow):
    """Days relative to Western Easter Sunday (Good Friday is -2)."""

    kind: ClassVar[str] = "easter_offset"

    offset: int
    first_year: Optional[int] = None
    last_year: Optional[int] = None
    skip_years: Tuple[int, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "skip_years", tuple(self.skip_years))

    def in_year(self, year: int, weekend: AbstractSet[int] = DEFAULT_WEEKEND) -> Optional[date]:
        if not self.applies_to(year):
            return None
        return easter(year) + timedelta(days=self.offset)

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "offset": self.offset, **self._window_dict()}


@dataclass(frozen=True)
class Singular:
    """A one-off holiday on exactly one date; never recurs."""

    kind: ClassVar[str] = "singular"

    day: date

    def __post_init__(self):
        object.__setattr__(self, "day", to_date(self.day))

    def in_year(self, year: int, weekend: AbstractSet[int] = DEFAULT_WEEKEND) -> Optional[date]:
        return self.day if self.day.year == year else None

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "date": self.day.isoformat()}


HolidayRule = Union[FixedDate, FixedDateObserved, NthWeekdayOfMonth, EasterOffset, Singular]

_RULE_TYPES = {
    cls.kind: cls
    for cls in (FixedDate, FixedDateObserved, NthWeekdayOfMonth, EasterOffset, Singular)
}


def holiday_rule_from_dict(data: Dict[str, Any]) -> HolidayRule:
    """Rebuild a rule from the output of its ``to_dict``."""
    params = dict(data)
    try:
        kind = params.pop("kind")
        cls = _RULE_TYPES[kind]
    except KeyError as exc:
        raise ValueError(f"Unknown holiday rule: {data!r}") from exc
    if cls is Singular:
        return Singular(to_date(params["date"]))
    if "skip_years" in params:
        params["skip_years"] = tuple(params["skip_years"])
    return cls(**params)
