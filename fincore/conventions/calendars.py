"""
Rule-based business day calendars.

``Calendar`` evaluates an ordered tuple of holiday rules per year and keeps
the result in a per-instance cache. ``UnionCalendar`` combines several
calendars (a date is a holiday if any member says so) behind the same
interface, so combined markets are not a special case anywhere downstream.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from datetime import date, datetime
from pathlib import Path
from typing import AbstractSet, Any, Dict, FrozenSet, Iterable, List, Sequence, Set, Union

from fincore.business_calendar import date_utils
from fincore.conventions.holidays import (
    DEFAULT_WEEKEND,
    EasterOffset,
    FixedDate,
    FixedDateObserved,
    HolidayRule,
    NthWeekdayOfMonth,
    Singular,
    holiday_rule_from_dict,
)
from fincore.conventions.types import BusinessDayAdjustment, WeekendShift, Weekday
from fincore.exceptions import UnknownConvention

logger = logging.getLogger(__name__)

DateInput = Union[date, datetime]


def _as_date(dt: DateInput) -> date:
    return dt.date() if isinstance(dt, datetime) else dt


class BusinessCalendar(ABC):
    """Contract shared by every calendar kind."""

    name: str

    @abstractmethod
    def is_weekend(self, dt: DateInput) -> bool:
        """True if ``dt`` falls on a weekend day of this calendar."""

    @abstractmethod
    def is_holiday(self, dt: DateInput) -> bool:
        """True if a holiday (not merely a weekend) falls on ``dt``."""

    @abstractmethod
    def holidays_in_year(self, year: int) -> FrozenSet[date]:
        """Holidays generated for ``year``."""

    def is_business_day(self, dt: DateInput) -> bool:
        """Check if date is a business day (not weekend or holiday)."""
        dt = _as_date(dt)
        return not self.is_weekend(dt) and not self.is_holiday(dt)

    def adjust(
        self,
        dt: DateInput,
        adjustment: BusinessDayAdjustment = BusinessDayAdjustment.FOLLOWING,
    ) -> date:
        """Shift a non-business date according to ``adjustment``."""
        return date_utils.adjust_date(dt, adjustment, self)

    def next_business_day(self, dt: DateInput) -> date:
        return date_utils.next_business_day(dt, self)

    def prev_business_day(self, dt: DateInput) -> date:
        return date_utils.prev_business_day(dt, self)

    def add_business_days(self, start_date: DateInput, days: int) -> date:
        """Add business days to a date."""
        return date_utils.add_business_days(start_date, days, self)

    def business_days_between(self, start: DateInput, end: DateInput) -> int:
        """Count business days between two dates (exclusive of start, inclusive of end)."""
        return date_utils.business_days_between(start, end, self)

    def holidays_between(self, start: DateInput, end: DateInput) -> List[date]:
        """Sorted holidays within ``[start, end]``, weekends excluded."""
        start, end = _as_date(start), _as_date(end)
        found = set()
        for year in range(start.year - 1, end.year + 2):
            found.update(d for d in self.holidays_in_year(year) if start <= d <= end)
        return sorted(found)

    def __or__(self, other: "BusinessCalendar") -> "UnionCalendar":
        if not isinstance(other, BusinessCalendar):
            return NotImplemented
        return UnionCalendar([self, other])

    def __str__(self) -> str:
        return self.name


class Calendar(BusinessCalendar):
    """Calendar built from an ordered set of holiday rules.

    Args:
        name: Identifier, e.g. ``"UK"``.
        rules: Holiday rules, evaluated in order.
        weekend: Weekday numbers (Monday = 0) treated as weekend.
    """

    def __init__(
        self,
        name: str,
        rules: Iterable[HolidayRule] = (),
        weekend: Iterable[Union[int, Weekday]] = DEFAULT_WEEKEND,
    ):
        self.name = name
        self.rules = tuple(rules)
        self.weekend = frozenset(Weekday(w).value for w in weekend)
        if len(self.weekend) == 7:
            raise ValueError("A calendar needs at least one working weekday")
        self._cache: Dict[int, FrozenSet[date]] = {}

    def is_weekend(self, dt: DateInput) -> bool:
        return _as_date(dt).weekday() in self.weekend

    def is_holiday(self, dt: DateInput) -> bool:
        dt = _as_date(dt)
        # observed shifts may move a holiday across the year boundary
        return any(dt in self.holidays_in_year(year) for year in (dt.year, dt.year - 1, dt.year + 1))

    def _place(self, year: int, blocked: AbstractSet[date] = frozenset()) -> Set[date]:
        """Dates the rules claim for ``year``, weekend days included.

        Fixed and moveable dates are placed first; weekend observations are
        then shifted in rule order, stepping over days already taken and
        over ``blocked``.
        """
        taken: Set[date] = set()
        shifted: List[FixedDateObserved] = []
        for rule in self.rules:
            if isinstance(rule, FixedDateObserved):
                nominal = rule.nominal_date(year)
                if nominal is not None and nominal.weekday() in self.weekend:
                    shifted.append(rule)
                    continue
            day = rule.in_year(year, self.weekend)
            if day is not None:
                taken.add(day)
        for rule in shifted:
            taken.add(rule.in_year(year, self.weekend, taken | blocked))
        return taken

    def holidays_in_year(self, year: int) -> FrozenSet[date]:
        """All dates the rules produce for ``year``.

        Observed days that the neighbouring years' rules shift into ``year``
        are already taken, so a substitute keeps rolling past them.
        """
        cached = self._cache.get(year)
        if cached is not None:
            return cached

        spill = {d for y in (year - 1, year + 1) for d in self._place(y) if d.year == year}
        taken = self._place(year, spill)

        # weekend days are reported by is_weekend, not as holidays
        holidays = frozenset(d for d in taken if d.weekday() not in self.weekend)
        logger.debug("Calendar %s: %d holidays for %s", self.name, len(holidays), year)
        # recomputation yields the same set, so a plain store is enough
        self._cache[year] = holidays
        return holidays

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "weekend": sorted(self.weekend),
            "rules": [rule.to_dict() for rule in self.rules],
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Calendar):
            return NotImplemented
        return (self.name, self.rules, self.weekend) == (other.name, other.rules, other.weekend)

    def __hash__(self) -> int:
        return hash((self.name, self.rules, self.weekend))

    def __repr__(self) -> str:
        return f"Calendar(name={self.name!r}, rules={len(self.rules)}, weekend={sorted(self.weekend)})"


class UnionCalendar(BusinessCalendar):
    """Joint calendar: a day is a business day only if it is one in every member."""

    def __init__(self, members: Sequence[BusinessCalendar], name: str = None):
        if not members:
            raise ValueError("UnionCalendar needs at least one member calendar")
        self.members = tuple(members)
        self.name = name or "+".join(m.name for m in self.members)

    def is_weekend(self, dt: DateInput) -> bool:
        return any(m.is_weekend(dt) for m in self.members)

    def is_holiday(self, dt: DateInput) -> bool:
        return any(m.is_holiday(dt) for m in self.members)

    def is_business_day(self, dt: DateInput) -> bool:
        return all(m.is_business_day(dt) for m in self.members)

    def holidays_in_year(self, year: int) -> FrozenSet[date]:
        days = set()
        for member in self.members:
            days.update(member.holidays_in_year(year))
        return frozenset(d for d in days if not self.is_weekend(d))

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "members": [m.to_dict() for m in self.members]}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, UnionCalendar):
            return NotImplemented
        return self.members == other.members

    def __hash__(self) -> int:
        return hash(self.members)

    def __repr__(self) -> str:
        return f"UnionCalendar({list(self.members)!r})"


def calendar_from_dict(data: Dict[str, Any]) -> BusinessCalendar:
    """Rebuild a calendar from the output of any calendar's ``to_dict``."""
    if "quantlib" in data:
        from fincore.conventions.calendars_quantlib import get_quantlib_calendar

        return get_quantlib_calendar(data["quantlib"])
    if "members" in data:
        return UnionCalendar([calendar_from_dict(m) for m in data["members"]], data.get("name"))
    return Calendar(
        name=data["name"],
        rules=[holiday_rule_from_dict(r) for r in data.get("rules", [])],
        weekend=data.get("weekend", DEFAULT_WEEKEND),
    )


def load_calendar(path: Union[str, Path]) -> BusinessCalendar:
    """Load a calendar definition from a JSON file."""
    with open(path, "r", encoding="utf-8") as fh:
        data = json.load(fh)
    logger.debug("Loaded calendar definition from %s", path)
    return calendar_from_dict(data)


def save_calendar(calendar: BusinessCalendar, path: Union[str, Path]) -> None:
    """Write a calendar definition as JSON."""
    with open(path, "w", encoding="utf-8") as fh:
        json.dump(calendar.to_dict(), fh, indent=2)


MON, THU = Weekday.MONDAY, Weekday.THURSDAY


def _singulars(*days: str) -> List[Singular]:
    return [Singular(date.fromisoformat(d)) for d in days]


# England & Wales bank holidays
UK_RULES: List[HolidayRule] = [
    FixedDateObserved(1, 1, WeekendShift.FORWARD),
    EasterOffset(-2),
    EasterOffset(1),
    NthWeekdayOfMonth(5, MON, 1, first_year=1978, skip_years=(1995, 2020)),
    NthWeekdayOfMonth(5, MON, -1, first_year=1971, skip_years=(2002, 2012, 2022)),
    NthWeekdayOfMonth(8, MON, -1, first_year=1971),
    FixedDateObserved(12, 25, WeekendShift.FORWARD),
    FixedDateObserved(12, 26, WeekendShift.FORWARD),
    *_singulars(
        "1995-05-08",  # VE day anniversary
        "1999-12-31",  # millennium
        "2002-06-03",  # golden jubilee
        "2002-06-04",
        "2011-04-29",  # royal wedding
        "2012-06-04",  # diamond jubilee
        "2012-06-05",
        "2020-05-08",  # VE day anniversary
        "2022-06-02",  # platinum jubilee
        "2022-06-03",
        "2022-09-19",  # state funeral
        "2023-05-08",  # coronation
    ),
]

TARGET_RULES: List[HolidayRule] = [
    FixedDate(1, 1),
    EasterOffset(-2, first_year=2000),
    EasterOffset(1, first_year=2000),
    FixedDate(5, 1, first_year=2000),
    FixedDate(12, 25),
    FixedDate(12, 26, first_year=2000),
    *_singulars("1999-12-31", "2001-12-31"),
]

# US government bond settlement (federal holidays)
US_RULES: List[HolidayRule] = [
    FixedDateObserved(1, 1, WeekendShift.NEAREST),
    NthWeekdayOfMonth(1, MON, 3, first_year=1983),
    NthWeekdayOfMonth(2, MON, 3),
    NthWeekdayOfMonth(5, MON, -1),
    FixedDateObserved(6, 19, WeekendShift.NEAREST, first_year=2022),
    FixedDateObserved(7, 4, WeekendShift.NEAREST),
    NthWeekdayOfMonth(9, MON, 1),
    NthWeekdayOfMonth(10, MON, 2),
    FixedDateObserved(11, 11, WeekendShift.NEAREST),
    NthWeekdayOfMonth(11, THU, 4),
    FixedDateObserved(12, 25, WeekendShift.NEAREST),
]

WEEKEND_ONLY = Calendar("WEEKEND")
UK = Calendar("UK", UK_RULES)
TARGET = Calendar("TARGET", TARGET_RULES)
US = Calendar("US", US_RULES)

# Calendar registry
CALENDARS: Dict[str, BusinessCalendar] = {
    "WEEKEND": WEEKEND_ONLY,
    "UK": UK,
    "GB": UK,  # Alias
    "TARGET": TARGET,
    "EUR": TARGET,  # Alias
    "US": US,
    "USD": US,  # Alias
}


def get_calendar(name: str) -> BusinessCalendar:
    """
    Get a predefined calendar by name.

    Joint calendars can be requested as ``"UK+TARGET"``.
    """
    key = name.upper().strip()
    if "+" in key:
        return UnionCalendar([get_calendar(part) for part in key.split("+")])
    if key not in CALENDARS:
        raise UnknownConvention(
            f"Unknown calendar: {name}. Available: {list(CALENDARS.keys())}"
        )
    return CALENDARS[key]
