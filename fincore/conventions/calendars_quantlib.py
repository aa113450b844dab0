"""
QuantLib-backed calendar adapter.

Wraps a ``QuantLib.Calendar`` behind the ``BusinessCalendar`` contract so
that QuantLib's maintained market calendars can be used, or unioned with
rule-based calendars, wherever fincore expects a calendar.
"""

from datetime import date, datetime, timedelta
from typing import Any, Dict, FrozenSet, Union

import QuantLib as ql

from fincore.conventions.calendars import BusinessCalendar
from fincore.exceptions import UnknownConvention


def _to_ql_date(dt: Union[date, datetime]) -> ql.Date:
    """Convert Python date/datetime to QuantLib Date."""
    if isinstance(dt, datetime):
        dt = dt.date()
    return ql.Date(dt.day, dt.month, dt.year)


class QuantLibCalendar(BusinessCalendar):
    """Business day calendar delegating to a QuantLib calendar."""

    def __init__(self, name: str, ql_calendar: ql.Calendar):
        self.name = name
        self._ql_calendar = ql_calendar
        self._cache: Dict[int, FrozenSet[date]] = {}

    def is_weekend(self, dt: Union[date, datetime]) -> bool:
        return self._ql_calendar.isWeekend(_to_ql_date(dt).weekday())

    def is_holiday(self, dt: Union[date, datetime]) -> bool:
        """Check if date is a holiday (weekends excluded)."""
        ql_date = _to_ql_date(dt)
        return self._ql_calendar.isHoliday(ql_date) and not self._ql_calendar.isWeekend(ql_date.weekday())

    def is_business_day(self, dt: Union[date, datetime]) -> bool:
        return self._ql_calendar.isBusinessDay(_to_ql_date(dt))

    def holidays_in_year(self, year: int) -> FrozenSet[date]:
        cached = self._cache.get(year)
        if cached is not None:
            return cached
        days = set()
        current = date(year, 1, 1)
        while current.year == year:
            if self.is_holiday(current):
                days.add(current)
            current += timedelta(days=1)
        holidays = frozenset(days)
        self._cache[year] = holidays
        return holidays

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "quantlib": self.name}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, QuantLibCalendar):
            return NotImplemented
        return self.name == other.name

    def __hash__(self) -> int:
        return hash(("quantlib", self.name))

    def __repr__(self) -> str:
        return f"QuantLibCalendar({self.name!r})"


_QL_FACTORIES = {
    "TARGET": ql.TARGET,
    "WEEKEND": ql.WeekendsOnly,
    "UK": lambda: ql.UnitedKingdom(ql.UnitedKingdom.Settlement),
    "US": lambda: ql.UnitedStates(ql.UnitedStates.GovernmentBond),
}


def get_quantlib_calendar(name: str) -> QuantLibCalendar:
    """
    Get a QuantLib-backed calendar by name ("TARGET", "WEEKEND", "UK" or "US").
    """
    key = name.upper().strip()
    if key not in _QL_FACTORIES:
        raise UnknownConvention(
            f"Unknown QuantLib calendar: {name}. Available: {list(_QL_FACTORIES.keys())}"
        )
    return QuantLibCalendar(key, _QL_FACTORIES[key]())
