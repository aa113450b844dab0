"""Dated value series and calendar gap detection."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional, Tuple

import pandas as pd

from fincore.conventions.calendars import BusinessCalendar
from fincore.utils.date import DateLike, to_date


@dataclass(frozen=True)
class TimeValue:
    time: date
    value: float

    def __post_init__(self):
        object.__setattr__(self, "time", to_date(self.time))


@dataclass
class TimeSeries:
    """A titled series of values, kept in time order."""

    title: str
    series: List[TimeValue] = field(default_factory=list)

    def __post_init__(self):
        self.series = sorted(self.series, key=lambda tv: tv.time)

    def add(self, time: DateLike, value: float) -> None:
        self.series.append(TimeValue(to_date(time), float(value)))
        self.series.sort(key=lambda tv: tv.time)

    def min_max(self) -> Tuple[date, date, float, float]:
        """First date, last date, minimum and maximum value."""
        if not self.series:
            raise ValueError(f"Time series {self.title!r} is empty")
        values = [tv.value for tv in self.series]
        return self.series[0].time, self.series[-1].time, min(values), max(values)

    def find_gaps(
        self, calendar: BusinessCalendar, until: Optional[DateLike] = None
    ) -> List[Tuple[date, date]]:
        """Business-day ranges without a value, from the first entry to ``until``.

        Each gap is an inclusive ``(first, last)`` pair of business days. A gap
        still open at ``until`` ends at ``until``, which defaults to today.
        """
        first, _, _, _ = self.min_max()
        end = to_date(until) if until is not None else date.today()
        dates = {tv.time for tv in self.series}

        gaps: List[Tuple[date, date]] = []
        gap_begin = None
        day = first
        while day <= end:
            if gap_begin is None:
                if day not in dates:
                    gap_begin = day
            elif day in dates:
                gaps.append((gap_begin, calendar.prev_business_day(day)))
                gap_begin = None
            day = calendar.next_business_day(day)

        if gap_begin is not None:
            gaps.append((gap_begin, end))
        return gaps

    def to_series(self) -> pd.Series:
        return pd.Series(
            [tv.value for tv in self.series],
            index=pd.DatetimeIndex([pd.Timestamp(tv.time) for tv in self.series]),
            name=self.title,
        )
