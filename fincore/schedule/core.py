"""
Core data structures for cash-flow schedules.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Iterator, List, Mapping, Optional, Sequence, Tuple, Union

import pandas as pd

from fincore.config import DEFAULT_SCHEDULE
from fincore.conventions.calendars import BusinessCalendar, get_calendar
from fincore.conventions.daycount import DayCountConvention
from fincore.conventions.types import BusinessDayAdjustment, Frequency, StubPolicy
from fincore.exceptions import CurrencyError, InvalidTerms
from fincore.utils.date import DateLike, to_date

_ZERO_DIGIT_CURRENCIES = ("JPY", "TRL")


@dataclass(frozen=True)
class Currency:
    """Three-letter ISO currency code (case-insensitive on input)."""

    code: str
    rounding_digits: Optional[int] = field(default=None, compare=False)

    def __post_init__(self):
        code = self.code
        if not isinstance(code, str) or len(code) != 3:
            raise CurrencyError("currency codes must consist of exactly three characters")
        if not all(c.isascii() and c.isalpha() for c in code):
            raise CurrencyError("currency codes must contain only alphabetic ASCII characters")
        code = code.upper()
        object.__setattr__(self, "code", code)
        if self.rounding_digits is None:
            digits = 0 if code in _ZERO_DIGIT_CURRENCIES else 2
            object.__setattr__(self, "rounding_digits", digits)

    @classmethod
    def from_str(cls, code: Union[str, "Currency"]) -> "Currency":
        if isinstance(code, Currency):
            return code
        return cls(code)

    def __str__(self) -> str:
        return self.code


def round_digits(x: float, digits: int) -> float:
    return round(x * 10.0 ** digits) / 10.0 ** digits


@dataclass(frozen=True)
class CashAmount:
    """An amount of money in some currency."""

    amount: float
    currency: Currency

    def _check(self, other: "CashAmount") -> None:
        if other.currency != self.currency:
            raise CurrencyError(
                f"cannot combine {self.currency} and {other.currency} amounts without an FX rate"
            )

    def __add__(self, other: "CashAmount") -> "CashAmount":
        self._check(other)
        return CashAmount(self.amount + other.amount, self.currency)

    def __sub__(self, other: "CashAmount") -> "CashAmount":
        self._check(other)
        return CashAmount(self.amount - other.amount, self.currency)

    def __neg__(self) -> "CashAmount":
        return CashAmount(-self.amount, self.currency)

    def round(self, digits: int) -> "CashAmount":
        return CashAmount(round_digits(self.amount, digits), self.currency)

    def round_by_convention(self, conventions: Optional[Mapping[str, int]] = None) -> "CashAmount":
        """Round to the digits configured for the currency (two by default)."""
        conventions = conventions or {}
        return self.round(conventions.get(self.currency.code, 2))

    def __str__(self) -> str:
        return f"{self.amount:16.4f} {self.currency}"


@dataclass(frozen=True)
class CashFlow:
    """A single signed payment."""

    date: date
    amount: float
    currency: Currency

    @property
    def cash_amount(self) -> CashAmount:
        return CashAmount(self.amount, self.currency)

    def aggregatable(self, other: "CashFlow") -> bool:
        """Check whether two flows could be merged (same date and currency)."""
        return self.currency == other.currency and self.date == other.date

    def fuzzy_eq(self, other: "CashFlow", tol: float) -> bool:
        """Compare for equality within an absolute tolerance on the amount."""
        if not self.aggregatable(other):
            return False
        if pd.isna(self.amount) or pd.isna(other.amount):
            return False
        return abs(self.amount - other.amount) <= tol

    def __neg__(self) -> "CashFlow":
        return CashFlow(self.date, -self.amount, self.currency)

    def __str__(self) -> str:
        return f"{self.date} {self.cash_amount}"


@dataclass(frozen=True)
class SchedulePeriod:
    """Represents a single accrual period in a payment schedule.

    Accrual dates are unadjusted; only the payment date is moved to a
    business day.
    """

    accrual_start: date
    accrual_end: date
    payment_date: date
    year_fraction: float
    coupon: float
    redemption: float = 0.0
    is_stub: bool = False

    @property
    def accrual_days(self) -> int:
        """Number of calendar days in accrual period."""
        return (self.accrual_end - self.accrual_start).days

    @property
    def amount(self) -> float:
        return self.coupon + self.redemption


class Schedule(Sequence[CashFlow]):
    """Cash flows of one instrument, strictly increasing by payment date.

    Iterating yields ``CashFlow`` objects; the accrual detail behind each
    flow is available through ``periods``.
    """

    def __init__(
        self,
        periods: Sequence[SchedulePeriod],
        currency: Currency,
        coupon_rate: Optional[float] = None,
        notional: Optional[float] = None,
        day_count: Optional[DayCountConvention] = None,
    ):
        self.periods: Tuple[SchedulePeriod, ...] = tuple(periods)
        self.currency = currency
        self.coupon_rate = coupon_rate
        self.notional = notional
        self.day_count = day_count
        for prev, nxt in zip(self.periods, self.periods[1:]):
            if nxt.payment_date <= prev.payment_date:
                raise InvalidTerms(
                    f"payment dates must be strictly increasing: {prev.payment_date} >= {nxt.payment_date}"
                )
        self._flows: Tuple[CashFlow, ...] = tuple(
            CashFlow(p.payment_date, p.amount, currency) for p in self.periods
        )

    @property
    def cash_flows(self) -> List[CashFlow]:
        return list(self._flows)

    def __getitem__(self, index):
        return self._flows[index]

    def __len__(self) -> int:
        return len(self._flows)

    def __iter__(self) -> Iterator[CashFlow]:
        return iter(self._flows)

    def after(self, valuation_date: DateLike) -> List[CashFlow]:
        """Cash flows paid strictly after ``valuation_date``."""
        cutoff = to_date(valuation_date)
        return [cf for cf in self._flows if cf.date > cutoff]

    def to_frame(self) -> pd.DataFrame:
        """Tabular view of the schedule, one row per period."""
        return pd.DataFrame(
            {
                "accrual_start": [p.accrual_start for p in self.periods],
                "accrual_end": [p.accrual_end for p in self.periods],
                "payment_date": [p.payment_date for p in self.periods],
                "year_fraction": [p.year_fraction for p in self.periods],
                "coupon": [p.coupon for p in self.periods],
                "redemption": [p.redemption for p in self.periods],
                "amount": [p.amount for p in self.periods],
                "is_stub": [p.is_stub for p in self.periods],
            }
        )

    def __repr__(self) -> str:
        return f"Schedule({len(self)} flows, currency={self.currency})"


@dataclass(frozen=True)
class InstrumentTerms:
    """Prospectus terms of a fixed-coupon bullet bond.

    ``payment_frequency`` is in payments per year and must divide 12.
    A ``Frequency`` member is stored as its payments-per-year value.
    Strings are accepted for dates, the day count, the calendar and the
    currency and converted on construction; consistency is checked when the
    schedule is rolled out.
    """

    issue_date: date
    maturity_date: date
    coupon_rate: float
    payment_frequency: Union[int, Frequency]
    day_count: DayCountConvention
    calendar: BusinessCalendar
    adjustment: BusinessDayAdjustment = DEFAULT_SCHEDULE.adjustment
    stub_policy: StubPolicy = DEFAULT_SCHEDULE.stub_policy
    notional: float = DEFAULT_SCHEDULE.notional
    currency: Currency = Currency(DEFAULT_SCHEDULE.currency)
    end_of_month: bool = DEFAULT_SCHEDULE.end_of_month

    def __post_init__(self):
        object.__setattr__(self, "issue_date", to_date(self.issue_date))
        object.__setattr__(self, "maturity_date", to_date(self.maturity_date))
        object.__setattr__(self, "day_count", DayCountConvention.from_name(self.day_count))
        if isinstance(self.payment_frequency, Frequency):
            object.__setattr__(self, "payment_frequency", self.payment_frequency.value)
        if isinstance(self.calendar, str):
            object.__setattr__(self, "calendar", get_calendar(self.calendar))
        object.__setattr__(self, "adjustment", BusinessDayAdjustment(self.adjustment))
        object.__setattr__(self, "stub_policy", StubPolicy(self.stub_policy))
        object.__setattr__(self, "currency", Currency.from_str(self.currency))
