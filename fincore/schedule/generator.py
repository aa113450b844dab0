"""
Cash-flow roll-out for fixed-coupon instruments.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import List

from fincore.business_calendar.date_utils import apply_end_of_month_rule
from fincore.conventions.types import StubPolicy
from fincore.exceptions import InvalidTerms

from .core import InstrumentTerms, Schedule, SchedulePeriod

logger = logging.getLogger(__name__)


class CashFlowScheduler:
    """Generates the coupon and redemption schedule of an instrument.

    Front stubs (the market default) come from generating dates backwards
    from maturity; back stubs from generating forwards from issue. Every
    regular date is derived from the anchor by a whole number of periods
    rather than by chaining, so month-end clamping never drifts the roll day
    (Aug 31 -> Feb 28 -> Aug 31, not Aug 28).
    """

    def roll_out(self, terms: InstrumentTerms) -> Schedule:
        """Roll out the full payment schedule for ``terms``."""
        self._validate(terms)
        unadjusted = self._generate_unadjusted_dates(terms)
        logger.debug(
            "Rolled out %d unadjusted dates from %s to %s (%s)",
            len(unadjusted),
            unadjusted[0],
            unadjusted[-1],
            terms.stub_policy.value,
        )

        period_months = 12 // terms.payment_frequency
        last = len(unadjusted) - 2
        periods: List[SchedulePeriod] = []
        for i in range(len(unadjusted) - 1):
            start_unadj = unadjusted[i]
            end_unadj = unadjusted[i + 1]

            # Accrual runs on unadjusted dates; only the payment moves
            year_frac = terms.day_count.year_fraction(start_unadj, end_unadj)
            payment = terms.calendar.adjust(end_unadj, terms.adjustment)

            periods.append(
                SchedulePeriod(
                    accrual_start=start_unadj,
                    accrual_end=end_unadj,
                    payment_date=payment,
                    year_fraction=year_frac,
                    coupon=terms.coupon_rate * year_frac * terms.notional,
                    redemption=terms.notional if i == last else 0.0,
                    is_stub=self._is_stub_period(start_unadj, end_unadj, period_months, terms.end_of_month),
                )
            )

        if periods[0].payment_date < terms.issue_date:
            raise InvalidTerms(
                f"first payment {periods[0].payment_date} adjusts ({terms.adjustment.value}) "
                f"to before issue_date {terms.issue_date}"
            )

        return Schedule(
            periods,
            currency=terms.currency,
            coupon_rate=terms.coupon_rate,
            notional=terms.notional,
            day_count=terms.day_count,
        )

    @staticmethod
    def _validate(terms: InstrumentTerms) -> None:
        if terms.maturity_date <= terms.issue_date:
            raise InvalidTerms(
                f"maturity_date {terms.maturity_date} must be after issue_date {terms.issue_date}"
            )
        if terms.payment_frequency <= 0:
            raise InvalidTerms(f"payment_frequency must be positive, got {terms.payment_frequency}")
        if 12 % terms.payment_frequency != 0:
            raise InvalidTerms(
                f"payment_frequency must divide 12 (1, 2, 3, 4, 6 or 12), got {terms.payment_frequency}"
            )
        if terms.notional <= 0:
            raise InvalidTerms(f"notional must be positive, got {terms.notional}")

    def _generate_unadjusted_dates(self, terms: InstrumentTerms) -> List[date]:
        """Generate unadjusted schedule dates, issue date first."""
        if terms.stub_policy in (StubPolicy.SHORT_FRONT, StubPolicy.LONG_FRONT):
            return self._generate_front_stub_schedule(terms)
        if terms.stub_policy in (StubPolicy.SHORT_BACK, StubPolicy.LONG_BACK):
            return self._generate_back_stub_schedule(terms)
        raise InvalidTerms(f"Unsupported stub policy: {terms.stub_policy}")

    def _generate_front_stub_schedule(self, terms: InstrumentTerms) -> List[date]:
        """Work backwards from maturity; any irregular period lands at the front."""
        months = 12 // terms.payment_frequency
        issue, maturity = terms.issue_date, terms.maturity_date

        # regular dates strictly after issue, latest first
        regular = [maturity]
        k = 1
        while True:
            prev_date = apply_end_of_month_rule(maturity, -k * months, terms.end_of_month)
            if prev_date <= issue:
                break
            regular.append(prev_date)
            k += 1
        regular.reverse()

        if prev_date == issue:
            return [issue] + regular

        if terms.stub_policy == StubPolicy.LONG_FRONT and len(regular) > 1:
            # merge the would-be short first period into the next one
            return [issue] + regular[1:]
        return [issue] + regular

    def _generate_back_stub_schedule(self, terms: InstrumentTerms) -> List[date]:
        """Work forwards from issue; any irregular period lands at the back."""
        months = 12 // terms.payment_frequency
        issue, maturity = terms.issue_date, terms.maturity_date

        dates = [issue]
        k = 1
        while True:
            next_date = apply_end_of_month_rule(issue, k * months, terms.end_of_month)
            if next_date >= maturity:
                break
            dates.append(next_date)
            k += 1

        if next_date != maturity and terms.stub_policy == StubPolicy.LONG_BACK and len(dates) > 1:
            # fold the short final period into the previous one
            dates.pop()
        dates.append(maturity)
        return dates

    @staticmethod
    def _is_stub_period(start: date, end: date, period_months: int, end_of_month: bool) -> bool:
        """A period is regular if ``end`` lies exactly one period after ``start``."""
        return apply_end_of_month_rule(start, period_months, end_of_month) != end and (
            apply_end_of_month_rule(end, -period_months, end_of_month) != start
        )


def roll_out(terms: InstrumentTerms) -> Schedule:
    """Roll out the schedule for ``terms`` with the default scheduler."""
    return CashFlowScheduler().roll_out(terms)
