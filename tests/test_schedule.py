from dataclasses import replace
from datetime import date

import pandas as pd
import pytest

from fincore.conventions.calendars import UK, WEEKEND_ONLY
from fincore.conventions.daycount import DayCountConvention
from fincore.conventions.types import BusinessDayAdjustment, Frequency, StubPolicy
from fincore.exceptions import InvalidTerms
from fincore.schedule.core import Currency, InstrumentTerms, Schedule, SchedulePeriod
from fincore.schedule.generator import CashFlowScheduler, roll_out


def _unadjusted(terms, **changes):
    return replace(
        terms,
        calendar=WEEKEND_ONLY,
        adjustment=BusinessDayAdjustment.NO_ADJUSTMENT,
        **changes,
    )


def test_two_year_semiannual_bond(semiannual_terms):
    schedule = CashFlowScheduler().roll_out(semiannual_terms)

    assert len(schedule) == 4
    assert [cf.date for cf in schedule] == [
        date(2020, 7, 1),
        date(2021, 1, 4),
        date(2021, 7, 1),
        date(2022, 1, 4),
    ]
    for cf in schedule[:3]:
        assert cf.amount == pytest.approx(2.5, abs=0.03)
    assert schedule[-1].amount == pytest.approx(102.5, abs=0.03)
    assert all(not p.is_stub for p in schedule.periods)
    assert all(cf.currency == Currency("EUR") for cf in schedule)


def test_payment_dates_are_business_days_and_increasing(semiannual_terms, uk):
    schedule = roll_out(semiannual_terms)
    dates = [cf.date for cf in schedule]
    assert dates == sorted(set(dates))
    assert all(uk.is_business_day(d) for d in dates)


def test_accrual_uses_unadjusted_dates(semiannual_terms):
    schedule = roll_out(semiannual_terms)
    second, third = schedule.periods[1], schedule.periods[2]
    # Jan 1 2021 is a holiday: the payment moves, the accrual boundary doesn't
    assert second.payment_date == date(2021, 1, 4)
    assert second.accrual_end == date(2021, 1, 1)
    assert third.accrual_start == date(2021, 1, 1)
    assert second.year_fraction == pytest.approx(184 / 365)
    assert second.coupon == pytest.approx(0.05 * 184 / 365 * 100)


def test_coupons_follow_day_count(annual_terms):
    schedule = roll_out(annual_terms)
    assert [cf.amount for cf in schedule] == pytest.approx([5.0, 5.0, 105.0])
    assert sum(p.redemption for p in schedule.periods) == 100.0


def test_end_of_month_schedule_does_not_drift(annual_terms):
    terms = replace(
        annual_terms,
        issue_date=date(2021, 8, 31),
        maturity_date=date(2023, 8, 31),
        payment_frequency=2,
        end_of_month=False,
    )
    schedule = roll_out(terms)
    assert [p.accrual_end for p in schedule.periods] == [
        date(2022, 2, 28),
        date(2022, 8, 31),
        date(2023, 2, 28),
        date(2023, 8, 31),
    ]
    assert not any(p.is_stub for p in schedule.periods)


def test_end_of_month_rule_from_february(annual_terms):
    terms = replace(
        annual_terms,
        issue_date=date(2021, 2, 28),
        maturity_date=date(2022, 8, 31),
        payment_frequency=2,
        end_of_month=True,
    )
    schedule = roll_out(terms)
    assert [p.accrual_start for p in schedule.periods] == [
        date(2021, 2, 28),
        date(2021, 8, 31),
        date(2022, 2, 28),
    ]
    assert not any(p.is_stub for p in schedule.periods)


@pytest.mark.parametrize(
    "policy, boundaries, stub_index",
    [
        (
            StubPolicy.SHORT_FRONT,
            [date(2020, 3, 15), date(2020, 7, 1), date(2021, 1, 1), date(2021, 7, 1), date(2022, 1, 1)],
            0,
        ),
        (
            StubPolicy.LONG_FRONT,
            [date(2020, 3, 15), date(2021, 1, 1), date(2021, 7, 1), date(2022, 1, 1)],
            0,
        ),
        (
            StubPolicy.SHORT_BACK,
            [date(2020, 3, 15), date(2020, 9, 15), date(2021, 3, 15), date(2021, 9, 15), date(2022, 1, 1)],
            -1,
        ),
        (
            StubPolicy.LONG_BACK,
            [date(2020, 3, 15), date(2020, 9, 15), date(2021, 3, 15), date(2022, 1, 1)],
            -1,
        ),
    ],
)
def test_stub_policies(semiannual_terms, policy, boundaries, stub_index):
    terms = _unadjusted(semiannual_terms, issue_date=date(2020, 3, 15), stub_policy=policy)
    schedule = roll_out(terms)

    assert [p.accrual_start for p in schedule.periods] + [schedule.periods[-1].accrual_end] == boundaries
    stubs = [p.is_stub for p in schedule.periods]
    assert stubs[stub_index]
    assert sum(stubs) == 1


def test_monthly_schedule(semiannual_terms):
    terms = _unadjusted(semiannual_terms, maturity_date=date(2021, 1, 1), payment_frequency=12)
    schedule = roll_out(terms)
    assert len(schedule) == 12
    assert schedule[0].date == date(2020, 2, 1)


@pytest.mark.parametrize(
    "changes",
    [
        {"maturity_date": date(2019, 1, 1)},
        {"maturity_date": date(2020, 1, 1)},
        {"payment_frequency": 0},
        {"payment_frequency": 5},
        {"notional": 0.0},
    ],
)
def test_inconsistent_terms(semiannual_terms, changes):
    with pytest.raises(InvalidTerms):
        roll_out(replace(semiannual_terms, **changes))


def test_stub_payment_before_issue_rejected(semiannual_terms):
    # one-day front stub ends on Sunday 2021-05-30 and rolls back to Friday
    terms = replace(
        semiannual_terms,
        issue_date=date(2021, 5, 29),
        maturity_date=date(2022, 5, 30),
        adjustment=BusinessDayAdjustment.PRECEDING,
        stub_policy=StubPolicy.SHORT_FRONT,
    )
    with pytest.raises(InvalidTerms, match="before issue_date"):
        roll_out(terms)
    # following pushes the same payment to Tuesday (Monday is a bank holiday)
    schedule = roll_out(replace(terms, adjustment=BusinessDayAdjustment.FOLLOWING))
    assert schedule[0].date == date(2021, 6, 1)
    assert schedule.periods[0].is_stub


def test_terms_accept_frequency_enum(semiannual_terms):
    terms = replace(semiannual_terms, payment_frequency=Frequency.SEMIANNUAL)
    assert terms.payment_frequency == 2
    assert len(roll_out(terms)) == 4
    quarterly = replace(semiannual_terms, payment_frequency=Frequency.QUARTERLY)
    assert len(roll_out(quarterly)) == 8


def test_terms_accept_names_and_strings():
    terms = InstrumentTerms(
        issue_date="2020-01-01",
        maturity_date="20220101",
        coupon_rate=0.05,
        payment_frequency=2,
        day_count="ACT/365F",
        calendar="UK",
        currency="gbp",
        stub_policy="SHORT_FRONT",
        adjustment="FOLLOWING",
    )
    assert terms.issue_date == date(2020, 1, 1)
    assert terms.maturity_date == date(2022, 1, 1)
    assert terms.day_count is DayCountConvention.ACT_365F
    assert terms.calendar is UK
    assert terms.currency.code == "GBP"
    assert terms.stub_policy is StubPolicy.SHORT_FRONT


def test_schedule_rejects_colliding_payment_dates():
    period = SchedulePeriod(date(2021, 1, 1), date(2021, 7, 1), date(2021, 7, 1), 0.5, 2.5)
    clash = SchedulePeriod(date(2021, 7, 1), date(2021, 7, 2), date(2021, 7, 1), 0.0, 0.0)
    with pytest.raises(InvalidTerms):
        Schedule([period, clash], Currency("EUR"))


def test_schedule_views(semiannual_terms):
    schedule = roll_out(semiannual_terms)
    frame = schedule.to_frame()
    assert isinstance(frame, pd.DataFrame)
    assert len(frame) == 4
    assert frame["redemption"].tolist() == [0.0, 0.0, 0.0, 100.0]
    assert [cf.date for cf in schedule.after(date(2021, 1, 4))] == [date(2021, 7, 1), date(2022, 1, 4)]
    assert schedule.cash_flows == list(schedule)
    assert schedule.coupon_rate == 0.05
    assert schedule.day_count is DayCountConvention.ACT_365F
