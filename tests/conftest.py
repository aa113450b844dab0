from datetime import date

import pytest

from fincore.conventions.calendars import UK, WEEKEND_ONLY
from fincore.conventions.daycount import DayCountConvention
from fincore.conventions.types import BusinessDayAdjustment
from fincore.schedule.core import InstrumentTerms


@pytest.fixture(scope="module")
def uk():
    return UK


@pytest.fixture
def semiannual_terms():
    """2Y semi-annual 5% bond on ACT/365F, paid on the UK calendar."""
    return InstrumentTerms(
        issue_date=date(2020, 1, 1),
        maturity_date=date(2022, 1, 1),
        coupon_rate=0.05,
        payment_frequency=2,
        day_count=DayCountConvention.ACT_365F,
        calendar=UK,
        adjustment=BusinessDayAdjustment.FOLLOWING,
        notional=100.0,
    )


@pytest.fixture
def annual_terms():
    """3Y annual 5% bond on 30E/360 with unadjusted payments."""
    return InstrumentTerms(
        issue_date=date(2020, 1, 1),
        maturity_date=date(2023, 1, 1),
        coupon_rate=0.05,
        payment_frequency=1,
        day_count=DayCountConvention.THIRTY_360_EU,
        calendar=WEEKEND_ONLY,
        adjustment=BusinessDayAdjustment.NO_ADJUSTMENT,
        notional=100.0,
    )
