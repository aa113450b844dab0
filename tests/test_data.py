from datetime import date

import pandas as pd
import pytest

from fincore.conventions.calendars import Calendar
from fincore.conventions.holidays import Singular
from fincore.data import (
    InMemoryMarketData,
    InstrumentSource,
    QuoteSource,
    TimeSeries,
    TimeValue,
    value_instrument,
)
from fincore.exceptions import NotFound


@pytest.fixture
def market(annual_terms):
    source = InMemoryMarketData()
    source.add_terms("BOND3Y", annual_terms)
    source.add_quote("BOND3Y", date(2020, 1, 1), 100.0)
    source.add_quote("BOND3Y", "2020-01-06", 99.5)
    return source


def test_implements_both_protocols(market):
    assert isinstance(market, QuoteSource)
    assert isinstance(market, InstrumentSource)


def test_latest_quote_on_or_before(market):
    assert market.get_quote("BOND3Y", date(2020, 1, 1)) == 100.0
    assert market.get_quote("BOND3Y", date(2020, 1, 3)) == 100.0
    assert market.get_quote("BOND3Y", date(2020, 1, 6)) == 99.5
    assert market.get_quote("BOND3Y", date(2021, 1, 1)) == 99.5


def test_quote_overwrite(market):
    market.add_quote("BOND3Y", date(2020, 1, 6), 99.75)
    assert market.get_quote("BOND3Y", date(2020, 1, 6)) == 99.75


def test_missing_data_raises_not_found(market):
    with pytest.raises(NotFound):
        market.get_quote("BOND3Y", date(2019, 12, 31))
    with pytest.raises(NotFound):
        market.get_quote("OTHER", date(2020, 1, 1))
    with pytest.raises(LookupError):
        market.get_terms("OTHER")


def test_value_instrument(market):
    result = value_instrument(market, "BOND3Y", date(2020, 1, 1))
    assert result.yield_rate == pytest.approx(0.05, abs=1e-6)
    later = value_instrument(market, "BOND3Y", date(2020, 1, 6))
    assert later.yield_rate > 0.05


def test_value_instrument_with_separate_quote_source(market):
    quotes = InMemoryMarketData()
    quotes.add_quote("BOND3Y", date(2020, 1, 1), 100.0)
    result = value_instrument(market, "BOND3Y", date(2020, 1, 2), quotes=quotes)
    assert result.converged


def test_find_gaps():
    cal = Calendar(
        "TEST",
        [Singular(date(2021, 11, 4)), Singular(date(2021, 11, 5)), Singular(date(2021, 11, 8))],
    )
    ts = TimeSeries(
        "test",
        [
            TimeValue(date(2021, 10, 28), 1.0),
            TimeValue(date(2021, 11, 1), 1.0),
            TimeValue(date(2021, 11, 8), 1.0),
            TimeValue(date(2021, 11, 9), 1.0),
        ],
    )
    gaps = ts.find_gaps(cal, until=date(2021, 11, 12))
    assert gaps == [
        (date(2021, 10, 29), date(2021, 10, 29)),
        (date(2021, 11, 2), date(2021, 11, 3)),
        (date(2021, 11, 10), date(2021, 11, 12)),
    ]


def test_min_max():
    ts = TimeSeries("px")
    ts.add("2021-01-05", 3.0)
    ts.add(date(2021, 1, 4), 1.0)
    ts.add(pd.Timestamp("2021-01-06"), 2.0)
    assert ts.min_max() == (date(2021, 1, 4), date(2021, 1, 6), 1.0, 3.0)
    series = ts.to_series()
    assert series.tolist() == [1.0, 3.0, 2.0]
    assert series.name == "px"


def test_empty_series():
    with pytest.raises(ValueError):
        TimeSeries("empty").min_max()
