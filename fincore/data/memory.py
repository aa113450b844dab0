"""
In-memory market data source backed by pandas series.
"""

from __future__ import annotations

import logging
from typing import Dict, Optional

import pandas as pd

from fincore.bond.analytics import YieldResult, YieldSolver
from fincore.config import DEFAULT_SOLVER_CONFIG, SolverConfig
from fincore.exceptions import NotFound
from fincore.schedule.core import InstrumentTerms
from fincore.schedule.generator import CashFlowScheduler
from fincore.utils.date import DateLike, to_date

from .base import BaseMarketData, InstrumentSource, QuoteSource

logger = logging.getLogger(__name__)


class InMemoryMarketData(BaseMarketData):
    """Quotes and terms held in memory, mainly for tests and notebooks.

    Quotes are stored per instrument as a date-indexed ``pd.Series``.
    """

    def __init__(self):
        self._terms: Dict[str, InstrumentTerms] = {}
        self._quotes: Dict[str, pd.Series] = {}

    def add_terms(self, instrument_id: str, terms: InstrumentTerms) -> None:
        self._terms[instrument_id] = terms

    def add_quote(self, instrument_id: str, as_of: DateLike, price: float) -> None:
        """Insert or overwrite the quote of ``instrument_id`` on ``as_of``."""
        stamp = pd.Timestamp(to_date(as_of))
        new = pd.Series([float(price)], index=pd.DatetimeIndex([stamp]))
        series = self._quotes.get(instrument_id)
        if series is not None:
            new = pd.concat([series[series.index != stamp], new])
        self._quotes[instrument_id] = new.sort_index()

    def get_terms(self, instrument_id: str) -> InstrumentTerms:
        try:
            return self._terms[instrument_id]
        except KeyError:
            raise NotFound(f"No terms for instrument {instrument_id}") from None

    def get_quote(self, instrument_id: str, as_of: DateLike) -> float:
        """Latest quote dated on or before ``as_of``."""
        series = self._quotes.get(instrument_id)
        if series is None or series.empty:
            raise NotFound(f"No quotes for instrument {instrument_id}")
        eligible = series.loc[: pd.Timestamp(to_date(as_of))]
        if eligible.empty:
            raise NotFound(f"No quote for instrument {instrument_id} on or before {to_date(as_of)}")
        return float(eligible.iloc[-1])


def value_instrument(
    source: InstrumentSource,
    instrument_id: str,
    as_of: DateLike,
    quotes: Optional[QuoteSource] = None,
    config: SolverConfig = DEFAULT_SOLVER_CONFIG,
) -> YieldResult:
    """Yield and risk figures of an instrument at its latest quote.

    ``quotes`` defaults to ``source`` for sources serving both protocols.
    The schedule is valued with the instrument's own day count.
    """
    valuation = to_date(as_of)
    terms = source.get_terms(instrument_id)
    schedule = CashFlowScheduler().roll_out(terms)
    price = (quotes or source).get_quote(instrument_id, valuation)
    logger.debug("Valuing %s at %s from price %s", instrument_id, valuation, price)
    return YieldSolver(config).solve_yield(schedule, valuation, price, terms.day_count)
