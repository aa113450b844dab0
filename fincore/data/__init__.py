"""
Market data boundary.

Provides the protocols valuation code depends on, an in-memory
implementation and quote time series.
"""

from .base import BaseMarketData, InstrumentSource, QuoteSource
from .memory import InMemoryMarketData, value_instrument
from .time_series import TimeSeries, TimeValue

__all__ = [
    # Base abstractions
    "QuoteSource",
    "InstrumentSource",
    "BaseMarketData",
    # Concrete implementations
    "InMemoryMarketData",
    "value_instrument",
    # Time series
    "TimeSeries",
    "TimeValue",
]
