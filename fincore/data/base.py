"""
Base abstractions for market data access.

Valuation code only depends on these protocols; concrete sources (database,
files, vendor feeds) live outside the core.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Protocol, runtime_checkable

from fincore.schedule.core import InstrumentTerms


@runtime_checkable
class QuoteSource(Protocol):
    """
    Protocol for price quote lookups.

    Implementations return the latest quote dated on or before ``as_of`` and
    raise ``fincore.exceptions.NotFound`` when there is none.
    """

    def get_quote(self, instrument_id: str, as_of: date) -> float:
        """
        Load the price of an instrument.

        Args:
            instrument_id: Identifier of the instrument (e.g. an ISIN)
            as_of: Latest admissible quote date

        Returns:
            Quoted (dirty) price
        """
        ...


@runtime_checkable
class InstrumentSource(Protocol):
    """Protocol for static instrument data."""

    def get_terms(self, instrument_id: str) -> InstrumentTerms:
        """Load the terms of an instrument, raising ``NotFound`` when unknown."""
        ...


class BaseMarketData(ABC):
    """
    Abstract base class for sources serving both quotes and terms.
    """

    @abstractmethod
    def get_quote(self, instrument_id: str, as_of: date) -> float:
        """Load a quote (to be implemented by subclasses)."""
        pass

    @abstractmethod
    def get_terms(self, instrument_id: str) -> InstrumentTerms:
        """Load instrument terms (to be implemented by subclasses)."""
        pass
