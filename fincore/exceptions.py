"""Error kinds raised across fincore.

Every failure surfaces as one of these exceptions rather than a sentinel
value. Each kind also derives from the builtin exception a caller would
naturally catch (``ValueError`` for bad input, ``RuntimeError`` for numerical
failure, ``LookupError`` for missing data).
"""

from __future__ import annotations

from typing import Optional


class FincoreError(Exception):
    """Base class for all fincore errors."""


class InvalidPeriodFormat(FincoreError, ValueError):
    """Raised when a tenor string is not ``[sign]digits`` followed by D/W/M/Y."""


class InvalidDateRange(FincoreError, ValueError):
    """Raised when an interval ends before it starts."""


class InvalidTerms(FincoreError, ValueError):
    """Raised when instrument terms are inconsistent."""


class UnknownConvention(FincoreError, ValueError):
    """Raised when a calendar or day count name is not registered."""


class CurrencyError(FincoreError, ValueError):
    """Raised for malformed ISO codes or mixed-currency arithmetic."""


class NoCashFlowsAfterValuationDate(FincoreError, ValueError):
    """Raised when no cash flow remains strictly after the valuation date."""


class NotFound(FincoreError, LookupError):
    """Raised by data sources when a requested quote or instrument is absent."""


class NonConvergent(FincoreError, RuntimeError):
    """Raised when root-finding exhausts its iteration budget.

    ``last_estimate`` is kept for diagnostics only; it is not a valid result.
    """

    def __init__(
        self,
        message: str,
        last_estimate: Optional[float] = None,
        iterations: int = 0,
    ):
        super().__init__(message)
        self.last_estimate = last_estimate
        self.iterations = iterations
