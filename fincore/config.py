"""Explicit configuration values for the valuation core.

Nothing here is read from the environment; callers pass a config object (or
rely on the defaults below) at the point of use.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from fincore.conventions.types import BusinessDayAdjustment, StubPolicy

# Default market settings
_DEFAULT_MAX_ITER = 100
_DEFAULT_TOLERANCE = 1e-6
_DEFAULT_STEP_CLAMP = 0.05
_DEFAULT_BRACKET = (-0.95, 5.0)
_DEFAULT_INITIAL_GUESS = 0.05
_DEFAULT_NOTIONAL = 100.0
_DEFAULT_CURRENCY = "EUR"


@dataclass(frozen=True)
class SolverConfig:
    """Settings for the yield root-finder.

    Attributes:
        max_iter: Total iteration budget (Newton plus bisection fallback).
        tolerance: Absolute tolerance on ``|PV(r) - price|``.
        step_clamp: Largest absolute Newton step (0.05 = 500 bp).
        bracket: Lower and upper bound for the rate.
        initial_guess: Start value when the schedule carries no coupon rate.
    """

    max_iter: int = _DEFAULT_MAX_ITER
    tolerance: float = _DEFAULT_TOLERANCE
    step_clamp: float = _DEFAULT_STEP_CLAMP
    bracket: Tuple[float, float] = _DEFAULT_BRACKET
    initial_guess: float = _DEFAULT_INITIAL_GUESS

    def __post_init__(self):
        if self.max_iter <= 0:
            raise ValueError("max_iter must be positive")
        if self.tolerance <= 0:
            raise ValueError("tolerance must be positive")
        lower, upper = self.bracket
        if not -1.0 < lower < upper:
            raise ValueError("bracket must satisfy -1 < lower < upper")


@dataclass(frozen=True)
class ScheduleDefaults:
    """Defaults applied to instrument terms that leave a field unset."""

    adjustment: BusinessDayAdjustment = BusinessDayAdjustment.FOLLOWING
    stub_policy: StubPolicy = StubPolicy.SHORT_FRONT
    end_of_month: bool = True
    notional: float = _DEFAULT_NOTIONAL
    currency: str = _DEFAULT_CURRENCY


DEFAULT_SOLVER_CONFIG = SolverConfig()
DEFAULT_SCHEDULE = ScheduleDefaults()
