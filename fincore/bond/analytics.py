"""Yield-to-maturity, duration and convexity from a cash-flow schedule.

Compounding convention
----------------------
Every figure in this module discounts with *annual compounding on the
day-count year fraction*::

    v(t) = (1 + r) ** (-t),   t = day_count.year_fraction(valuation_date, pay_date)

so ``PV(r) = sum(a_i * v(t_i))`` over cash flows paid strictly after the
valuation date. Durations and convexity are the analytic first and second
derivatives of that expression:

    macaulay  = sum(t_i a_i v_i) / PV
    modified  = macaulay / (1 + r)
    convexity = sum(a_i t_i (t_i + 1) (1 + r) ** (-t_i - 2)) / PV
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Optional, Sequence, Tuple, Union

import logging

import numpy as np

from fincore.config import DEFAULT_SOLVER_CONFIG, SolverConfig
from fincore.conventions.daycount import DayCountConvention
from fincore.exceptions import NoCashFlowsAfterValuationDate, NonConvergent
from fincore.schedule.core import CashFlow, Schedule
from fincore.utils.date import DateLike, to_date
from fincore.utils.rootfinding import newton_with_bisect

logger = logging.getLogger(__name__)

DayCountLike = Union[DayCountConvention, str]


@dataclass(frozen=True)
class YieldResult:
    yield_rate: float
    macaulay_duration: float
    modified_duration: float
    convexity: float
    iterations_used: int
    converged: bool
    method: str = "newton"


def get_cash_flows_after(cash_flows: Iterable[CashFlow], valuation_date: DateLike) -> List[CashFlow]:
    """Filter cash flows strictly after the valuation date."""
    cutoff = to_date(valuation_date)
    return [cf for cf in cash_flows if cf.date > cutoff]


def _times_and_amounts(
    cash_flows: Iterable[CashFlow],
    valuation_date: date,
    day_count: DayCountConvention,
) -> Tuple[np.ndarray, np.ndarray]:
    future = get_cash_flows_after(cash_flows, valuation_date)
    if not future:
        raise NoCashFlowsAfterValuationDate(f"No cash flows after {valuation_date}")
    currencies = {cf.currency for cf in future}
    if len(currencies) > 1:
        raise ValueError(f"Cash flows must share one currency, got {sorted(map(str, currencies))}")
    times = np.array([day_count.year_fraction(valuation_date, cf.date) for cf in future])
    amounts = np.array([cf.amount for cf in future])
    return times, amounts


def _pv_and_derivatives(times: np.ndarray, amounts: np.ndarray, rate: float) -> Tuple[float, float, float]:
    """PV and its first two derivatives with respect to ``rate``."""
    base = 1.0 + rate
    discount = base ** (-times)
    pv = float(np.sum(amounts * discount))
    d1 = float(np.sum(-times * amounts * discount / base))
    d2 = float(np.sum(times * (times + 1.0) * amounts * discount / base ** 2))
    return pv, d1, d2


def present_value(
    cash_flows: Iterable[CashFlow],
    valuation_date: DateLike,
    rate: float,
    day_count: DayCountLike = DayCountConvention.ACT_365F,
) -> float:
    """Dirty price of the cash flows after ``valuation_date`` at yield ``rate``."""
    if rate <= -1.0:
        raise ValueError("rate must be greater than -100%")
    times, amounts = _times_and_amounts(
        cash_flows, to_date(valuation_date), DayCountConvention.from_name(day_count)
    )
    return _pv_and_derivatives(times, amounts, rate)[0]


class YieldSolver:
    """Solves for the flat annually-compounded yield implied by a price."""

    def __init__(self, config: SolverConfig = DEFAULT_SOLVER_CONFIG):
        self.config = config

    def solve_yield(
        self,
        schedule: Union[Schedule, Sequence[CashFlow]],
        valuation_date: DateLike,
        price: float,
        day_count: DayCountLike = DayCountConvention.ACT_365F,
        guess: Optional[float] = None,
    ) -> YieldResult:
        """Find ``r`` with ``PV(r) == price`` and the risk figures at ``r``.

        ``price`` is the dirty price in the same units as the cash flow
        amounts. The start value is ``guess``, else the schedule's coupon
        rate, else ``config.initial_guess``.
        """
        valuation = to_date(valuation_date)
        dc = DayCountConvention.from_name(day_count)
        times, amounts = _times_and_amounts(schedule, valuation, dc)

        if guess is None:
            guess = getattr(schedule, "coupon_rate", None)
        if guess is None:
            guess = self.config.initial_guess

        def func_and_deriv(r: float) -> Tuple[float, float]:
            pv, d1, _ = _pv_and_derivatives(times, amounts, r)
            return pv - price, d1

        cfg = self.config
        try:
            result = newton_with_bisect(
                func_and_deriv,
                guess,
                tol_value=cfg.tolerance,
                max_iter=cfg.max_iter,
                clamp=cfg.step_clamp,
                bracket=cfg.bracket,
            )
        except NonConvergent as exc:
            logger.error("Yield solve failed for price %s at %s: %s", price, valuation, exc)
            raise
        logger.debug("Yield solved after %s iterations via %s", result.iterations, result.method)

        rate = result.root
        pv, d1, d2 = _pv_and_derivatives(times, amounts, rate)
        macaulay = float(np.sum(times * amounts * (1.0 + rate) ** (-times))) / pv
        return YieldResult(
            yield_rate=rate,
            macaulay_duration=macaulay,
            modified_duration=macaulay / (1.0 + rate),
            convexity=d2 / pv,
            iterations_used=result.iterations,
            converged=result.converged,
            method=result.method,
        )


def solve_yield(
    schedule: Union[Schedule, Sequence[CashFlow]],
    valuation_date: DateLike,
    price: float,
    day_count: DayCountLike = DayCountConvention.ACT_365F,
    config: SolverConfig = DEFAULT_SOLVER_CONFIG,
) -> YieldResult:
    """Module-level shortcut for ``YieldSolver(config).solve_yield(...)``."""
    return YieldSolver(config).solve_yield(schedule, valuation_date, price, day_count)


def cash_flows_irr(
    cash_flows: Sequence[CashFlow],
    purchase: CashFlow,
    day_count: DayCountLike = DayCountConvention.ACT_365F,
    config: SolverConfig = DEFAULT_SOLVER_CONFIG,
) -> float:
    """Annual rate at which the purchase payment and later flows net to zero.

    ``purchase`` is the (negative) amount paid on the purchase date; only
    flows after that date count.
    """
    if purchase.amount >= 0:
        raise ValueError("purchase cash flow must be a payment (negative amount)")
    result = YieldSolver(config).solve_yield(
        cash_flows, purchase.date, -purchase.amount, day_count, guess=config.initial_guess
    )
    return result.yield_rate


def accrued_interest(schedule: Schedule, settlement_date: DateLike) -> float:
    """Coupon accrued in the period containing ``settlement_date``.

    Pro rata on the schedule's day count (actual days when the schedule
    carries none); zero outside the schedule.
    """
    settlement = to_date(settlement_date)
    for period in schedule.periods:
        if period.accrual_start <= settlement < period.accrual_end:
            if schedule.day_count is not None and period.year_fraction > 0:
                elapsed = schedule.day_count.year_fraction(period.accrual_start, settlement)
                return period.coupon * elapsed / period.year_fraction
            return period.coupon * (settlement - period.accrual_start).days / period.accrual_days
    return 0.0


def dirty_from_clean(clean_price: float, accrued: float) -> float:
    """Dirty price = clean + accrued."""
    return float(clean_price) + float(accrued)


def clean_from_dirty(dirty_price: float, accrued: float) -> float:
    """Clean price = dirty - accrued."""
    return float(dirty_price) - float(accrued)
