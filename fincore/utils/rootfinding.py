"""Root-finding utilities (Newton-Raphson with a bisection fallback)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Tuple

import logging
import math

from fincore.exceptions import NonConvergent

logger = logging.getLogger(__name__)

FuncDeriv = Callable[[float], Tuple[float, float]]
Func = Callable[[float], float]


@dataclass
class RootResult:
    root: float
    iterations: int
    converged: bool
    method: str


def _bisect(
    func: Func,
    lower: float,
    upper: float,
    tol: float = 1e-6,
    max_iter: int = 100,
    used: int = 0,
) -> RootResult:
    """Bisection on ``[lower, upper]``; ``used`` iterations are already spent."""
    f_lower = func(lower)
    f_upper = func(upper)
    if abs(f_lower) <= tol:
        return RootResult(lower, used, True, "bisect")
    if abs(f_upper) <= tol:
        return RootResult(upper, used, True, "bisect")
    if f_lower * f_upper > 0:
        raise NonConvergent(
            f"No sign change in bracket [{lower}, {upper}]",
            last_estimate=lower if abs(f_lower) < abs(f_upper) else upper,
            iterations=used,
        )

    mid = 0.5 * (lower + upper)
    for iteration in range(used + 1, max_iter + 1):
        mid = 0.5 * (lower + upper)
        f_mid = func(mid)
        if abs(f_mid) <= tol:
            return RootResult(mid, iteration, True, "bisect")
        if f_lower * f_mid < 0:
            upper, f_upper = mid, f_mid
        else:
            lower, f_lower = mid, f_mid
    raise NonConvergent(
        f"Bisection failed to converge within {max_iter} iterations",
        last_estimate=mid,
        iterations=max_iter,
    )


def newton_with_bisect(
    func_and_deriv: FuncDeriv,
    initial_guess: float,
    *,
    tol_value: float = 1e-6,
    max_iter: int = 100,
    clamp: float = 0.05,
    bracket: Tuple[float, float] = (-0.95, 5.0),
) -> RootResult:
    """Newton-Raphson root finder with a bisection fallback.

    Both phases share one iteration budget; when it runs out without
    ``|f(x)| <= tol_value`` a ``NonConvergent`` error is raised.

    Parameters
    ----------
    func_and_deriv:
        Callable returning (value, derivative) at a given point.
    initial_guess:
        Starting point for Newton iterations, clipped into ``bracket``.
    tol_value:
        Absolute tolerance for the function value.
    max_iter:
        Total iteration budget.
    clamp:
        Maximum absolute Newton step size (e.g., 0.05 = 500 bps).
    bracket:
        (lower, upper) bounds for the iterate and the bisection fallback.
    """
    lower, upper = bracket
    x = min(max(float(initial_guess), lower), upper)

    iteration = 0
    while iteration < max_iter:
        iteration += 1
        value, deriv = func_and_deriv(x)
        logger.debug("Newton iter %s: x=%s value=%s deriv=%s", iteration, x, value, deriv)
        if abs(value) <= tol_value:
            return RootResult(x, iteration, True, "newton")
        if deriv == 0.0 or not math.isfinite(deriv) or not math.isfinite(value):
            logger.debug("Degenerate derivative; leaving Newton at iter %s", iteration)
            break
        step = value / deriv
        if abs(step) > clamp:
            step = clamp if step > 0 else -clamp
        x_new = max(lower, min(upper, x - step))
        if x_new == x:
            logger.debug("Newton stalled at bracket edge %s", x)
            break
        x = x_new

    if iteration >= max_iter:
        raise NonConvergent(
            f"Newton failed to converge within {max_iter} iterations",
            last_estimate=x,
            iterations=iteration,
        )

    def func_only(v: float) -> float:
        return func_and_deriv(v)[0]

    return _bisect(func_only, lower, upper, tol=tol_value, max_iter=max_iter, used=iteration)
