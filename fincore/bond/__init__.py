"""Bond analytics public API."""

from .analytics import (
    YieldResult,
    YieldSolver,
    accrued_interest,
    cash_flows_irr,
    clean_from_dirty,
    dirty_from_clean,
    present_value,
    solve_yield,
)

__all__ = [
    "YieldResult",
    "YieldSolver",
    "solve_yield",
    "present_value",
    "accrued_interest",
    "cash_flows_irr",
    "dirty_from_clean",
    "clean_from_dirty",
]
