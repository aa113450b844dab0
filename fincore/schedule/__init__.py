# Re-export schedule components
from .core import (
    CashAmount,
    CashFlow,
    Currency,
    InstrumentTerms,
    Schedule,
    SchedulePeriod,
)
from .generator import CashFlowScheduler, roll_out

__all__ = [
    "CashAmount",
    "CashFlow",
    "Currency",
    "InstrumentTerms",
    "Schedule",
    "SchedulePeriod",
    "CashFlowScheduler",
    "roll_out",
]
