"""Tenor arithmetic and business-day helpers."""

from .date_utils import (
    add_business_days,
    adjust_date,
    apply_end_of_month_rule,
    business_days_between,
    get_month_end,
    is_end_of_month,
    next_business_day,
    prev_business_day,
)
from .period import Period, parse_period, tenor_to_months

__all__ = [
    "Period",
    "parse_period",
    "tenor_to_months",
    "adjust_date",
    "apply_end_of_month_rule",
    "add_business_days",
    "business_days_between",
    "get_month_end",
    "is_end_of_month",
    "next_business_day",
    "prev_business_day",
]
