"""Financial time and cash-flow engine.

This package turns instrument terms into dated cash flows and solves for the
yield, duration and convexity implied by a price.

Key modules:
- business_calendar: Tenor arithmetic and business-day stepping
- conventions: Holiday calendars, day count conventions and enums
- schedule: Cash-flow data types and schedule roll-out
- bond: Yield solver and price analytics
- data: Market data boundary and quote time series
"""

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Main modules are imported via subpackages
    "business_calendar",
    "conventions",
    "schedule",
    "bond",
    "data",
]
