"""Growth rate unit conversions.

All rates here are percentages (12.0 means 12%). Assumption nodes store
quarterly rates; annual rates exist only at the display/input boundary.
"""

from __future__ import annotations

from valuation.config import MIN_GROWTH_PCT


def annual_to_quarterly(annual_pct: float) -> float:
    """Convert an annual growth rate to the compounding-equivalent quarterly rate.

    q = (1 + a)^(1/4) - 1. Clamps to MIN_GROWTH_PCT first so the base of
    the fractional power stays positive.
    """
    a = max(annual_pct, MIN_GROWTH_PCT) / 100
    return ((1 + a) ** 0.25 - 1) * 100


def quarterly_to_annual(quarterly_pct: float) -> float:
    """Convert a quarterly growth rate to its annual equivalent.

    a = (1 + q)^4 - 1.
    """
    q = quarterly_pct / 100
    return ((1 + q) ** 4 - 1) * 100
