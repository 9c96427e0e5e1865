"""Future EPS assumption cascade.

An ordered chain of forward earnings anchors, each holding an EPS value
and the quarterly growth rate that produced it from the previous anchor
(or from the scenario's current EPS for the first anchor).

Edits never mutate an existing chain: every operation returns a new
tuple, and AssumptionCascade swaps its whole chain in one assignment so
readers never see a half-updated cascade.

Cascade rule: editing node i rewrites eps for nodes i..n-1 but leaves
every growth_rate after i untouched.
"""

from __future__ import annotations

import datetime
import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass, replace

import pandas as pd

from valuation.analysis.growth import annual_to_quarterly, quarterly_to_annual

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FutureAssumption:
    """One forward earnings anchor.

    Attributes:
        date: Anchor (earnings report) date.
        eps: Trailing EPS assumed at this date.
        growth_rate: Quarterly growth from the previous anchor, in percent.
        is_estimate: True for generated (not reported) anchors.
    """

    date: datetime.date
    eps: float
    growth_rate: float
    is_estimate: bool = True


@dataclass(frozen=True)
class AnnualizedAssumption:
    """Display view of an anchor with its growth rate annualised."""

    date: datetime.date
    eps: float
    annual_growth_rate: float
    quarterly_growth_rate: float


def to_date(value: datetime.date | datetime.datetime | str) -> datetime.date:
    """Normalise a date-like value to a calendar date (midnight)."""
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    return pd.Timestamp(value).date()


def generate_earnings_dates(
    start: datetime.date | str,
    quarters: int = 12,
    months_between: int = 3,
) -> list[datetime.date]:
    """Generate future quarterly report dates.

    Date i (1-based) is start + i * months_between calendar months. Days
    past the end of the target month clamp to its last day (Nov 30 + 3
    months is Feb 28/29).

    Args:
        start: Base date; not itself included.
        quarters: Number of dates to generate.
        months_between: Calendar months between reports.

    Returns:
        Ascending list of dates.
    """
    base = pd.Timestamp(to_date(start))
    return [
        (base + pd.DateOffset(months=months_between * i)).date()
        for i in range(1, quarters + 1)
    ]


def build_earnings_schedule(
    base_date: datetime.date | str,
    next_earnings_date: datetime.date | str | None = None,
    quarters: int = 12,
    months_between: int = 3,
) -> list[datetime.date]:
    """Build the anchor dates for a scenario.

    With a known next earnings date, that date is the first anchor and
    quarters - 1 further dates follow it. Otherwise all dates are
    generated from base_date.
    """
    if next_earnings_date is None:
        return generate_earnings_dates(base_date, quarters, months_between)

    first = to_date(next_earnings_date)
    if first <= to_date(base_date):
        logger.warning(
            "Next earnings date %s is not after base date %s",
            first, to_date(base_date),
        )
    return [first] + generate_earnings_dates(first, quarters - 1, months_between)


def build_default_assumptions(
    current_eps: float,
    annual_growth_pct: float,
    dates: Sequence[datetime.date | str],
) -> tuple[FutureAssumption, ...]:
    """Seed an assumption chain at a constant growth rate.

    Args:
        current_eps: Current trailing EPS.
        annual_growth_pct: Annual growth in percent (15.0 for 15%).
        dates: Anchor dates, ascending.

    Returns:
        Chain where each EPS compounds the previous one by the quarterly
        equivalent of annual_growth_pct.
    """
    q = annual_to_quarterly(annual_growth_pct)
    prev_eps = current_eps
    chain: list[FutureAssumption] = []
    for d in dates:
        eps = prev_eps * (1 + q / 100)
        chain.append(FutureAssumption(date=to_date(d), eps=eps, growth_rate=q))
        prev_eps = eps
    return tuple(chain)


def _parse_number(value: object) -> float | None:
    """Parse user input as a finite float, or None if it is not one."""
    if isinstance(value, bool):
        return None
    try:
        f = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    if not math.isfinite(f):
        return None
    return f


def _valid_index(assumptions: Sequence[FutureAssumption], index: int) -> bool:
    if 0 <= index < len(assumptions):
        return True
    logger.warning(
        "Assumption index %d out of range (0..%d), edit ignored",
        index, len(assumptions) - 1,
    )
    return False


def _cascade_from(
    chain: list[FutureAssumption], index: int
) -> tuple[FutureAssumption, ...]:
    """Recompute eps after index from each node's own growth rate."""
    eps = chain[index].eps
    for i in range(index + 1, len(chain)):
        node = chain[i]
        eps = eps * (1 + node.growth_rate / 100)
        chain[i] = replace(node, eps=eps)
    return tuple(chain)


def edit_growth(
    assumptions: Sequence[FutureAssumption],
    base_eps: float,
    index: int,
    annual_growth_pct: object,
) -> tuple[FutureAssumption, ...]:
    """Set one node's growth from an annual rate and cascade.

    The annual rate is stored as its quarterly equivalent. The node's
    EPS is rebuilt from the previous node (base_eps for index 0) and every
    later node's EPS ripples forward at its own stored rate.

    Non-numeric input or a bad index returns the chain unchanged.
    """
    annual = _parse_number(annual_growth_pct)
    if annual is None:
        logger.warning("Non-numeric growth %r ignored", annual_growth_pct)
        return tuple(assumptions)
    if not _valid_index(assumptions, index):
        return tuple(assumptions)

    chain = list(assumptions)
    q = annual_to_quarterly(annual)
    prev_eps = base_eps if index == 0 else chain[index - 1].eps
    chain[index] = replace(chain[index], growth_rate=q, eps=prev_eps * (1 + q / 100))
    return _cascade_from(chain, index)


def edit_eps(
    assumptions: Sequence[FutureAssumption],
    base_eps: float,
    index: int,
    eps: object,
) -> tuple[FutureAssumption, ...]:
    """Set one node's EPS directly, back-solve its growth and cascade.

    growth = (eps / prev_eps - 1) * 100, or 0 when the previous EPS is 0.
    Non-numeric input or a bad index returns the chain unchanged.
    """
    new_eps = _parse_number(eps)
    if new_eps is None:
        logger.warning("Non-numeric EPS %r ignored", eps)
        return tuple(assumptions)
    if not _valid_index(assumptions, index):
        return tuple(assumptions)

    chain = list(assumptions)
    prev_eps = base_eps if index == 0 else chain[index - 1].eps
    growth = (new_eps / prev_eps - 1) * 100 if prev_eps != 0 else 0.0
    chain[index] = replace(chain[index], eps=new_eps, growth_rate=growth)
    return _cascade_from(chain, index)


def apply_growth_delta(
    assumptions: Sequence[FutureAssumption],
    base_eps: float,
    delta_pct: object,
) -> tuple[FutureAssumption, ...]:
    """Shift every node's annual growth by delta_pct percentage points.

    Each node's quarterly rate is annualised, shifted, and converted back.
    EPS is rebuilt in one forward pass, each node reading the already
    updated previous node.
    """
    delta = _parse_number(delta_pct)
    if delta is None:
        logger.warning("Non-numeric growth delta %r ignored", delta_pct)
        return tuple(assumptions)

    chain: list[FutureAssumption] = []
    prev_eps = base_eps
    for node in assumptions:
        q = annual_to_quarterly(quarterly_to_annual(node.growth_rate) + delta)
        eps = prev_eps * (1 + q / 100)
        chain.append(replace(node, growth_rate=q, eps=eps))
        prev_eps = eps
    return tuple(chain)


def annualize(
    assumptions: Sequence[FutureAssumption],
) -> list[AnnualizedAssumption]:
    """Display rows with quarterly growth converted to annual."""
    return [
        AnnualizedAssumption(
            date=a.date,
            eps=a.eps,
            annual_growth_rate=quarterly_to_annual(a.growth_rate),
            quarterly_growth_rate=a.growth_rate,
        )
        for a in assumptions
    ]


class AssumptionCascade:
    """Editable assumption chain for one scenario.

    Holds the seed (current EPS, annual growth, anchor dates) so the chain
    can be reset, and replaces the chain wholesale on every edit.

    Args:
        current_eps: Scenario's current trailing EPS.
        annual_growth_pct: Seed annual growth in percent.
        dates: Anchor dates, ascending.
    """

    def __init__(
        self,
        current_eps: float,
        annual_growth_pct: float,
        dates: Sequence[datetime.date | str],
    ) -> None:
        self._current_eps = current_eps
        self._annual_growth_pct = annual_growth_pct
        self._dates = tuple(to_date(d) for d in dates)
        self._assumptions = build_default_assumptions(
            current_eps, annual_growth_pct, self._dates,
        )

    @property
    def current_eps(self) -> float:
        return self._current_eps

    @property
    def assumptions(self) -> tuple[FutureAssumption, ...]:
        return self._assumptions

    def edit_growth(self, index: int, annual_growth_pct: object) -> None:
        self._assumptions = edit_growth(
            self._assumptions, self._current_eps, index, annual_growth_pct,
        )

    def edit_eps(self, index: int, eps: object) -> None:
        self._assumptions = edit_eps(
            self._assumptions, self._current_eps, index, eps,
        )

    def edit_growth_at(
        self, date: datetime.date | str, annual_growth_pct: object
    ) -> None:
        """Edit the node anchored at date (e.g. a dragged chart handle).

        Unknown dates are ignored.
        """
        target = to_date(date)
        for i, node in enumerate(self._assumptions):
            if node.date == target:
                self.edit_growth(i, annual_growth_pct)
                return
        logger.warning("No assumption anchored at %s, edit ignored", target)

    def apply_growth_delta(self, delta_pct: object) -> None:
        self._assumptions = apply_growth_delta(
            self._assumptions, self._current_eps, delta_pct,
        )

    def reset(self) -> None:
        """Discard all edits and re-seed from the original inputs."""
        self._assumptions = build_default_assumptions(
            self._current_eps, self._annual_growth_pct, self._dates,
        )

    def annualized(self) -> list[AnnualizedAssumption]:
        return annualize(self._assumptions)
