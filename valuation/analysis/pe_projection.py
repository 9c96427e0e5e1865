"""Forward PE projection at a fixed price.

Answers "what PE will this stock trade at if the price never moves and
earnings follow the assumption chain". EPS is interpolated linearly
between anchors so the projected PE drifts day by day instead of
stepping at each report date.
"""

from __future__ import annotations

import datetime
import logging
from collections.abc import Sequence
from dataclasses import dataclass

from valuation.analysis.assumptions import FutureAssumption, to_date

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProjectionPoint:
    """One projected day.

    Attributes:
        date: Calendar date.
        implied_eps: Interpolated trailing EPS.
        pe_ratio: price / implied_eps, or 0.0 when implied_eps is 0.
        is_earnings_date: True on an assumption anchor date.
    """

    date: datetime.date
    implied_eps: float
    pe_ratio: float
    is_earnings_date: bool = False


def _pe(price: float, eps: float) -> float:
    return price / eps if eps != 0 else 0.0


def calculate_pe_projection(
    price: float,
    current_eps: float,
    assumptions: Sequence[FutureAssumption],
    start_date: datetime.date | datetime.datetime | str | None = None,
) -> list[ProjectionPoint]:
    """Project daily PE ratios from start_date to the last anchor.

    The series opens with a synthetic start point (start_date,
    current_eps). For each consecutive anchor pair spanning n days, points
    are emitted for days 1..n after the earlier anchor with
    eps = eps_a + (eps_b - eps_a) * d / n, so every anchor date carries
    exactly the anchor's EPS.

    An anchor on the same date as the previous one is a zero-length
    segment: it emits nothing, but the next segment starts from its EPS.
    An anchor dated before the previous one is skipped with a warning and
    the next segment starts from the last accepted anchor, keeping the
    output strictly ascending by date.

    Args:
        price: Fixed share price.
        current_eps: Trailing EPS at start_date.
        assumptions: Anchor chain, ascending by date.
        start_date: First projected day. Defaults to today; datetimes are
            truncated to midnight.

    Returns:
        Daily ProjectionPoints. Just the start point if there are no
        anchors.
    """
    start = datetime.date.today() if start_date is None else to_date(start_date)

    series = [
        ProjectionPoint(
            date=start,
            implied_eps=current_eps,
            pe_ratio=_pe(price, current_eps),
        )
    ]

    prev_date = start
    prev_eps = current_eps
    skipped = 0

    for anchor in assumptions:
        days = (anchor.date - prev_date).days
        if days == 0:
            logger.debug("Zero-length segment at %s", anchor.date)
            prev_eps = anchor.eps
            continue
        if days < 0:
            logger.warning(
                "Skipping anchor %s: before previous anchor %s",
                anchor.date, prev_date,
            )
            skipped += 1
            continue

        for d in range(1, days + 1):
            # Land exactly on the anchor value, free of rounding drift.
            if d == days:
                eps = anchor.eps
            else:
                eps = prev_eps + (anchor.eps - prev_eps) * (d / days)
            series.append(
                ProjectionPoint(
                    date=prev_date + datetime.timedelta(days=d),
                    implied_eps=eps,
                    pe_ratio=_pe(price, eps),
                    is_earnings_date=d == days,
                )
            )

        prev_date = anchor.date
        prev_eps = anchor.eps

    logger.debug(
        "PE projection: %d points from %s (%d anchors skipped)",
        len(series), start, skipped,
    )
    return series
