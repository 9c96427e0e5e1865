"""Summary table ranking."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from valuation.bands.common import finite_or_null
from valuation.config import SortMetric
from valuation.data.models import SummaryRow

logger = logging.getLogger(__name__)


def sort_rankings(
    rows: Sequence[SummaryRow],
    metric: SortMetric = SortMetric.RET_1Y,
) -> list[SummaryRow]:
    """Sort summary rows descending on one metric.

    Rows whose metric is missing or non-finite go last, keeping their
    input order; ties keep input order too.

    Args:
        rows: Summary rows.
        metric: Column to sort on.

    Returns:
        New sorted list.
    """

    def _key(row: SummaryRow) -> tuple[bool, float]:
        value = finite_or_null(getattr(row, metric.value))
        if value is None:
            return True, 0.0
        return False, -value

    ranked = sorted(rows, key=_key)
    missing = sum(1 for r in rows if finite_or_null(getattr(r, metric.value)) is None)
    logger.debug(
        "Ranked %d rows by %s (%d without a value)",
        len(ranked), metric.value, missing,
    )
    return ranked
