"""Data loading orchestration."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from valuation.bands.common import last_non_null
from valuation.data.csv_store import (
    load_finance,
    load_forecast,
    load_stock_series,
    load_summary,
)
from valuation.data.models import DailyRow, FinanceRow, ForecastRow, SummaryRow

logger = logging.getLogger(__name__)

__all__ = [
    "DailyRow",
    "FinanceRow",
    "ForecastRow",
    "SummaryRow",
    "get_current_close",
    "load_finance",
    "load_forecast",
    "load_stock_series",
    "load_summary",
]


def get_current_close(rows: Sequence[DailyRow]) -> tuple[str, float] | None:
    """Latest (date, close) with a finite close, scanning from the end.

    Args:
        rows: Daily rows in file order.

    Returns:
        (date, close), or None if no row has a close.
    """
    found = last_non_null(rows, lambda r: r.close)
    if found is None:
        return None
    row, close = found
    return row.date, close
