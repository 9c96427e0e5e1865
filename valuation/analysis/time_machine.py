"""Time machine: what a past purchase would be worth today."""

from __future__ import annotations

import datetime
import logging
from collections.abc import Sequence
from dataclasses import dataclass

import pandas as pd

from valuation.analysis.comparison import parse_timestamp
from valuation.bands.common import finite_or_null
from valuation.data.models import DailyRow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValuePoint:
    date: str
    value: float


@dataclass(frozen=True)
class TimeMachineResult:
    """Outcome of investing `amount` in a ticker on a past date.

    Attributes:
        ticker: Upper-case ticker.
        product_name: Label for what the amount would otherwise have bought.
        amount: Amount invested.
        purchase_date: First trading day on or after the requested date.
        requested_date: Date as requested.
        past_price: Close on purchase_date.
        current_price: Latest actual close.
        current_value: shares_bought * current_price.
        percent_change: (current_value - amount) / amount * 100.
        shares_bought: amount / past_price.
        value_series: Holding value from purchase_date onward.
    """

    ticker: str
    product_name: str
    amount: float
    purchase_date: str
    requested_date: str
    past_price: float
    current_price: float
    current_value: float
    percent_change: float
    shares_bought: float
    value_series: list[ValuePoint]


def calculate_time_machine(
    ticker: str,
    rows: Sequence[DailyRow],
    target_date: datetime.date | str,
    amount: float,
    product_name: str = "",
) -> TimeMachineResult | None:
    """Value a hypothetical purchase made on target_date.

    Only actual rows (finite close, not a forecast point) count. The
    purchase happens on the first of them dated on or after target_date.

    Args:
        ticker: Ticker symbol.
        rows: Full daily history, any order.
        target_date: Requested purchase date.
        amount: Amount invested. Must be positive.
        product_name: Display label for the amount.

    Returns:
        TimeMachineResult, or None when the target date cannot be parsed,
        no purchase row exists, or a price or the amount is not positive.
    """
    if amount <= 0:
        logger.warning("%s: non-positive amount %.2f", ticker, amount)
        return None

    target = parse_timestamp(target_date)
    if target is None:
        logger.warning("%s: invalid target date %r", ticker, target_date)
        return None

    dated: list[tuple[pd.Timestamp, DailyRow]] = []
    for r in rows:
        if r.is_forecast_point or finite_or_null(r.close) is None:
            continue
        d = parse_timestamp(r.date)
        if d is not None:
            dated.append((d, r))
    actual = sorted(dated, key=lambda pair: pair[0])

    start_index = next(
        (i for i, (d, _) in enumerate(actual) if d >= target), None,
    )
    if start_index is None:
        logger.info("%s: no actual close on or after %s", ticker, target.date())
        return None

    start_row = actual[start_index][1]
    end_row = actual[-1][1]
    start_price = float(start_row.close)  # type: ignore[arg-type]
    end_price = float(end_row.close)  # type: ignore[arg-type]
    if start_price <= 0 or end_price <= 0:
        logger.warning("%s: non-positive close in range", ticker)
        return None

    shares = amount / start_price
    current_value = shares * end_price

    return TimeMachineResult(
        ticker=ticker.upper(),
        product_name=product_name,
        amount=amount,
        purchase_date=start_row.date,
        requested_date=str(target_date),
        past_price=start_price,
        current_price=end_price,
        current_value=current_value,
        percent_change=(current_value - amount) / amount * 100,
        shares_bought=shares,
        value_series=[
            ValuePoint(date=r.date, value=float(r.close) / start_price * amount)  # type: ignore[arg-type]
            for _, r in actual[start_index:]
        ],
    )
