"""Seeds for the future PE simulator and per-ticker financial metrics.

Both are derived from the summary table plus the reported and forecast
quarterly rows for one ticker.
"""

from __future__ import annotations

import datetime
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

import pandas as pd

from valuation.bands.common import finite_or_null
from valuation.data.models import FinanceRow, ForecastRow, SummaryRow

logger = logging.getLogger(__name__)

# Quarters summed for trailing twelve month figures.
_TTM_QUARTERS = 4


@dataclass(frozen=True)
class FuturePEInputs:
    """Scenario seed for the future PE simulator.

    Attributes:
        ticker: Upper-case ticker.
        price: Current close, held fixed over the projection.
        current_eps: Trailing twelve month EPS.
        growth_rate_pct: Annual EPS growth seed in percent.
        next_earnings_date: Earliest forecast report date after today.
        current_date: Date of the current close.
        last_report_date: Date of the latest reported quarter.
    """

    ticker: str
    price: float
    current_eps: float
    growth_rate_pct: float
    next_earnings_date: datetime.date | None = None
    current_date: datetime.date | None = None
    last_report_date: datetime.date | None = None

    @property
    def current_pe(self) -> float:
        return self.price / self.current_eps if self.current_eps > 0 else 0.0


@dataclass(frozen=True)
class FinancialMetrics:
    """Trailing twelve month snapshot for one ticker.

    Attributes:
        pe: price / eps, None unless trailing EPS is positive.
        eps: Sum of the last four reported EPS.
        quarterly_eps: The four quarterly EPS values, oldest first.
        net_income: Sum of the last four net incomes.
        shares: Shares outstanding from the latest quarter.
        market_cap: shares * price, None if either is missing.
    """

    ticker: str
    price: float
    pe: float | None
    eps: float
    quarterly_eps: list[float] = field(default_factory=list)
    net_income: float = 0.0
    shares: float | None = None
    market_cap: float | None = None


def _parse_date(value: str) -> datetime.date | None:
    if not value:
        return None
    try:
        ts = pd.Timestamp(value)
    except ValueError:
        return None
    return None if pd.isna(ts) else ts.date()


def find_summary(
    summary: Sequence[SummaryRow], ticker: str
) -> SummaryRow | None:
    """Case-insensitive ticker lookup in the summary table."""
    wanted = ticker.strip().upper()
    return next((r for r in summary if r.ticker.upper() == wanted), None)


def trailing_eps(
    finance: Sequence[FinanceRow],
) -> tuple[float, datetime.date] | None:
    """Trailing twelve month EPS from reported quarters.

    Rows without a finite reported EPS are ignored; the rest are ordered
    by report date.

    Returns:
        (sum of the last four EPS, latest report date), or None with
        fewer than four reported quarters.
    """
    reported: list[tuple[datetime.date, FinanceRow]] = []
    for r in finance:
        d = _parse_date(r.reported_date)
        if d is not None and finite_or_null(r.reported_eps) is not None:
            reported.append((d, r))
    if len(reported) < _TTM_QUARTERS:
        return None
    reported.sort(key=lambda pair: pair[0])
    last = reported[-_TTM_QUARTERS:]
    total = sum(float(r.reported_eps) for _, r in last)  # type: ignore[arg-type]
    return total, last[-1][0]


def next_earnings_date(
    forecast: Sequence[ForecastRow], today: datetime.date
) -> datetime.date | None:
    """Earliest forecast report date strictly after today."""
    dates = (_parse_date(r.reported_date) for r in forecast)
    future = [d for d in dates if d is not None and d > today]
    return min(future) if future else None


def derive_future_pe_inputs(
    ticker: str,
    summary: Sequence[SummaryRow],
    finance: Sequence[FinanceRow],
    forecast: Sequence[ForecastRow],
    today: datetime.date | None = None,
) -> FuturePEInputs | None:
    """Assemble the simulator seed for one ticker.

    Current EPS is the trailing four-quarter sum when four reported
    quarters exist, otherwise price / current_pe from the summary when
    that PE is positive, otherwise 0. Growth defaults to 0 when the
    summary has none.

    Args:
        ticker: Ticker symbol.
        summary: Summary table rows.
        finance: Reported quarters for the ticker.
        forecast: Forecast quarters for the ticker.
        today: Reference date for "next" earnings. Defaults to today.

    Returns:
        FuturePEInputs, or None if the ticker has no summary row or no
        positive current close.
    """
    today = today or datetime.date.today()
    row = find_summary(summary, ticker)
    price = finite_or_null(row.current_close) if row is not None else None
    if row is None or price is None or price <= 0:
        logger.warning("%s: no summary row with a current close", ticker)
        return None

    growth = finite_or_null(row.eps_yoy_growth_avg_last4q_pct) or 0.0

    ttm = trailing_eps(finance)
    last_report: datetime.date | None = None
    if ttm is not None:
        current_eps, last_report = ttm
    else:
        current_pe = finite_or_null(row.current_pe)
        if current_pe is not None and current_pe > 0:
            current_eps = price / current_pe
            logger.info("%s: EPS from summary PE (%.2f)", ticker, current_pe)
        else:
            current_eps = 0.0
            logger.warning("%s: no trailing EPS available", ticker)

    inputs = FuturePEInputs(
        ticker=ticker.strip().upper(),
        price=price,
        current_eps=current_eps,
        growth_rate_pct=growth,
        next_earnings_date=next_earnings_date(forecast, today),
        current_date=_parse_date(row.current_date),
        last_report_date=last_report,
    )
    logger.debug(
        "%s: price %.2f, eps %.4f, growth %.2f%%, next report %s",
        inputs.ticker, price, current_eps, growth, inputs.next_earnings_date,
    )
    return inputs


def derive_financial_metrics(
    ticker: str,
    summary: Sequence[SummaryRow],
    finance: Sequence[FinanceRow],
) -> FinancialMetrics | None:
    """Trailing twelve month metrics from the last four finance rows.

    Missing quarterly EPS or net income count as zero.

    Returns:
        FinancialMetrics, or None without a summary row or with fewer
        than four finance rows.
    """
    row = find_summary(summary, ticker)
    if row is None or len(finance) < _TTM_QUARTERS:
        logger.info("%s: insufficient data for financial metrics", ticker)
        return None

    price = finite_or_null(row.current_close) or 0.0
    last4 = list(finance)[-_TTM_QUARTERS:]
    quarterly_eps = [finite_or_null(q.reported_eps) or 0.0 for q in last4]
    eps = sum(quarterly_eps)
    net_income = sum(finite_or_null(q.net_income) or 0.0 for q in last4)
    shares = finite_or_null(last4[-1].shares_outstanding)

    return FinancialMetrics(
        ticker=ticker.strip().upper(),
        price=price,
        pe=price / eps if eps > 0 else None,
        eps=eps,
        quarterly_eps=quarterly_eps,
        net_income=net_income,
        shares=shares,
        market_cap=shares * price if shares and price else None,
    )
