"""Row models supplied by the CSV row store."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class DailyRow:
    """One trading day for one ticker.

    Rows are read-only. Derived row sets (e.g. after the assumed PE band
    changes) are built with ``dataclasses.replace``.

    Attributes:
        date: ISO date string, unique per ticker.
        close: Closing price. None if unavailable.
        trailing_eps_4q: Trailing twelve month EPS as of this date.
        pe_ratio: close / trailing_eps_4q. None if either is missing.
        is_forecast_point: True for synthetic projected rows.
        pe_assumed_low: 5th percentile PE band (constant per series).
        pe_assumed_mid: 50th percentile PE band (constant per series).
        pe_assumed_high: 95th percentile PE band (constant per series).
        price_est_low: trailing_eps_4q * pe_assumed_low.
        price_est_mid: trailing_eps_4q * pe_assumed_mid.
        price_est_high: trailing_eps_4q * pe_assumed_high.
    """

    date: str
    close: float | None = None
    trailing_eps_4q: float | None = None
    pe_ratio: float | None = None
    is_forecast_point: bool = False
    pe_assumed_low: float | None = None
    pe_assumed_mid: float | None = None
    pe_assumed_high: float | None = None
    price_est_low: float | None = None
    price_est_mid: float | None = None
    price_est_high: float | None = None


@dataclass(frozen=True)
class FinanceRow:
    """One reported quarter."""

    fiscal_date_ending: str
    reported_date: str
    reported_eps: float | None = None
    estimated_eps: float | None = None
    total_revenue: float | None = None
    net_income: float | None = None
    shares_outstanding: float | None = None
    operating_cashflow: float | None = None
    capital_expenditures: float | None = None
    free_cash_flow: float | None = None


@dataclass(frozen=True)
class ForecastRow:
    """One forecast quarter."""

    ticker: str
    fiscal_date_ending: str
    reported_date: str
    revenue_forecast: float | None = None
    eps_forecast: float | None = None
    net_income_forecast: float | None = None
    report_lag_days_used: float | None = None


@dataclass(frozen=True)
class SummaryRow:
    """One ticker's row in the return summary table."""

    ticker: str
    current_date: str
    current_close: float | None = None
    note: str = ""
    mid_6m: float | None = None
    ret_6m_pct: float | None = None
    mid_1y: float | None = None
    ret_1y_pct: float | None = None
    mid_2y: float | None = None
    ret_2y_pct: float | None = None
    pe_low_used: float | None = None
    pe_mid_used: float | None = None
    pe_high_used: float | None = None
    current_pe: float | None = None
    current_pe_gap_pct: float | None = None
    eps_yoy_growth_avg_last4q_pct: float | None = None
