"""CSV row store (read-only, explicit column mappings)."""

from __future__ import annotations

import logging
import math
import re
from pathlib import Path

import pandas as pd

from valuation.config import NULL_SENTINELS, DataConfig
from valuation.data.models import DailyRow, FinanceRow, ForecastRow, SummaryRow

logger = logging.getLogger(__name__)

# Column mappings: CSV header -> model field
_DAILY_NUMERIC_COLUMNS = {
    "close": "close",
    "trailing_eps_4q": "trailing_eps_4q",
    "pe_ratio": "pe_ratio",
    "pe_assumed_low": "pe_assumed_low",
    "pe_assumed_mid": "pe_assumed_mid",
    "pe_assumed_high": "pe_assumed_high",
    "price_est_low": "price_est_low",
    "price_est_mid": "price_est_mid",
    "price_est_high": "price_est_high",
}

_FINANCE_NUMERIC_COLUMNS = {
    "reportedEPS": "reported_eps",
    "estimatedEPS": "estimated_eps",
    "totalRevenue": "total_revenue",
    "netIncome": "net_income",
    "commonStockSharesOutstanding": "shares_outstanding",
    "operatingCashflow": "operating_cashflow",
    "capitalExpenditures": "capital_expenditures",
    "freeCashFlow": "free_cash_flow",
}

_FORECAST_NUMERIC_COLUMNS = {
    "revenue_forecast": "revenue_forecast",
    "eps_forecast": "eps_forecast",
    "netIncome_forecast": "net_income_forecast",
    "report_lag_days_used": "report_lag_days_used",
}

_SUMMARY_NUMERIC_COLUMNS = (
    "current_close",
    "mid_6m",
    "ret_6m_pct",
    "mid_1y",
    "ret_1y_pct",
    "mid_2y",
    "ret_2y_pct",
    "pe_low_used",
    "pe_mid_used",
    "pe_high_used",
    "current_pe",
    "current_pe_gap_pct",
    "eps_yoy_growth_avg_last4q_pct",
)

_UNSAFE_TICKER_CHARS = re.compile(r"[^A-Z0-9.\-_]")


def sanitize_ticker(ticker: str) -> str:
    """Upper-case a ticker and strip characters unsafe for file names."""
    return _UNSAFE_TICKER_CHARS.sub("", ticker.strip().upper())


def to_float_or_none(value: object) -> float | None:
    """Coerce a raw CSV cell to a finite float.

    Blank cells and the nan/null/none sentinels (any case) become None,
    as do unparseable and non-finite values.
    """
    if value is None:
        return None
    text = str(value).strip()
    if text.lower() in NULL_SENTINELS:
        return None
    try:
        f = float(text)
    except ValueError:
        return None
    if not math.isfinite(f):
        return None
    return f


def _clean(value: object) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _read_csv(path: Path) -> pd.DataFrame:
    """Read a CSV with every cell kept as a raw string."""
    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    df.columns = [str(c).strip() for c in df.columns]
    return df


def _numeric_fields(
    record: dict[str, object], columns: dict[str, str]
) -> dict[str, float | None]:
    return {
        field: to_float_or_none(record.get(column))
        for column, field in columns.items()
    }


def load_stock_series(ticker: str, config: DataConfig) -> list[DailyRow]:
    """Load the daily price/PE series for one ticker.

    Args:
        ticker: Ticker symbol (sanitised before use).
        config: Data configuration.

    Returns:
        Rows in file order. Empty if the file does not exist.
    """
    path = config.price_dir / f"{sanitize_ticker(ticker)}.csv"
    if not path.exists():
        logger.warning("%s: no price series at %s", ticker, path)
        return []

    df = _read_csv(path)
    rows: list[DailyRow] = []
    for record in df.to_dict(orient="records"):
        date = _clean(record.get("date"))
        if not date:
            continue
        rows.append(
            DailyRow(
                date=date,
                is_forecast_point=to_float_or_none(
                    record.get("is_forecast_point")
                ) == 1.0,
                **_numeric_fields(record, _DAILY_NUMERIC_COLUMNS),
            )
        )

    logger.debug("%s: loaded %d daily rows", ticker, len(rows))
    return rows


def load_finance(ticker: str, config: DataConfig) -> list[FinanceRow]:
    """Load reported quarterly financials for one ticker.

    Returns:
        Rows with a non-empty reportedDate, in file order. Empty if the
        file does not exist.
    """
    path = config.finance_dir / f"{sanitize_ticker(ticker)}.csv"
    if not path.exists():
        logger.warning("%s: no finance data at %s", ticker, path)
        return []

    df = _read_csv(path)
    rows: list[FinanceRow] = []
    for record in df.to_dict(orient="records"):
        reported_date = _clean(record.get("reportedDate"))
        if not reported_date:
            continue
        rows.append(
            FinanceRow(
                fiscal_date_ending=_clean(record.get("fiscalDateEnding")),
                reported_date=reported_date,
                **_numeric_fields(record, _FINANCE_NUMERIC_COLUMNS),
            )
        )
    return rows


def load_forecast(ticker: str, config: DataConfig) -> list[ForecastRow]:
    """Load forecast quarters for one ticker.

    A missing forecast file is common and yields an empty list.
    """
    path = config.forecast_dir / f"{sanitize_ticker(ticker)}.csv"
    if not path.exists():
        logger.debug("%s: no forecast file at %s", ticker, path)
        return []

    df = _read_csv(path)
    rows: list[ForecastRow] = []
    for record in df.to_dict(orient="records"):
        reported_date = _clean(record.get("reportedDate"))
        if not reported_date:
            continue
        rows.append(
            ForecastRow(
                ticker=_clean(record.get("ticker")),
                fiscal_date_ending=_clean(record.get("fiscalDateEnding")),
                reported_date=reported_date,
                **_numeric_fields(record, _FORECAST_NUMERIC_COLUMNS),
            )
        )
    return rows


def load_summary(config: DataConfig) -> list[SummaryRow]:
    """Load the per-ticker return summary table.

    Raises:
        FileNotFoundError: If the summary file does not exist.
    """
    df = _read_csv(config.summary_path)
    rows: list[SummaryRow] = []
    for record in df.to_dict(orient="records"):
        ticker = _clean(record.get("ticker"))
        if not ticker:
            continue
        rows.append(
            SummaryRow(
                ticker=ticker,
                current_date=_clean(record.get("current_date")),
                note=_clean(record.get("note")),
                **{
                    column: to_float_or_none(record.get(column))
                    for column in _SUMMARY_NUMERIC_COLUMNS
                },
            )
        )

    logger.info("Loaded summary for %d tickers", len(rows))
    return rows
