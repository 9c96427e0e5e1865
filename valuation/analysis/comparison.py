"""Relative return comparison across tickers.

Each ticker's series is normalised independently to percentage return
from its own first close on or after the start date. Tickers are only
combined at presentation time.
"""

from __future__ import annotations

import datetime
import logging
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass

import pandas as pd

from valuation.bands.common import finite_or_null
from valuation.config import ComparisonConfig
from valuation.data.models import DailyRow

logger = logging.getLogger(__name__)

# Fewer actual rows than this cannot show a return.
_MIN_ROWS = 2


@dataclass(frozen=True)
class NormalizedPoint:
    date: str
    pct_return: float


@dataclass(frozen=True)
class ComparisonSeries:
    """Normalised return series for one ticker.

    Attributes:
        ticker: Upper-case ticker.
        rows: Qualifying rows (actual, finite close, on/after start),
            ascending by date.
        normalized: (close / start_price - 1) * 100 per row.
        start_price: Close of the first qualifying row.
        end_price: Close of the last qualifying row.
        total_return_pct: (end_price / start_price - 1) * 100.
    """

    ticker: str
    rows: list[DailyRow]
    normalized: list[NormalizedPoint]
    start_price: float
    end_price: float
    total_return_pct: float


def parse_timestamp(value: datetime.date | str) -> pd.Timestamp | None:
    """Parse a date-like value to a naive Timestamp, or None.

    A UTC offset is dropped and the wall-clock time kept, so rows dated
    "2024-01-02T00:00:00Z" compare with plain "2024-01-02" start dates.
    """
    try:
        ts = pd.Timestamp(value)
    except (TypeError, ValueError):
        return None
    if pd.isna(ts):
        return None
    if ts.tzinfo is not None:
        ts = ts.tz_localize(None)
    return ts


def build_comparison_series(
    ticker: str,
    rows: Sequence[DailyRow],
    start_date: datetime.date | str,
) -> ComparisonSeries | None:
    """Normalise one ticker's closes to percentage return from start_date.

    Rows qualify when dated on or after start_date, carrying a finite
    close, and not flagged as forecast points.

    Args:
        ticker: Ticker symbol.
        rows: Full daily history, any order.
        start_date: First date to include.

    Returns:
        ComparisonSeries, or None if fewer than 2 rows qualify, the start
        date cannot be parsed, or the start price is zero.
    """
    start = parse_timestamp(start_date)
    if start is None:
        logger.warning("%s: invalid start date %r", ticker, start_date)
        return None

    dated: list[tuple[pd.Timestamp, DailyRow]] = []
    for r in rows:
        if r.is_forecast_point or finite_or_null(r.close) is None:
            continue
        d = parse_timestamp(r.date)
        if d is None or d < start:
            continue
        dated.append((d, r))
    dated.sort(key=lambda pair: pair[0])
    qualifying = [r for _, r in dated]

    if len(qualifying) < _MIN_ROWS:
        logger.info(
            "%s: %d qualifying rows since %s, need %d",
            ticker, len(qualifying), start.date(), _MIN_ROWS,
        )
        return None

    start_price = float(qualifying[0].close)  # type: ignore[arg-type]
    if start_price == 0:
        logger.warning("%s: zero start price on %s", ticker, qualifying[0].date)
        return None

    normalized = [
        NormalizedPoint(
            date=r.date,
            pct_return=(float(r.close) / start_price - 1) * 100,  # type: ignore[arg-type]
        )
        for r in qualifying
    ]
    end_price = float(qualifying[-1].close)  # type: ignore[arg-type]

    return ComparisonSeries(
        ticker=ticker.upper(),
        rows=qualifying,
        normalized=normalized,
        start_price=start_price,
        end_price=end_price,
        total_return_pct=(end_price / start_price - 1) * 100,
    )


def _clean_tickers(tickers: Sequence[str], max_tickers: int) -> list[str]:
    cleaned = [t.strip() for t in tickers if t.strip()]
    if len(cleaned) > max_tickers:
        logger.warning(
            "Comparing first %d of %d tickers", max_tickers, len(cleaned),
        )
        cleaned = cleaned[:max_tickers]
    return cleaned


def fetch_comparison_batch(
    tickers: Sequence[str],
    start_date: datetime.date | str,
    loader: Callable[[str], Sequence[DailyRow]],
    config: ComparisonConfig | None = None,
) -> list[ComparisonSeries]:
    """Build comparison series for several tickers concurrently.

    Each ticker is loaded and normalised in its own task. A ticker whose
    load fails or that has too little data is dropped without affecting
    the others.

    Args:
        tickers: Requested tickers; blanks are ignored.
        start_date: Shared start date.
        loader: Returns the daily rows for a ticker.
        config: Comparison configuration.

    Returns:
        Series for the tickers that produced one, in request order.
    """
    config = config or ComparisonConfig()
    requested = _clean_tickers(tickers, config.max_tickers)
    if not requested:
        return []

    def _one(ticker: str) -> ComparisonSeries | None:
        return build_comparison_series(ticker, loader(ticker), start_date)

    results: dict[int, ComparisonSeries | None] = {}
    with ThreadPoolExecutor(max_workers=config.max_workers) as executor:
        futures = {
            executor.submit(_one, ticker): order
            for order, ticker in enumerate(requested)
        }
        for future in as_completed(futures):
            order = futures[future]
            try:
                results[order] = future.result()
            except Exception as e:
                logger.warning(
                    "%s: comparison load failed: %s", requested[order], e,
                    exc_info=True,
                )
                results[order] = None

    series = [
        s for _, s in sorted(results.items()) if s is not None
    ]
    logger.info(
        "Comparison: %d of %d tickers have data since %s",
        len(series), len(requested), start_date,
    )
    return series
