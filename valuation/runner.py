"""Orchestration: load rows, build models, export CSV."""

from __future__ import annotations

import datetime
import logging
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import asdict, dataclass
from pathlib import Path

import pandas as pd

from valuation.analysis.comparison import ComparisonSeries, fetch_comparison_batch
from valuation.analysis.future_pe import FuturePEScenario
from valuation.analysis.scenario_inputs import derive_future_pe_inputs
from valuation.bands.assumed_pe import rebuild_price_rows, update_assumed_pe
from valuation.bands.pe_band import AssumedPE, PEBandModel, build_pe_band_model
from valuation.bands.price_band import PriceBandModel, build_price_band_model
from valuation.config import (
    BandConfig,
    ComparisonConfig,
    DataConfig,
    ProjectionConfig,
)
from valuation.data import (
    get_current_close,
    load_finance,
    load_forecast,
    load_stock_series,
    load_summary,
)
from valuation.data.models import SummaryRow

logger = logging.getLogger(__name__)


@dataclass
class StockModels:
    """Chart models for one ticker's dashboard.

    Attributes:
        ticker: Upper-case ticker.
        pe_model: PE band model (carries the assumed band in use).
        price_model: Price band model built from the assumed band.
        current_close: Latest (date, close), None if no close exists.
    """

    ticker: str
    pe_model: PEBandModel
    price_model: PriceBandModel
    current_close: tuple[str, float] | None


def build_stock_models(
    ticker: str,
    data_config: DataConfig,
    band_config: BandConfig | None = None,
    low: float | None = None,
    mid: float | None = None,
    high: float | None = None,
) -> StockModels | None:
    """Build PE and price band models, optionally with an edited PE band.

    The stored assumed band is the starting point; any of low/mid/high
    given are applied as a user edit before price estimates are rebuilt.

    Returns:
        StockModels, or None if the ticker has no rows.
    """
    band_config = band_config or BandConfig()
    rows = load_stock_series(ticker, data_config)
    if not rows:
        return None

    stored = build_pe_band_model(rows, band_config).assumed
    assumed: AssumedPE = update_assumed_pe(stored, low=low, mid=mid, high=high)

    pe_model = build_pe_band_model(rows, band_config, assumed=assumed)
    if assumed == stored:
        price_rows = list(rows)
    else:
        logger.info(
            "%s: assumed PE %s -> %s", ticker, stored.values(), assumed.values(),
        )
        price_rows = rebuild_price_rows(rows, assumed)
    price_model = build_price_band_model(price_rows, band_config)

    return StockModels(
        ticker=ticker.upper(),
        pe_model=pe_model,
        price_model=price_model,
        current_close=get_current_close(rows),
    )


def _load_scenario(
    ticker: str,
    summary: Sequence[SummaryRow],
    data_config: DataConfig,
    projection_config: ProjectionConfig,
    today: datetime.date,
) -> FuturePEScenario | None:
    inputs = derive_future_pe_inputs(
        ticker,
        summary,
        load_finance(ticker, data_config),
        load_forecast(ticker, data_config),
        today=today,
    )
    if inputs is None:
        return None
    return FuturePEScenario(inputs, projection_config, today=today)


def build_future_pe_scenarios(
    tickers: Sequence[str],
    data_config: DataConfig,
    projection_config: ProjectionConfig | None = None,
    max_workers: int = 4,
    today: datetime.date | None = None,
) -> list[FuturePEScenario]:
    """Build future PE scenarios for several tickers concurrently.

    The summary table is loaded once. A ticker that fails to load or
    lacks data is dropped; the rest keep request order.
    """
    projection_config = projection_config or ProjectionConfig()
    today = today or datetime.date.today()
    requested = [t.strip() for t in tickers if t.strip()]
    summary = load_summary(data_config)

    results: dict[int, FuturePEScenario | None] = {}
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = {
            executor.submit(
                _load_scenario, ticker, summary, data_config,
                projection_config, today,
            ): order
            for order, ticker in enumerate(requested)
        }
        for future in as_completed(futures):
            order = futures[future]
            try:
                results[order] = future.result()
            except Exception as e:
                logger.warning(
                    "%s: scenario load failed: %s", requested[order], e,
                    exc_info=True,
                )
                results[order] = None

    scenarios = [s for _, s in sorted(results.items()) if s is not None]
    logger.info("Built %d of %d future PE scenarios", len(scenarios), len(requested))
    return scenarios


def run_comparison(
    tickers: Sequence[str],
    start_date: datetime.date | str,
    data_config: DataConfig,
    config: ComparisonConfig | None = None,
) -> list[ComparisonSeries]:
    """Load and normalise several tickers from the row store."""
    return fetch_comparison_batch(
        tickers,
        start_date,
        lambda t: load_stock_series(t, data_config),
        config,
    )


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------


def pe_model_frame(model: PEBandModel) -> pd.DataFrame:
    df = pd.DataFrame([asdict(p) for p in model.points], columns=["date", "pe_ratio"])
    df["pe_assumed_low"] = model.assumed.low
    df["pe_assumed_mid"] = model.assumed.mid
    df["pe_assumed_high"] = model.assumed.high
    return df


def price_model_frame(model: PriceBandModel) -> pd.DataFrame:
    columns = ["date", "close", "low", "mid", "high", "pe_ratio"]
    df = pd.DataFrame([asdict(p) for p in model.points], columns=columns)
    if model.split_date is not None:
        df["is_forecast_region"] = df["date"] > model.split_date
    else:
        df["is_forecast_region"] = False
    return df


def projection_frame(scenario: FuturePEScenario) -> pd.DataFrame:
    columns = ["date", "implied_eps", "pe_ratio", "is_earnings_date"]
    df = pd.DataFrame([asdict(p) for p in scenario.projection()], columns=columns)
    df.insert(0, "ticker", scenario.ticker)
    return df


def assumptions_frame(scenario: FuturePEScenario) -> pd.DataFrame:
    columns = ["date", "eps", "annual_growth_rate", "quarterly_growth_rate"]
    df = pd.DataFrame(
        [asdict(a) for a in scenario.annualized_assumptions()], columns=columns,
    )
    df.insert(0, "ticker", scenario.ticker)
    return df


def comparison_frame(series: Sequence[ComparisonSeries]) -> pd.DataFrame:
    """Wide frame: one pct-return column per ticker, outer-joined on date."""
    frames = [
        pd.DataFrame(
            [asdict(p) for p in s.normalized], columns=["date", "pct_return"],
        ).set_index("date").rename(columns={"pct_return": s.ticker})
        for s in series
    ]
    if not frames:
        return pd.DataFrame(columns=["date"])
    return pd.concat(frames, axis=1).sort_index().reset_index()


def export_frames(frames: dict[str, pd.DataFrame], output_dir: Path) -> None:
    """Write each frame to output_dir/<name>."""
    output_dir.mkdir(parents=True, exist_ok=True)
    for filename, df in frames.items():
        path = output_dir / filename
        df.to_csv(path, index=False)
        logger.info("Exported %s (%d rows)", filename, len(df))
