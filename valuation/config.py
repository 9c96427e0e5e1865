"""Valuation engine configuration dataclasses."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

# CSV cell values treated as missing (compared case-insensitively).
NULL_SENTINELS: frozenset[str] = frozenset({"", "nan", "null", "none"})

# Annual growth below -100% has no real quarterly equivalent.
# Rates are clamped here before fractional exponentiation.
MIN_GROWTH_PCT: float = -99.0


class SortMetric(Enum):
    """Summary table sort options."""

    RET_6M = "ret_6m_pct"
    RET_1Y = "ret_1y_pct"
    RET_2Y = "ret_2y_pct"
    PE_MID = "pe_mid_used"
    EPS_GROWTH = "eps_yoy_growth_avg_last4q_pct"
    CURRENT_PE = "current_pe"
    PE_GAP = "current_pe_gap_pct"


@dataclass
class BandConfig:
    """Display range padding for band models."""

    pe_padding: float = 0.08
    price_padding: float = 0.05
    degenerate_padding: float = 1.0

    def __post_init__(self) -> None:
        for name in ("pe_padding", "price_padding", "degenerate_padding"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative")


@dataclass
class ProjectionConfig:
    """Future PE simulator parameters."""

    quarters: int = 12
    months_between_reports: int = 3

    def __post_init__(self) -> None:
        if self.quarters < 1:
            raise ValueError("quarters must be at least 1")
        if self.months_between_reports < 1:
            raise ValueError("months_between_reports must be at least 1")


@dataclass
class DataConfig:
    """Location of the CSV row store."""

    data_dir: Path = Path("data")

    @property
    def price_dir(self) -> Path:
        return self.data_dir / "price"

    @property
    def finance_dir(self) -> Path:
        return self.data_dir / "finance"

    @property
    def forecast_dir(self) -> Path:
        return self.data_dir / "finance_forecast"

    @property
    def summary_path(self) -> Path:
        return self.data_dir / "summary" / "stock_return_summary.csv"


@dataclass
class ComparisonConfig:
    """Multi-ticker comparison parameters."""

    max_workers: int = 4
    max_tickers: int = 3
    default_lookback_days: int = 365

    def __post_init__(self) -> None:
        if self.max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        if self.max_tickers < 1:
            raise ValueError("max_tickers must be at least 1")
