"""Tests for valuation.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from valuation.config import (
    BandConfig,
    ComparisonConfig,
    DataConfig,
    ProjectionConfig,
    SortMetric,
)


class TestDefaults:

    def test_band_config(self) -> None:
        config = BandConfig()
        assert config.pe_padding == 0.08
        assert config.price_padding == 0.05
        assert config.degenerate_padding == 1.0

    def test_projection_config(self) -> None:
        config = ProjectionConfig()
        assert config.quarters == 12
        assert config.months_between_reports == 3

    def test_comparison_config(self) -> None:
        config = ComparisonConfig()
        assert config.max_tickers == 3
        assert config.default_lookback_days == 365


class TestValidation:

    def test_negative_padding(self) -> None:
        with pytest.raises(ValueError, match="pe_padding"):
            BandConfig(pe_padding=-0.1)

    def test_zero_quarters(self) -> None:
        with pytest.raises(ValueError, match="quarters"):
            ProjectionConfig(quarters=0)

    def test_zero_workers(self) -> None:
        with pytest.raises(ValueError, match="max_workers"):
            ComparisonConfig(max_workers=0)


class TestDataConfig:

    def test_paths(self) -> None:
        config = DataConfig(data_dir=Path("/srv/data"))
        assert config.price_dir == Path("/srv/data/price")
        assert config.finance_dir == Path("/srv/data/finance")
        assert config.forecast_dir == Path("/srv/data/finance_forecast")
        assert config.summary_path == Path("/srv/data/summary/stock_return_summary.csv")


class TestSortMetric:

    def test_values_are_summary_fields(self) -> None:
        assert SortMetric("ret_1y_pct") is SortMetric.RET_1Y
        assert SortMetric.PE_GAP.value == "current_pe_gap_pct"
