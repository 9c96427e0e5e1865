"""Tests for valuation.runner."""

from __future__ import annotations

import datetime
from pathlib import Path
from unittest.mock import patch

import pandas as pd
import pytest

from valuation.analysis.comparison import build_comparison_series
from valuation.config import DataConfig, ProjectionConfig
from valuation.data.models import DailyRow
from valuation.runner import (
    assumptions_frame,
    build_future_pe_scenarios,
    build_stock_models,
    comparison_frame,
    export_frames,
    pe_model_frame,
    price_model_frame,
    projection_frame,
    run_comparison,
)

_TODAY = datetime.date(2024, 1, 10)

# ---------------------------------------------------------------------------
# build_stock_models
# ---------------------------------------------------------------------------


class TestBuildStockModels:

    def test_stored_band(self, data_config: DataConfig) -> None:
        models = build_stock_models("abc", data_config)
        assert models is not None
        assert models.ticker == "ABC"
        assert models.pe_model.assumed.values() == (15.0, 20.0, 25.0)
        assert models.pe_model.y_min == pytest.approx(14.2)
        assert models.pe_model.y_max == pytest.approx(25.8)
        assert models.current_close == ("2024-01-05", 120.0)

    def test_price_model_split(self, data_config: DataConfig) -> None:
        models = build_stock_models("ABC", data_config)
        assert models is not None
        assert models.price_model.split_date == "2024-01-05"
        assert models.price_model.points[-1].mid == 120.0

    def test_mid_edit_rebuilds_price_estimates(self, data_config: DataConfig) -> None:
        models = build_stock_models("ABC", data_config, mid=30.0)
        assert models is not None
        assert models.pe_model.assumed.values() == pytest.approx((22.5, 30.0, 37.5))
        first = models.price_model.points[0]
        assert (first.low, first.mid, first.high) == pytest.approx((112.5, 150.0, 187.5))
        assert models.price_model.points[-1].mid == pytest.approx(180.0)

    def test_unknown_ticker(self, data_config: DataConfig) -> None:
        assert build_stock_models("NOPE", data_config) is None


# ---------------------------------------------------------------------------
# build_future_pe_scenarios
# ---------------------------------------------------------------------------


class TestBuildFuturePEScenarios:

    def test_request_order_and_inputs(self, data_config: DataConfig) -> None:
        scenarios = build_future_pe_scenarios(
            ["XYZ", "abc"], data_config, ProjectionConfig(quarters=4), today=_TODAY,
        )
        assert [s.ticker for s in scenarios] == ["XYZ", "ABC"]
        xyz, abc = scenarios
        assert abc.inputs.current_eps == pytest.approx(5.0)
        assert abc.inputs.next_earnings_date == datetime.date(2024, 5, 1)
        assert xyz.inputs.current_eps == pytest.approx(2.5)
        assert xyz.inputs.growth_rate_pct == 0.0

    def test_unknown_ticker_dropped(self, data_config: DataConfig) -> None:
        scenarios = build_future_pe_scenarios(
            ["NOPE", "ABC", " "], data_config, today=_TODAY,
        )
        assert [s.ticker for s in scenarios] == ["ABC"]

    @pytest.mark.parametrize("error", [OSError("disk error"), RuntimeError("corrupt row")])
    def test_loader_failure_isolated(
        self, data_config: DataConfig, error: Exception
    ) -> None:
        def failing_finance(ticker: str, config: DataConfig) -> list:
            if ticker == "XYZ":
                raise error
            return []

        with patch("valuation.runner.load_finance", side_effect=failing_finance):
            scenarios = build_future_pe_scenarios(
                ["XYZ", "ABC"], data_config, today=_TODAY,
            )
        assert [s.ticker for s in scenarios] == ["ABC"]

    def test_missing_summary_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            build_future_pe_scenarios(["ABC"], DataConfig(data_dir=tmp_path))


# ---------------------------------------------------------------------------
# run_comparison
# ---------------------------------------------------------------------------


class TestRunComparison:

    def test_loads_from_store(self, data_config: DataConfig) -> None:
        series = run_comparison(["ABC", "XYZ", "NOPE"], "2024-01-01", data_config)
        assert [s.ticker for s in series] == ["ABC", "XYZ"]
        assert series[0].total_return_pct == pytest.approx(20.0)
        assert series[1].total_return_pct == pytest.approx(10.0)


# ---------------------------------------------------------------------------
# Frames and export
# ---------------------------------------------------------------------------


class TestFrames:

    def test_pe_model_frame(self, data_config: DataConfig) -> None:
        models = build_stock_models("ABC", data_config)
        assert models is not None
        df = pe_model_frame(models.pe_model)
        assert list(df.columns) == [
            "date", "pe_ratio", "pe_assumed_low", "pe_assumed_mid", "pe_assumed_high",
        ]
        assert len(df) == 5
        assert (df["pe_assumed_mid"] == 20.0).all()

    def test_price_model_frame_marks_forecast_region(self, data_config: DataConfig) -> None:
        models = build_stock_models("ABC", data_config)
        assert models is not None
        df = price_model_frame(models.price_model)
        assert df["is_forecast_region"].tolist() == [False, False, False, False, True]

    def test_projection_and_assumption_frames(self, data_config: DataConfig) -> None:
        scenario = build_future_pe_scenarios(
            ["ABC"], data_config, ProjectionConfig(quarters=4), today=_TODAY,
        )[0]
        projection = projection_frame(scenario)
        assert projection.columns[0] == "ticker"
        assert projection["is_earnings_date"].sum() == 4
        assumptions = assumptions_frame(scenario)
        assert len(assumptions) == 4
        assert assumptions["annual_growth_rate"].tolist() == pytest.approx([12.0] * 4)

    def test_comparison_frame_outer_join(self) -> None:
        a = build_comparison_series(
            "A",
            [DailyRow(date="2024-01-01", close=10.0), DailyRow(date="2024-01-03", close=11.0)],
            "2024-01-01",
        )
        b = build_comparison_series(
            "B",
            [DailyRow(date="2024-01-02", close=20.0), DailyRow(date="2024-01-03", close=18.0)],
            "2024-01-01",
        )
        assert a is not None and b is not None
        df = comparison_frame([a, b])
        assert list(df.columns) == ["date", "A", "B"]
        assert df["date"].tolist() == ["2024-01-01", "2024-01-02", "2024-01-03"]
        assert pd.isna(df.loc[1, "A"])
        assert df.loc[2, "B"] == pytest.approx(-10.0)

    def test_comparison_frame_empty(self) -> None:
        assert list(comparison_frame([]).columns) == ["date"]


class TestExportFrames:

    def test_writes_csv_files(self, tmp_path: Path) -> None:
        output_dir = tmp_path / "nested" / "out"
        export_frames(
            {"a.csv": pd.DataFrame({"x": [1, 2]}), "b.csv": pd.DataFrame({"y": [3]})},
            output_dir,
        )
        assert {f.name for f in output_dir.iterdir()} == {"a.csv", "b.csv"}
        assert pd.read_csv(output_dir / "a.csv")["x"].tolist() == [1, 2]
