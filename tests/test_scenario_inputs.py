"""Tests for valuation.analysis.scenario_inputs."""

from __future__ import annotations

import datetime

import pytest

from valuation.analysis.scenario_inputs import (
    derive_financial_metrics,
    derive_future_pe_inputs,
    find_summary,
    next_earnings_date,
    trailing_eps,
)
from valuation.data.models import FinanceRow, ForecastRow, SummaryRow

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_TODAY = datetime.date(2024, 6, 30)


def _summary(**overrides: object) -> list[SummaryRow]:
    fields: dict = {
        "ticker": "ABC",
        "current_date": "2024-06-28",
        "current_close": 100.0,
        "current_pe": 25.0,
        "eps_yoy_growth_avg_last4q_pct": 12.0,
    }
    fields.update(overrides)
    return [SummaryRow(ticker="XYZ", current_date="2024-06-28", current_close=5.0),
            SummaryRow(**fields)]


def _quarter(reported: str, eps: float | None, **kwargs: object) -> FinanceRow:
    return FinanceRow(
        fiscal_date_ending=reported, reported_date=reported, reported_eps=eps, **kwargs,
    )


def _finance() -> list[FinanceRow]:
    return [
        _quarter("2023-05-01", 1.0, net_income=100.0),
        _quarter("2023-08-01", 1.0, net_income=100.0),
        _quarter("2023-11-01", 1.5, net_income=150.0),
        _quarter("2024-02-01", None, net_income=None),
        _quarter("2024-05-01", 2.0, net_income=200.0, shares_outstanding=1000.0),
    ]


def _forecast() -> list[ForecastRow]:
    return [
        ForecastRow(ticker="ABC", fiscal_date_ending="2024-09-30", reported_date="2024-11-01"),
        ForecastRow(ticker="ABC", fiscal_date_ending="2024-06-30", reported_date="2024-08-01"),
        ForecastRow(ticker="ABC", fiscal_date_ending="2024-03-31", reported_date="2024-05-01"),
    ]


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------


class TestLookups:

    def test_find_summary_case_insensitive(self) -> None:
        row = find_summary(_summary(), " abc ")
        assert row is not None
        assert row.ticker == "ABC"

    def test_find_summary_missing(self) -> None:
        assert find_summary(_summary(), "NOPE") is None

    def test_trailing_eps_skips_missing_quarters(self) -> None:
        result = trailing_eps(_finance())
        assert result is not None
        total, last = result
        assert total == pytest.approx(5.5)
        assert last == datetime.date(2024, 5, 1)

    def test_trailing_eps_orders_by_report_date(self) -> None:
        result = trailing_eps(list(reversed(_finance())))
        assert result is not None
        assert result[0] == pytest.approx(5.5)

    def test_trailing_eps_needs_four_quarters(self) -> None:
        assert trailing_eps(_finance()[:3]) is None

    def test_next_earnings_date(self) -> None:
        assert next_earnings_date(_forecast(), _TODAY) == datetime.date(2024, 8, 1)

    def test_next_earnings_date_none_in_future(self) -> None:
        assert next_earnings_date(_forecast(), datetime.date(2025, 1, 1)) is None


# ---------------------------------------------------------------------------
# derive_future_pe_inputs
# ---------------------------------------------------------------------------


class TestDeriveFuturePEInputs:

    def test_full_data(self) -> None:
        inputs = derive_future_pe_inputs(
            "abc", _summary(), _finance(), _forecast(), today=_TODAY,
        )
        assert inputs is not None
        assert inputs.ticker == "ABC"
        assert inputs.price == 100.0
        assert inputs.current_eps == pytest.approx(5.5)
        assert inputs.growth_rate_pct == 12.0
        assert inputs.next_earnings_date == datetime.date(2024, 8, 1)
        assert inputs.current_date == datetime.date(2024, 6, 28)
        assert inputs.last_report_date == datetime.date(2024, 5, 1)
        assert inputs.current_pe == pytest.approx(100.0 / 5.5)

    def test_eps_from_summary_pe_fallback(self) -> None:
        inputs = derive_future_pe_inputs("ABC", _summary(), [], [], today=_TODAY)
        assert inputs is not None
        assert inputs.current_eps == pytest.approx(4.0)
        assert inputs.last_report_date is None
        assert inputs.next_earnings_date is None

    def test_no_eps_source(self) -> None:
        inputs = derive_future_pe_inputs(
            "ABC", _summary(current_pe=None), [], [], today=_TODAY,
        )
        assert inputs is not None
        assert inputs.current_eps == 0.0
        assert inputs.current_pe == 0.0

    def test_missing_growth_defaults_to_zero(self) -> None:
        inputs = derive_future_pe_inputs(
            "ABC", _summary(eps_yoy_growth_avg_last4q_pct=None), _finance(), [], today=_TODAY,
        )
        assert inputs is not None
        assert inputs.growth_rate_pct == 0.0

    def test_unknown_ticker(self) -> None:
        assert derive_future_pe_inputs("NOPE", _summary(), [], [], today=_TODAY) is None

    def test_no_current_close(self) -> None:
        summary = _summary(current_close=None)
        assert derive_future_pe_inputs("ABC", summary, [], [], today=_TODAY) is None


# ---------------------------------------------------------------------------
# derive_financial_metrics
# ---------------------------------------------------------------------------


class TestDeriveFinancialMetrics:

    def test_last_four_rows(self) -> None:
        metrics = derive_financial_metrics("ABC", _summary(), _finance())
        assert metrics is not None
        assert metrics.quarterly_eps == [1.0, 1.5, 0.0, 2.0]
        assert metrics.eps == pytest.approx(4.5)
        assert metrics.pe == pytest.approx(100.0 / 4.5)
        assert metrics.net_income == pytest.approx(450.0)
        assert metrics.shares == 1000.0
        assert metrics.market_cap == pytest.approx(100000.0)

    def test_non_positive_eps_has_no_pe(self) -> None:
        finance = [_quarter(f"2024-0{m}-01", -1.0) for m in range(1, 5)]
        metrics = derive_financial_metrics("ABC", _summary(), finance)
        assert metrics is not None
        assert metrics.pe is None
        assert metrics.market_cap is None

    def test_too_few_quarters(self) -> None:
        assert derive_financial_metrics("ABC", _summary(), _finance()[:3]) is None

    def test_unknown_ticker(self) -> None:
        assert derive_financial_metrics("NOPE", _summary(), _finance()) is None
