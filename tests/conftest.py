"""Shared fixtures: a small on-disk CSV row store."""

from __future__ import annotations

from pathlib import Path

import pytest

from valuation.config import DataConfig

_DAILY_HEADER = (
    "date,close,trailing_eps_4q,pe_ratio,is_forecast_point,"
    "pe_assumed_low,pe_assumed_mid,pe_assumed_high,"
    "price_est_low,price_est_mid,price_est_high,"
    "reportedDate_point,trailing_eps_4q_point,valuation_gap_mid"
)

_ABC_PRICE = f"""{_DAILY_HEADER}
2024-01-02,100,5,20,0,15,20,25,75,100,125,2024-01-02,5,0
2024-01-03,110,5,22,0,15,20,25,75,100,125,,,10
2024-01-04,NaN,5,null,0,15,20,25,75,100,125,,,
,99,,,,,,,,,,,,
2024-01-05,120,5,24,0,15,20,25,75,100,125,,,20
2024-04-01,,6,,1,15,20,25,90,120,150,,,
"""

_XYZ_PRICE = f"""{_DAILY_HEADER}
2024-01-02,50,2.5,20,0,10,20,30,25,50,75,,,
2024-01-03,45,2.5,18,0,10,20,30,25,50,75,,,
2024-01-05,55,2.5,22,0,10,20,30,25,50,75,,,
"""

_ABC_FINANCE = """fiscalDateEnding,reportedDate,reportedEPS,estimatedEPS,totalRevenue,netIncome,commonStockSharesOutstanding,operatingCashflow,capitalExpenditures,freeCashFlow
2023-03-31,2023-05-01,1.0,0.9,1000,100,100,150,50,100
2023-06-30,2023-08-01,1.0,1.0,1100,100,100,160,50,110
2023-06-30,,9.9,,,,,,,
2023-09-30,2023-11-01,1.5,1.2,1200,150,100,170,50,120
2023-12-31,2024-02-01,1.5,None,1300,150,100,180,50,130
"""

_ABC_FORECAST = """ticker,fiscalDateEnding,reportedDate,revenue_forecast,eps_forecast,netIncome_forecast,report_lag_days_used
ABC,2024-03-31,2024-05-01,1400,1.6,160,31
ABC,2024-06-30,2024-08-01,1500,1.7,170,32
"""

_SUMMARY = """ticker,current_date,current_close,note,mid_6m,ret_6m_pct,mid_1y,ret_1y_pct,mid_2y,ret_2y_pct,pe_low_used,pe_mid_used,pe_high_used,current_pe,current_pe_gap_pct,eps_yoy_growth_avg_last4q_pct
ABC,2024-01-05,120,,110,5.0,130,8.3,150,25.0,15,20,25,24,20.0,12.0
XYZ,2024-01-05,55,thin history,50,,60,9.1,,,10,20,30,22,10.0,
"""


def write_row_store(root: Path) -> DataConfig:
    """Write a two-ticker row store under root and return its config."""
    config = DataConfig(data_dir=root)
    for directory in (
        config.price_dir,
        config.finance_dir,
        config.forecast_dir,
        config.summary_path.parent,
    ):
        directory.mkdir(parents=True, exist_ok=True)

    (config.price_dir / "ABC.csv").write_text(_ABC_PRICE)
    (config.price_dir / "XYZ.csv").write_text(_XYZ_PRICE)
    (config.finance_dir / "ABC.csv").write_text(_ABC_FINANCE)
    (config.forecast_dir / "ABC.csv").write_text(_ABC_FORECAST)
    config.summary_path.write_text(_SUMMARY)
    return config


@pytest.fixture
def data_config(tmp_path: Path) -> DataConfig:
    return write_row_store(tmp_path / "data")
