"""CLI entry point for the valuation band and projection tools."""

from __future__ import annotations

import argparse
import datetime
import logging
import sys
from pathlib import Path

import pandas as pd

from valuation.analysis.ranking import sort_rankings
from valuation.analysis.time_machine import calculate_time_machine
from valuation.config import (
    BandConfig,
    ComparisonConfig,
    DataConfig,
    ProjectionConfig,
    SortMetric,
)
from valuation.data import load_stock_series, load_summary
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

logger = logging.getLogger(__name__)


def _parse_date(value: str) -> datetime.date:
    try:
        return datetime.date.fromisoformat(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"invalid date {value!r}") from e


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        argv: Argument list (defaults to sys.argv[1:]).

    Returns:
        Parsed arguments namespace.
    """
    parser = argparse.ArgumentParser(
        prog="valuation",
        description="PE band, fair-value band and future PE tools",
    )
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=None,
        help="Row store directory (default: ./data)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # bands command
    bands_parser = subparsers.add_parser(
        "bands", help="Build PE and price band models for a ticker"
    )
    bands_parser.add_argument("ticker", help="Ticker symbol")
    bands_parser.add_argument("--pe-low", type=float, default=None)
    bands_parser.add_argument(
        "--pe-mid",
        type=float,
        default=None,
        help="Mid PE; low and high scale with it",
    )
    bands_parser.add_argument("--pe-high", type=float, default=None)
    bands_parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path("output/bands"),
        help="Output directory (default: output/bands/)",
    )

    # future-pe command
    future_parser = subparsers.add_parser(
        "future-pe", help="Project forward PE at today's price"
    )
    future_parser.add_argument("tickers", nargs="+", help="Ticker symbols")
    future_parser.add_argument(
        "--quarters",
        type=int,
        default=None,
        help="Number of future earnings anchors (default: 12)",
    )
    future_parser.add_argument(
        "--growth-delta",
        type=float,
        default=0.0,
        help="Percentage points added to every anchor's annual growth",
    )
    future_parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path("output/future_pe"),
        help="Output directory (default: output/future_pe/)",
    )

    # compare command
    compare_parser = subparsers.add_parser(
        "compare", help="Compare percentage returns since a start date"
    )
    compare_parser.add_argument("tickers", nargs="+", help="Ticker symbols")
    compare_parser.add_argument(
        "--start",
        type=_parse_date,
        default=None,
        help="Start date YYYY-MM-DD (default: one year ago)",
    )
    compare_parser.add_argument(
        "--output",
        type=Path,
        default=Path("output/comparison.csv"),
        help="Output CSV path (default: output/comparison.csv)",
    )

    # time-machine command
    tm_parser = subparsers.add_parser(
        "time-machine", help="Value a past purchase at today's close"
    )
    tm_parser.add_argument("ticker", help="Ticker symbol")
    tm_parser.add_argument("--date", type=_parse_date, required=True)
    tm_parser.add_argument("--amount", type=float, required=True)
    tm_parser.add_argument("--product", default="", help="What the amount would have bought")

    # rankings command
    rank_parser = subparsers.add_parser(
        "rankings", help="Print the summary table ranked by a metric"
    )
    rank_parser.add_argument(
        "--sort",
        choices=[m.value for m in SortMetric],
        default=SortMetric.RET_1Y.value,
        help="Sort metric (default: ret_1y_pct)",
    )
    rank_parser.add_argument("--top", type=int, default=20)

    return parser.parse_args(argv)


def run_bands(args: argparse.Namespace, data_config: DataConfig) -> None:
    models = build_stock_models(
        args.ticker,
        data_config,
        BandConfig(),
        low=args.pe_low,
        mid=args.pe_mid,
        high=args.pe_high,
    )
    if models is None:
        logger.error("%s: no price series found", args.ticker)
        sys.exit(1)

    export_frames(
        {
            f"{models.ticker}_pe_band.csv": pe_model_frame(models.pe_model),
            f"{models.ticker}_price_band.csv": price_model_frame(models.price_model),
        },
        args.output_dir,
    )
    logger.info(
        "%s: PE range [%.2f, %.2f], price range [%.2f, %.2f], split %s",
        models.ticker,
        models.pe_model.y_min, models.pe_model.y_max,
        models.price_model.y_min, models.price_model.y_max,
        models.price_model.split_date,
    )


def run_future_pe(args: argparse.Namespace, data_config: DataConfig) -> None:
    if args.quarters is not None:
        config = ProjectionConfig(quarters=args.quarters)
    else:
        config = ProjectionConfig()

    scenarios = build_future_pe_scenarios(args.tickers, data_config, config)
    if not scenarios:
        logger.error("No ticker had enough data for a projection")
        sys.exit(1)

    frames: dict[str, pd.DataFrame] = {}
    for scenario in scenarios:
        if args.growth_delta:
            scenario.cascade.apply_growth_delta(args.growth_delta)
        frames[f"{scenario.ticker}_projection.csv"] = projection_frame(scenario)
        frames[f"{scenario.ticker}_assumptions.csv"] = assumptions_frame(scenario)

        final = scenario.projection()[-1]
        logger.info(
            "%s: PE %.2fx today -> %.2fx on %s at fixed price %.2f",
            scenario.ticker,
            scenario.inputs.current_pe,
            final.pe_ratio,
            final.date,
            scenario.inputs.price,
        )

    export_frames(frames, args.output_dir)


def run_compare(args: argparse.Namespace, data_config: DataConfig) -> None:
    config = ComparisonConfig()
    start = args.start or (
        datetime.date.today() - datetime.timedelta(days=config.default_lookback_days)
    )
    series = run_comparison(args.tickers, start, data_config, config)
    if not series:
        logger.error("No data found for the given tickers since %s", start)
        sys.exit(1)

    for s in series:
        logger.info(
            "%s: %.2f -> %.2f (%+.2f%%)",
            s.ticker, s.start_price, s.end_price, s.total_return_pct,
        )
    args.output.parent.mkdir(parents=True, exist_ok=True)
    comparison_frame(series).to_csv(args.output, index=False)
    logger.info("Comparison written to %s", args.output)


def run_time_machine(args: argparse.Namespace, data_config: DataConfig) -> None:
    rows = load_stock_series(args.ticker, data_config)
    result = calculate_time_machine(
        args.ticker, rows, args.date, args.amount, args.product,
    )
    if result is None:
        logger.error("%s: no price data on or after %s", args.ticker, args.date)
        sys.exit(1)

    logger.info(
        "%s: %.2f on %s bought %.4f shares at %.2f, now worth %.2f (%+.2f%%)",
        result.ticker,
        result.amount,
        result.purchase_date,
        result.shares_bought,
        result.past_price,
        result.current_value,
        result.percent_change,
    )


def run_rankings(args: argparse.Namespace, data_config: DataConfig) -> None:
    metric = SortMetric(args.sort)
    ranked = sort_rankings(load_summary(data_config), metric)
    for position, row in enumerate(ranked[: args.top], start=1):
        value = getattr(row, metric.value)
        logger.info(
            "%3d. %-8s %s",
            position,
            row.ticker,
            f"{value:.2f}" if value is not None else "-",
        )


COMMANDS = {
    "bands": run_bands,
    "future-pe": run_future_pe,
    "compare": run_compare,
    "time-machine": run_time_machine,
    "rankings": run_rankings,
}


def main(argv: list[str] | None = None) -> None:
    """Main entry point.

    Args:
        argv: Argument list (defaults to sys.argv[1:]).
    """
    args = _parse_args(argv)

    # Configure logging
    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    data_config = DataConfig()
    if args.data_dir is not None:
        data_config.data_dir = args.data_dir

    handler = COMMANDS.get(args.command)
    if handler is None:
        logger.error("Unknown command: %s", args.command)
        sys.exit(1)
    handler(args, data_config)


if __name__ == "__main__":
    main()
