"""Fair-value price band model."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from valuation.bands.common import finite_or_null, last_non_null, padded_range
from valuation.config import BandConfig
from valuation.data.models import DailyRow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PriceBandPoint:
    """One price chart point: actual close plus the estimated price band."""

    date: str
    close: float | None
    low: float | None
    mid: float | None
    high: float | None
    pe_ratio: float | None


@dataclass(frozen=True)
class LastClose:
    date: str
    close: float


@dataclass(frozen=True)
class PriceBandModel:
    """Price series with its display range.

    Attributes:
        points: Points sorted ascending by date.
        y_min: Lower display bound (not clamped at zero).
        y_max: Upper display bound.
        last_close: Most recent point with an actual close. None if no
            point has one.
        split_date: Date of last_close; separates history from forecast.
    """

    points: list[PriceBandPoint]
    y_min: float
    y_max: float
    last_close: LastClose | None
    split_date: str | None


def build_price_band_model(
    rows: Sequence[DailyRow],
    config: BandConfig | None = None,
) -> PriceBandModel:
    """Build the price band model from daily rows.

    Rows may arrive in any order; points are sorted by date. The display
    range pools close and the low/mid/high price estimates.

    Args:
        rows: Daily rows for one ticker.
        config: Band padding configuration.

    Returns:
        PriceBandModel.
    """
    config = config or BandConfig()

    points = sorted(
        (
            PriceBandPoint(
                date=r.date,
                close=finite_or_null(r.close),
                low=finite_or_null(r.price_est_low),
                mid=finite_or_null(r.price_est_mid),
                high=finite_or_null(r.price_est_high),
                pe_ratio=finite_or_null(r.pe_ratio),
            )
            for r in rows
            if r.date
        ),
        key=lambda p: p.date,
    )

    y_min, y_max = padded_range(
        (v for p in points for v in (p.close, p.low, p.mid, p.high)),
        padding=config.price_padding,
        degenerate_padding=config.degenerate_padding,
    )

    found = last_non_null(points, lambda p: p.close)
    if found is not None:
        point, close = found
        last_close: LastClose | None = LastClose(date=point.date, close=close)
        split_date: str | None = point.date
    else:
        last_close = None
        split_date = None

    logger.debug(
        "Price band model: %d points, range [%.2f, %.2f], split %s",
        len(points), y_min, y_max, split_date,
    )
    return PriceBandModel(
        points=points,
        y_min=y_min,
        y_max=y_max,
        last_close=last_close,
        split_date=split_date,
    )
