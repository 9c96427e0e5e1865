"""PE ratio band model.

Builds the chart-ready PE series plus a display range covering both the
historical PE ratio and the assumed low/mid/high PE lines.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from valuation.bands.common import finite_or_null, last_non_null, padded_range
from valuation.config import BandConfig
from valuation.data.models import DailyRow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PEBandPoint:
    """One PE chart point."""

    date: str
    pe_ratio: float | None


@dataclass(frozen=True)
class AssumedPE:
    """Assumed PE band (5th/50th/95th percentile multiples).

    Attributes:
        low: Low band multiple. None if unavailable.
        mid: Mid band multiple. None if unavailable.
        high: High band multiple. None if unavailable.
    """

    low: float | None = None
    mid: float | None = None
    high: float | None = None

    def values(self) -> tuple[float | None, float | None, float | None]:
        return self.low, self.mid, self.high


@dataclass(frozen=True)
class PEBandModel:
    """PE series with its display range.

    Attributes:
        points: PE points in caller order.
        y_min: Lower display bound, never negative.
        y_max: Upper display bound.
        assumed: Assumed PE band found in the rows.
    """

    points: list[PEBandPoint]
    y_min: float
    y_max: float
    assumed: AssumedPE = field(default_factory=AssumedPE)


def _assumed_from_rows(rows: Sequence[DailyRow]) -> AssumedPE:
    """Last non-null assumed PE per field.

    The assumed columns are constant per series, so the last finite value
    stands for the whole column.
    """
    found = [
        last_non_null(rows, lambda r, name=name: getattr(r, name))
        for name in ("pe_assumed_low", "pe_assumed_mid", "pe_assumed_high")
    ]
    low, mid, high = (f[1] if f is not None else None for f in found)
    return AssumedPE(low=low, mid=mid, high=high)


def build_pe_band_model(
    rows: Sequence[DailyRow],
    config: BandConfig | None = None,
    assumed: AssumedPE | None = None,
) -> PEBandModel:
    """Build the PE band model from daily rows.

    Rows are expected pre-sorted; caller order is preserved. Rows with an
    empty date are dropped.

    Args:
        rows: Daily rows for one ticker.
        config: Band padding configuration.
        assumed: Assumed PE band overriding the one stored in the rows
            (e.g. after a user edit).

    Returns:
        PEBandModel. Empty input yields no points and the unit range.
    """
    config = config or BandConfig()

    points = [
        PEBandPoint(date=r.date, pe_ratio=finite_or_null(r.pe_ratio))
        for r in rows
        if r.date
    ]
    if assumed is None:
        assumed = _assumed_from_rows(rows)

    y_min, y_max = padded_range(
        [p.pe_ratio for p in points] + list(assumed.values()),
        padding=config.pe_padding,
        degenerate_padding=config.degenerate_padding,
        floor=0.0,
    )

    logger.debug(
        "PE band model: %d points, range [%.2f, %.2f]",
        len(points), y_min, y_max,
    )
    return PEBandModel(points=points, y_min=y_min, y_max=y_max, assumed=assumed)
