"""User edits to the assumed PE band and the price rows derived from it."""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Sequence

from valuation.bands.pe_band import AssumedPE
from valuation.data.models import DailyRow

logger = logging.getLogger(__name__)

# Mid multiples at or below this are too small to scale low/high from.
_MIN_SCALABLE_MID = 0.1


def update_assumed_pe(
    prev: AssumedPE,
    low: float | None = None,
    mid: float | None = None,
    high: float | None = None,
) -> AssumedPE:
    """Merge an edit into the assumed PE band.

    Moving the mid line drags low and high proportionally: both are scaled
    by new_mid / prev.mid, provided the previous mid is above 0.1. An
    explicitly supplied low or high is scaled from its previous value too,
    so a mid edit always keeps the band shape.

    Args:
        prev: Current assumed band.
        low: New low multiple, or None to keep.
        mid: New mid multiple, or None to keep.
        high: New high multiple, or None to keep.

    Returns:
        New AssumedPE.
    """
    new_low = prev.low if low is None else low
    new_mid = prev.mid if mid is None else mid
    new_high = prev.high if high is None else high

    if mid is not None and prev.mid is not None and prev.mid > _MIN_SCALABLE_MID:
        ratio = mid / prev.mid
        if prev.low is not None:
            new_low = prev.low * ratio
        if prev.high is not None:
            new_high = prev.high * ratio
        logger.debug("Assumed PE mid %.2f -> %.2f (x%.4f)", prev.mid, mid, ratio)

    return AssumedPE(low=new_low, mid=new_mid, high=new_high)


def rebuild_price_rows(
    rows: Sequence[DailyRow],
    assumed: AssumedPE,
) -> list[DailyRow]:
    """Derive a new row set with price estimates for an assumed PE band.

    price_est_x = trailing_eps_4q * pe_x, with missing EPS or multiples
    treated as zero. Input rows are not modified.
    """
    result: list[DailyRow] = []
    for r in rows:
        eps = r.trailing_eps_4q or 0.0
        result.append(
            dataclasses.replace(
                r,
                pe_assumed_low=assumed.low,
                pe_assumed_mid=assumed.mid,
                pe_assumed_high=assumed.high,
                price_est_low=eps * (assumed.low or 0.0),
                price_est_mid=eps * (assumed.mid or 0.0),
                price_est_high=eps * (assumed.high or 0.0),
            )
        )
    return result
