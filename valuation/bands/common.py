"""Shared helpers for band model builders."""

from __future__ import annotations

import math
from collections.abc import Callable, Iterable, Sequence
from typing import TypeVar

import numpy as np

T = TypeVar("T")

# Display range when no finite value is available.
UNIT_RANGE: tuple[float, float] = (0.0, 1.0)


def finite_or_null(value: float | None) -> float | None:
    """Return value if it is a finite number, otherwise None."""
    if value is None:
        return None
    try:
        f = float(value)
    except (TypeError, ValueError):
        return None
    return f if math.isfinite(f) else None


def last_non_null(
    items: Sequence[T],
    selector: Callable[[T], float | None],
) -> tuple[T, float] | None:
    """Scan backward for the last item whose selected value is finite.

    Args:
        items: Sequence to scan, in its natural order.
        selector: Extracts the candidate value from an item.

    Returns:
        (item, value) for the last finite value, or None.
    """
    for item in reversed(items):
        value = finite_or_null(selector(item))
        if value is not None:
            return item, value
    return None


def padded_range(
    values: Iterable[float | None],
    padding: float,
    degenerate_padding: float,
    floor: float | None = None,
) -> tuple[float, float]:
    """Compute a padded (y_min, y_max) display range.

    Non-finite and None values are ignored. A non-degenerate range is
    widened by ``padding`` times its span on each side; a single-valued
    range is widened by ``degenerate_padding``. When ``floor`` is given,
    y_min never drops below it.

    Returns:
        (y_min, y_max) with y_min <= y_max. UNIT_RANGE when no finite
        value exists.
    """
    pool = np.array(
        [v for v in (finite_or_null(x) for x in values) if v is not None],
        dtype=float,
    )
    if pool.size == 0:
        return UNIT_RANGE

    y_min = float(pool.min())
    y_max = float(pool.max())

    if y_max > y_min:
        pad = (y_max - y_min) * padding
    else:
        pad = degenerate_padding
    y_min -= pad
    y_max += pad

    if floor is not None:
        y_min = max(floor, y_min)
        y_max = max(y_min, y_max)
    return y_min, y_max
