"""
Technical indicators over plain float series: SMA-seeded EMA, Bollinger Bands,
crossover/crossunder predicates and CAGR.
Windows are summed in index order so results are reproducible to the bit.
"""

from __future__ import annotations
import math
from typing import Iterable, Sequence, Tuple

import numpy as np

from letf_rebase.core.errors import ConfigurationError

_MS_PER_YEAR = 365.25 * 24 * 60 * 60 * 1000


def _check_period(period: int) -> None:
    if isinstance(period, bool) or not isinstance(period, int) or period < 1:
        raise ConfigurationError(f"Indicator period must be a positive integer, got {period!r}")


def ema(values: Sequence[float], period: int) -> np.ndarray:
    """
    Exponential moving average with k = 2 / (period + 1).
    The first defined value is the SMA of the trailing `period` values; NaN inputs
    are skipped without resetting the running average.
    """
    _check_period(period)
    vals = [float(v) for v in values]
    out = np.full(len(vals), np.nan)
    k = 2 / (period + 1)
    current = math.nan
    for i, v in enumerate(vals):
        if math.isnan(v):
            continue
        if math.isnan(current):
            if i + 1 < period:
                continue
            total = 0.0
            for j in range(i - period + 1, i + 1):
                total += vals[j]
            current = total / period
        else:
            current = v * k + current * (1 - k)
        out[i] = current
    return out


def bollinger_bands(
    values: Sequence[float],
    period: int,
    std_dev_mult: float,
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Returns (mid, upper, lower). Population standard deviation over the trailing window."""
    _check_period(period)
    vals = [float(v) for v in values]
    n = len(vals)
    mid = np.full(n, np.nan)
    upper = np.full(n, np.nan)
    lower = np.full(n, np.nan)
    for i in range(period - 1, n):
        total = 0.0
        for j in range(i - period + 1, i + 1):
            total += vals[j]
        avg = total / period
        variance = 0.0
        for j in range(i - period + 1, i + 1):
            variance += (vals[j] - avg) ** 2
        sd = math.sqrt(variance / period)
        mid[i] = avg
        upper[i] = avg + std_dev_mult * sd
        lower[i] = avg - std_dev_mult * sd
    return mid, upper, lower


def crossover(a: Sequence[float], b: Sequence[float], index: int, offset: int = 0) -> bool:
    """True if a crossed above b at `offset` bars before `index` (0 = current bar)."""
    i = index - offset
    if i < 1:
        return False
    return bool(a[i] > b[i] and a[i - 1] <= b[i - 1])


def crossunder(a: Sequence[float], b: Sequence[float], index: int, offset: int = 0) -> bool:
    """True if a crossed below b at `offset` bars before `index`."""
    i = index - offset
    if i < 1:
        return False
    return bool(a[i] < b[i] and a[i - 1] >= b[i - 1])


def crossed_over_within(a: Sequence[float], b: Sequence[float], index: int, offsets: Iterable[int]) -> bool:
    return any(crossover(a, b, index, off) for off in offsets)


def crossed_under_within(a: Sequence[float], b: Sequence[float], index: int, offsets: Iterable[int]) -> bool:
    return any(crossunder(a, b, index, off) for off in offsets)


def cagr(start_ms: float, start_value: float, end_ms: float, end_value: float) -> float:
    """Compound annual growth rate in percent. 0 for non-positive values or elapsed time."""
    if start_value <= 0 or end_value <= 0:
        return 0.0
    years = (end_ms - start_ms) / _MS_PER_YEAR
    if years <= 0:
        return 0.0
    return ((end_value / start_value) ** (1 / years) - 1) * 100
