"""Indicators: EMA, Bollinger Bands, crossovers, CAGR."""

from letf_rebase.indicators.ta import (
    ema,
    bollinger_bands,
    crossover,
    crossunder,
    crossed_over_within,
    crossed_under_within,
    cagr,
)

__all__ = [
    "ema",
    "bollinger_bands",
    "crossover",
    "crossunder",
    "crossed_over_within",
    "crossed_under_within",
    "cagr",
]
