"""
ETF/LETF rebasing signals.
Entry (add exposure): ETF close crosses above its lower Bollinger band within the last
5 bars and above its EMA within the last 4 bars.
Exit (reduce exposure): LETF close crosses below its upper band within the last 5 bars
and below its EMA within the last 4 bars.
"""

from __future__ import annotations
from typing import Optional, Sequence, Tuple

from letf_rebase.core.config import StrategyConfig
from letf_rebase.core.types import IndicatorSeries
from letf_rebase.indicators.ta import (
    bollinger_bands,
    crossed_over_within,
    crossed_under_within,
    ema,
)
from letf_rebase.strategies.base import BaseStrategy

# The band and EMA look-backs differ on purpose; changing either shifts every signal.
BB_LOOKBACK_OFFSETS = range(5)
EMA_LOOKBACK_OFFSETS = range(4)


def _series(closes: Sequence[float], bb_len: int, bb_sd: float, ema_len: int) -> IndicatorSeries:
    mid, upper, lower = bollinger_bands(closes, bb_len, bb_sd)
    return IndicatorSeries(bb_upper=upper, bb_mid=mid, bb_lower=lower, ema=ema(closes, ema_len))


class EtfLetfRebaseStrategy(BaseStrategy):

    def __init__(self, config: Optional[StrategyConfig] = None):
        self.config = config or StrategyConfig()

    def compute_indicators(
        self,
        etf_close: Sequence[float],
        letf_close: Sequence[float],
    ) -> Tuple[IndicatorSeries, IndicatorSeries]:
        cfg = self.config
        etf = _series(etf_close, cfg.bb_len_etf, cfg.bb_sd_etf, cfg.ema_len_etf)
        letf = _series(letf_close, cfg.bb_len_letf, cfg.bb_sd_letf, cfg.ema_len_letf)
        return etf, letf

    def entry_signal(self, etf_close: Sequence[float], etf: IndicatorSeries, index: int) -> bool:
        bb_breakout = crossed_over_within(etf_close, etf.bb_lower, index, BB_LOOKBACK_OFFSETS)
        ema_breakout = crossed_over_within(etf_close, etf.ema, index, EMA_LOOKBACK_OFFSETS)
        return bb_breakout and ema_breakout

    def exit_signal(self, letf_close: Sequence[float], letf: IndicatorSeries, index: int) -> bool:
        bb_breakdown = crossed_under_within(letf_close, letf.bb_upper, index, BB_LOOKBACK_OFFSETS)
        ema_breakdown = crossed_under_within(letf_close, letf.ema, index, EMA_LOOKBACK_OFFSETS)
        return bb_breakdown and ema_breakdown
