"""
Rebasing backtest engine: bar-by-bar rotation between an ETF and its leveraged
counterpart, with buy-and-hold baselines for both instruments.
Pure and deterministic: same bars and config give the same result.
"""

from __future__ import annotations
import logging
import math
from typing import Any, Iterable, List, Mapping, Optional, Union

import numpy as np

from letf_rebase.analytics.metrics import DrawdownTracker, days_per_rebase
from letf_rebase.core.config import StrategyConfig
from letf_rebase.core.types import (
    Bar,
    ExposureLevel,
    IndicatorSeries,
    RebaseResult,
    SignalPoint,
    SignalSide,
    StrategyState,
    StrategyStats,
)
from letf_rebase.data.alignment import align_bars
from letf_rebase.indicators.ta import cagr
from letf_rebase.strategies.base import BaseStrategy
from letf_rebase.strategies.etf_letf_rebase import EtfLetfRebaseStrategy

logger = logging.getLogger("letf_rebase.backtest")

ConfigLike = Union[StrategyConfig, Mapping[str, Any], None]


def _resolve_config(config: ConfigLike) -> StrategyConfig:
    if config is None:
        return StrategyConfig()
    if isinstance(config, StrategyConfig):
        return config
    return StrategyConfig.from_mapping(config)


def apply_bar(
    state: StrategyState,
    config: StrategyConfig,
    etf_close: float,
    letf_close: float,
    time_ms: int,
    add_exposure: bool,
    reduce_exposure: bool,
) -> List[SignalPoint]:
    """
    Advance the rotation state by one bar and return the signals it emitted.
    Order: entry, then exit (or ETF profit-taking when no exit fired), then the
    highest-close tracker.
    """
    signals: List[SignalPoint] = []
    t_sec = time_ms // 1000

    if state.exposure == ExposureLevel.LOW and add_exposure:
        state.entry_count += 1
        state.exposure = ExposureLevel.HIGH
        state.letf_shares = (state.etf_shares * etf_close + state.cash_reserve) / letf_close
        state.cash_reserve = 0.0
        state.etf_shares = 0.0
        signals.append(SignalPoint(time=t_sec, side=SignalSide.BUY, price=etf_close))
        logger.debug("Rotate into LETF at %d: etf=%.4f letf=%.4f shares=%.4f",
                     t_sec, etf_close, letf_close, state.letf_shares)

    # An exit must also print a new ETF high versus the last stretch held in ETF.
    if (
        state.exposure == ExposureLevel.HIGH
        and reduce_exposure
        and etf_close > state.etf_highest_close
    ):
        state.exposure = ExposureLevel.LOW
        state.etf_last_exit_close = etf_close
        state.exit_count += 1
        state.etf_shares = (state.letf_shares * letf_close + state.cash_reserve) / etf_close
        state.cash_reserve = 0.0
        state.letf_shares = 0.0
        state.profit_take_count = 0
        signals.append(SignalPoint(time=t_sec, side=SignalSide.SELL, price=etf_close))
        logger.debug("Rotate into ETF at %d: etf=%.4f letf=%.4f shares=%.4f",
                     t_sec, etf_close, letf_close, state.etf_shares)
    elif (
        state.exposure == ExposureLevel.LOW
        and state.exit_count > 0
        and config.etf_lim_profit_enabled
    ):
        trigger_pct = config.etf_lim_profit_line + state.profit_take_count * config.etf_lim_profit_interval
        ref = state.etf_last_exit_close
        if ref > 0 and (etf_close - ref) / ref > trigger_pct:
            state.cash_reserve += state.etf_shares * config.etf_lim_profit_pct * etf_close
            state.etf_shares = state.etf_shares * (1 - config.etf_lim_profit_pct)
            state.profit_take_count += 1
            logger.debug("ETF profit take #%d at %d: etf=%.4f reserve=%.2f",
                         state.profit_take_count, t_sec, etf_close, state.cash_reserve)

    if state.exposure == ExposureLevel.LOW and etf_close > state.etf_highest_close:
        state.etf_highest_close = etf_close

    return signals


class RebaseEngine:
    """
    Aligns ETF/LETF bars, computes indicators once per instrument, then walks the
    aligned bars in time order maintaining a single StrategyState.
    """

    def __init__(self, config: ConfigLike = None, strategy: Optional[BaseStrategy] = None):
        self.config = _resolve_config(config)
        self.strategy = strategy or EtfLetfRebaseStrategy(self.config)

    def run(self, etf_bars: Iterable[Bar], letf_bars: Iterable[Bar]) -> RebaseResult:
        """Fewer than two aligned bars returns empty indicators and stats=None."""
        pairs = align_bars(etf_bars, letf_bars)
        n = len(pairs)
        if n < 2:
            logger.info("Insufficient aligned data (%d bars); no stats", n)
            return RebaseResult(etf=IndicatorSeries.empty(), letf=IndicatorSeries.empty())

        cfg = self.config
        times_ms = [p.time_ms for p in pairs]
        etf_close = np.array([p.etf.close for p in pairs], dtype=float)
        letf_close = np.array([p.letf.close for p in pairs], dtype=float)
        etf_ind, letf_ind = self.strategy.compute_indicators(etf_close, letf_close)

        signals: List[SignalPoint] = []
        state = StrategyState()
        strategy_dd = DrawdownTracker()
        bh_etf_dd = DrawdownTracker()
        bh_letf_dd = DrawdownTracker()
        bh_etf_shares = 0.0
        bh_letf_shares = 0.0
        entry_signals = 0
        exit_signals = 0
        total_value = 0.0
        bh_etf_value = 0.0
        bh_letf_value = 0.0
        start_ms: Optional[int] = None
        end_ms = 0

        for i in range(n):
            etf_c = float(etf_close[i])
            letf_c = float(letf_close[i])
            if math.isnan(etf_c) or math.isnan(letf_c):
                continue
            t_ms = times_ms[i]

            add_exposure = self.strategy.entry_signal(etf_close, etf_ind, i)
            reduce_exposure = self.strategy.exit_signal(letf_close, letf_ind, i)
            if add_exposure:
                entry_signals += 1
            if reduce_exposure:
                exit_signals += 1

            if start_ms is None:
                start_ms = t_ms
                bh_etf_shares = cfg.init_cap / etf_c
                bh_letf_shares = cfg.init_cap / letf_c
                state.etf_shares = cfg.init_cap / etf_c
            end_ms = t_ms

            signals.extend(apply_bar(state, cfg, etf_c, letf_c, t_ms, add_exposure, reduce_exposure))

            if state.exposure == ExposureLevel.HIGH:
                state.bars_in_high += 1
            total_value = state.portfolio_value(etf_c, letf_c)
            bh_etf_value = bh_etf_shares * etf_c
            bh_letf_value = bh_letf_shares * letf_c
            strategy_dd.update(total_value, t_ms)
            bh_etf_dd.update(bh_etf_value, t_ms)
            bh_letf_dd.update(bh_letf_value, t_ms)

        result = RebaseResult(etf=etf_ind, letf=letf_ind, signals=signals, times_ms=times_ms)
        if start_ms is None:
            logger.warning("No bar with valid closes among %d aligned bars; no stats", n)
            return result

        rotations = state.entry_count + state.exit_count
        result.stats = StrategyStats(
            initial_capital=cfg.init_cap,
            final_capital=total_value,
            cagr=cagr(start_ms, cfg.init_cap, end_ms, total_value),
            max_drawdown_pct=strategy_dd.max_drawdown_pct,
            max_drawdown_time_ms=strategy_dd.max_drawdown_time_ms,
            bh_etf_capital=bh_etf_value,
            bh_etf_cagr=cagr(start_ms, cfg.init_cap, end_ms, bh_etf_value),
            bh_etf_max_drawdown_pct=bh_etf_dd.max_drawdown_pct,
            bh_letf_capital=bh_letf_value,
            bh_letf_cagr=cagr(start_ms, cfg.init_cap, end_ms, bh_letf_value),
            bh_letf_max_drawdown_pct=bh_letf_dd.max_drawdown_pct,
            entry_count=state.entry_count,
            exit_count=state.exit_count,
            entry_signal_count=entry_signals,
            exit_signal_count=exit_signals,
            pct_bars_in_letf=(state.bars_in_high * 100) / n,
            days_per_rebase=days_per_rebase(start_ms, end_ms, rotations),
            etf_shares=state.etf_shares,
            letf_shares=state.letf_shares,
            cash_reserve=state.cash_reserve,
            is_holding_letf=state.exposure == ExposureLevel.HIGH,
        )
        logger.info(
            "Rebase run: %d bars, %d rotations, final=%.2f cagr=%.2f%% max_dd=%.2f%%",
            n, rotations, total_value, result.stats.cagr, result.stats.max_drawdown_pct,
        )
        return result


def run_strategy(
    etf_bars: Iterable[Bar],
    letf_bars: Iterable[Bar],
    config: ConfigLike = None,
) -> RebaseResult:
    """Run the rebasing strategy once. `config` may be a StrategyConfig or a mapping."""
    return RebaseEngine(config).run(etf_bars, letf_bars)
