"""
Performance metrics: running drawdown tracking, rotation frequency and a plain-text stats report.
"""

from __future__ import annotations
from typing import List

from letf_rebase.core.timestamps import MS_PER_DAY, ms_to_utc
from letf_rebase.core.types import StrategyStats


class DrawdownTracker:
    """
    Incremental peak / max drawdown bookkeeping for one equity track.
    The drawdown time only moves when a new maximum drawdown is set.
    """

    __slots__ = ("peak", "max_drawdown", "max_drawdown_pct", "max_drawdown_time_ms")

    def __init__(self) -> None:
        self.peak = 0.0
        self.max_drawdown = 0.0
        self.max_drawdown_pct = 0.0
        self.max_drawdown_time_ms = 0

    def update(self, value: float, time_ms: int) -> None:
        if value > self.peak:
            self.peak = value
        drawdown = self.peak - value
        if drawdown > self.max_drawdown:
            self.max_drawdown = drawdown
            self.max_drawdown_pct = (drawdown * 100) / self.peak
            self.max_drawdown_time_ms = time_ms


def days_per_rebase(start_ms: int, end_ms: int, rotations: int) -> float:
    """Average calendar days between rotations; 0 when nothing rotated."""
    if rotations <= 0:
        return 0.0
    return ((end_ms - start_ms) / MS_PER_DAY) / rotations


def format_stats(stats: StrategyStats, etf_symbol: str = "ETF", letf_symbol: str = "LETF") -> List[str]:
    """Human-readable report lines."""
    dd_time = ms_to_utc(stats.max_drawdown_time_ms).strftime("%Y-%m-%d") if stats.max_drawdown_time_ms else "-"
    if stats.is_holding_letf:
        holding = f"{letf_symbol} {stats.letf_shares:,.1f} shares"
    else:
        holding = f"{etf_symbol} {stats.etf_shares:,.1f} shares"
    if stats.cash_reserve > 0:
        holding += f" + ${stats.cash_reserve:,.0f} cash"
    return [
        f"{'':<14}{'Strategy':>16}{'B&H ' + etf_symbol:>16}{'B&H ' + letf_symbol:>16}",
        f"{'Capital':<14}{stats.final_capital:>16,.2f}{stats.bh_etf_capital:>16,.2f}{stats.bh_letf_capital:>16,.2f}",
        f"{'CAGR %':<14}{stats.cagr:>16.2f}{stats.bh_etf_cagr:>16.2f}{stats.bh_letf_cagr:>16.2f}",
        f"{'Max DD %':<14}{stats.max_drawdown_pct:>16.2f}{stats.bh_etf_max_drawdown_pct:>16.2f}"
        f"{stats.bh_letf_max_drawdown_pct:>16.2f}",
        f"Max DD date: {dd_time}",
        f"Rotations: {stats.entry_count} buy / {stats.exit_count} sell"
        f" (signals: {stats.entry_signal_count} buy / {stats.exit_signal_count} sell)",
        f"Time in {letf_symbol}: {stats.pct_bars_in_letf:.0f}%",
        f"Days per rotation: {stats.days_per_rebase:.0f}",
        f"Holding: {holding}",
    ]
