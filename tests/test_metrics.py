"""Unit tests for analytics.metrics."""

import pytest

from letf_rebase.analytics.metrics import DrawdownTracker, days_per_rebase, format_stats
from letf_rebase.core.types import StrategyStats


def _stats(**overrides):
    values = dict(
        initial_capital=1000.0, final_capital=1250.0, cagr=12.5, max_drawdown_pct=16.7,
        max_drawdown_time_ms=1704585600000, bh_etf_capital=1400.0, bh_etf_cagr=20.0,
        bh_etf_max_drawdown_pct=20.0, bh_letf_capital=1250.0, bh_letf_cagr=12.5,
        bh_letf_max_drawdown_pct=16.7, entry_count=1, exit_count=1, entry_signal_count=3,
        exit_signal_count=1, pct_bars_in_letf=28.6, days_per_rebase=3.0, etf_shares=89.3,
        letf_shares=0.0, cash_reserve=0.0, is_holding_letf=False,
    )
    values.update(overrides)
    return StrategyStats(**values)


def test_drawdown_tracker_records_time_of_new_max_only():
    t = DrawdownTracker()
    for time_ms, value in enumerate([100, 120, 90, 110, 100, 130, 125]):
        t.update(value, time_ms)
    assert t.peak == 130
    assert t.max_drawdown == 30
    assert t.max_drawdown_pct == pytest.approx(25.0)
    assert t.max_drawdown_time_ms == 2


def test_drawdown_tracker_deeper_drop_after_new_peak():
    t = DrawdownTracker()
    for time_ms, value in enumerate([1.0, 1.2, 1.0, 1.1, 0.9, 1.3]):
        t.update(value, time_ms)
    # 1.2 -> 0.9 beats the earlier 1.2 -> 1.0
    assert t.max_drawdown == pytest.approx(0.3)
    assert t.max_drawdown_pct == pytest.approx(25.0)
    assert t.max_drawdown_time_ms == 4


def test_days_per_rebase():
    day = 24 * 60 * 60 * 1000
    assert days_per_rebase(0, 30 * day, 3) == pytest.approx(10.0)
    assert days_per_rebase(0, 30 * day, 0) == 0.0


def test_format_stats():
    lines = format_stats(_stats(), "QQQ", "TQQQ")
    text = "\n".join(lines)
    assert "B&H QQQ" in text and "B&H TQQQ" in text
    assert "Max DD date: 2024-01-07" in text
    assert "Rotations: 1 buy / 1 sell" in text
    assert "Holding: QQQ 89.3 shares" in text


def test_format_stats_holding_letf_with_cash():
    lines = format_stats(_stats(is_holding_letf=True, letf_shares=12.5, cash_reserve=3000.0))
    assert lines[-1] == "Holding: LETF 12.5 shares + $3,000 cash"
