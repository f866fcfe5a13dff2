"""Unit tests for backtesting.engine."""

import numpy as np
import pandas as pd
import pytest

from letf_rebase.backtesting.engine import RebaseEngine, apply_bar, run_strategy
from letf_rebase.core.config import StrategyConfig
from letf_rebase.core.types import Bar, ExposureLevel, SignalSide, StrategyState
from letf_rebase.indicators.ta import cagr

# Short windows and zero band width so the lower/upper band is the 3-bar SMA.
FAST = StrategyConfig(
    bb_len_etf=3, bb_sd_etf=0.0, ema_len_etf=2,
    bb_len_letf=3, bb_sd_letf=0.0, ema_len_letf=2,
    init_cap=1000.0,
)

ETF = [10, 10, 10, 8, 12, 13, 14]
LETF = [20, 20, 20, 20, 24, 30, 25]


def _bars(closes, start="2024-01-01"):
    days = pd.date_range(start, periods=len(closes), freq="D")
    return [Bar(time=d.strftime("%Y-%m-%d"), open=c, high=c, low=c, close=float(c)) for d, c in zip(days, closes)]


def _ms(day):
    return int(pd.Timestamp(day, tz="UTC").value // 1_000_000)


def test_rotation_round_trip():
    result = run_strategy(_bars(ETF), _bars(LETF), FAST)
    stats = result.stats

    assert [(s.side, s.price) for s in result.signals] == [(SignalSide.BUY, 12.0), (SignalSide.SELL, 14.0)]
    assert result.signals[0].time == _ms("2024-01-05") // 1000
    assert result.signals[1].time == _ms("2024-01-07") // 1000

    assert stats.entry_count == 1 and stats.exit_count == 1
    assert stats.entry_signal_count == 3
    assert stats.exit_signal_count == 1
    assert stats.final_capital == pytest.approx(1250.0)
    assert stats.etf_shares == pytest.approx(50 * 25 / 14)
    assert stats.letf_shares == 0.0
    assert stats.is_holding_letf is False
    assert stats.pct_bars_in_letf == pytest.approx(200 / 7)
    assert stats.days_per_rebase == pytest.approx(3.0)

    # 1000 -> 800 (20%), later 1500 -> 1250 (250 absolute) sets the new max
    assert stats.max_drawdown_pct == pytest.approx(250 * 100 / 1500)
    assert stats.max_drawdown_time_ms == _ms("2024-01-07")

    assert stats.bh_etf_capital == pytest.approx(1400.0)
    assert stats.bh_etf_max_drawdown_pct == pytest.approx(20.0)
    assert stats.bh_letf_capital == pytest.approx(1250.0)
    assert stats.bh_letf_max_drawdown_pct == pytest.approx(250 * 100 / 1500)
    assert stats.cagr == pytest.approx(cagr(_ms("2024-01-01"), 1000.0, _ms("2024-01-07"), 1250.0))


def test_exit_blocked_below_etf_highest_close():
    etf = ETF[:-1] + [9.5]
    result = run_strategy(_bars(etf), _bars(LETF), FAST)
    stats = result.stats
    assert stats.exit_signal_count == 1
    assert [s.side for s in result.signals] == [SignalSide.BUY]
    assert stats.exit_count == 0
    assert stats.is_holding_letf is True
    assert stats.final_capital == pytest.approx(50 * 25)


@pytest.mark.parametrize("n", [0, 1])
def test_insufficient_data_returns_no_stats(n):
    result = run_strategy(_bars(ETF[:n]), _bars(LETF[:n]), FAST)
    assert result.stats is None
    assert result.has_stats is False
    assert result.signals == []
    assert len(result.etf) == 0 and len(result.letf) == 0
    assert result.to_dict()["etfEMA"] == []


def test_no_overlap_is_insufficient_data():
    result = run_strategy(_bars(ETF), _bars(LETF, start="2025-01-01"), FAST)
    assert result.stats is None


def test_two_bars_buy_and_hold_only():
    result = run_strategy(_bars([100, 110]), _bars([50, 40]))
    assert result.signals == []
    assert result.stats.final_capital == pytest.approx(1_100_000)
    assert result.stats.bh_letf_capital == pytest.approx(800_000)
    assert result.stats.bh_letf_max_drawdown_pct == pytest.approx(20.0)
    assert result.stats.max_drawdown_pct == 0.0
    assert result.stats.days_per_rebase == 0.0
    assert np.isnan(result.etf.ema).all()


def test_indicators_follow_aligned_bars():
    etf = _bars(ETF)
    letf = [b for i, b in enumerate(_bars(LETF)) if i != 3]
    result = run_strategy(etf, letf, FAST)
    assert len(result.etf) == len(result.letf) == len(result.times_ms) == 6
    assert _ms("2024-01-04") not in result.times_ms


def test_run_is_deterministic():
    rng = np.random.default_rng(42)
    rets = rng.normal(0.0005, 0.012, 600)
    etf = 100 * np.cumprod(1 + rets)
    letf = 30 * np.cumprod(1 + 3 * rets)
    cfg = {"bbLenETF": 20, "bbLenLETF": 20, "emaLenETF": 5, "emaLenLETF": 5}

    first = RebaseEngine(cfg).run(_bars(etf), _bars(letf))
    second = RebaseEngine(cfg).run(_bars(etf), _bars(letf))

    assert first.signals == second.signals
    assert first.stats == second.stats
    np.testing.assert_array_equal(first.etf.bb_upper, second.etf.bb_upper)
    np.testing.assert_array_equal(first.letf.ema, second.letf.ema)
    assert first.to_dict() == second.to_dict()


def test_signals_are_chronological_and_alternate():
    rng = np.random.default_rng(3)
    rets = rng.normal(0.0, 0.02, 800)
    etf = 50 * np.cumprod(1 + rets)
    letf = 10 * np.cumprod(1 + 2 * rets)
    result = run_strategy(_bars(etf), _bars(letf), {"bb_len_etf": 10, "bb_len_letf": 10})
    times = [s.time for s in result.signals]
    assert times == sorted(times)
    sides = [s.side for s in result.signals]
    assert all(a != b for a, b in zip(sides, sides[1:]))
    if sides:
        assert sides[0] == SignalSide.BUY


def test_to_dict_payload():
    payload = run_strategy(_bars(ETF), _bars(LETF), FAST).to_dict()
    assert payload["etfBBLower"][:2] == [None, None]
    assert payload["etfBBLower"][2] == pytest.approx(10.0)
    assert payload["signals"][0]["type"] == "buy"
    assert payload["stats"]["rebaseEntryCnt"] == 1
    assert payload["stats"]["isHoldingLETF"] is False


def test_apply_bar_entry_folds_cash_reserve():
    state = StrategyState(etf_shares=10.0, cash_reserve=50.0)
    signals = apply_bar(state, FAST, 20.0, 25.0, 86_400_000, True, False)
    assert state.exposure == ExposureLevel.HIGH
    assert state.letf_shares == pytest.approx(10.0)
    assert state.etf_shares == 0.0 and state.cash_reserve == 0.0
    assert signals[0].side == SignalSide.BUY and signals[0].time == 86_400


def test_apply_bar_exit_resets_profit_take_count():
    state = StrategyState(
        exposure=ExposureLevel.HIGH, letf_shares=10.0, cash_reserve=100.0,
        etf_highest_close=50.0, profit_take_count=3,
    )
    signals = apply_bar(state, FAST, 60.0, 30.0, 0, False, True)
    assert state.exposure == ExposureLevel.LOW
    assert state.etf_shares == pytest.approx(400.0 / 60.0)
    assert state.cash_reserve == 0.0 and state.letf_shares == 0.0
    assert state.profit_take_count == 0
    assert state.exit_count == 1
    assert state.etf_last_exit_close == 60.0
    assert state.etf_highest_close == 60.0
    assert signals[0].side == SignalSide.SELL


def test_apply_bar_exit_guard():
    state = StrategyState(exposure=ExposureLevel.HIGH, letf_shares=10.0, etf_highest_close=50.0)
    assert apply_bar(state, FAST, 45.0, 30.0, 0, False, True) == []
    assert state.exposure == ExposureLevel.HIGH
    assert state.letf_shares == 10.0
    assert state.etf_highest_close == 50.0


def test_apply_bar_profit_taking_threshold_widens():
    state = StrategyState(etf_shares=10.0, exit_count=1, etf_last_exit_close=100.0, etf_highest_close=100.0)
    apply_bar(state, FAST, 121.0, 1.0, 0, False, False)
    assert state.profit_take_count == 1
    assert state.cash_reserve == pytest.approx(10 * 0.05 * 121)
    assert state.etf_shares == pytest.approx(9.5)

    # threshold is now 25%
    apply_bar(state, FAST, 124.0, 1.0, 0, False, False)
    assert state.profit_take_count == 1

    apply_bar(state, FAST, 126.0, 1.0, 0, False, False)
    assert state.profit_take_count == 2
    assert state.etf_shares == pytest.approx(9.5 * 0.95)
    assert state.etf_highest_close == 126.0


def test_apply_bar_profit_taking_needs_prior_exit_and_flag():
    state = StrategyState(etf_shares=10.0, etf_last_exit_close=100.0)
    apply_bar(state, FAST, 150.0, 1.0, 0, False, False)
    assert state.profit_take_count == 0

    disabled = StrategyConfig(etf_lim_profit_enabled=False)
    state = StrategyState(etf_shares=10.0, exit_count=1, etf_last_exit_close=100.0)
    apply_bar(state, disabled, 150.0, 1.0, 0, False, False)
    assert state.profit_take_count == 0
    assert state.cash_reserve == 0.0
