"""
Core data types for bars, indicator series, signals, strategy state and stats.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Dict, List, Optional, Sequence

import numpy as np
import pandas as pd

from letf_rebase.core.timestamps import parse_time_ms


class SignalSide(str, Enum):
    BUY = "buy"
    SELL = "sell"


class ExposureLevel(IntEnum):
    """Capital exposure. LOW holds the ETF, HIGH holds the LETF."""
    LOW = 0
    HIGH = 2


@dataclass(frozen=True)
class Bar:
    """OHLC sample for one instrument. ``time`` is normalized into ``time_ms`` on construction."""
    time: Any
    open: float
    high: float
    low: float
    close: float
    volume: Optional[float] = None
    time_ms: int = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "time_ms", parse_time_ms(self.time))


@dataclass(frozen=True)
class AlignedBarPair:
    """ETF and LETF bars sharing one normalized timestamp."""
    etf: Bar
    letf: Bar

    def __post_init__(self) -> None:
        if self.etf.time_ms != self.letf.time_ms:
            raise ValueError(
                f"Bars are not aligned: etf={self.etf.time_ms} letf={self.letf.time_ms}"
            )

    @property
    def time_ms(self) -> int:
        return self.etf.time_ms


@dataclass(frozen=True)
class SignalPoint:
    """Rotation event. ``time`` is Unix seconds, ``price`` the ETF close."""
    time: int
    side: SignalSide
    price: float

    def to_dict(self) -> Dict[str, Any]:
        return {"time": self.time, "type": self.side.value, "price": self.price}


def _nullable(arr: np.ndarray) -> List[Optional[float]]:
    return [None if np.isnan(v) else float(v) for v in arr]


@dataclass
class IndicatorSeries:
    """Per-instrument indicator arrays, index-aligned with the aligned bars. NaN = not yet available."""
    bb_upper: np.ndarray
    bb_mid: np.ndarray
    bb_lower: np.ndarray
    ema: np.ndarray

    @classmethod
    def empty(cls) -> "IndicatorSeries":
        return cls(
            bb_upper=np.array([], dtype=float),
            bb_mid=np.array([], dtype=float),
            bb_lower=np.array([], dtype=float),
            ema=np.array([], dtype=float),
        )

    def __len__(self) -> int:
        return len(self.ema)

    def to_nullable(self) -> Dict[str, List[Optional[float]]]:
        """Lists with None in place of NaN, as chart renderers expect."""
        return {
            "bb_upper": _nullable(self.bb_upper),
            "bb_lower": _nullable(self.bb_lower),
            "bb_mid": _nullable(self.bb_mid),
            "ema": _nullable(self.ema),
        }

    def to_frame(self, times_ms: Sequence[int]) -> pd.DataFrame:
        return pd.DataFrame(
            {
                "bb_upper": self.bb_upper,
                "bb_mid": self.bb_mid,
                "bb_lower": self.bb_lower,
                "ema": self.ema,
            },
            index=pd.to_datetime(list(times_ms), unit="ms", utc=True),
        )


@dataclass
class StrategyState:
    """Mutable per-run simulation state. Owned by exactly one run."""
    exposure: ExposureLevel = ExposureLevel.LOW
    etf_shares: float = 0.0
    letf_shares: float = 0.0
    cash_reserve: float = 0.0
    etf_highest_close: float = 0.0
    etf_last_exit_close: float = 0.0
    profit_take_count: int = 0
    entry_count: int = 0
    exit_count: int = 0
    bars_in_high: int = 0

    def portfolio_value(self, etf_close: float, letf_close: float) -> float:
        return self.etf_shares * etf_close + self.cash_reserve + self.letf_shares * letf_close


@dataclass(frozen=True)
class StrategyStats:
    """Terminal statistics of one run."""
    initial_capital: float
    final_capital: float
    cagr: float
    max_drawdown_pct: float
    max_drawdown_time_ms: int
    bh_etf_capital: float
    bh_etf_cagr: float
    bh_etf_max_drawdown_pct: float
    bh_letf_capital: float
    bh_letf_cagr: float
    bh_letf_max_drawdown_pct: float
    entry_count: int
    exit_count: int
    entry_signal_count: int
    exit_signal_count: int
    pct_bars_in_letf: float
    days_per_rebase: float
    etf_shares: float
    letf_shares: float
    cash_reserve: float
    is_holding_letf: bool

    def to_dict(self) -> Dict[str, Any]:
        """camelCase payload consumed by the chart UI."""
        return {
            "initCap": self.initial_capital,
            "myCap": self.final_capital,
            "myCagr": self.cagr,
            "myMaxDDPct": self.max_drawdown_pct,
            "myMaxDDTime": self.max_drawdown_time_ms,
            "bhEtfCap": self.bh_etf_capital,
            "bhEtfCagr": self.bh_etf_cagr,
            "bhEtfMaxDDPct": self.bh_etf_max_drawdown_pct,
            "bhLetfCap": self.bh_letf_capital,
            "bhLetfCagr": self.bh_letf_cagr,
            "bhLetfMaxDDPct": self.bh_letf_max_drawdown_pct,
            "rebaseEntryCnt": self.entry_count,
            "rebaseExitCnt": self.exit_count,
            "sigAddExpoCnt": self.entry_signal_count,
            "sigRedExpoCnt": self.exit_signal_count,
            "totalBarsLETFPct": self.pct_bars_in_letf,
            "daysPerRebase": self.days_per_rebase,
            "etfPos": self.etf_shares,
            "letfPos": self.letf_shares,
            "letfCashReserve": self.cash_reserve,
            "isHoldingLETF": self.is_holding_letf,
        }


@dataclass
class RebaseResult:
    """Engine output: indicators for both instruments, signals, and stats (None if insufficient data)."""
    etf: IndicatorSeries
    letf: IndicatorSeries
    signals: List[SignalPoint] = field(default_factory=list)
    stats: Optional[StrategyStats] = None
    times_ms: List[int] = field(default_factory=list)

    @property
    def has_stats(self) -> bool:
        return self.stats is not None

    def to_dict(self) -> Dict[str, Any]:
        etf = self.etf.to_nullable()
        letf = self.letf.to_nullable()
        return {
            "etfBBUpper": etf["bb_upper"],
            "etfBBLower": etf["bb_lower"],
            "etfBBMid": etf["bb_mid"],
            "etfEMA": etf["ema"],
            "letfBBUpper": letf["bb_upper"],
            "letfBBLower": letf["bb_lower"],
            "letfBBMid": letf["bb_mid"],
            "letfEMA": letf["ema"],
            "signals": [s.to_dict() for s in self.signals],
            "stats": self.stats.to_dict() if self.stats is not None else None,
        }
