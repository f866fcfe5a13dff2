"""
CSV bar loading for the command line host. The engine itself never touches files.
"""

from __future__ import annotations
import logging
from pathlib import Path
from typing import List, Union

import pandas as pd

from letf_rebase.core.errors import BarDataError
from letf_rebase.core.types import Bar

logger = logging.getLogger("letf_rebase.data")

_TIME_COLUMNS = ("time", "date")


def _time_column(df: pd.DataFrame) -> str:
    for col in _TIME_COLUMNS:
        if col in df.columns:
            return col
    raise BarDataError(f"Missing time column (expected one of: {', '.join(_TIME_COLUMNS)})")


def bars_from_frame(df: pd.DataFrame) -> List[Bar]:
    """
    Build Bars from a frame with time/date and close columns.
    Missing open/high/low default to close. Time values are passed through as text.
    """
    df = df.rename(columns=lambda c: str(c).strip().lower())
    time_col = _time_column(df)
    if "close" not in df.columns:
        raise BarDataError("Missing required column: close")
    df = df.dropna(subset=[time_col, "close"])
    if df.empty:
        raise BarDataError("No rows with both time and close")

    close = df["close"].astype(float)
    opens = df["open"].astype(float) if "open" in df.columns else close
    highs = df["high"].astype(float) if "high" in df.columns else close
    lows = df["low"].astype(float) if "low" in df.columns else close
    volumes = df["volume"] if "volume" in df.columns else None

    bars = []
    for i, t in enumerate(df[time_col]):
        volume = None
        if volumes is not None and not pd.isna(volumes.iloc[i]):
            volume = float(volumes.iloc[i])
        bars.append(Bar(
            time=t if not isinstance(t, str) else t.strip(),
            open=float(opens.iloc[i]),
            high=float(highs.iloc[i]),
            low=float(lows.iloc[i]),
            close=float(close.iloc[i]),
            volume=volume,
        ))
    return bars


def load_bars_csv(path: Union[str, Path]) -> List[Bar]:
    """Load bars from CSV. Raises BarDataError on missing columns or no usable rows."""
    df = pd.read_csv(path, dtype=str)
    bars = bars_from_frame(df)
    logger.info("Loaded %d bars from %s", len(bars), path)
    return bars
