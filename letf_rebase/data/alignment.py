"""
Bar alignment: pair ETF and LETF bars that share a normalized timestamp.
"""

from __future__ import annotations
import logging
from typing import Dict, Iterable, List

from letf_rebase.core.timestamps import parse_time_ms
from letf_rebase.core.types import AlignedBarPair, Bar

logger = logging.getLogger("letf_rebase.data")


def align_bars(etf_bars: Iterable[Bar], letf_bars: Iterable[Bar]) -> List[AlignedBarPair]:
    """
    Keep ETF order; drop bars without a counterpart in the other series.
    If the LETF series repeats a timestamp, the last occurrence wins.
    """
    letf_by_time: Dict[int, Bar] = {}
    n_letf = 0
    for bar in letf_bars:
        letf_by_time[bar.time_ms] = bar
        n_letf += 1

    aligned: List[AlignedBarPair] = []
    n_etf = 0
    for bar in etf_bars:
        n_etf += 1
        match = letf_by_time.get(bar.time_ms)
        if match is not None:
            aligned.append(AlignedBarPair(etf=bar, letf=match))

    dropped = (n_etf - len(aligned)) + (n_letf - len(aligned))
    if dropped > 0:
        logger.debug(
            "Aligned %d bars (etf=%d letf=%d), dropped %d unmatched",
            len(aligned), n_etf, n_letf, dropped,
        )
    return aligned


__all__ = ["align_bars", "parse_time_ms"]
