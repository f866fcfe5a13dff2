"""Abstract strategy: indicators + entry/exit signal detection."""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Sequence, Tuple

from letf_rebase.core.types import IndicatorSeries


class BaseStrategy(ABC):
    """Strategy computes indicator series and reports signals at a bar index. No lookahead."""

    @abstractmethod
    def compute_indicators(
        self,
        etf_close: Sequence[float],
        letf_close: Sequence[float],
    ) -> Tuple[IndicatorSeries, IndicatorSeries]:
        """Indicator series for both instruments over the aligned closes."""
        pass

    @abstractmethod
    def entry_signal(self, etf_close: Sequence[float], etf: IndicatorSeries, index: int) -> bool:
        """True if the strategy wants to rotate into the leveraged instrument at `index`."""
        pass

    @abstractmethod
    def exit_signal(self, letf_close: Sequence[float], letf: IndicatorSeries, index: int) -> bool:
        """True if the strategy wants to rotate back into the base instrument at `index`."""
        pass
