"""Backtesting engine: bar-by-bar ETF/LETF rotation with buy-and-hold baselines."""

from letf_rebase.backtesting.engine import RebaseEngine, apply_bar, run_strategy

__all__ = ["RebaseEngine", "apply_bar", "run_strategy"]
