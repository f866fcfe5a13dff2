"""ETF/LETF rebasing strategy engine."""

from letf_rebase.backtesting.engine import RebaseEngine, apply_bar, run_strategy
from letf_rebase.core.config import StrategyConfig
from letf_rebase.core.errors import ConfigurationError, InvalidTimestampError, RebaseError
from letf_rebase.core.types import Bar, RebaseResult, SignalPoint, StrategyStats

__version__ = "0.1.0"

__all__ = [
    "RebaseEngine",
    "apply_bar",
    "run_strategy",
    "StrategyConfig",
    "ConfigurationError",
    "InvalidTimestampError",
    "RebaseError",
    "Bar",
    "RebaseResult",
    "SignalPoint",
    "StrategyStats",
]
