"""Core: config, types, errors, logging."""

from letf_rebase.core.config import load_config, Config, StrategyConfig
from letf_rebase.core.errors import (
    RebaseError,
    InvalidTimestampError,
    ConfigurationError,
    BarDataError,
)
from letf_rebase.core.types import (
    Bar,
    AlignedBarPair,
    SignalSide,
    SignalPoint,
    ExposureLevel,
    IndicatorSeries,
    StrategyState,
    StrategyStats,
    RebaseResult,
)
from letf_rebase.core.logger import setup_logging

__all__ = [
    "load_config",
    "Config",
    "StrategyConfig",
    "RebaseError",
    "InvalidTimestampError",
    "ConfigurationError",
    "BarDataError",
    "Bar",
    "AlignedBarPair",
    "SignalSide",
    "SignalPoint",
    "ExposureLevel",
    "IndicatorSeries",
    "StrategyState",
    "StrategyStats",
    "RebaseResult",
    "setup_logging",
]
