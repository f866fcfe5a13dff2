"""
Load configuration from config.yaml and .env. Environment variables override the file.
"""

from __future__ import annotations
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml
from dotenv import load_dotenv

from letf_rebase.core.errors import ConfigurationError

# camelCase names used by the chart UI
_CAMEL_KEYS = {
    "bbLenETF": "bb_len_etf",
    "bbSdETF": "bb_sd_etf",
    "emaLenETF": "ema_len_etf",
    "bbLenLETF": "bb_len_letf",
    "bbSdLETF": "bb_sd_letf",
    "emaLenLETF": "ema_len_letf",
    "initCap": "init_cap",
    "etfLimProfitEnabled": "etf_lim_profit_enabled",
    "etfLimProfitLine": "etf_lim_profit_line",
    "etfLimProfitInterval": "etf_lim_profit_interval",
    "etfLimProfitPct": "etf_lim_profit_pct",
}


@dataclass(frozen=True)
class StrategyConfig:
    """Rebasing strategy parameters. Validated on construction."""
    bb_len_etf: int = 50
    bb_sd_etf: float = 2.0
    ema_len_etf: int = 5
    bb_len_letf: int = 50
    bb_sd_letf: float = 2.05
    ema_len_letf: int = 5
    init_cap: float = 1_000_000.0
    etf_lim_profit_enabled: bool = True
    etf_lim_profit_line: float = 0.2
    etf_lim_profit_interval: float = 0.05
    etf_lim_profit_pct: float = 0.05

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        for name in ("bb_len_etf", "ema_len_etf", "bb_len_letf", "ema_len_letf"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise ConfigurationError(f"{name} must be a positive integer, got {value!r}")
        for name in ("bb_sd_etf", "bb_sd_letf"):
            if getattr(self, name) < 0:
                raise ConfigurationError(f"{name} must be >= 0, got {getattr(self, name)!r}")
        if not self.init_cap > 0:
            raise ConfigurationError(f"init_cap must be > 0, got {self.init_cap!r}")
        if not 0.0 <= self.etf_lim_profit_pct <= 1.0:
            raise ConfigurationError(
                f"etf_lim_profit_pct must be within [0, 1], got {self.etf_lim_profit_pct!r}"
            )
        if self.etf_lim_profit_line < 0 or self.etf_lim_profit_interval < 0:
            raise ConfigurationError("etf_lim_profit_line and etf_lim_profit_interval must be >= 0")

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "StrategyConfig":
        """Build from snake_case or camelCase keys. Missing keys take defaults."""
        known = {f.name for f in fields(cls)}
        kwargs: dict[str, Any] = {}
        for key, value in (data or {}).items():
            name = _CAMEL_KEYS.get(key, key)
            if name not in known:
                raise ConfigurationError(f"Unknown strategy option: {key}")
            if value is not None:
                kwargs[name] = value
        return cls(**kwargs)


def _env_path(project_root: Optional[Path] = None) -> Path:
    root = project_root or Path(__file__).resolve().parents[2]
    return root / ".env"


def load_dotenv_if_exists(project_root: Optional[Path] = None) -> None:
    """Load .env from project root if present."""
    path = _env_path(project_root)
    if path.exists():
        load_dotenv(path)


def load_config(config_path: Optional[Path] = None, project_root: Optional[Path] = None) -> "Config":
    """Load config.yaml and overlay with env. Returns Config."""
    load_dotenv_if_exists(project_root)
    root = project_root or Path(__file__).resolve().parents[2]
    path = config_path or root / "config.yaml"
    data: dict[str, Any] = {}
    if path.exists():
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

    def env(key: str, default: str = "") -> str:
        return os.getenv(key, default or "").strip()

    def env_bool(key: str, default: bool = False) -> bool:
        return os.getenv(key, str(default)).lower() in ("true", "1", "yes")

    def env_int(key: str, default: int = 0) -> int:
        try:
            return int(os.getenv(key, str(default)))
        except ValueError:
            return default

    def env_float(key: str, default: float = 0.0) -> float:
        try:
            return float(os.getenv(key, str(default)))
        except ValueError:
            return default

    strategy = StrategyConfig.from_mapping(data.get("strategy", {}))
    data_section = data.get("data", {})
    logging_section = data.get("logging", {})

    strategy = StrategyConfig(
        bb_len_etf=env_int("BB_LEN_ETF", strategy.bb_len_etf),
        bb_sd_etf=env_float("BB_SD_ETF", strategy.bb_sd_etf),
        ema_len_etf=env_int("EMA_LEN_ETF", strategy.ema_len_etf),
        bb_len_letf=env_int("BB_LEN_LETF", strategy.bb_len_letf),
        bb_sd_letf=env_float("BB_SD_LETF", strategy.bb_sd_letf),
        ema_len_letf=env_int("EMA_LEN_LETF", strategy.ema_len_letf),
        init_cap=env_float("INIT_CAP", strategy.init_cap),
        etf_lim_profit_enabled=env_bool("ETF_LIM_PROFIT_ENABLED", strategy.etf_lim_profit_enabled),
        etf_lim_profit_line=env_float("ETF_LIM_PROFIT_LINE", strategy.etf_lim_profit_line),
        etf_lim_profit_interval=env_float("ETF_LIM_PROFIT_INTERVAL", strategy.etf_lim_profit_interval),
        etf_lim_profit_pct=env_float("ETF_LIM_PROFIT_PCT", strategy.etf_lim_profit_pct),
    )

    etf_csv = env("ETF_CSV", data_section.get("etf_csv", ""))
    letf_csv = env("LETF_CSV", data_section.get("letf_csv", ""))
    return Config(
        strategy=strategy,
        etf_symbol=env("ETF_SYMBOL", data_section.get("etf_symbol", "QQQ")).upper(),
        letf_symbol=env("LETF_SYMBOL", data_section.get("letf_symbol", "TQQQ")).upper(),
        etf_csv=Path(etf_csv) if etf_csv else None,
        letf_csv=Path(letf_csv) if letf_csv else None,
        log_level=env("LOG_LEVEL", logging_section.get("level", "INFO")),
        log_dir=Path(logging_section.get("log_dir", "logs")),
        log_file=logging_section.get("log_file", "letf_rebase.log"),
    )


class Config:
    """Application configuration. Immutable after load."""

    __slots__ = (
        "strategy", "etf_symbol", "letf_symbol", "etf_csv", "letf_csv",
        "log_level", "log_dir", "log_file",
    )

    def __init__(
        self,
        strategy: Optional[StrategyConfig] = None,
        etf_symbol: str = "QQQ",
        letf_symbol: str = "TQQQ",
        etf_csv: Optional[Path] = None,
        letf_csv: Optional[Path] = None,
        log_level: str = "INFO",
        log_dir: Optional[Path] = None,
        log_file: str = "letf_rebase.log",
    ):
        self.strategy = strategy or StrategyConfig()
        self.etf_symbol = etf_symbol
        self.letf_symbol = letf_symbol
        self.etf_csv = etf_csv
        self.letf_csv = letf_csv
        self.log_level = log_level
        self.log_dir = Path(log_dir) if log_dir else Path("logs")
        self.log_file = log_file
