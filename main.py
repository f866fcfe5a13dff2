#!/usr/bin/env python3
"""
ETF/LETF rebase CLI: backtest | signals
Usage:
  python main.py backtest [--config config.yaml] [--etf QQQ.csv] [--letf TQQQ.csv] [--export out.csv] [--json]
  python main.py signals [--config config.yaml] [--etf QQQ.csv] [--letf TQQQ.csv]
"""

from __future__ import annotations
import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

import pandas as pd

# Project root
ROOT = Path(__file__).resolve().parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from letf_rebase.analytics.metrics import format_stats
from letf_rebase.backtesting.engine import RebaseEngine
from letf_rebase.core.config import Config, load_config
from letf_rebase.core.errors import RebaseError
from letf_rebase.core.logger import setup_logging
from letf_rebase.core.timestamps import ms_to_utc
from letf_rebase.core.types import RebaseResult
from letf_rebase.data.loader import load_bars_csv

logger = logging.getLogger("letf_rebase")


def _run(config: Config, etf_csv: Optional[Path], letf_csv: Optional[Path]) -> Optional[RebaseResult]:
    etf_path = etf_csv or config.etf_csv
    letf_path = letf_csv or config.letf_csv
    if not etf_path or not letf_path:
        logger.error("Both ETF and LETF bar files are required (--etf/--letf or data.etf_csv/data.letf_csv)")
        return None
    etf_bars = load_bars_csv(etf_path)
    letf_bars = load_bars_csv(letf_path)
    return RebaseEngine(config.strategy).run(etf_bars, letf_bars)


def run_backtest(args: argparse.Namespace) -> int:
    """Run the strategy over two bar files and print the stats report."""
    config = load_config(args.config, ROOT)
    setup_logging(config.log_level, config.log_dir, config.log_file)
    try:
        result = _run(config, args.etf, args.letf)
    except RebaseError as e:
        logger.error("Backtest failed: %s", e)
        return 1
    if result is None:
        return 1
    if args.export:
        frame = pd.concat(
            [
                result.etf.to_frame(result.times_ms).add_prefix("etf_"),
                result.letf.to_frame(result.times_ms).add_prefix("letf_"),
            ],
            axis=1,
        )
        frame.to_csv(args.export, index_label="time")
        logger.info("Indicators written to %s", args.export)
    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
        return 0
    if result.stats is None:
        print("Not enough aligned bars to compute stats.")
        return 0
    print(f"\n--- {config.etf_symbol}/{config.letf_symbol} Rebase Results ---")
    for line in format_stats(result.stats, config.etf_symbol, config.letf_symbol):
        print(line)
    return 0


def run_signals(args: argparse.Namespace) -> int:
    """Print the rotation signals."""
    config = load_config(args.config, ROOT)
    setup_logging(config.log_level, config.log_dir, config.log_file)
    try:
        result = _run(config, args.etf, args.letf)
    except RebaseError as e:
        logger.error("Signal run failed: %s", e)
        return 1
    if result is None:
        return 1
    for s in result.signals:
        day = ms_to_utc(s.time * 1000).strftime("%Y-%m-%d")
        print(f"{day}  {s.side.value:<4}  {s.price:.2f}")
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="ETF/LETF rebasing strategy CLI")
    parser.add_argument("mode", choices=["backtest", "signals"], help="Print stats or signal list")
    parser.add_argument("--config", type=Path, default=None, help="Path to config.yaml")
    parser.add_argument("--etf", type=Path, default=None, help="ETF bar CSV (time/date, close, ...)")
    parser.add_argument("--letf", type=Path, default=None, help="LETF bar CSV")
    parser.add_argument("--export", type=Path, default=None, help="Write indicator series to CSV")
    parser.add_argument("--json", action="store_true", help="Print the chart payload as JSON")
    args = parser.parse_args()
    if args.mode == "backtest":
        return run_backtest(args)
    return run_signals(args)


if __name__ == "__main__":
    sys.exit(main())
