"""
Logging setup. Console plus optional file handler under the ``letf_rebase`` logger.
"""

from __future__ import annotations
import logging
import sys
from pathlib import Path
from typing import Optional


def setup_logging(
    level: str = "INFO",
    log_dir: Optional[Path] = None,
    log_file: Optional[str] = None,
) -> logging.Logger:
    """
    Configure the package logger: console and optional file.
    Handlers from an earlier call are closed and replaced.
    Engine modules log through child loggers (letf_rebase.backtest, letf_rebase.data).
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    root = logging.getLogger("letf_rebase")
    root.setLevel(log_level)
    for handler in list(root.handlers):
        handler.close()
        root.removeHandler(handler)

    fmt = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
    date_fmt = "%Y-%m-%d %H:%M:%S"
    formatter = logging.Formatter(fmt, datefmt=date_fmt)

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(formatter)
    root.addHandler(console)

    if log_dir and log_file:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        path = log_dir / log_file
        fh = logging.FileHandler(path, encoding="utf-8")
        fh.setFormatter(formatter)
        root.addHandler(fh)

    return root
