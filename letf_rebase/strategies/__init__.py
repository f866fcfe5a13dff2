"""Strategies: base interface and the ETF/LETF rebasing implementation."""

from letf_rebase.strategies.base import BaseStrategy
from letf_rebase.strategies.etf_letf_rebase import EtfLetfRebaseStrategy

__all__ = ["BaseStrategy", "EtfLetfRebaseStrategy"]
