"""Data: bar alignment and CSV loading."""

from letf_rebase.data.alignment import align_bars, parse_time_ms
from letf_rebase.data.loader import load_bars_csv, bars_from_frame

__all__ = ["align_bars", "parse_time_ms", "load_bars_csv", "bars_from_frame"]
