"""Analytics: drawdown tracking, rotation frequency, stats report."""

from letf_rebase.analytics.metrics import (
    DrawdownTracker,
    days_per_rebase,
    format_stats,
)

__all__ = [
    "DrawdownTracker",
    "days_per_rebase",
    "format_stats",
]
