"""
Exception hierarchy for the rebasing engine.
"""

from __future__ import annotations


class RebaseError(Exception):
    """Base class for all engine errors."""


class InvalidTimestampError(RebaseError, ValueError):
    """A bar time matches none of the accepted encodings."""

    def __init__(self, value: object, reason: str = ""):
        self.value = value
        msg = f"Invalid bar timestamp: {value!r}"
        if reason:
            msg = f"{msg} ({reason})"
        super().__init__(msg)


class ConfigurationError(RebaseError, ValueError):
    """Strategy configuration is degenerate (bad window, capital, fraction...)."""


class BarDataError(RebaseError):
    """A bar file is malformed or empty."""
