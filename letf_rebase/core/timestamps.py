"""
Bar time normalization: every accepted encoding becomes UTC milliseconds since epoch.
"""

from __future__ import annotations
import math
import numbers
import re
from datetime import date, datetime, timezone
from typing import Any

import pandas as pd

from letf_rebase.core.errors import InvalidTimestampError

_ISO_DATE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
_COMPACT_DATE = re.compile(r"^(\d{4})(\d{2})(\d{2})$")
_EPOCH_DATE = date(1970, 1, 1)
MS_PER_DAY = 24 * 60 * 60 * 1000
# pandas resolves these against the wall clock
_RELATIVE_WORDS = ("now", "today", "yesterday", "tomorrow")


def _midnight_ms(raw: Any, year: str, month: str, day: str) -> int:
    try:
        d = date(int(year), int(month), int(day))
    except ValueError as e:
        raise InvalidTimestampError(raw, str(e)) from None
    return (d - _EPOCH_DATE).days * MS_PER_DAY


def _timestamp_ms(raw: Any, ts: pd.Timestamp) -> int:
    if pd.isna(ts):
        raise InvalidTimestampError(raw, "not a date")
    if ts.tzinfo is None:
        ts = ts.tz_localize("UTC")
    return int(ts.value // 1_000_000)


def _seconds_ms(raw: Any, seconds: float) -> int:
    if not math.isfinite(seconds):
        raise InvalidTimestampError(raw, "non-finite unix seconds")
    return int(round(seconds * 1000))


def parse_time_ms(value: Any) -> int:
    """
    Normalize a bar time to UTC milliseconds.
    Accepts YYYY-MM-DD, YYYYMMDD, a Unix-seconds numeral, or anything pandas can parse
    as a date. Naive datetimes are taken as UTC. Raises InvalidTimestampError otherwise.
    """
    if isinstance(value, bool) or value is None:
        raise InvalidTimestampError(value, "unsupported type")
    if isinstance(value, datetime):
        return _timestamp_ms(value, pd.Timestamp(value))
    if isinstance(value, date):
        return (value - _EPOCH_DATE).days * MS_PER_DAY
    if isinstance(value, numbers.Integral):
        return int(value) * 1000
    if isinstance(value, float):
        return _seconds_ms(value, value)
    if not isinstance(value, str):
        raise InvalidTimestampError(value, "unsupported type")

    text = value.strip()
    if not text:
        raise InvalidTimestampError(value, "empty")
    m = _ISO_DATE.match(text)
    if m:
        return _midnight_ms(value, *m.groups())
    m = _COMPACT_DATE.match(text)
    if m:
        return _midnight_ms(value, *m.groups())
    try:
        return int(text) * 1000
    except ValueError:
        pass
    try:
        seconds = float(text)
    except ValueError:
        seconds = None
    if seconds is not None:
        return _seconds_ms(value, seconds)
    if text.lower() in _RELATIVE_WORDS:
        raise InvalidTimestampError(value, "relative date")
    try:
        ts = pd.Timestamp(text)
    except (ValueError, TypeError, OverflowError) as e:
        raise InvalidTimestampError(value, str(e)) from None
    return _timestamp_ms(value, ts)


def ms_to_utc(time_ms: int) -> datetime:
    """Milliseconds since epoch to an aware UTC datetime."""
    return datetime.fromtimestamp(time_ms / 1000, tz=timezone.utc)
