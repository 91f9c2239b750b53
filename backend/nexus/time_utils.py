# Overview: UTC timestamp helpers for ledger record dates.

"""
Record dates are held as naive datetimes in UTC and written as ISO-8601
strings with millisecond precision and a trailing "Z"
("2024-03-01T12:30:05.250Z"), the layout stored sales and purchases use.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """Current time in UTC (naive)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_utc_naive(dt: datetime) -> datetime:
    """Aware datetimes are converted to UTC; naive ones are taken as UTC already."""
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def parse_timestamp(text: str) -> datetime:
    """
    Parse a stored record date.

    Accepts a trailing "Z" or a numeric offset; raises ValueError for blank
    or non-ISO text.
    """
    s = text.strip()
    if not s:
        raise ValueError("empty timestamp")
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    return as_utc_naive(datetime.fromisoformat(s))


def format_timestamp(dt: Optional[datetime]) -> Optional[str]:
    if dt is None:
        return None
    stamp = as_utc_naive(dt).isoformat(timespec="milliseconds")
    return stamp + "Z"
