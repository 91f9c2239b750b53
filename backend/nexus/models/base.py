from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from nexus.time_utils import as_utc_naive, format_timestamp, parse_timestamp, utcnow
from nexus.validation import ValidationError


def new_record_id(prefix: str) -> str:
    """Opaque id for records created server-side (imports, builders)."""
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


def coerce_datetime(value: Any, field: str = "date") -> datetime:
    """Record date from a datetime, an ISO string, or None (now)."""
    if value is None:
        return utcnow()
    if isinstance(value, datetime):
        return as_utc_naive(value)
    if isinstance(value, str):
        try:
            return parse_timestamp(value)
        except ValueError:
            raise ValidationError(f"{field} must be an ISO-8601 datetime")
    raise ValidationError(f"{field} must be a datetime")


def datetime_to_json(value: datetime) -> str:
    return format_timestamp(value)
