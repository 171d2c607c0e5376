"""Timestamp parsing for order dates stored as ISO-8601 strings.

Stored values may carry a ``Z`` marker, a numeric offset, or no offset at
all. Values without an offset are UTC wall-clock fields. Every parsed value
is returned as an aware datetime in the local timezone.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from dateutil import parser, tz


def local_now() -> datetime:
    return datetime.now(tz.tzlocal())


def to_local(value: datetime) -> datetime:
    """Attach the local zone to naive datetimes, convert aware ones."""
    if value.tzinfo is None:
        return value.replace(tzinfo=tz.tzlocal())
    return value.astimezone(tz.tzlocal())


def try_parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse a stored timestamp, returning None when it cannot be read."""
    if not value:
        return None
    text = str(value).strip()
    if not text:
        return None
    try:
        parsed = parser.isoparse(text)
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=tz.UTC)
        return parsed.astimezone(tz.tzlocal())
    except (ValueError, OverflowError, OSError):
        return None


def parse_timestamp(value: Optional[str]) -> datetime:
    """Parse a stored timestamp, falling back to the current local instant."""
    parsed = try_parse_timestamp(value)
    if parsed is None:
        return local_now()
    return parsed
