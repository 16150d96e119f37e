"""Common time utilities."""

from __future__ import annotations

import datetime as dt

# Widest offsets in use by civil time zones.
MIN_UTC_OFFSET_HOURS = -12
MAX_UTC_OFFSET_HOURS = 14


def utcnow() -> dt.datetime:
    """Return an aware UTC timestamp."""
    return dt.datetime.now(dt.UTC)


def fixed_offset(hours: int) -> dt.timezone:
    """Return a fixed-offset time zone ``hours`` east of UTC.

    Raises
    ------
    ValueError
        If ``hours`` lies outside the civil offset range.

    """
    if not MIN_UTC_OFFSET_HOURS <= hours <= MAX_UTC_OFFSET_HOURS:
        msg = (
            f"UTC offset must be within {MIN_UTC_OFFSET_HOURS}.."
            f"{MAX_UTC_OFFSET_HOURS} hours, got {hours}"
        )
        raise ValueError(msg)
    return dt.timezone(dt.timedelta(hours=hours), name="localtime")


def ensure_utc(value: dt.datetime, *, field: str) -> dt.datetime:
    """Return ``value`` converted to UTC, rejecting naive datetimes."""
    if value.tzinfo is None:
        msg = f"{field} must be timezone-aware"
        raise ValueError(msg)
    return value.astimezone(dt.UTC)


def parse_rfc3339(value: str) -> dt.datetime:
    """Parse an RFC 3339 timestamp as returned by Google APIs into UTC."""
    parsed = dt.datetime.fromisoformat(value.replace("Z", "+00:00"))
    return ensure_utc(parsed, field="timestamp")


def format_rfc3339(value: dt.datetime) -> str:
    """Format an aware datetime as the nanosecond RFC 3339 form the API expects."""
    utc = ensure_utc(value, field="timestamp")
    return f"{utc:%Y-%m-%dT%H:%M:%S}.000000000Z"
