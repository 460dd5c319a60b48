"""Shared utilities: datetime normalization and formatting."""

from eventpush.shared.utils.datetime import (
    ensure_utc,
    format_event_date,
    from_timestamp_ms_utc,
    from_timestamp_utc,
    local_date,
    to_instant,
    utc_now,
)

__all__ = [
    "utc_now",
    "ensure_utc",
    "from_timestamp_utc",
    "from_timestamp_ms_utc",
    "to_instant",
    "local_date",
    "format_event_date",
]
