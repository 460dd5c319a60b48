"""
UTC datetime utilities for consistent timezone handling.

All datetime values in the system should be timezone-aware UTC.
Use these helpers instead of datetime.now() or datetime.utcnow().

Event documents carry their scheduled time in several shapes (native
datetimes, ``{seconds, nanos}`` wrappers, ISO strings). ``to_instant`` is the
only place those shapes are interpreted; every comparison goes through it.
"""

from collections.abc import Mapping
from datetime import UTC, date, datetime, timedelta
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from eventpush.domain.exceptions import ValidationException

# English names regardless of the process locale (strftime %a/%b/%p follow it).
_DAY_NAMES = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
_MONTH_NAMES = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


def utc_now() -> datetime:
    """
    Return the current UTC datetime with timezone info.

    Use this instead of:
        - datetime.now() - naive, uses local timezone
        - datetime.utcnow() - naive, deprecated in Python 3.12
        - datetime.now(UTC) - correct but verbose

    Returns:
        Timezone-aware datetime in UTC
    """
    return datetime.now(UTC)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """
    Ensure a datetime is UTC-aware.

    - If None, returns None
    - If naive, assumes UTC and attaches timezone
    - If aware, converts to UTC

    Use at repository/persistence boundaries to normalize datetimes.

    Args:
        dt: A datetime that may be naive or aware

    Returns:
        UTC-aware datetime or None
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        # Naive datetime - assume it's UTC and attach timezone
        return dt.replace(tzinfo=UTC)

    # Aware datetime - convert to UTC
    return dt.astimezone(UTC)


def from_timestamp_utc(timestamp: float) -> datetime:
    """
    Create a UTC-aware datetime from a Unix timestamp.
    Use instead of datetime.fromtimestamp() which returns naive local time.

    Args:
        timestamp: Unix timestamp (seconds since epoch)

    Returns:
        UTC-aware datetime
    """
    return datetime.fromtimestamp(timestamp, tz=UTC)


def from_timestamp_ms_utc(timestamp_ms: int) -> datetime:
    """
    Create a UTC-aware datetime from a millisecond Unix timestamp.
    Common in JavaScript/APIs that use milliseconds.

    Args:
        timestamp_ms: Unix timestamp in milliseconds

    Returns:
        UTC-aware datetime
    """
    return datetime.fromtimestamp(timestamp_ms / 1000, tz=UTC)


def _from_seconds_nanos(seconds: Any, nanos: Any) -> datetime:
    """Build an instant from an epoch-seconds wrapper (nanos truncated to microseconds)."""
    try:
        whole = int(seconds)
        fraction = int(nanos or 0)
    except (TypeError, ValueError) as e:
        raise ValidationException(
            f"Invalid epoch-seconds timestamp: {seconds!r}", field="dateTime"
        ) from e
    return from_timestamp_utc(whole) + timedelta(microseconds=fraction // 1000)


def to_instant(value: Any) -> datetime:
    """
    Normalize any supported timestamp representation to a UTC-aware datetime.

    Supported shapes:
        - datetime (naive values are taken as UTC; Firestore's
          DatetimeWithNanoseconds is a datetime subclass)
        - mapping with ``seconds``/``nanos`` or ``_seconds``/``_nanoseconds``
        - object with ``seconds`` and ``nanos`` attributes (protobuf Timestamp)
        - ISO-8601 string (trailing ``Z`` accepted)
        - int/float epoch milliseconds

    Two representations of the same instant always return equal values.

    Raises:
        ValidationException: value is missing or cannot be interpreted.
    """
    if value is None or value == "":
        raise ValidationException("Timestamp is missing", field="dateTime")

    if isinstance(value, datetime):
        return ensure_utc(value)

    if isinstance(value, Mapping):
        if "seconds" in value:
            return _from_seconds_nanos(value["seconds"], value.get("nanos"))
        if "_seconds" in value:
            return _from_seconds_nanos(value["_seconds"], value.get("_nanoseconds"))
        raise ValidationException(
            f"Unrecognized timestamp mapping keys: {sorted(value)}", field="dateTime"
        )

    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError as e:
            raise ValidationException(
                f"Invalid ISO timestamp: {value!r}", field="dateTime"
            ) from e
        return ensure_utc(parsed)

    if isinstance(value, bool):
        raise ValidationException("Boolean is not a timestamp", field="dateTime")

    if isinstance(value, (int, float)):
        return from_timestamp_ms_utc(value)

    if hasattr(value, "seconds") and hasattr(value, "nanos"):
        return _from_seconds_nanos(value.seconds, value.nanos)

    raise ValidationException(
        f"Unsupported timestamp type: {type(value).__name__}", field="dateTime"
    )


def get_zone(tz_name: str) -> ZoneInfo:
    """Return the ZoneInfo for an IANA name; raise ValueError if unknown."""
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"Unknown timezone: {tz_name!r}") from e


def local_date(instant: datetime, tz_name: str) -> date:
    """Calendar date of an instant in the given timezone (time-of-day discarded)."""
    return ensure_utc(instant).astimezone(get_zone(tz_name)).date()


def format_event_date(instant: datetime, tz_name: str) -> str:
    """
    Format an instant for notification text in the deployment timezone.

    Output looks like ``Tue, Oct 20, 2026, 09:30 AM``. The zone is fixed by
    configuration, not by the caller, since recipients share one region.
    """
    local = ensure_utc(instant).astimezone(get_zone(tz_name))
    hour = local.hour % 12 or 12
    meridiem = "AM" if local.hour < 12 else "PM"
    return (
        f"{_DAY_NAMES[local.weekday()]}, {_MONTH_NAMES[local.month - 1]} "
        f"{local.day}, {local.year}, {hour:02d}:{local.minute:02d} {meridiem}"
    )
