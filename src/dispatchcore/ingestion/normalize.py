"""Normalization helpers.

Centralizes defensive parsing of store records: every helper returns
``None`` (or a documented sentinel) instead of raising.
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping
from datetime import UTC, date, datetime, time
from typing import Any

_SENTINELS = frozenset({"", "--", "null", "none", "n/a", "nan"})

_CLOCK_RE = re.compile(
    r"^\s*(?P<hour>\d{1,2})(?::(?P<minute>\d{2}))?(?::(?P<second>\d{2}))?\s*(?P<meridiem>[ap]\.?m\.?)?\s*$",
    re.IGNORECASE,
)


def is_sentinel(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return isinstance(value, str) and value.strip().lower() in _SENTINELS


def safe_float(value: Any) -> float | None:
    if is_sentinel(value) or isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def safe_int(value: Any) -> int | None:
    parsed = safe_float(value)
    if parsed is None:
        return None
    return int(parsed)


def safe_str(value: Any) -> str | None:
    if is_sentinel(value):
        return None
    text = str(value).strip()
    return text if text else None


def first_present(record: Mapping[str, Any], *keys: str) -> Any:
    """Return the first non-sentinel value among *keys*, else ``None``.

    Store records carry several historical spellings of the same column
    (``driver_name`` / ``driverName``); callers list them in priority order.
    """
    for key in keys:
        value = record.get(key)
        if not is_sentinel(value):
            return value
    return None


def parse_clock_time(value: Any) -> time | None:
    """Parse ``"h:mm AM/PM"``, ``"HH:MM"`` or ``"HH:MM:SS"`` into a :class:`time`."""
    if isinstance(value, time):
        return value
    text = safe_str(value)
    if text is None:
        return None
    match = _CLOCK_RE.match(text)
    if match is None:
        return None
    hour = int(match["hour"])
    minute = int(match["minute"] or 0)
    second = int(match["second"] or 0)
    meridiem = match["meridiem"]
    if meridiem is not None:
        if not 1 <= hour <= 12:
            return None
        is_pm = meridiem.lower().startswith("p")
        hour = hour % 12 + (12 if is_pm else 0)
    if hour > 23 or minute > 59 or second > 59:
        return None
    return time(hour, minute, second)


def parse_time_of_day(value: Any) -> int:
    """Minutes since midnight for a free-text time; unparsable values give 0."""
    parsed = parse_clock_time(value)
    if parsed is None:
        return 0
    return parsed.hour * 60 + parsed.minute


def parse_date(value: Any) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = safe_str(value)
    if text is None:
        return None
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        pass
    for fmt in ("%m/%d/%Y", "%m/%d/%y"):
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def parse_datetime(value: Any) -> datetime | None:
    """Parse an ISO-8601 timestamp or epoch seconds/milliseconds."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        ts = float(value)
        if ts <= 0:
            return None
        if ts > 1e11:
            ts /= 1000.0
        try:
            return datetime.fromtimestamp(ts, tz=UTC)
        except (OverflowError, OSError, ValueError):
            return None
    text = safe_str(value)
    if text is None:
        return None
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def safe_timestamp(value: datetime | None) -> float | None:
    """POSIX timestamp of *value*, or ``None`` when it falls outside the platform range.

    Naive datetimes near ``datetime.min`` or ``datetime.max`` cannot be
    converted in every local time zone.
    """
    if value is None:
        return None
    try:
        return value.timestamp()
    except (OverflowError, OSError, ValueError):
        return None


def combine_pickup(pickup_date: Any, pickup_time: Any, pickup_at: Any = None) -> datetime | None:
    """Best-effort pickup datetime from separate date/time or a combined column.

    Returns ``None`` when nothing parsable is present; callers sort such rows
    after rows with a known pickup time.
    """
    combined = parse_datetime(pickup_at)
    if combined is not None:
        # Pickups compare as wall-clock times; a stored offset is dropped.
        return combined.replace(tzinfo=None)
    day = parse_date(pickup_date)
    clock = parse_clock_time(pickup_time)
    if day is None or clock is None:
        return None
    return datetime.combine(day, clock)
