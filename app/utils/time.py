"""Utility functions for time handling.

All timestamps should be timezone-aware. Persist timestamps as ISO-8601
strings with timezone offsets (e.g., "+00:00") via iso_now(). Naive values
are treated as UTC.

Day-granularity helpers (``add_days``, ``is_today``, ``difference_in_days``)
compare *calendar days* rather than 24-hour durations. The calendar is the
one of ``tz`` when given, otherwise the timezone of the reference value
(``now`` for ``is_today``, ``earlier`` for ``difference_in_days``).
"""

from __future__ import annotations

import os
from contextlib import suppress
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


def utc_now() -> datetime:
    """Return current UTC time as an aware datetime."""
    return datetime.now(timezone.utc)


def iso_now(*, timespec: str | None = None) -> str:
    """Return current UTC time as an ISO8601 string (timezone-aware)."""
    now = utc_now()
    if timespec:
        return now.isoformat(timespec=timespec)
    return now.isoformat()


def ensure_aware(value: datetime) -> datetime:
    """Attach UTC to a naive datetime; aware values are returned unchanged."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def coerce_datetime(value: Any) -> datetime | None:
    """
    Coerce value to datetime, returning None on failure.

    Args:
        value: String or datetime to coerce

    Returns:
        Datetime in timezone.utc or None if invalid
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        raw = value.strip()
        if raw.endswith("Z"):
            raw = raw.replace("Z", "+00:00")
        try:
            parsed = datetime.fromisoformat(raw)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc)
    else:
        parsed = parsed.replace(tzinfo=timezone.utc)

    return parsed


def add_days(base: datetime, days: int, tz: tzinfo | None = None) -> datetime:
    """Return ``base`` shifted by ``days`` whole days on the calendar of ``tz``.

    The local wall-clock time is kept across DST changes, so 23:30 the night
    before a spring-forward plus one day is 23:30 the next night (23 hours
    later), not 00:30.
    """
    return _local(base, tz) + timedelta(days=days)


def is_before(a: datetime, b: datetime) -> bool:
    """Strict ordering: ``a`` happens before ``b``."""
    return ensure_aware(a) < ensure_aware(b)


def _local(value: datetime, tz: tzinfo | None) -> datetime:
    value = ensure_aware(value)
    return value.astimezone(tz) if tz is not None else value


def start_of_day(value: datetime, tz: tzinfo | None = None) -> datetime:
    """Midnight of the calendar day containing ``value``."""
    return _local(value, tz).replace(hour=0, minute=0, second=0, microsecond=0)


def is_same_day(a: datetime, b: datetime, tz: tzinfo | None = None) -> bool:
    """True when ``a`` and ``b`` fall on the same calendar day.

    Without ``tz`` the calendar of ``b`` is used.
    """
    zone = tz if tz is not None else ensure_aware(b).tzinfo
    return _local(a, zone).date() == _local(b, zone).date()


def is_today(value: datetime, now: datetime | None = None, tz: tzinfo | None = None) -> bool:
    """True when ``value`` falls on the same calendar day as ``now``."""
    return is_same_day(value, now or utc_now(), tz)


def difference_in_days(later: datetime, earlier: datetime, tz: tzinfo | None = None) -> int:
    """Signed number of calendar days from ``earlier`` to ``later``.

    ``difference_in_days(2024-01-15T01:00, 2024-01-14T23:00) == 1`` even
    though only two hours separate the values.
    """
    zone = tz if tz is not None else ensure_aware(earlier).tzinfo
    return (_local(later, zone).date() - _local(earlier, zone).date()).days


def local_timezone() -> tzinfo:
    """The host's zone, following ``TZ`` and then ``/etc/localtime``.

    Falls back to the current fixed UTC offset when neither names a zone
    database entry.
    """
    name = os.environ.get("TZ", "").lstrip(":")
    if name:
        with suppress(ZoneInfoNotFoundError, ValueError):
            return ZoneInfo(name)
    with suppress(OSError, ValueError):
        with open("/etc/localtime", "rb") as fh:
            return ZoneInfo.from_file(fh, key="localtime")
    return datetime.now().astimezone().tzinfo
