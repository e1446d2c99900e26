"""Helpers for working with timezone-aware datetimes."""

from __future__ import annotations

import re
from datetime import datetime, time, timedelta, timezone, tzinfo
from functools import lru_cache
from typing import Final, Protocol

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from interest_hub.config import get_settings

_DEFAULT_TIMEZONE: Final[str] = "UTC"
_OFFSET_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"^(?:UTC|GMT)(?P<sign>[+-])(?P<hours>\d{1,2})(?::?(?P<minutes>\d{2}))?$",
    re.IGNORECASE,
)


class Clock(Protocol):
    """Source of the current time, injectable so boundaries are testable."""

    def now(self) -> datetime:
        ...


class SystemClock:
    """Clock backed by the wall clock in the configured timezone."""

    def now(self) -> datetime:
        return now_in_app_timezone()


class FrozenClock:
    """Clock that returns a fixed instant until moved explicitly."""

    def __init__(self, current: datetime) -> None:
        self._current = ensure_app_timezone(current)

    def now(self) -> datetime:
        return self._current

    def set(self, current: datetime) -> None:
        self._current = ensure_app_timezone(current)

    def advance(self, **delta: float) -> datetime:
        self._current = self._current + timedelta(**delta)
        return self._current


@lru_cache(maxsize=1)
def get_app_timezone() -> tzinfo:
    """Return the configured application timezone.

    The timezone is resolved using the ``APP_TIMEZONE`` environment variable (via
    :class:`Settings`). If the provided value cannot be resolved, UTC is used as
    a fallback.
    """

    settings = get_settings()
    tz_name = (settings.app_timezone or "").strip() or _DEFAULT_TIMEZONE
    return _resolve_timezone(tz_name)


def now_in_app_timezone() -> datetime:
    """Return the current time localized to the configured timezone."""

    return datetime.now(tz=get_app_timezone())


def ensure_app_timezone(value: datetime | None) -> datetime | None:
    """Normalize ``value`` so it is expressed in the configured timezone."""

    if value is None:
        return None

    tz = get_app_timezone()
    if value.tzinfo is None:
        return value.replace(tzinfo=tz)
    return value.astimezone(tz)


def ensure_app_naive_datetime(value: datetime | None) -> datetime | None:
    """Return ``value`` localized to the app timezone but without ``tzinfo``.

    ``DATETIME`` columns on SQLite and SQL Server drop offsets, so values are
    stored as local wall-clock time and re-localized when read back.
    """

    localized = ensure_app_timezone(value)
    if localized is None:
        return None
    return localized.replace(tzinfo=None)


def start_of_local_day(value: datetime) -> datetime:
    """Return local midnight for the calendar day containing ``value``."""

    localized = ensure_app_timezone(value)
    return datetime.combine(localized.date(), time.min, tzinfo=localized.tzinfo)


def iso_or_none(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _resolve_timezone(tz_name: str) -> tzinfo:
    """Resolve ``tz_name`` into a ``timezone`` instance."""

    try:
        return ZoneInfo(tz_name)
    except ZoneInfoNotFoundError:
        match = _OFFSET_PATTERN.match(tz_name)
        if match:
            sign = -1 if match.group("sign") == "-" else 1
            hours = int(match.group("hours"))
            minutes = int(match.group("minutes") or 0)
            offset = timedelta(hours=hours, minutes=minutes)
            return timezone(sign * offset)
    return timezone.utc
