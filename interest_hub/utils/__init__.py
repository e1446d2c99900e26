"""Utility helpers for reusable functionality."""

from .datetime import (
    Clock,
    FrozenClock,
    SystemClock,
    ensure_app_naive_datetime,
    ensure_app_timezone,
    get_app_timezone,
    iso_or_none,
    now_in_app_timezone,
    start_of_local_day,
)

__all__ = [
    "Clock",
    "FrozenClock",
    "SystemClock",
    "ensure_app_naive_datetime",
    "ensure_app_timezone",
    "get_app_timezone",
    "iso_or_none",
    "now_in_app_timezone",
    "start_of_local_day",
]
