"""Month-key helpers.

A month key is a ``"YYYY-MM"`` string naming a calendar month. All arithmetic
goes through a zero-based month ordinal (``year * 12 + month - 1``) so shifts of
any size roll across year boundaries correctly.
"""

from __future__ import annotations

import re
from datetime import date, datetime

_MONTH_KEY_RE = re.compile(r"^(\d{4})-(\d{2})$")


def parse_month_key(key: str) -> tuple[int, int]:
    """Return ``(year, month)`` for a ``"YYYY-MM"`` key.

    Raises ``ValueError`` when the shape is wrong or the month is not 1..12.
    """

    m = _MONTH_KEY_RE.match(key.strip()) if isinstance(key, str) else None
    if m is None:
        raise ValueError(f"invalid month key (expected YYYY-MM): {key!r}")
    year, month = int(m.group(1)), int(m.group(2))
    if not 1 <= month <= 12:
        raise ValueError(f"invalid month in month key: {key!r}")
    if year < 1:
        raise ValueError(f"invalid year in month key: {key!r}")
    return year, month


def format_month_key(year: int, month: int) -> str:
    return f"{year:04d}-{month:02d}"


def month_key_for(value: date | datetime) -> str:
    """Month key of the calendar month containing ``value``."""

    return format_month_key(value.year, value.month)


def current_month_key(today: date | None = None) -> str:
    return month_key_for(today or date.today())


def shift_month_key(key: str, delta: int) -> str:
    """Shift ``key`` by ``delta`` months (negative moves backwards)."""

    year, month = parse_month_key(key)
    ordinal = year * 12 + (month - 1) + delta
    return format_month_key(ordinal // 12, ordinal % 12 + 1)


def previous_month_key(key: str) -> str:
    return shift_month_key(key, -1)


def month_bounds(key: str) -> tuple[datetime, datetime]:
    """Half-open ``[start, end)`` naive datetime range covering the month."""

    year, month = parse_month_key(key)
    start = datetime(year, month, 1)
    next_year, next_month = parse_month_key(shift_month_key(key, 1))
    return start, datetime(next_year, next_month, 1)


__all__ = [
    "current_month_key",
    "format_month_key",
    "month_bounds",
    "month_key_for",
    "parse_month_key",
    "previous_month_key",
    "shift_month_key",
]
