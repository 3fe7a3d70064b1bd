"""Timezone helpers – provide a single UTC *now()* function.

Grant timestamps are stored in naive ``DateTime`` columns holding UTC, so
the stores and fixtures import :pyfunc:`utc_now_naive` instead of calling the
stdlib helpers directly.
"""

from datetime import datetime
from datetime import timezone


def utc_now_naive() -> datetime:  # noqa: D401 – simple utility
    """Return *naive* current time in UTC for database compatibility."""

    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_naive_utc(value: datetime | None) -> datetime | None:
    """Normalise *value* to a naive UTC datetime (``None`` passes through)."""

    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


__all__ = ["as_naive_utc", "utc_now_naive"]
