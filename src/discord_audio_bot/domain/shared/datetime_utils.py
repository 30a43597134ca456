"""Date/time helpers.

All timestamps in the bot are timezone-aware UTC datetimes.
"""

from __future__ import annotations

from datetime import UTC, datetime


def utcnow() -> datetime:
    """Timezone-aware replacement for `datetime.utcnow()`."""
    return datetime.now(UTC)


def format_duration(seconds: int | float | None) -> str:
    """Render a duration as ``H:MM:SS`` (one hour or more) or ``M:SS``."""
    if not seconds or seconds < 0:
        return "0:00"
    total = int(seconds)
    hours, rem = divmod(total, 3600)
    minutes, secs = divmod(rem, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"
