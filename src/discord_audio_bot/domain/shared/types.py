"""Reusable Pydantic Annotated types for domain-wide validation.

Constrained types are defined here once so models can annotate their
fields directly::

    from discord_audio_bot.domain.shared.types import DiscordSnowflake, NonEmptyStr

    class MyModel(BaseModel):
        guild_id: DiscordSnowflake
        title: NonEmptyStr
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Annotated

from pydantic import BeforeValidator, Field

# ── Numeric constraints ─────────────────────────────────────────────

DiscordSnowflake = Annotated[int, Field(gt=0, lt=2**64)]
"""Positive integer that fits a Discord snowflake (1 … 2^64-1)."""

NonNegativeInt = Annotated[int, Field(ge=0)]
"""Integer >= 0."""

PositiveInt = Annotated[int, Field(gt=0)]
"""Integer > 0."""

DurationSeconds = Annotated[int, Field(ge=0)]
"""Duration in whole seconds, never negative."""

PlaylistIndex = Annotated[int, Field(ge=-1)]
"""1-based position inside a playlist, or -1 when not part of one."""


# ── String constraints ──────────────────────────────────────────────

NonEmptyStr = Annotated[str, Field(min_length=1)]
"""String with at least one character."""

HttpUrlStr = Annotated[str, Field(pattern=r"^https?://")]
"""String that starts with http:// or https://."""


# ── Settings-specific constraints ──────────────────────────────────

TimeoutSeconds = Annotated[float, Field(gt=0.0, le=3600.0)]
"""Timeout for a network or voice operation: (0, 3600] seconds."""

PreviewLimit = Annotated[int, Field(ge=1, le=25)]
"""How many queued items a status listing shows: 1 … 25."""


# ── Datetime constraints ────────────────────────────────────────────

def _ensure_utc(v: datetime) -> datetime:
    """Validate that a datetime is timezone-aware and normalise to UTC."""
    if v.tzinfo is None:
        raise ValueError("datetime must be timezone-aware (UTC)")
    return v.astimezone(UTC)


UtcDatetimeField = Annotated[datetime, BeforeValidator(_ensure_utc)]
"""Timezone-aware datetime, normalised to UTC on input."""
