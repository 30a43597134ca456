"""Utility functions for formatting Discord replies."""

from __future__ import annotations

from functools import cache
from typing import TYPE_CHECKING

from discord_audio_bot.domain.music.value_objects import SkipScope
from discord_audio_bot.domain.shared.messages import DiscordUIMessages

if TYPE_CHECKING:
    from discord_audio_bot.application.services.session_models import (
        EnqueueResult,
        SessionSnapshot,
        SkipResult,
    )

TITLE_MAX_LENGTH = 90


@cache
def truncate(text: str, max_length: int = TITLE_MAX_LENGTH) -> str:
    if len(text) <= max_length:
        return text
    return text[: max_length - 1] + "…"


def format_enqueue_reply(result: EnqueueResult) -> str:
    playlist = result.resolved.playlist
    if playlist is not None:
        return DiscordUIMessages.ACTION_QUEUED_PLAYLIST.format(
            title=truncate(playlist.title),
            count=playlist.item_count,
            duration=playlist.display_duration,
        )

    track = result.track
    if result.started:
        return DiscordUIMessages.ACTION_QUEUED_NOW.format(
            title=truncate(track.title), duration=track.display_duration
        )
    return DiscordUIMessages.ACTION_QUEUED.format(
        title=truncate(track.title), duration=track.display_duration, position=result.position
    )


def format_skip_reply(result: SkipResult) -> str:
    if result.scope is SkipScope.GROUP and result.playlist is not None:
        return DiscordUIMessages.ACTION_SKIPPED_PLAYLIST.format(
            title=truncate(result.playlist.title), dropped=result.dropped
        )
    return DiscordUIMessages.ACTION_SKIPPED.format(title=truncate(result.skipped.title))


def format_status(snapshot: SessionSnapshot, limit: int = 5) -> str:
    """Current track plus the first ``limit`` queued tracks."""
    if snapshot.is_empty:
        return DiscordUIMessages.STATE_NOTHING_PLAYING

    lines: list[str] = []
    if snapshot.current is not None:
        lines.append(
            DiscordUIMessages.STATE_STATUS_CURRENT.format(
                title=truncate(snapshot.current.title),
                duration=snapshot.current.display_duration,
                paused=DiscordUIMessages.STATE_STATUS_PAUSED_SUFFIX if snapshot.is_paused else "",
            )
        )

    shown, remaining = snapshot.preview(limit)
    if shown:
        lines.append(DiscordUIMessages.STATE_STATUS_QUEUE_HEADER.format(count=snapshot.queue_length))
        for position, track in enumerate(shown, start=1):
            lines.append(
                DiscordUIMessages.STATE_STATUS_QUEUE_ITEM.format(
                    position=position, title=truncate(track.title), duration=track.display_duration
                )
            )
    if remaining > 0:
        lines.append(DiscordUIMessages.STATE_STATUS_MORE.format(count=remaining))
    return "\n".join(lines)
