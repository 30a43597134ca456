"""
Music Bounded Context

Track and playlist descriptors plus the enums that describe playback state.
"""

from discord_audio_bot.domain.music.entities import (
    PlaylistDescriptor,
    Requester,
    ResolvedReference,
    TrackDescriptor,
)
from discord_audio_bot.domain.music.value_objects import (
    NOT_IN_PLAYLIST,
    InactivityKind,
    PlaybackStatus,
    SessionCloseReason,
    SkipScope,
    TransportStatus,
)

__all__ = [
    "TrackDescriptor",
    "PlaylistDescriptor",
    "ResolvedReference",
    "Requester",
    "NOT_IN_PLAYLIST",
    "PlaybackStatus",
    "TransportStatus",
    "SkipScope",
    "InactivityKind",
    "SessionCloseReason",
]
