"""Enumerations and constants for the music bounded context."""

from __future__ import annotations

from enum import Enum, StrEnum

NOT_IN_PLAYLIST = -1
"""Playlist index sentinel for tracks that were queued on their own."""


class PlaybackStatus(Enum):
    """Playback session status with enforced transitions.

    State transitions:
    - IDLE -> PLAYING (reconciliation starts the queue head)
    - PLAYING -> PAUSED (pause)
    - PAUSED -> PLAYING (resume)
    - PLAYING -> IDLE (track end, stop, skip)
    - PAUSED -> IDLE (stop, skip)
    """

    IDLE = "idle"
    PLAYING = "playing"
    PAUSED = "paused"

    def can_transition_to(self, target: PlaybackStatus) -> bool:
        """Check if transition to target status is valid."""
        valid_transitions = {
            PlaybackStatus.IDLE: {PlaybackStatus.PLAYING},
            PlaybackStatus.PLAYING: {PlaybackStatus.PAUSED, PlaybackStatus.IDLE},
            PlaybackStatus.PAUSED: {PlaybackStatus.PLAYING, PlaybackStatus.IDLE},
        }
        return target in valid_transitions.get(self, set())


class TransportStatus(Enum):
    """Statuses reported by a voice transport's audio sink.

    BUFFERING and AUTO_PAUSED are transient and only clear inactivity timers.
    """

    IDLE = "idle"
    PLAYING = "playing"
    PAUSED = "paused"
    BUFFERING = "buffering"
    AUTO_PAUSED = "auto_paused"

    @property
    def is_transient(self) -> bool:
        return self in {TransportStatus.BUFFERING, TransportStatus.AUTO_PAUSED}


class SkipScope(StrEnum):
    TRACK = "track"
    GROUP = "group"


class InactivityKind(StrEnum):
    """Which inactivity timer is armed; the value doubles as the user-facing word."""

    IDLE = "idle"
    PAUSE = "paused"


class SessionCloseReason(StrEnum):
    LEFT = "left"
    IDLE_TIMEOUT = "idle_timeout"
    PAUSE_TIMEOUT = "pause_timeout"
    DISCONNECTED = "disconnected"
    DESTROYED = "destroyed"
    SHUTDOWN = "shutdown"

    @classmethod
    def for_inactivity(cls, kind: InactivityKind) -> SessionCloseReason:
        return cls.IDLE_TIMEOUT if kind is InactivityKind.IDLE else cls.PAUSE_TIMEOUT
