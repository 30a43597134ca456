"""DTOs returned by playback session commands."""

from __future__ import annotations

from pydantic import BaseModel

from ...domain.music.entities import PlaylistDescriptor, ResolvedReference, TrackDescriptor
from ...domain.music.value_objects import PlaybackStatus, SkipScope
from ...domain.shared.types import NonNegativeInt


class EnqueueResult(BaseModel):
    resolved: ResolvedReference
    position: NonNegativeInt = 0  # 1-based queue position of the first new item; 0 when it started
    queue_length: NonNegativeInt = 0

    @property
    def track(self) -> TrackDescriptor:
        return self.resolved.first

    @property
    def started(self) -> bool:
        return self.position == 0


class SkipResult(BaseModel):
    skipped: TrackDescriptor
    scope: SkipScope
    dropped: NonNegativeInt = 0
    playlist: PlaylistDescriptor | None = None
    next_track: TrackDescriptor | None = None


class SessionSnapshot(BaseModel):
    """Read-only view of a playback session at one instant."""

    status: PlaybackStatus
    current: TrackDescriptor | None
    upcoming: list[TrackDescriptor]
    playlists: list[PlaylistDescriptor]

    @property
    def queue_length(self) -> int:
        return len(self.upcoming)

    @property
    def is_empty(self) -> bool:
        return self.current is None and not self.upcoming

    @property
    def is_paused(self) -> bool:
        return self.status is PlaybackStatus.PAUSED

    def preview(self, limit: int) -> tuple[list[TrackDescriptor], int]:
        """First ``limit`` upcoming tracks and how many were left out."""
        shown = self.upcoming[:limit]
        return shown, len(self.upcoming) - len(shown)
