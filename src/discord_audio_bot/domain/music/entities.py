"""Track and playlist descriptors for the music bounded context."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

from discord_audio_bot.domain.music.value_objects import NOT_IN_PLAYLIST
from discord_audio_bot.domain.shared.datetime_utils import format_duration, utcnow
from discord_audio_bot.domain.shared.messages import ErrorMessages
from discord_audio_bot.domain.shared.types import (
    DiscordSnowflake,
    DurationSeconds,
    HttpUrlStr,
    NonEmptyStr,
    NonNegativeInt,
    PlaylistIndex,
    UtcDatetimeField,
)

UNKNOWN_TITLE = "Unknown Title"
UNKNOWN_UPLOADER = "Unknown"


class Requester(BaseModel):
    """The Discord member who asked for something to be played."""

    model_config = ConfigDict(frozen=True)

    user_id: DiscordSnowflake
    display_name: NonEmptyStr

    def __str__(self) -> str:
        return self.display_name


class TrackDescriptor(BaseModel):
    """One playable unit.

    Everything except ``stream_url`` is fixed at construction. The stream URL
    may be filled in later, either just before playback or by a prefetch, and
    once set it is never replaced.
    """

    model_config = ConfigDict(validate_assignment=True)

    reference: NonEmptyStr = Field(frozen=True)
    stream_url: HttpUrlStr | None = None
    title: NonEmptyStr = Field(default=UNKNOWN_TITLE, frozen=True)
    duration_seconds: DurationSeconds = Field(default=0, frozen=True)
    uploader: NonEmptyStr = Field(default=UNKNOWN_UPLOADER, frozen=True)
    requested_by: Requester = Field(frozen=True)
    requested_at: UtcDatetimeField = Field(default_factory=utcnow, frozen=True)

    playlist_id: NonEmptyStr | None = Field(default=None, frozen=True)
    playlist_index: PlaylistIndex = Field(default=NOT_IN_PLAYLIST, frozen=True)

    # Optional provider metadata
    view_count: NonNegativeInt | None = Field(default=None, frozen=True)
    thumbnail_url: HttpUrlStr | None = Field(default=None, frozen=True)

    @model_validator(mode="after")
    def _check_playlist_membership(self) -> TrackDescriptor:
        if self.playlist_id is not None and self.playlist_index < 1:
            raise ValueError(ErrorMessages.PLAYLIST_INDEX_REQUIRED.format(playlist_id=self.playlist_id))
        if self.playlist_id is None and self.playlist_index != NOT_IN_PLAYLIST:
            raise ValueError(ErrorMessages.PLAYLIST_ID_REQUIRED.format(index=self.playlist_index))
        return self

    @property
    def is_resolved(self) -> bool:
        return self.stream_url is not None

    @property
    def in_playlist(self) -> bool:
        return self.playlist_id is not None

    @property
    def display_duration(self) -> str:
        return format_duration(self.duration_seconds)

    def attach_stream_url(self, url: str) -> None:
        """Record the resolved stream URL; a no-op if one is already set."""
        if self.stream_url is None:
            self.stream_url = url


class PlaylistDescriptor(BaseModel):
    """Metadata about a group of tracks that were enqueued together."""

    model_config = ConfigDict(frozen=True)

    playlist_id: NonEmptyStr
    reference: NonEmptyStr
    title: NonEmptyStr = UNKNOWN_TITLE
    description: str = ""
    duration_seconds: DurationSeconds = 0
    uploader: NonEmptyStr = UNKNOWN_UPLOADER
    requested_by: Requester
    item_count: NonNegativeInt
    created_at: UtcDatetimeField = Field(default_factory=utcnow)

    @property
    def display_duration(self) -> str:
        return format_duration(self.duration_seconds)


class ResolvedReference(BaseModel):
    """What a locator resolved to: one track, or a playlist and its members in order."""

    model_config = ConfigDict(frozen=True)

    tracks: list[TrackDescriptor]
    playlist: PlaylistDescriptor | None = None

    @model_validator(mode="after")
    def _check_shape(self) -> ResolvedReference:
        if self.playlist is None:
            if len(self.tracks) != 1:
                raise ValueError(ErrorMessages.SINGLE_TRACK_EXPECTED)
            return self

        if self.playlist.item_count != len(self.tracks):
            raise ValueError(
                ErrorMessages.PLAYLIST_COUNT_MISMATCH.format(
                    expected=self.playlist.item_count, actual=len(self.tracks)
                )
            )
        for track in self.tracks:
            if track.playlist_id != self.playlist.playlist_id:
                raise ValueError(
                    ErrorMessages.PLAYLIST_MEMBER_MISMATCH.format(
                        title=track.title, playlist_id=self.playlist.playlist_id
                    )
                )
        return self

    @property
    def is_playlist(self) -> bool:
        return self.playlist is not None

    @property
    def first(self) -> TrackDescriptor:
        return self.tracks[0]

    @property
    def duration_seconds(self) -> int:
        if self.playlist is not None:
            return self.playlist.duration_seconds
        return self.first.duration_seconds
