"""Pydantic models for yt-dlp data transformation and configuration.

Infrastructure-only models for parsing raw yt-dlp info dicts, caching
extraction results, and building YoutubeDL options.
"""

from __future__ import annotations

from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field, field_validator

from discord_audio_bot.domain.music.entities import UNKNOWN_TITLE, UNKNOWN_UPLOADER
from discord_audio_bot.domain.shared.types import NonEmptyStr, NonNegativeInt, PositiveInt

CACHE_TTL: Final[int] = 3600
CACHE_MAX_SIZE: Final[int] = 500
DEFAULT_RETRIES: Final[int] = 3
DEFAULT_SOCKET_TIMEOUT: Final[int] = 10
LOG_URL_TRUNCATE: Final[int] = 60
WATCH_URL: Final[str] = "https://www.youtube.com/watch?v={video_id}"


def _coerce_non_negative(v: Any) -> int | None:
    if v is None:
        return None
    try:
        val = int(v)
    except (TypeError, ValueError):
        return None
    return val if val >= 0 else None


def _coerce_text(v: Any) -> str | None:
    if not isinstance(v, str) or not v.strip():
        return None
    return v


# ── Pydantic models for yt-dlp data ────────────────────────────────────


class AudioFormatInfo(BaseModel):
    """A single format entry from yt-dlp extraction."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    url: NonEmptyStr | None = None
    acodec: NonEmptyStr | None = None


class YtDlpTrackInfo(BaseModel):
    """Trimmed yt-dlp info dict for one video, or one flat playlist entry.

    Before-validators turn garbage from yt-dlp into defaults instead of errors.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: NonEmptyStr | None = None
    webpage_url: NonEmptyStr | None = None
    url: NonEmptyStr | None = None
    title: NonEmptyStr = UNKNOWN_TITLE
    duration: NonNegativeInt | None = None
    thumbnail: NonEmptyStr | None = None
    uploader: NonEmptyStr | None = None
    channel: NonEmptyStr | None = None
    view_count: NonNegativeInt | None = None
    playlist_index: PositiveInt | None = None
    formats: list[AudioFormatInfo] = Field(default_factory=list)

    @field_validator("id", "webpage_url", "url", "thumbnail", "uploader", "channel", mode="before")
    @classmethod
    def _coerce_empty_to_none(cls, v: Any) -> str | None:
        return _coerce_text(v)

    @field_validator("title", mode="before")
    @classmethod
    def _coerce_title(cls, v: Any) -> str:
        return _coerce_text(v) or UNKNOWN_TITLE

    @field_validator("duration", "view_count", mode="before")
    @classmethod
    def _coerce_count(cls, v: Any) -> int | None:
        return _coerce_non_negative(v)

    @field_validator("playlist_index", mode="before")
    @classmethod
    def _coerce_index(cls, v: Any) -> int | None:
        val = _coerce_non_negative(v)
        return val if val else None

    @property
    def uploader_name(self) -> str:
        return self.uploader or self.channel or UNKNOWN_UPLOADER

    @property
    def page_url(self) -> str | None:
        """The watch-page URL; flat playlist entries carry it in ``url``."""
        if self.webpage_url:
            return self.webpage_url
        if self.url and "youtube.com/watch" in self.url:
            return self.url
        if self.id:
            return WATCH_URL.format(video_id=self.id)
        return None

    @property
    def stream_url(self) -> str | None:
        """The media URL of the selected format, falling back to the last audio format."""
        if self.url and self.url.startswith(("http://", "https://")) and "youtube.com/watch" not in self.url:
            return self.url
        audio_formats = [f for f in self.formats if f.acodec != "none" and f.url]
        if audio_formats:
            return audio_formats[-1].url
        return None


class YtDlpPlaylistInfo(BaseModel):
    """Flat-extracted playlist: its metadata and lightweight entries."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: NonEmptyStr | None = None
    title: NonEmptyStr = UNKNOWN_TITLE
    description: str = ""
    uploader: NonEmptyStr | None = None
    channel: NonEmptyStr | None = None
    entries: list[YtDlpTrackInfo] = Field(default_factory=list)

    @field_validator("id", "uploader", "channel", mode="before")
    @classmethod
    def _coerce_empty_to_none(cls, v: Any) -> str | None:
        return _coerce_text(v)

    @field_validator("title", mode="before")
    @classmethod
    def _coerce_title(cls, v: Any) -> str:
        return _coerce_text(v) or UNKNOWN_TITLE

    @field_validator("description", mode="before")
    @classmethod
    def _coerce_description(cls, v: Any) -> str:
        return v if isinstance(v, str) else ""

    @field_validator("entries", mode="before")
    @classmethod
    def _drop_missing_entries(cls, v: Any) -> list[Any]:
        # yt-dlp yields None for private/deleted videos
        if not isinstance(v, list):
            return []
        return [entry for entry in v if isinstance(entry, dict)]

    @property
    def uploader_name(self) -> str:
        return self.uploader or self.channel or UNKNOWN_UPLOADER


class CacheEntry(BaseModel):
    """Cached yt-dlp extraction result with its insertion time."""

    model_config = ConfigDict(frozen=True)

    info: YtDlpTrackInfo
    cached_at: float


# ── yt-dlp option models ───────────────────────────────────────────────


class YtDlpOpts(BaseModel):
    """Typed yt-dlp configuration options passed to YoutubeDL."""

    model_config = ConfigDict(frozen=True)

    quiet: bool = True
    no_warnings: bool = True
    noprogress: bool = True
    noplaylist: bool = True
    forceipv4: bool = True
    retries: PositiveInt = DEFAULT_RETRIES
    socket_timeout: PositiveInt = DEFAULT_SOCKET_TIMEOUT
    format: NonEmptyStr | None = None
    skip_download: bool = True
    extract_flat: NonEmptyStr | bool = False
