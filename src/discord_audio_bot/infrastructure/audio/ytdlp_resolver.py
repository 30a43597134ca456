"""AudioResolver implementation using yt-dlp for YouTube videos and playlists."""

from __future__ import annotations

import asyncio
import logging
import re
import time
from collections.abc import Callable
from datetime import datetime
from typing import Any, Final, TypeVar, cast

from yt_dlp import YoutubeDL

from discord_audio_bot.application.interfaces.audio_resolver import AudioResolver
from discord_audio_bot.config.settings import AudioSettings
from discord_audio_bot.domain.music.entities import (
    PlaylistDescriptor,
    Requester,
    ResolvedReference,
    TrackDescriptor,
)
from discord_audio_bot.domain.shared.exceptions import (
    InvalidReferenceError,
    ResolutionErrorKind,
    ResolutionFailureError,
)
from discord_audio_bot.domain.shared.messages import ErrorMessages, LogTemplates
from discord_audio_bot.infrastructure.audio.models import (
    CACHE_MAX_SIZE,
    CACHE_TTL,
    LOG_URL_TRUNCATE,
    CacheEntry,
    YtDlpOpts,
    YtDlpPlaylistInfo,
    YtDlpTrackInfo,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# ── Module-level state and patterns ────────────────────────────────────

_info_cache: dict[str, CacheEntry] = {}

URL_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"^(https?://)?([\w\-]+\.)+[\w\-]+(/[\w\-._~:/?#\[\]@!$&'()*+,;=]*)?$"
)

YOUTUBE_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"^(https?://)?(www\.)?(youtube\.com|youtu\.?be)/.+$"
)

YOUTUBE_PLAYLIST_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"^(https?://)?(www\.)?(youtube\.com|youtu\.?be)/.*(list=)([^#&?]*).+$"
)


def clear_info_cache() -> None:
    _info_cache.clear()


class YtDlpResolver(AudioResolver):
    """Resolves YouTube links with yt-dlp.

    A single video is resolved in one extraction that returns both metadata
    and the audio stream URL. A playlist is flat-extracted for metadata only;
    each member's stream URL is looked up later through
    :meth:`resolve_stream_address`.
    """

    def __init__(self, settings: AudioSettings | None = None) -> None:
        self._settings = settings or AudioSettings()
        self._base_opts = YtDlpOpts(format=self._settings.ytdlp_format)

    def _get_opts(self, **overrides: Any) -> YtDlpOpts:
        if overrides:
            return self._base_opts.model_copy(update=overrides)
        return self._base_opts

    def _get_playlist_opts(self) -> YtDlpOpts:
        return self._get_opts(noplaylist=False, extract_flat="in_playlist", format=None)

    # ── Classification ──────────────────────────────────────────────

    def is_resolvable(self, locator: str) -> bool:
        return bool(URL_PATTERN.match(locator.strip()))

    def is_supported_source(self, locator: str) -> bool:
        return bool(YOUTUBE_PATTERN.match(locator.strip()))

    def is_group_reference(self, locator: str) -> bool:
        return bool(YOUTUBE_PLAYLIST_PATTERN.match(locator.strip()))

    # ── Resolution ──────────────────────────────────────────────────

    async def resolve(self, locator: str, requester: Requester, now: datetime) -> ResolvedReference:
        locator = locator.strip()
        if not self.is_resolvable(locator):
            raise InvalidReferenceError(locator, ErrorMessages.INVALID_REFERENCE.format(locator=locator))
        if not self.is_supported_source(locator):
            raise InvalidReferenceError(
                locator,
                ErrorMessages.UNSUPPORTED_SOURCE.format(locator=locator),
                kind=ResolutionErrorKind.UNSUPPORTED,
            )

        if self.is_group_reference(locator):
            playlist = await self._run(
                self._extract_playlist_sync, locator, self._settings.playlist_timeout_seconds
            )
            return self._build_playlist(locator, playlist, requester, now)

        info = await self._run(self._extract_info_sync, locator, self._settings.metadata_timeout_seconds)
        return ResolvedReference(tracks=[self._build_track(locator, info, requester, now)])

    async def resolve_stream_address(self, track: TrackDescriptor) -> None:
        if track.is_resolved:
            return
        info = await self._run(self._extract_info_sync, track.reference, self._settings.stream_timeout_seconds)
        stream_url = info.stream_url
        if not stream_url:
            raise ResolutionFailureError(
                track.reference, ErrorMessages.NO_STREAM_URL.format(title=track.title)
            )
        track.attach_stream_url(stream_url)

    async def _run(self, func: Callable[[str], T], locator: str, timeout: float) -> T:
        """Run a blocking yt-dlp call in a worker thread, mapping failures to ResolutionFailureError."""
        try:
            async with asyncio.timeout(timeout):
                return await asyncio.to_thread(func, locator)
        except TimeoutError as exc:
            logger.warning(LogTemplates.YTDLP_TIMEOUT, timeout, locator[:LOG_URL_TRUNCATE])
            raise ResolutionFailureError(
                locator,
                ErrorMessages.RESOLUTION_TIMEOUT.format(locator=locator, timeout=timeout),
                kind=ResolutionErrorKind.TIMEOUT,
            ) from exc
        except ResolutionFailureError:
            raise
        except Exception as exc:
            logger.warning(LogTemplates.YTDLP_EXTRACT_FAILED, locator[:LOG_URL_TRUNCATE], exc)
            raise ResolutionFailureError(locator, str(exc) or None) from exc

    # ── Descriptor construction ─────────────────────────────────────

    def _build_track(
        self, locator: str, info: YtDlpTrackInfo, requester: Requester, now: datetime
    ) -> TrackDescriptor:
        return TrackDescriptor(
            reference=info.page_url or locator,
            stream_url=info.stream_url,
            title=info.title,
            duration_seconds=info.duration or 0,
            uploader=info.uploader_name,
            requested_by=requester,
            requested_at=now,
            view_count=info.view_count,
            thumbnail_url=_http_or_none(info.thumbnail),
        )

    def _build_playlist(
        self, locator: str, playlist: YtDlpPlaylistInfo, requester: Requester, now: datetime
    ) -> ResolvedReference:
        playlist_id = playlist.id or locator
        tracks: list[TrackDescriptor] = []
        for position, entry in enumerate(playlist.entries, start=1):
            reference = entry.page_url
            if reference is None:
                logger.debug(LogTemplates.YTDLP_ENTRY_SKIPPED, playlist_id)
                continue
            tracks.append(
                TrackDescriptor(
                    reference=reference,
                    title=entry.title,
                    duration_seconds=entry.duration or 0,
                    uploader=entry.uploader_name,
                    requested_by=requester,
                    requested_at=now,
                    playlist_id=playlist_id,
                    playlist_index=entry.playlist_index or position,
                    view_count=entry.view_count,
                )
            )

        if not tracks:
            raise ResolutionFailureError(locator, ErrorMessages.PLAYLIST_EMPTY.format(locator=locator))

        logger.info(LogTemplates.YTDLP_PLAYLIST_RESOLVED, playlist_id, len(tracks))
        descriptor = PlaylistDescriptor(
            playlist_id=playlist_id,
            reference=locator,
            title=playlist.title,
            description=playlist.description,
            duration_seconds=sum(track.duration_seconds for track in tracks),
            uploader=playlist.uploader_name,
            requested_by=requester,
            item_count=len(tracks),
            created_at=now,
        )
        return ResolvedReference(tracks=tracks, playlist=descriptor)

    # ── Blocking yt-dlp calls (worker thread) ───────────────────────

    def _extract_info_sync(self, url: str) -> YtDlpTrackInfo:
        now = time.time()
        cached = _info_cache.get(url)
        if cached is not None:
            if now - cached.cached_at < CACHE_TTL:
                logger.debug(LogTemplates.CACHE_HIT, url[:LOG_URL_TRUNCATE])
                return cached.info
            _info_cache.pop(url, None)

        logger.debug(LogTemplates.YTDLP_EXTRACTING, url[:LOG_URL_TRUNCATE])
        with YoutubeDL(params=cast(Any, self._get_opts().model_dump())) as ydl:
            data = ydl.extract_info(url, download=False)

        if not isinstance(data, dict):
            raise ResolutionFailureError(url, ErrorMessages.RESOLUTION_EMPTY.format(locator=url))
        info = YtDlpTrackInfo.model_validate(dict(data))

        _info_cache[url] = CacheEntry(info=info, cached_at=now)
        if len(_info_cache) > CACHE_MAX_SIZE:
            expired = [k for k, entry in _info_cache.items() if now - entry.cached_at >= CACHE_TTL]
            for k in expired:
                _info_cache.pop(k, None)
        return info

    def _extract_playlist_sync(self, url: str) -> YtDlpPlaylistInfo:
        logger.debug(LogTemplates.YTDLP_EXTRACTING, url[:LOG_URL_TRUNCATE])
        with YoutubeDL(params=cast(Any, self._get_playlist_opts().model_dump(exclude_none=True))) as ydl:
            data = ydl.extract_info(url, download=False)

        if not isinstance(data, dict):
            raise ResolutionFailureError(url, ErrorMessages.PLAYLIST_EMPTY.format(locator=url))
        return YtDlpPlaylistInfo.model_validate(dict(data))


def _http_or_none(url: str | None) -> str | None:
    if url and url.startswith(("http://", "https://")):
        return url
    return None
