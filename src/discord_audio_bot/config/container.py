"""Dependency Injection Container

Lazily builds the resolver, transcoder, session registry, and command
service, caching each instance for the lifetime of the bot.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import partial
from typing import TYPE_CHECKING

from ..domain.shared.messages import ErrorMessages, LogTemplates

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from discord.ext.commands import Bot

    from ..application.interfaces.audio_resolver import AudioResolver
    from ..application.interfaces.transport import AudioTranscoder
    from ..application.services.audio_service import AudioCommandService
    from ..application.services.session_registry import SessionRegistry
    from .settings import Settings


@dataclass
class Container:
    """Dependency injection container.

    Components are created on first access. Tests may pre-populate the
    private fields with fakes.
    """

    settings: Settings

    _bot: Bot | None = None
    _audio_resolver: AudioResolver | None = None
    _transcoder: AudioTranscoder | None = None
    _session_registry: SessionRegistry | None = None
    _audio_service: AudioCommandService | None = None

    def set_bot(self, bot: Bot) -> None:
        self._bot = bot

    @property
    def bot(self) -> Bot:
        if self._bot is None:
            raise RuntimeError(ErrorMessages.BOT_NOT_SET)
        return self._bot

    # === Infrastructure Adapters ===

    @property
    def audio_resolver(self) -> AudioResolver:
        if self._audio_resolver is None:
            from ..infrastructure.audio.ytdlp_resolver import YtDlpResolver

            self._audio_resolver = YtDlpResolver(self.settings.audio)
        return self._audio_resolver

    @property
    def transcoder(self) -> AudioTranscoder:
        if self._transcoder is None:
            from ..infrastructure.audio.ffmpeg_transcoder import FFmpegTranscoder

            self._transcoder = FFmpegTranscoder(self.settings.audio)
        return self._transcoder

    # === Application Services ===

    @property
    def session_registry(self) -> SessionRegistry:
        """Registry whose sessions share this container's resolver and transcoder."""
        if self._session_registry is None:
            from ..application.services.playback_session import PlaybackSession
            from ..application.services.session_registry import SessionRegistry

            playback = self.settings.playback
            factory = partial(
                PlaybackSession,
                resolver=self.audio_resolver,
                transcoder=self.transcoder,
                idle_timeout=playback.idle_timeout_seconds,
                pause_timeout=playback.pause_timeout_seconds,
            )
            self._session_registry = SessionRegistry(factory)
        return self._session_registry

    @property
    def audio_service(self) -> AudioCommandService:
        if self._audio_service is None:
            from ..application.services.audio_service import AudioCommandService

            self._audio_service = AudioCommandService(
                resolver=self.audio_resolver,
                registry=self.session_registry,
                allow_playlists=self.settings.audio.allow_playlists,
            )
        return self._audio_service

    # === Lifecycle ===

    async def shutdown(self) -> None:
        """Close every live playback session."""
        if self._session_registry is not None:
            count = len(self._session_registry)
            await self._session_registry.close_all()
            logger.info(LogTemplates.SESSIONS_CLOSED, count)


def create_container(settings: Settings) -> Container:
    """Create a new dependency injection container."""
    return Container(settings)
