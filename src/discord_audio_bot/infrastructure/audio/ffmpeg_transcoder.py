"""
FFmpeg Transcoder

Turns a resolved stream URL into an Opus audio source for discord.py.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

import discord

from discord_audio_bot.application.interfaces.transport import AudioTranscoder
from discord_audio_bot.config.settings import AudioSettings
from discord_audio_bot.domain.shared.exceptions import PlaybackFailureError
from discord_audio_bot.domain.shared.messages import ErrorMessages, LogTemplates

if TYPE_CHECKING:
    from ...domain.music.entities import TrackDescriptor

logger = logging.getLogger(__name__)


@dataclass
class FFmpegConfig:
    """Configuration for FFmpeg audio processing."""

    # Reconnection settings for streaming
    reconnect: bool = True
    reconnect_streamed: bool = True
    reconnect_delay_max: int = 5

    # Input probing and diagnostics
    analyzeduration: int = 0
    loglevel: str = "error"

    # Audio processing
    disable_video: bool = True
    loudnorm: bool = True

    executable: str = "ffmpeg"

    @classmethod
    def from_settings(cls, settings: AudioSettings) -> FFmpegConfig:
        return cls(
            reconnect_delay_max=settings.ffmpeg_reconnect_delay_max,
            loudnorm=settings.ffmpeg_loudnorm,
            executable=settings.ffmpeg_executable,
        )

    def get_before_options(self) -> str:
        """FFmpeg options placed before ``-i``."""
        opts = []
        if self.reconnect:
            opts.append("-reconnect 1")
        if self.reconnect_streamed:
            opts.append("-reconnect_streamed 1")
        if self.reconnect_delay_max:
            opts.append(f"-reconnect_delay_max {self.reconnect_delay_max}")
        opts.append(f"-analyzeduration {self.analyzeduration}")
        if self.loglevel:
            opts.append(f"-loglevel {self.loglevel}")
        return " ".join(opts)

    def get_options(self) -> str:
        """FFmpeg output options."""
        opts = []
        if self.disable_video:
            opts.append("-vn")
        if self.loudnorm:
            opts.append("-filter:a loudnorm")
        return " ".join(opts)


class FFmpegTranscoder(AudioTranscoder):
    """Spawns one FFmpeg process per track, encoding to Opus.

    A missing executable or a bad URL is reported as a
    :class:`PlaybackFailureError` so only the current track is affected.
    """

    def __init__(self, settings: AudioSettings | None = None, config: FFmpegConfig | None = None) -> None:
        self._settings = settings or AudioSettings()
        self._config = config or FFmpegConfig.from_settings(self._settings)

    @property
    def config(self) -> FFmpegConfig:
        return self._config

    def open_stream(self, track: TrackDescriptor) -> discord.FFmpegOpusAudio:
        stream_url = track.stream_url
        if not stream_url or not stream_url.startswith(("http://", "https://")):
            raise PlaybackFailureError(
                track.title, ErrorMessages.STREAM_URL_NOT_HTTP.format(title=track.title)
            )

        try:
            source = discord.FFmpegOpusAudio(
                stream_url,
                executable=self._config.executable,
                before_options=self._config.get_before_options(),
                options=self._config.get_options(),
            )
        except discord.ClientException as e:
            logger.error(LogTemplates.FFMPEG_SOURCE_FAILED, track.title, e)
            raise PlaybackFailureError(
                track.title, ErrorMessages.TRANSCODER_FAILED.format(title=track.title, error=e)
            ) from e

        logger.debug(LogTemplates.FFMPEG_SOURCE_CREATED, track.title)
        return source
