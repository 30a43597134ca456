"""Discord voice transport implementing TransportSession for one guild connection."""

from __future__ import annotations

import asyncio
import logging
from functools import partial
from typing import TYPE_CHECKING, cast

import discord

from discord_audio_bot.application.interfaces.transport import TransportSession
from discord_audio_bot.domain.music.value_objects import TransportStatus
from discord_audio_bot.domain.shared.exceptions import (
    PlaybackFailureError,
    TransportUnavailableError,
)
from discord_audio_bot.domain.shared.messages import ErrorMessages, LogTemplates

if TYPE_CHECKING:
    from ....application.interfaces.transport import AudioStream, TransportListener

logger = logging.getLogger(__name__)

CONNECT_TIMEOUT: float = 15.0

VoiceChannel = discord.VoiceChannel | discord.StageChannel


class DiscordTransportSession(TransportSession):
    """Wraps a connected :class:`discord.VoiceClient`.

    discord.py calls the ``after`` hook of ``VoiceClient.play`` from its audio
    thread; the hook is marshalled onto the event loop before any listener
    sees it. Each ``play`` gets a generation number so that the hook of a
    stopped or replaced stream never reports the new stream as finished.
    """

    def __init__(
        self, voice_client: discord.VoiceClient, loop: asyncio.AbstractEventLoop | None = None
    ) -> None:
        self._vc = voice_client
        self._loop = loop or asyncio.get_running_loop()
        self._listener: TransportListener | None = None
        self._status = TransportStatus.IDLE
        self._generation = 0
        self._closed = False

    @classmethod
    async def connect(cls, channel: VoiceChannel, *, timeout: float = CONNECT_TIMEOUT) -> DiscordTransportSession:
        """Join ``channel`` self-deafened, waiting at most ``timeout`` seconds.

        Raises:
            TransportUnavailableError: on timeout, missing permissions, or client errors.
        """
        guild = channel.guild
        stale = guild.voice_client
        if stale is not None:
            logger.warning(LogTemplates.VOICE_STALE_CLEANUP, guild.id)
            try:
                await stale.disconnect(force=True)
            except Exception:
                logger.debug(LogTemplates.VOICE_STALE_CLEANUP_FAILED, guild.id, exc_info=True)

        try:
            async with asyncio.timeout(timeout):
                voice_client = await channel.connect(self_deaf=True, timeout=timeout)
        except TimeoutError as exc:
            logger.error(LogTemplates.VOICE_CONNECTION_TIMEOUT, channel.id)
            raise TransportUnavailableError(channel.id) from exc
        except discord.Forbidden as exc:
            logger.error(LogTemplates.VOICE_NO_PERMISSION, channel.id)
            raise TransportUnavailableError(channel.id) from exc
        except discord.ClientException as exc:
            logger.error(LogTemplates.VOICE_CLIENT_ERROR, channel.id, exc)
            raise TransportUnavailableError(channel.id) from exc

        logger.info(LogTemplates.VOICE_CONNECTED, channel.name, guild.id)
        return cls(cast(discord.VoiceClient, voice_client))

    # ── TransportSession ────────────────────────────────────────────

    @property
    def status(self) -> TransportStatus:
        return self._status

    @property
    def is_ready(self) -> bool:
        return not self._closed and self._vc.is_connected()

    @property
    def guild_id(self) -> int:
        return self._vc.guild.id

    def set_listener(self, listener: TransportListener | None) -> None:
        self._listener = listener

    def play(self, stream: AudioStream) -> None:
        if not self.is_ready:
            stream.cleanup()
            raise PlaybackFailureError("stream", ErrorMessages.TRANSPORT_NOT_READY)

        self._generation += 1
        if self._vc.is_playing() or self._vc.is_paused():
            self._vc.stop()

        try:
            self._vc.play(cast(discord.AudioSource, stream), after=partial(self._after, self._generation))
        except discord.ClientException as exc:
            stream.cleanup()
            raise PlaybackFailureError("stream", str(exc)) from exc
        self._set_status(TransportStatus.PLAYING)

    def pause(self) -> None:
        if self._vc.is_playing():
            self._vc.pause()
            self._set_status(TransportStatus.PAUSED)

    def resume(self) -> None:
        if self._vc.is_paused():
            self._vc.resume()
            self._set_status(TransportStatus.PLAYING)

    def stop(self) -> None:
        self._generation += 1
        if self._vc.is_playing() or self._vc.is_paused():
            self._vc.stop()
        self._set_status(TransportStatus.IDLE)

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._generation += 1
        self._listener = None
        try:
            if self._vc.is_playing() or self._vc.is_paused():
                self._vc.stop()
            await self._vc.disconnect(force=True)
        finally:
            self._status = TransportStatus.IDLE
            logger.info(LogTemplates.VOICE_DISCONNECTED, self.guild_id)

    # ── Event plumbing ──────────────────────────────────────────────

    def _after(self, generation: int, error: Exception | None = None) -> None:
        """Called by discord.py from the audio thread."""
        if self._loop.is_closed():
            return
        self._loop.call_soon_threadsafe(self._on_stream_end, generation, error)

    def _on_stream_end(self, generation: int, error: Exception | None) -> None:
        if self._closed or generation != self._generation:
            logger.debug(LogTemplates.VOICE_STALE_CALLBACK, self.guild_id)
            return

        if error is not None:
            logger.warning(LogTemplates.VOICE_PLAYER_ERROR, self.guild_id, error)
            self._dispatch("on_playback_error", error)

        if not self._vc.is_connected():
            logger.warning(LogTemplates.VOICE_LOST, self.guild_id)
            self._dispatch("on_connection_lost")
            return

        self._set_status(TransportStatus.IDLE)

    def _set_status(self, status: TransportStatus) -> None:
        if status is self._status:
            return
        self._status = status
        self._dispatch("on_status_change", status)

    def _dispatch(self, event: str, *args: object) -> None:
        if self._listener is None:
            return
        try:
            getattr(self._listener, event)(*args)
        except Exception:
            logger.exception(LogTemplates.VOICE_LISTENER_FAILED, self.guild_id)
