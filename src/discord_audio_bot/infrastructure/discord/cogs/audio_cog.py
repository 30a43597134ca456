"""Slash-command cog for audio playback: play, stop, skip, pause, resume, playing, leave."""

from __future__ import annotations

import logging
from functools import partial
from typing import TYPE_CHECKING

import discord
from discord import app_commands
from discord.ext import commands

from discord_audio_bot.domain.music.entities import Requester
from discord_audio_bot.domain.music.value_objects import SkipScope
from discord_audio_bot.domain.shared.exceptions import (
    InvalidReferenceError,
    ResolutionError,
    TransportUnavailableError,
    UnsupportedGroupReferenceError,
)
from discord_audio_bot.domain.shared.messages import DiscordUIMessages, ErrorMessages, LogTemplates
from discord_audio_bot.infrastructure.discord.adapters.voice_transport import DiscordTransportSession
from discord_audio_bot.infrastructure.discord.guards.voice_guards import (
    get_member,
    get_member_voice_channel,
    send_ephemeral,
)
from discord_audio_bot.utils.reply import format_enqueue_reply, format_skip_reply, format_status

if TYPE_CHECKING:
    from ....application.interfaces.transport import NotificationSink
    from ....application.services.audio_service import AudioCommandService
    from ....config.container import Container

logger = logging.getLogger(__name__)


def channel_notifier(channel: discord.abc.Messageable) -> NotificationSink:
    """Notification sink that posts to ``channel``."""

    async def notify(message: str) -> None:
        await channel.send(message)

    return notify


class AudioCog(commands.Cog):
    def __init__(self, bot: commands.Bot, container: Container) -> None:
        self.bot = bot
        self.container = container

    @property
    def _service(self) -> AudioCommandService:
        return self.container.audio_service

    def _notifier_for(self, interaction: discord.Interaction) -> NotificationSink | None:
        channel = interaction.channel
        if isinstance(channel, discord.abc.Messageable):
            return channel_notifier(channel)
        return None

    # ─────────────────────────────────────────────────────────────────
    # Play
    # ─────────────────────────────────────────────────────────────────

    @app_commands.command(name="play", description="Play a YouTube video or playlist by URL.")
    @app_commands.describe(url="YouTube video or playlist URL")
    async def play(self, interaction: discord.Interaction, url: str) -> None:
        channel = await get_member_voice_channel(interaction)
        if channel is None:
            return
        assert interaction.guild is not None

        service = self._service
        try:
            service.validate(url.strip(), allow_groups=self.container.settings.audio.allow_playlists)
        except UnsupportedGroupReferenceError:
            await send_ephemeral(interaction, DiscordUIMessages.ERROR_PLAYLIST_NOT_SUPPORTED)
            return
        except InvalidReferenceError:
            await send_ephemeral(interaction, DiscordUIMessages.ERROR_INVALID_URL)
            return

        await interaction.response.defer()

        user = interaction.user
        requester = Requester(user_id=user.id, display_name=user.display_name)
        transport_factory = partial(
            DiscordTransportSession.connect,
            channel,
            timeout=self.container.settings.playback.connect_timeout_seconds,
        )

        try:
            result = await service.play(
                interaction.guild.id,
                url,
                requester,
                transport_factory,
                self._notifier_for(interaction),
            )
        except ResolutionError as exc:
            await send_ephemeral(interaction, DiscordUIMessages.ERROR_RESOLUTION_FAILED.format(error=exc.message))
            return
        except TransportUnavailableError:
            await send_ephemeral(interaction, DiscordUIMessages.ERROR_COULD_NOT_JOIN_VOICE)
            return

        await interaction.followup.send(format_enqueue_reply(result))

    # ─────────────────────────────────────────────────────────────────
    # Playback Controls
    # ─────────────────────────────────────────────────────────────────

    async def _defer_for_session(self, interaction: discord.Interaction) -> bool:
        """Defer the reply if the guild has a session, otherwise answer that there is none."""
        if await get_member(interaction) is None:
            return False
        assert interaction.guild is not None

        if self.container.session_registry.get(interaction.guild.id) is None:
            await send_ephemeral(interaction, DiscordUIMessages.ERROR_NO_PLAYER)
            return False
        await interaction.response.defer()
        return True

    @app_commands.command(name="stop", description="Stop playback and clear the queue.")
    async def stop(self, interaction: discord.Interaction) -> None:
        if not await self._defer_for_session(interaction):
            return
        assert interaction.guild is not None

        stopped = await self._service.stop(interaction.guild.id)
        if stopped is None:
            await send_ephemeral(interaction, DiscordUIMessages.ERROR_NO_PLAYER)
            return
        await interaction.followup.send(DiscordUIMessages.ACTION_STOPPED)

    @app_commands.command(name="skip", description="Skip the current track or the rest of its playlist.")
    @app_commands.describe(scope="Skip just this track, or every remaining track of its playlist")
    @app_commands.choices(
        scope=[
            app_commands.Choice(name="track", value=SkipScope.TRACK.value),
            app_commands.Choice(name="playlist", value=SkipScope.GROUP.value),
        ]
    )
    async def skip(
        self, interaction: discord.Interaction, scope: app_commands.Choice[str] | None = None
    ) -> None:
        if not await self._defer_for_session(interaction):
            return
        assert interaction.guild is not None

        skip_scope = SkipScope(scope.value) if scope is not None else SkipScope.TRACK
        result = await self._service.skip(interaction.guild.id, skip_scope)
        if result is None:
            await interaction.followup.send(DiscordUIMessages.STATE_NOTHING_TO_SKIP)
            return
        await interaction.followup.send(format_skip_reply(result))

    @app_commands.command(name="pause", description="Pause the current track.")
    async def pause(self, interaction: discord.Interaction) -> None:
        if not await self._defer_for_session(interaction):
            return
        assert interaction.guild is not None

        paused = await self._service.pause(interaction.guild.id)
        if paused is None:
            await send_ephemeral(interaction, DiscordUIMessages.ERROR_NO_PLAYER)
        elif paused:
            await interaction.followup.send(DiscordUIMessages.ACTION_PAUSED)
        else:
            await send_ephemeral(interaction, DiscordUIMessages.STATE_NOT_PLAYING)

    @app_commands.command(name="resume", description="Resume paused playback.")
    async def resume(self, interaction: discord.Interaction) -> None:
        if not await self._defer_for_session(interaction):
            return
        assert interaction.guild is not None

        resumed = await self._service.resume(interaction.guild.id)
        if resumed is None:
            await send_ephemeral(interaction, DiscordUIMessages.ERROR_NO_PLAYER)
        elif resumed:
            await interaction.followup.send(DiscordUIMessages.ACTION_RESUMED)
        else:
            await send_ephemeral(interaction, DiscordUIMessages.STATE_NOT_PAUSED)

    @app_commands.command(name="playing", description="Show the current track and the queue.")
    async def playing(self, interaction: discord.Interaction) -> None:
        if not await self._defer_for_session(interaction):
            return
        assert interaction.guild is not None

        snapshot = await self._service.status(interaction.guild.id)
        if snapshot is None:
            await send_ephemeral(interaction, DiscordUIMessages.ERROR_NO_PLAYER)
            return
        limit = self.container.settings.playback.status_preview_limit
        await interaction.followup.send(format_status(snapshot, limit))

    @app_commands.command(name="leave", description="Disconnect from the voice channel.")
    async def leave(self, interaction: discord.Interaction) -> None:
        if not await self._defer_for_session(interaction):
            return
        assert interaction.guild is not None

        if not await self._service.leave(interaction.guild.id):
            await send_ephemeral(interaction, DiscordUIMessages.ERROR_NO_PLAYER)
            return
        await interaction.followup.send(DiscordUIMessages.ACTION_LEFT)

    # ─────────────────────────────────────────────────────────────────
    # Voice state
    # ─────────────────────────────────────────────────────────────────

    @commands.Cog.listener()
    async def on_voice_state_update(
        self, member: discord.Member, before: discord.VoiceState, after: discord.VoiceState
    ) -> None:
        """Destroy the session when the bot is disconnected from voice by someone else."""
        if self.bot.user is None or member.id != self.bot.user.id:
            return
        if before.channel is not None and after.channel is None:
            logger.info(LogTemplates.VOICE_LOST, member.guild.id)
            await self._service.handle_voice_disconnect(member.guild.id)


async def setup(bot: commands.Bot) -> None:
    container = getattr(bot, "container", None)
    if container is None:
        raise RuntimeError(ErrorMessages.CONTAINER_NOT_FOUND)

    await bot.add_cog(AudioCog(bot, container))
