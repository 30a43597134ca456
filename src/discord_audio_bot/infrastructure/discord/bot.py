"""Main Discord bot class integrating the DI container and cog lifecycle."""

from __future__ import annotations

import asyncio
import logging
import signal
from typing import TYPE_CHECKING, Any

import discord
from discord.ext import commands

from discord_audio_bot.domain.shared.messages import DiscordUIMessages, LogTemplates

if TYPE_CHECKING:
    from ...config.container import Container
    from ...config.settings import Settings

logger = logging.getLogger(__name__)

EXTENSIONS = ("discord_audio_bot.infrastructure.discord.cogs.audio_cog",)


class AudioBot(commands.Bot):
    def __init__(
        self,
        container: Container,
        settings: Settings,
        **kwargs: Any,
    ) -> None:
        intents = discord.Intents.default()
        intents.voice_states = True
        intents.guilds = True

        super().__init__(
            command_prefix=commands.when_mentioned,
            intents=intents,
            help_command=None,
            **kwargs,
        )

        self.container = container
        self.settings = settings
        container.set_bot(self)

    async def setup_hook(self) -> None:
        await self._load_cogs()
        self.tree.on_error = self._on_app_command_error

        if self.settings.discord.sync_on_startup:
            await self._sync_commands()

    async def _load_cogs(self) -> None:
        # Any extension failure aborts startup.
        for extension in EXTENSIONS:
            try:
                await self.load_extension(extension)
                logger.info(LogTemplates.EXTENSION_LOADED, extension)
            except commands.ExtensionError:
                logger.exception(LogTemplates.EXTENSION_LOAD_FAILED, extension)
                raise

    async def _sync_commands(self) -> None:
        guild_ids = self.settings.discord.guild_ids
        try:
            if guild_ids:
                for guild_id in guild_ids:
                    guild = discord.Object(id=guild_id)
                    self.tree.copy_global_to(guild=guild)
                    synced = await self.tree.sync(guild=guild)
                    logger.info(LogTemplates.COMMANDS_SYNCED_GUILD, len(synced), guild_id)
            else:
                synced = await self.tree.sync()
                logger.info(LogTemplates.COMMANDS_SYNCED_GLOBAL, len(synced))
        except discord.HTTPException as e:
            logger.warning(LogTemplates.COMMANDS_SYNC_FAILED, e)

    async def _on_app_command_error(
        self, interaction: discord.Interaction, error: Exception
    ) -> None:
        """Global slash-command error handler; replies ephemerally to avoid channel spam."""
        original = getattr(error, "original", error)
        logger.error(
            LogTemplates.SLASH_COMMAND_ERROR,
            getattr(interaction.command, "name", "<unknown>"),
            original,
            exc_info=original,
        )

        try:
            if interaction.response.is_done():
                await interaction.followup.send(DiscordUIMessages.ERROR_COMMAND_FAILED, ephemeral=True)
            else:
                await interaction.response.send_message(
                    DiscordUIMessages.ERROR_COMMAND_FAILED, ephemeral=True
                )
        except discord.HTTPException:
            logger.warning(LogTemplates.ERROR_REPLY_FAILED)

    async def on_ready(self) -> None:
        if self.user is None:
            return
        logger.info(LogTemplates.BOT_READY, self.user, self.user.id, len(self.guilds))

        activity = discord.Activity(type=discord.ActivityType.listening, name="/play")
        await self.change_presence(activity=activity)

    async def close(self) -> None:
        logger.info(LogTemplates.BOT_SHUTDOWN)

        try:
            await self.container.shutdown()
        except Exception as e:
            logger.warning(LogTemplates.BOT_SHUTDOWN_ERROR, e)

        await super().close()

    def run_with_graceful_shutdown(self, token: str, *, shutdown_timeout: float = 30.0) -> None:
        async def runner() -> None:
            async with self:
                loop = asyncio.get_running_loop()

                async def _graceful_close() -> None:
                    try:
                        await asyncio.wait_for(self.close(), timeout=shutdown_timeout)
                    except TimeoutError:
                        logger.warning(LogTemplates.BOT_SHUTDOWN_TIMEOUT, shutdown_timeout)

                for sig in (signal.SIGINT, signal.SIGTERM):
                    loop.add_signal_handler(sig, lambda: asyncio.create_task(_graceful_close()))
                await self.start(token)

        asyncio.run(runner())


def create_bot(container: Container, settings: Settings) -> AudioBot:
    return AudioBot(container=container, settings=settings)
