"""Reusable guard functions for Discord slash commands.

Free functions taking the interaction explicitly, so any cog can use them.
"""

from __future__ import annotations

import discord

from discord_audio_bot.domain.shared.messages import DiscordUIMessages

VoiceChannel = discord.VoiceChannel | discord.StageChannel


async def send_ephemeral(interaction: discord.Interaction, message: str) -> None:
    """Send an ephemeral message, handling both fresh and already-responded interactions."""
    if interaction.response.is_done():
        await interaction.followup.send(message, ephemeral=True)
    else:
        await interaction.response.send_message(message, ephemeral=True)


async def get_member(interaction: discord.Interaction) -> discord.Member | None:
    """Validate that the interaction comes from a guild member. Returns None with error on failure."""
    user = interaction.user
    if not interaction.guild or not isinstance(user, discord.Member):
        await send_ephemeral(interaction, DiscordUIMessages.ERROR_GUILD_ONLY)
        return None
    return user


async def get_member_voice_channel(interaction: discord.Interaction) -> VoiceChannel | None:
    """The voice channel the invoking member is in. Returns None with error on failure."""
    member = await get_member(interaction)
    if member is None:
        return None

    channel = member.voice.channel if member.voice else None
    if not isinstance(channel, VoiceChannel):
        await send_ephemeral(interaction, DiscordUIMessages.ERROR_NOT_IN_VOICE)
        return None
    return channel
