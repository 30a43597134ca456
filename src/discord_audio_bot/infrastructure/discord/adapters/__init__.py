"""Adapters bridging discord.py voice clients to the transport interface."""

from discord_audio_bot.infrastructure.discord.adapters.voice_transport import DiscordTransportSession

__all__ = ["DiscordTransportSession"]
