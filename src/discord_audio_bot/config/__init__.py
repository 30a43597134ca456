"""Settings and dependency wiring."""

from discord_audio_bot.config.container import Container, create_container
from discord_audio_bot.config.settings import Settings, clear_settings_cache, get_settings

__all__ = [
    "Container",
    "Settings",
    "create_container",
    "get_settings",
    "clear_settings_cache",
]
