#!/usr/bin/env python3
"""Main entry point for the Discord audio bot."""

from __future__ import annotations

import json
import logging
import logging.config
import shutil
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from discord_audio_bot.domain.shared.messages import ErrorMessages, LogTemplates

if TYPE_CHECKING:
    from discord_audio_bot.config.settings import Settings

_LOGGING_CONFIG_PATH = Path(__file__).resolve().parents[2] / "logging_config.json"


def setup_logging(log_level: str = "INFO", config_path: Path = _LOGGING_CONFIG_PATH) -> None:
    resolved_level = getattr(logging, log_level.upper(), logging.INFO)

    try:
        with open(config_path) as f:
            config = json.load(f)
        logging.config.dictConfig(config)
    except (FileNotFoundError, json.JSONDecodeError, ValueError):
        logging.basicConfig(
            level=resolved_level,
            format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logging.getLogger(__name__).warning(LogTemplates.LOGGING_CONFIG_FALLBACK, config_path)

    logging.getLogger().setLevel(resolved_level)


def log_startup_config(settings: Settings) -> None:
    """Log the playback, audio, and command-sync configuration the bot starts with."""
    logger = logging.getLogger(__name__)
    playback = settings.playback
    audio = settings.audio

    logger.info(
        LogTemplates.PLAYBACK_CONFIG,
        playback.idle_timeout_seconds,
        playback.pause_timeout_seconds,
        playback.connect_timeout_seconds,
        playback.status_preview_limit,
    )
    logger.info(LogTemplates.AUDIO_CONFIG, audio.ytdlp_format, audio.allow_playlists, audio.ffmpeg_executable)
    if shutil.which(audio.ffmpeg_executable) is None:
        logger.warning(LogTemplates.FFMPEG_NOT_FOUND, audio.ffmpeg_executable)

    discord_settings = settings.discord
    if not discord_settings.sync_on_startup:
        logger.info(LogTemplates.COMMAND_SYNC_DISABLED)
    elif discord_settings.guild_ids:
        logger.info(LogTemplates.COMMAND_SYNC_GUILDS, ", ".join(map(str, discord_settings.guild_ids)))
    else:
        logger.info(LogTemplates.COMMAND_SYNC_GLOBAL)


def main() -> int:
    from discord_audio_bot.config.settings import get_settings

    settings = get_settings()
    setup_logging(settings.log_level)

    logger = logging.getLogger(__name__)

    token_value = settings.discord.token.get_secret_value()
    if not token_value:
        logger.error(ErrorMessages.DISCORD_TOKEN_REQUIRED)
        return 1

    log_startup_config(settings)

    from discord_audio_bot.config.container import create_container
    from discord_audio_bot.infrastructure.discord.bot import create_bot

    container = create_container(settings)
    bot = create_bot(container, settings)

    try:
        logger.info(LogTemplates.BOT_STARTING)
        bot.run_with_graceful_shutdown(token_value)
        logger.info(LogTemplates.BOT_STOPPED)
        return 0
    except KeyboardInterrupt:
        logger.info(LogTemplates.BOT_INTERRUPTED)
        return 0
    except Exception as e:
        logger.exception(LogTemplates.BOT_FATAL_ERROR, e)
        return 1


def cli() -> None:
    """Console script entry point (used by pyproject.toml [project.scripts])."""
    sys.exit(main())


if __name__ == "__main__":
    cli()  # pragma: no cover
