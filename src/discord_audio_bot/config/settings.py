"""Application Settings and Configuration

Pydantic-based settings loaded from environment variables (and an optional
``.env`` file). Nested groups use ``__`` as the delimiter, e.g.
``PLAYBACK__IDLE_TIMEOUT_SECONDS=120``. All settings are frozen after
initialization.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, BaseModel, Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..domain.shared.messages import ErrorMessages
from ..domain.shared.types import PreviewLimit, TimeoutSeconds


class DiscordSettings(BaseModel):
    """Discord bot configuration."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    token: SecretStr = Field(
        default=SecretStr(""), validation_alias=AliasChoices("token", "bot_token", "discord_token")
    )
    guild_ids: tuple[int, ...] = Field(
        default_factory=tuple, validation_alias=AliasChoices("guild_ids", "guilds")
    )
    sync_on_startup: bool = True

    @field_validator("guild_ids", mode="before")
    @classmethod
    def validate_snowflake_ids(cls, v: object) -> tuple[int, ...]:
        """Accept a JSON list, a comma-separated string, or a tuple of snowflakes."""
        if isinstance(v, str):
            v = [part for part in v.replace(" ", "").split(",") if part]
        ids = tuple(int(x) for x in v)  # type: ignore[union-attr]
        for snowflake in ids:
            if not 0 < snowflake < 2**64:
                raise ValueError(f"Invalid guild id: {snowflake}")
        return ids


class AudioSettings(BaseModel):
    """yt-dlp and FFmpeg configuration."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    ytdlp_format: str = "bestaudio/best"
    ffmpeg_executable: str = "ffmpeg"
    ffmpeg_loudnorm: bool = True
    ffmpeg_reconnect_delay_max: int = Field(default=5, ge=0, le=60)
    metadata_timeout_seconds: TimeoutSeconds = 30.0
    playlist_timeout_seconds: TimeoutSeconds = 60.0
    stream_timeout_seconds: TimeoutSeconds = 30.0
    allow_playlists: bool = Field(
        default=True, validation_alias=AliasChoices("allow_playlists", "playlists")
    )


class PlaybackSettings(BaseModel):
    """Playback session lifecycle configuration."""

    model_config = SettingsConfigDict(frozen=True)

    idle_timeout_seconds: TimeoutSeconds = 300.0
    pause_timeout_seconds: TimeoutSeconds = 600.0
    connect_timeout_seconds: float = Field(default=15.0, gt=0, le=120)
    status_preview_limit: PreviewLimit = 5

    @model_validator(mode="after")
    def validate_timeouts(self) -> PlaybackSettings:
        if self.pause_timeout_seconds <= self.idle_timeout_seconds:
            raise ValueError(ErrorMessages.PAUSE_TIMEOUT_TOO_SHORT)
        return self


class Settings(BaseSettings):
    """Application settings container.

    Environment variable naming:
    - ENVIRONMENT, DEBUG, LOG_LEVEL (top-level)
    - DISCORD__TOKEN, DISCORD__GUILD_IDS, DISCORD__SYNC_ON_STARTUP
    - AUDIO__YTDLP_FORMAT, AUDIO__ALLOW_PLAYLISTS, AUDIO__*_TIMEOUT_SECONDS
    - PLAYBACK__IDLE_TIMEOUT_SECONDS, PLAYBACK__PAUSE_TIMEOUT_SECONDS, ...
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    environment: Literal["development", "production", "test"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    discord: DiscordSettings = Field(default_factory=DiscordSettings)
    audio: AudioSettings = Field(default_factory=AudioSettings)
    playback: PlaybackSettings = Field(default_factory=PlaybackSettings)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(ErrorMessages.INVALID_LOG_LEVEL.format(level=v, valid_levels=valid_levels))
        return v_upper


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached application settings.

    Loaded from, in order of precedence: environment variables, ``.env``,
    defaults.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing)."""
    get_settings.cache_clear()
