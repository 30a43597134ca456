"""
Application Services

- CommandSerializer: per-session FIFO of mutating commands
- PlaybackSession: queue and state machine for one voice channel
- SessionRegistry: one live session per guild
- AudioCommandService: play/stop/skip/pause/resume/status/leave
"""

from discord_audio_bot.application.services.audio_service import AudioCommandService
from discord_audio_bot.application.services.command_serializer import CommandSerializer
from discord_audio_bot.application.services.playback_session import PlaybackSession
from discord_audio_bot.application.services.session_models import (
    EnqueueResult,
    SessionSnapshot,
    SkipResult,
)
from discord_audio_bot.application.services.session_registry import SessionRegistry

__all__ = [
    "AudioCommandService",
    "CommandSerializer",
    "PlaybackSession",
    "SessionRegistry",
    "EnqueueResult",
    "SessionSnapshot",
    "SkipResult",
]
