"""
Application Interfaces (Ports)

Abstract contracts between the application layer and the infrastructure
adapters that talk to yt-dlp, FFmpeg, and Discord voice.
"""

from discord_audio_bot.application.interfaces.audio_resolver import AudioResolver
from discord_audio_bot.application.interfaces.transport import (
    AudioStream,
    AudioTranscoder,
    NotificationSink,
    TransportFactory,
    TransportListener,
    TransportSession,
)

__all__ = [
    "AudioResolver",
    "AudioStream",
    "AudioTranscoder",
    "NotificationSink",
    "TransportFactory",
    "TransportListener",
    "TransportSession",
]
