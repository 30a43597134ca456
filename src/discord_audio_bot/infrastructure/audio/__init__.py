"""Audio infrastructure - yt-dlp resolver and FFmpeg transcoder."""

from discord_audio_bot.infrastructure.audio.ffmpeg_transcoder import FFmpegConfig, FFmpegTranscoder
from discord_audio_bot.infrastructure.audio.models import (
    AudioFormatInfo,
    CacheEntry,
    YtDlpOpts,
    YtDlpPlaylistInfo,
    YtDlpTrackInfo,
)
from discord_audio_bot.infrastructure.audio.ytdlp_resolver import YtDlpResolver

__all__ = [
    "AudioFormatInfo",
    "CacheEntry",
    "FFmpegConfig",
    "FFmpegTranscoder",
    "YtDlpOpts",
    "YtDlpPlaylistInfo",
    "YtDlpResolver",
    "YtDlpTrackInfo",
]
