"""
Tests for FFmpegTranscoder

Tests for:
- FFmpeg option string construction
- Building options from AudioSettings
- Opus source creation
- Failure mapping to PlaybackFailureError
"""

from unittest.mock import patch

import discord
import pytest

from conftest import make_track
from discord_audio_bot.config.settings import AudioSettings
from discord_audio_bot.domain.shared.exceptions import PlaybackFailureError
from discord_audio_bot.infrastructure.audio.ffmpeg_transcoder import FFmpegConfig, FFmpegTranscoder

# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def transcoder():
    return FFmpegTranscoder(AudioSettings())


@pytest.fixture
def mock_opus():
    with patch("discord_audio_bot.infrastructure.audio.ffmpeg_transcoder.discord.FFmpegOpusAudio") as mock_cls:
        yield mock_cls


class TestFFmpegConfig:
    """Tests for option strings."""

    def test_default_before_options(self):
        assert FFmpegConfig().get_before_options() == (
            "-reconnect 1 -reconnect_streamed 1 -reconnect_delay_max 5 "
            "-analyzeduration 0 -loglevel error"
        )

    def test_default_options(self):
        assert FFmpegConfig().get_options() == "-vn -filter:a loudnorm"

    def test_loudnorm_disabled(self):
        assert FFmpegConfig(loudnorm=False).get_options() == "-vn"

    def test_no_reconnect(self):
        config = FFmpegConfig(reconnect=False, reconnect_streamed=False, reconnect_delay_max=0)

        assert config.get_before_options() == "-analyzeduration 0 -loglevel error"

    def test_from_settings(self):
        settings = AudioSettings(
            ffmpeg_executable="/usr/local/bin/ffmpeg",
            ffmpeg_loudnorm=False,
            ffmpeg_reconnect_delay_max=10,
        )

        config = FFmpegConfig.from_settings(settings)

        assert config.executable == "/usr/local/bin/ffmpeg"
        assert config.loudnorm is False
        assert "-reconnect_delay_max 10" in config.get_before_options()


class TestOpenStream:
    """Tests for open_stream()."""

    def test_creates_opus_source(self, transcoder, mock_opus):
        track = make_track("A", resolved=True)

        source = transcoder.open_stream(track)

        assert source is mock_opus.return_value
        mock_opus.assert_called_once_with(
            "https://cdn.example.com/A",
            executable="ffmpeg",
            before_options=transcoder.config.get_before_options(),
            options="-vn -filter:a loudnorm",
        )

    def test_unresolved_track_rejected(self, transcoder, mock_opus):
        with pytest.raises(PlaybackFailureError):
            transcoder.open_stream(make_track("A"))
        mock_opus.assert_not_called()

    def test_missing_executable_mapped(self, transcoder, mock_opus):
        mock_opus.side_effect = discord.ClientException("ffmpeg was not found.")

        with pytest.raises(PlaybackFailureError, match="ffmpeg was not found") as exc_info:
            transcoder.open_stream(make_track("A", resolved=True))
        assert exc_info.value.title == "A"

    def test_custom_config_wins(self, mock_opus):
        transcoder = FFmpegTranscoder(config=FFmpegConfig(executable="avconv", disable_video=False, loudnorm=False))

        transcoder.open_stream(make_track("A", resolved=True))

        kwargs = mock_opus.call_args.kwargs
        assert kwargs["executable"] == "avconv"
        assert kwargs["options"] == ""
