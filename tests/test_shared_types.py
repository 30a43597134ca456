"""Unit tests for domain/shared/types.py: Pydantic Annotated type constraints."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta, timezone

import pytest
from pydantic import BaseModel, ValidationError

from discord_audio_bot.domain.shared.types import (
    DiscordSnowflake,
    DurationSeconds,
    HttpUrlStr,
    NonEmptyStr,
    PlaylistIndex,
    PreviewLimit,
    TimeoutSeconds,
    UtcDatetimeField,
)


def _model_for(annotation, field_name: str = "v"):
    """Dynamically create a Pydantic model with a single field of the given type."""
    return type("M", (BaseModel,), {"__annotations__": {field_name: annotation}})


# ── DiscordSnowflake ────────────────────────────────────────────────


class TestDiscordSnowflake:
    M = _model_for(DiscordSnowflake)

    def test_valid_snowflake(self):
        assert self.M(v=2**64 - 1).v == 2**64 - 1

    @pytest.mark.parametrize("value", [0, -1, 2**64])
    def test_out_of_range_rejected(self, value):
        with pytest.raises(ValidationError):
            self.M(v=value)


# ── Durations and playlist positions ────────────────────────────────


class TestDurationSeconds:
    M = _model_for(DurationSeconds)

    def test_zero_allowed(self):
        assert self.M(v=0).v == 0

    def test_long_livestream_allowed(self):
        assert self.M(v=200_000).v == 200_000

    def test_negative_rejected(self):
        with pytest.raises(ValidationError):
            self.M(v=-1)


class TestPlaylistIndex:
    M = _model_for(PlaylistIndex)

    def test_not_in_playlist_sentinel(self):
        assert self.M(v=-1).v == -1

    def test_position_allowed(self):
        assert self.M(v=12).v == 12

    def test_below_sentinel_rejected(self):
        with pytest.raises(ValidationError):
            self.M(v=-2)


# ── Strings ─────────────────────────────────────────────────────────


class TestNonEmptyStr:
    M = _model_for(NonEmptyStr)

    def test_empty_rejected(self):
        with pytest.raises(ValidationError):
            self.M(v="")

    def test_single_char(self):
        assert self.M(v="a").v == "a"


class TestHttpUrlStr:
    M = _model_for(HttpUrlStr)

    def test_https_valid(self):
        assert self.M(v="https://rr1.googlevideo.com/x").v == "https://rr1.googlevideo.com/x"

    @pytest.mark.parametrize("value", ["example.com", "ftp://example.com", "file:///etc/passwd"])
    def test_other_schemes_rejected(self, value):
        with pytest.raises(ValidationError):
            self.M(v=value)


# ── Settings constraints ───────────────────────────────────────────


class TestTimeoutSeconds:
    M = _model_for(TimeoutSeconds)

    def test_fractional_allowed(self):
        assert self.M(v=0.5).v == 0.5

    def test_upper_bound_inclusive(self):
        assert self.M(v=3600).v == 3600

    @pytest.mark.parametrize("value", [0, -5, 3600.1])
    def test_out_of_range_rejected(self, value):
        with pytest.raises(ValidationError):
            self.M(v=value)


class TestPreviewLimit:
    M = _model_for(PreviewLimit)

    def test_bounds(self):
        assert self.M(v=1).v == 1
        assert self.M(v=25).v == 25

    @pytest.mark.parametrize("value", [0, 26])
    def test_out_of_range_rejected(self, value):
        with pytest.raises(ValidationError):
            self.M(v=value)


# ── UtcDatetimeField ───────────────────────────────────────────────


class TestUtcDatetimeField:
    M = _model_for(UtcDatetimeField)

    def test_utc_datetime_passes(self):
        dt = datetime(2024, 1, 1, tzinfo=UTC)
        assert self.M(v=dt).v == dt

    def test_non_utc_timezone_normalised(self):
        eastern = timezone(timedelta(hours=-5))
        result = self.M(v=datetime(2024, 1, 1, 12, 0, tzinfo=eastern)).v

        assert result.tzinfo == UTC
        assert result.hour == 17

    def test_naive_datetime_rejected(self):
        with pytest.raises(ValidationError):
            self.M(v=datetime(2024, 1, 1))
