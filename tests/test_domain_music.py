"""
Unit Tests for the Music Domain

Tests for:
- TrackDescriptor playlist membership rules and stream URL attachment
- PlaylistDescriptor and ResolvedReference shape validation
- Value object transitions
- Duration formatting
"""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from conftest import REQUESTER, make_playlist, make_track
from discord_audio_bot.domain.music.entities import (
    PlaylistDescriptor,
    Requester,
    ResolvedReference,
    TrackDescriptor,
)
from discord_audio_bot.domain.music.value_objects import (
    InactivityKind,
    PlaybackStatus,
    SessionCloseReason,
    TransportStatus,
)
from discord_audio_bot.domain.shared.datetime_utils import format_duration
from discord_audio_bot.domain.shared.exceptions import (
    InvalidReferenceError,
    ResolutionErrorKind,
    ResolutionFailureError,
    UnsupportedGroupReferenceError,
)

# =============================================================================
# TrackDescriptor
# =============================================================================


class TestTrackDescriptor:
    """Tests for TrackDescriptor validation."""

    def test_defaults(self):
        track = TrackDescriptor(reference="https://youtu.be/x", requested_by=REQUESTER)

        assert track.title == "Unknown Title"
        assert track.uploader == "Unknown"
        assert track.duration_seconds == 0
        assert track.playlist_index == -1
        assert not track.in_playlist
        assert not track.is_resolved
        assert track.requested_at.tzinfo is not None

    def test_playlist_member_needs_index(self):
        with pytest.raises(ValidationError, match="must have a playlist index"):
            make_track("a", playlist_id="PL1", index=-1)

    def test_index_without_playlist_rejected(self):
        with pytest.raises(ValidationError, match="must belong to a playlist"):
            make_track("a", index=3)

    def test_negative_duration_rejected(self):
        with pytest.raises(ValidationError):
            make_track("a", duration=-1)

    def test_naive_timestamp_rejected(self):
        with pytest.raises(ValidationError):
            TrackDescriptor(
                reference="https://youtu.be/x", requested_by=REQUESTER, requested_at=datetime(2024, 1, 1)
            )

    def test_timestamp_normalised_to_utc(self):
        plus_two = timezone(timedelta(hours=2))
        track = TrackDescriptor(
            reference="https://youtu.be/x",
            requested_by=REQUESTER,
            requested_at=datetime(2024, 1, 1, 14, 0, tzinfo=plus_two),
        )

        assert track.requested_at.hour == 12

    def test_attach_stream_url_once(self):
        track = make_track("a")

        track.attach_stream_url("https://cdn/1")
        track.attach_stream_url("https://cdn/2")

        assert track.stream_url == "https://cdn/1"
        assert track.is_resolved

    def test_non_http_stream_rejected(self):
        track = make_track("a")

        with pytest.raises(ValidationError):
            track.attach_stream_url("file:///etc/passwd")

    def test_metadata_is_frozen(self):
        track = make_track("a")

        with pytest.raises(ValidationError):
            track.title = "changed"

    def test_display_duration(self):
        assert make_track("a", duration=3725).display_duration == "1:02:05"


# =============================================================================
# ResolvedReference
# =============================================================================


class TestResolvedReference:
    """Tests for ResolvedReference shape rules."""

    def test_single_track(self):
        resolved = ResolvedReference(tracks=[make_track("a", duration=42)])

        assert not resolved.is_playlist
        assert resolved.duration_seconds == 42

    def test_single_requires_exactly_one(self):
        with pytest.raises(ValidationError, match="exactly one track"):
            ResolvedReference(tracks=[make_track("a"), make_track("b")])

    def test_playlist(self):
        resolved = make_playlist("PL1", ["a", "b", "c"])

        assert resolved.is_playlist
        assert resolved.playlist.item_count == 3
        assert resolved.duration_seconds == 30
        assert resolved.first.title == "a"

    def test_count_mismatch_rejected(self):
        good = make_playlist("PL1", ["a", "b"])
        playlist = good.playlist.model_copy(update={"item_count": 3})

        with pytest.raises(ValidationError, match="declares 3 items"):
            ResolvedReference(tracks=good.tracks, playlist=playlist)

    def test_foreign_member_rejected(self):
        good = make_playlist("PL1", ["a"])

        with pytest.raises(ValidationError, match="does not belong"):
            ResolvedReference(tracks=[make_track("x", playlist_id="PL2", index=1)], playlist=good.playlist)

    def test_playlist_descriptor_display_duration(self):
        playlist = PlaylistDescriptor(
            playlist_id="PL", reference="https://y", requested_by=REQUESTER, item_count=0, duration_seconds=61
        )

        assert playlist.display_duration == "1:01"


# =============================================================================
# Requester
# =============================================================================


class TestRequester:
    def test_str_is_display_name(self):
        assert str(Requester(user_id=1, display_name="bob")) == "bob"

    def test_invalid_snowflake(self):
        with pytest.raises(ValidationError):
            Requester(user_id=0, display_name="bob")


# =============================================================================
# Value objects
# =============================================================================


class TestValueObjects:
    """Tests for enums and their helpers."""

    @pytest.mark.parametrize(
        ("source", "target", "allowed"),
        [
            (PlaybackStatus.IDLE, PlaybackStatus.PLAYING, True),
            (PlaybackStatus.PLAYING, PlaybackStatus.PAUSED, True),
            (PlaybackStatus.PAUSED, PlaybackStatus.PLAYING, True),
            (PlaybackStatus.IDLE, PlaybackStatus.PAUSED, False),
        ],
    )
    def test_playback_transitions(self, source, target, allowed):
        assert source.can_transition_to(target) is allowed

    def test_close_reason_for_inactivity(self):
        assert SessionCloseReason.for_inactivity(InactivityKind.IDLE) is SessionCloseReason.IDLE_TIMEOUT
        assert SessionCloseReason.for_inactivity(InactivityKind.PAUSE) is SessionCloseReason.PAUSE_TIMEOUT

    def test_transient_transport_statuses(self):
        assert TransportStatus.BUFFERING.is_transient
        assert not TransportStatus.IDLE.is_transient


# =============================================================================
# Errors and formatting
# =============================================================================


class TestResolutionErrors:
    def test_codes(self):
        assert InvalidReferenceError("x").code == "RESOLUTION_INVALID"
        assert UnsupportedGroupReferenceError("x").kind is ResolutionErrorKind.GROUP_UNSUPPORTED_HERE
        assert ResolutionFailureError("x", kind=ResolutionErrorKind.TIMEOUT).timed_out


@pytest.mark.parametrize(
    ("seconds", "expected"),
    [(None, "0:00"), (0, "0:00"), (-5, "0:00"), (59, "0:59"), (61, "1:01"), (3600, "1:00:00")],
)
def test_format_duration(seconds, expected):
    assert format_duration(seconds) == expected
