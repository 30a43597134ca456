from __future__ import annotations

import asyncio
from datetime import UTC, datetime
from unittest.mock import MagicMock

import pytest

from discord_audio_bot.application.interfaces.audio_resolver import AudioResolver
from discord_audio_bot.application.interfaces.transport import AudioTranscoder, TransportSession
from discord_audio_bot.domain.music.entities import (
    PlaylistDescriptor,
    Requester,
    ResolvedReference,
    TrackDescriptor,
)
from discord_audio_bot.domain.music.value_objects import TransportStatus
from discord_audio_bot.domain.shared.exceptions import (
    PlaybackFailureError,
    ResolutionFailureError,
)

FIXED_NOW = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)

# ============================================================================
# Fakes for the session's collaborators
# ============================================================================


class FakeTransport(TransportSession):
    """In-memory transport that reports status changes synchronously."""

    def __init__(self, *, ready: bool = True) -> None:
        self.ready = ready
        self.listener = None
        self.played: list[object] = []
        self.stop_calls = 0
        self.closed = False
        self._status = TransportStatus.IDLE

    @property
    def status(self) -> TransportStatus:
        return self._status

    @property
    def is_ready(self) -> bool:
        return self.ready and not self.closed

    def set_listener(self, listener) -> None:
        self.listener = listener

    def play(self, stream) -> None:
        self.played.append(stream)
        self._set(TransportStatus.PLAYING)

    def pause(self) -> None:
        if self._status is TransportStatus.PLAYING:
            self._set(TransportStatus.PAUSED)

    def resume(self) -> None:
        if self._status is TransportStatus.PAUSED:
            self._set(TransportStatus.PLAYING)

    def stop(self) -> None:
        self.stop_calls += 1
        self._set(TransportStatus.IDLE)

    async def close(self) -> None:
        self.closed = True
        self.listener = None

    # -- test controls --

    def finish_track(self) -> None:
        """Simulate the current stream reaching its end."""
        self._set(TransportStatus.IDLE)

    def fail_track(self, error: Exception) -> None:
        if self.listener is not None:
            self.listener.on_playback_error(error)

    def lose_connection(self) -> None:
        self.ready = False
        if self.listener is not None:
            self.listener.on_connection_lost()

    def _set(self, status: TransportStatus) -> None:
        if status is self._status:
            return
        self._status = status
        if self.listener is not None:
            self.listener.on_status_change(status)


class FakeResolver(AudioResolver):
    """Resolver backed by a dict of canned results."""

    def __init__(self) -> None:
        self.results: dict[str, ResolvedReference | Exception] = {}
        self.stream_failures: set[str] = set()
        self.stream_calls: list[str] = []
        self.resolve_calls: list[str] = []
        self.gate: asyncio.Event | None = None
        self.gates: dict[str, asyncio.Event] = {}

    def is_resolvable(self, locator: str) -> bool:
        return locator.startswith("https://")

    def is_supported_source(self, locator: str) -> bool:
        return "youtube.com" in locator

    def is_group_reference(self, locator: str) -> bool:
        return "list=" in locator

    async def resolve(self, locator, requester, now) -> ResolvedReference:
        self.resolve_calls.append(locator)
        if self.gate is not None:
            await self.gate.wait()
        if locator in self.gates:
            await self.gates[locator].wait()
        result = self.results.get(locator)
        if result is None:
            raise ResolutionFailureError(locator)
        if isinstance(result, Exception):
            raise result
        return result

    async def resolve_stream_address(self, track: TrackDescriptor) -> None:
        self.stream_calls.append(track.reference)
        if track.is_resolved:
            return
        if track.reference in self.stream_failures:
            raise ResolutionFailureError(track.reference, f"gone: {track.title}")
        track.attach_stream_url(f"https://cdn.example.com/{track.title}")


class FakeTranscoder(AudioTranscoder):
    def __init__(self) -> None:
        self.failures: set[str] = set()
        self.opened: list[str] = []

    def open_stream(self, track: TrackDescriptor):
        if track.title in self.failures:
            raise PlaybackFailureError(track.title, f"ffmpeg failed for {track.title}")
        self.opened.append(track.title)
        stream = MagicMock(name=f"stream-{track.title}")
        stream.title = track.title
        return stream


class RecordingNotifier:
    def __init__(self) -> None:
        self.messages: list[str] = []

    async def __call__(self, message: str) -> None:
        self.messages.append(message)


# ============================================================================
# Builders
# ============================================================================

REQUESTER = Requester(user_id=111222333444555666, display_name="alice")


def make_track(
    title: str,
    *,
    duration: int = 10,
    resolved: bool = False,
    playlist_id: str | None = None,
    index: int = -1,
) -> TrackDescriptor:
    return TrackDescriptor(
        reference=f"https://www.youtube.com/watch?v={title}",
        stream_url=f"https://cdn.example.com/{title}" if resolved else None,
        title=title,
        duration_seconds=duration,
        requested_by=REQUESTER,
        requested_at=FIXED_NOW,
        playlist_id=playlist_id,
        playlist_index=index,
    )


def make_single(title: str, **kwargs) -> ResolvedReference:
    return ResolvedReference(tracks=[make_track(title, **kwargs)])


def make_playlist(playlist_id: str, titles: list[str], *, title: str = "Mix") -> ResolvedReference:
    tracks = [
        make_track(name, playlist_id=playlist_id, index=i)
        for i, name in enumerate(titles, start=1)
    ]
    playlist = PlaylistDescriptor(
        playlist_id=playlist_id,
        reference=f"https://www.youtube.com/playlist?list={playlist_id}",
        title=title,
        duration_seconds=sum(t.duration_seconds for t in tracks),
        requested_by=REQUESTER,
        item_count=len(tracks),
        created_at=FIXED_NOW,
    )
    return ResolvedReference(tracks=tracks, playlist=playlist)


async def settle(session, rounds: int = 10) -> None:
    """Let queued transport events drain through the session's serializer."""
    for _ in range(rounds):
        await session.snapshot()
        if len(session._serializer) == 0 and not session._serializer.is_draining:
            return


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def requester() -> Requester:
    return REQUESTER


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def resolver() -> FakeResolver:
    return FakeResolver()


@pytest.fixture
def transcoder() -> FakeTranscoder:
    return FakeTranscoder()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()
