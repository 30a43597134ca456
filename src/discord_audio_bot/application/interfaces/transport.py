"""Port interfaces for the voice transport and the audio transcoder."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from ...domain.music.entities import TrackDescriptor
    from ...domain.music.value_objects import TransportStatus


class AudioStream(Protocol):
    """A decodable audio byte stream handed to the transport."""

    def cleanup(self) -> None: ...


class TransportListener(Protocol):
    """Receives events from a transport session on the event loop."""

    def on_status_change(self, status: "TransportStatus") -> None: ...

    def on_playback_error(self, error: Exception) -> None: ...

    def on_connection_lost(self) -> None: ...


class TransportSession(ABC):
    """One live voice connection and its audio sink."""

    @property
    @abstractmethod
    def status(self) -> "TransportStatus":
        ...

    @property
    @abstractmethod
    def is_ready(self) -> bool:
        """Whether the connection is up and able to accept audio."""
        ...

    @abstractmethod
    def set_listener(self, listener: TransportListener | None) -> None:
        ...

    @abstractmethod
    def play(self, stream: AudioStream) -> None:
        """Start sending ``stream``; emits PLAYING and later IDLE when it ends."""
        ...

    @abstractmethod
    def pause(self) -> None:
        ...

    @abstractmethod
    def resume(self) -> None:
        ...

    @abstractmethod
    def stop(self) -> None:
        """Stop the current stream; emits IDLE if something was playing."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Disconnect without emitting further events. Safe to call twice."""
        ...


class AudioTranscoder(ABC):
    """Turns a resolved stream URL into an :class:`AudioStream`."""

    @abstractmethod
    def open_stream(self, track: "TrackDescriptor") -> AudioStream:
        """Raises PlaybackFailureError if the stream cannot be started."""
        ...


TransportFactory = Callable[[], Awaitable[TransportSession]]
"""Opens a transport for one voice channel; raises TransportUnavailableError."""

NotificationSink = Callable[[str], Awaitable[None]]
"""Delivers free-text status messages to the channel that issued the last command."""
