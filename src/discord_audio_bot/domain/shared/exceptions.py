"""Base exception classes for domain-level errors."""

from __future__ import annotations

from enum import StrEnum


class DomainError(Exception):
    """Base exception for all domain-level errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__


class ResolutionErrorKind(StrEnum):
    INVALID = "invalid"
    UNSUPPORTED = "unsupported"
    GROUP_UNSUPPORTED_HERE = "group_unsupported_here"
    PROVIDER_FAILURE = "provider_failure"
    TIMEOUT = "timeout"


class ResolutionError(DomainError):
    """Raised when a locator cannot be turned into playable tracks."""

    def __init__(self, kind: ResolutionErrorKind, message: str, locator: str | None = None) -> None:
        super().__init__(message, code=f"RESOLUTION_{kind.upper()}")
        self.kind = kind
        self.locator = locator


class InvalidReferenceError(ResolutionError):
    """Raised for malformed or unsupported locators, before any network call."""

    def __init__(
        self,
        locator: str,
        message: str | None = None,
        kind: ResolutionErrorKind = ResolutionErrorKind.INVALID,
    ) -> None:
        super().__init__(kind, message or f"Invalid reference: {locator}", locator)


class UnsupportedGroupReferenceError(ResolutionError):
    """Raised when a playlist locator is used where only single items are accepted."""

    def __init__(self, locator: str, message: str | None = None) -> None:
        super().__init__(
            ResolutionErrorKind.GROUP_UNSUPPORTED_HERE,
            message or f"Playlists are not supported here: {locator}",
            locator,
        )


class ResolutionFailureError(ResolutionError):
    """Raised when metadata or stream-address lookup fails or times out."""

    def __init__(
        self,
        locator: str,
        message: str | None = None,
        kind: ResolutionErrorKind = ResolutionErrorKind.PROVIDER_FAILURE,
    ) -> None:
        super().__init__(kind, message or f"Failed to resolve: {locator}", locator)

    @property
    def timed_out(self) -> bool:
        return self.kind == ResolutionErrorKind.TIMEOUT


class TransportUnavailableError(DomainError):
    """Raised when a voice connection could not be opened or is not ready."""

    def __init__(self, channel: str | int, message: str | None = None) -> None:
        msg = message or f"Voice transport unavailable for channel {channel}"
        super().__init__(msg, code="TRANSPORT_UNAVAILABLE")
        self.channel = channel


class PlaybackFailureError(DomainError):
    """Raised when the transcoder or audio sink fails for the current track."""

    def __init__(self, title: str, message: str | None = None) -> None:
        msg = message or f"Playback failed for '{title}'"
        super().__init__(msg, code="PLAYBACK_FAILURE")
        self.title = title
