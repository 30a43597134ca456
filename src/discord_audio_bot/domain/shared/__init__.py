"""
Shared Domain Kernel

Exceptions, constrained field types, and message constants used by every layer.
"""

from discord_audio_bot.domain.shared.exceptions import (
    DomainError,
    InvalidReferenceError,
    PlaybackFailureError,
    ResolutionError,
    ResolutionErrorKind,
    ResolutionFailureError,
    TransportUnavailableError,
    UnsupportedGroupReferenceError,
)

__all__ = [
    "DomainError",
    "ResolutionError",
    "ResolutionErrorKind",
    "InvalidReferenceError",
    "UnsupportedGroupReferenceError",
    "ResolutionFailureError",
    "TransportUnavailableError",
    "PlaybackFailureError",
]
