"""Port interface for turning user-supplied locators into track descriptors."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ...domain.music.entities import Requester, ResolvedReference, TrackDescriptor


class AudioResolver(ABC):
    """Resolution gateway for the one supported audio provider.

    The three classifiers are pure and cheap so callers can reject bad
    locators before paying for a network round trip.
    """

    @abstractmethod
    def is_resolvable(self, locator: str) -> bool:
        """Whether the locator is a syntactically plausible remote reference."""
        ...

    @abstractmethod
    def is_supported_source(self, locator: str) -> bool:
        """Whether the locator belongs to the supported provider."""
        ...

    @abstractmethod
    def is_group_reference(self, locator: str) -> bool:
        """Whether the locator denotes a playlist rather than a single item."""
        ...

    @abstractmethod
    async def resolve(self, locator: str, requester: "Requester", now: datetime) -> "ResolvedReference":
        """Resolve a locator into one track, or a playlist and its ordered members.

        Raises:
            ResolutionError: for invalid, unsupported, failed, or timed out lookups.
        """
        ...

    @abstractmethod
    async def resolve_stream_address(self, track: "TrackDescriptor") -> None:
        """Populate ``track.stream_url``; a no-op when it is already set.

        Raises:
            ResolutionFailureError: when the lookup fails or times out.
        """
        ...
