"""Audio command service: the operations the chat command surface invokes."""

from __future__ import annotations

import asyncio
import logging
from contextlib import nullcontext
from typing import TYPE_CHECKING

from ...domain.music.value_objects import SessionCloseReason, SkipScope
from ...domain.shared.datetime_utils import utcnow
from ...domain.shared.exceptions import (
    InvalidReferenceError,
    ResolutionErrorKind,
    TransportUnavailableError,
    UnsupportedGroupReferenceError,
)
from ...domain.shared.messages import ErrorMessages

if TYPE_CHECKING:
    from ...domain.music.entities import Requester, ResolvedReference
    from ..interfaces.audio_resolver import AudioResolver
    from ..interfaces.transport import NotificationSink, TransportFactory
    from .session_models import EnqueueResult, SessionSnapshot, SkipResult
    from .session_registry import SessionRegistry

logger = logging.getLogger(__name__)


class AudioCommandService:
    """Validates locators, resolves them, and routes commands to the guild's session.

    Only ``play`` creates sessions. Every other command is a no-op returning
    None when the guild has no live session.
    """

    def __init__(
        self,
        *,
        resolver: AudioResolver,
        registry: SessionRegistry,
        allow_playlists: bool = True,
    ) -> None:
        self._resolver = resolver
        self._registry = registry
        self._allow_playlists = allow_playlists
        # Per guild: completes once the most recently arrived play has enqueued or failed.
        self._play_turns: dict[int, asyncio.Future[None]] = {}

    def validate(self, locator: str, *, allow_groups: bool) -> None:
        """Reject unusable locators without touching the network.

        Raises:
            InvalidReferenceError: malformed URL or unsupported provider.
            UnsupportedGroupReferenceError: playlist URL where playlists are not allowed.
        """
        if not self._resolver.is_resolvable(locator):
            raise InvalidReferenceError(locator, ErrorMessages.INVALID_REFERENCE.format(locator=locator))
        if not self._resolver.is_supported_source(locator):
            raise InvalidReferenceError(
                locator,
                ErrorMessages.UNSUPPORTED_SOURCE.format(locator=locator),
                kind=ResolutionErrorKind.UNSUPPORTED,
            )
        if not allow_groups and self._resolver.is_group_reference(locator):
            raise UnsupportedGroupReferenceError(
                locator, ErrorMessages.PLAYLIST_NOT_SUPPORTED.format(locator=locator)
            )

    async def play(
        self,
        group_id: int,
        locator: str,
        requester: Requester,
        transport_factory: TransportFactory,
        notifier: NotificationSink | None = None,
        *,
        allow_groups: bool | None = None,
    ) -> EnqueueResult:
        """Resolve ``locator`` and enqueue it on the guild's session, creating it if needed.

        Raises:
            ResolutionError: invalid locator or failed lookup; no session is created.
            TransportUnavailableError: the voice connection could not be opened.

        Lookups for one guild run concurrently, but their results are enqueued
        in the order the plays arrived.
        """
        locator = locator.strip()
        self.validate(locator, allow_groups=self._allow_playlists if allow_groups is None else allow_groups)

        previous = self._play_turns.get(group_id)
        turn: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self._play_turns[group_id] = turn
        try:
            existing = self._registry.get(group_id)
            with existing.expanding() if existing is not None else nullcontext():
                resolved = await self._resolver.resolve(locator, requester, utcnow())

            if previous is not None and not previous.done():
                await asyncio.wait({previous})
            return await self._enqueue(group_id, resolved, transport_factory, notifier)
        finally:
            if not turn.done():
                turn.set_result(None)
            if self._play_turns.get(group_id) is turn:
                del self._play_turns[group_id]

    async def _enqueue(
        self,
        group_id: int,
        resolved: ResolvedReference,
        transport_factory: TransportFactory,
        notifier: NotificationSink | None,
    ) -> EnqueueResult:
        # A session can close between lookup and enqueue (e.g. inactivity); retry once.
        for _ in range(2):
            session = await self._registry.get_or_create(group_id, transport_factory, notifier)
            if session is None:
                raise TransportUnavailableError(group_id)
            result = await session.enqueue(resolved)
            if result is not None:
                return result
        raise TransportUnavailableError(group_id, ErrorMessages.TRANSPORT_NOT_READY)

    async def stop(self, group_id: int) -> bool | None:
        session = self._registry.get(group_id)
        if session is None:
            return None
        return await session.stop()

    async def skip(self, group_id: int, scope: SkipScope = SkipScope.TRACK) -> SkipResult | None:
        session = self._registry.get(group_id)
        if session is None:
            return None
        return await session.skip(scope)

    async def pause(self, group_id: int) -> bool | None:
        session = self._registry.get(group_id)
        if session is None:
            return None
        return await session.pause()

    async def resume(self, group_id: int) -> bool | None:
        session = self._registry.get(group_id)
        if session is None:
            return None
        return await session.resume()

    async def status(self, group_id: int) -> SessionSnapshot | None:
        session = self._registry.get(group_id)
        if session is None:
            return None
        return await session.snapshot()

    async def leave(self, group_id: int) -> bool:
        session = self._registry.get(group_id)
        if session is None:
            return False
        return await session.leave()

    async def handle_voice_disconnect(self, group_id: int) -> None:
        """The bot was removed from voice outside of a command."""
        session = self._registry.get(group_id)
        if session is not None:
            await session.close(SessionCloseReason.DISCONNECTED)
