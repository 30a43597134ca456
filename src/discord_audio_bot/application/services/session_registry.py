"""Process-wide map from guild to its live playback session."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from ...domain.music.value_objects import SessionCloseReason
from ...domain.shared.exceptions import TransportUnavailableError
from ...domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from ..interfaces.transport import NotificationSink, TransportFactory, TransportSession
    from .playback_session import PlaybackSession

logger = logging.getLogger(__name__)

SessionFactory = Callable[..., "PlaybackSession"]
"""Called as ``factory(group_id, transport, notifier=..., on_closed=...)``."""


class SessionRegistry:
    """Holds at most one live :class:`PlaybackSession` per guild.

    Creation is atomic per guild: concurrent callers for a guild with no
    session share one transport open and receive the same session.
    """

    def __init__(self, session_factory: SessionFactory) -> None:
        self._session_factory = session_factory
        self._sessions: dict[int, PlaybackSession] = {}
        self._pending: dict[int, asyncio.Future[PlaybackSession | None]] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, group_id: object) -> bool:
        return group_id in self._sessions

    def get(self, group_id: int) -> PlaybackSession | None:
        session = self._sessions.get(group_id)
        if session is None or session.is_closed:
            return None
        return session

    async def get_or_create(
        self,
        group_id: int,
        transport_factory: TransportFactory,
        notifier: NotificationSink | None = None,
    ) -> PlaybackSession | None:
        """Return the live session for ``group_id``, opening a transport if needed.

        Returns None, leaving the registry untouched, when the transport
        cannot be opened.
        """
        session = self.get(group_id)
        if session is not None:
            if notifier is not None:
                session.set_notifier(notifier)
            return session

        pending = self._pending.get(group_id)
        if pending is not None:
            logger.debug(LogTemplates.SESSION_JOINING_PENDING, group_id)
            session = await asyncio.shield(pending)
            if session is not None and notifier is not None:
                session.set_notifier(notifier)
            return session

        fut: asyncio.Future[PlaybackSession | None] = asyncio.get_running_loop().create_future()
        self._pending[group_id] = fut
        session = None
        try:
            session = await self._create(group_id, transport_factory, notifier)
        finally:
            self._pending.pop(group_id, None)
            if not fut.done():
                fut.set_result(session)
        return session

    async def _create(
        self,
        group_id: int,
        transport_factory: TransportFactory,
        notifier: NotificationSink | None,
    ) -> PlaybackSession | None:
        try:
            transport: TransportSession = await transport_factory()
        except TransportUnavailableError as exc:
            logger.warning(LogTemplates.SESSION_OPEN_FAILED, group_id, exc.message)
            return None
        except Exception as exc:
            logger.exception(LogTemplates.SESSION_OPEN_FAILED, group_id, exc)
            return None

        session = self._session_factory(group_id, transport, notifier=notifier, on_closed=self._on_session_closed)
        self._sessions[group_id] = session
        logger.info(LogTemplates.SESSION_CREATED, group_id)
        return session

    def _on_session_closed(self, session: PlaybackSession) -> None:
        self.remove(session.group_id, session)

    def remove(self, group_id: int, session: PlaybackSession | None = None) -> None:
        """Forget the session for ``group_id``; only if it is ``session`` when one is given."""
        current = self._sessions.get(group_id)
        if current is None:
            return
        if session is not None and current is not session:
            return
        del self._sessions[group_id]

    async def close_all(self, reason: SessionCloseReason = SessionCloseReason.SHUTDOWN) -> None:
        sessions = list(self._sessions.values())
        results = await asyncio.gather(
            *(session.close(reason) for session in sessions), return_exceptions=True
        )
        for session, result in zip(sessions, results):
            if isinstance(result, Exception):
                logger.error(LogTemplates.SESSION_CLOSE_ERROR, session.group_id, exc_info=result)
        self._sessions.clear()
