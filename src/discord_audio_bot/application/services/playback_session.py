"""Playback session: the queue and state machine for one voice channel."""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from functools import partial
from typing import TYPE_CHECKING

from ...domain.music.value_objects import (
    InactivityKind,
    PlaybackStatus,
    SessionCloseReason,
    SkipScope,
    TransportStatus,
)
from ...domain.shared.exceptions import PlaybackFailureError, ResolutionError
from ...domain.shared.messages import DiscordUIMessages, LogTemplates
from .command_serializer import CommandSerializer
from .session_models import EnqueueResult, SessionSnapshot, SkipResult

if TYPE_CHECKING:
    from ...domain.music.entities import PlaylistDescriptor, ResolvedReference, TrackDescriptor
    from ..interfaces.audio_resolver import AudioResolver
    from ..interfaces.transport import AudioTranscoder, NotificationSink, TransportSession

logger = logging.getLogger(__name__)

DEFAULT_IDLE_TIMEOUT = 5 * 60.0
DEFAULT_PAUSE_TIMEOUT = 10 * 60.0


class PlaybackSession:
    """Owns the queue, current track, and player status of one voice channel.

    Every command runs through a :class:`CommandSerializer`, so command bodies
    never interleave. Transport events are fed back through the same
    serializer. After each state change the session reconciles: it drops
    playlists nothing refers to any more, starts the queue head when idle,
    prefetches the stream for the track after it, and arms or disarms the
    inactivity timer.
    """

    def __init__(
        self,
        group_id: int,
        transport: TransportSession,
        *,
        resolver: AudioResolver,
        transcoder: AudioTranscoder,
        notifier: NotificationSink | None = None,
        on_closed: Callable[[PlaybackSession], None] | None = None,
        idle_timeout: float = DEFAULT_IDLE_TIMEOUT,
        pause_timeout: float = DEFAULT_PAUSE_TIMEOUT,
    ) -> None:
        self.group_id = group_id
        self._transport = transport
        self._resolver = resolver
        self._transcoder = transcoder
        self._notifier = notifier
        self._on_closed = on_closed
        self._timeouts = {
            InactivityKind.IDLE: idle_timeout,
            InactivityKind.PAUSE: pause_timeout,
        }

        self._serializer = CommandSerializer(name=f"session-{group_id}")
        self._queue: deque[TrackDescriptor] = deque()
        self._current: TrackDescriptor | None = None
        self._playlists: dict[str, PlaylistDescriptor] = {}
        self._status = PlaybackStatus.IDLE
        self._pending_expansions = 0

        self._timer: asyncio.Task[None] | None = None
        self._timer_kind: InactivityKind | None = None
        self._prefetch: asyncio.Task[None] | None = None
        self._prefetch_target: TrackDescriptor | None = None
        self._close_task: asyncio.Task[None] | None = None
        self._closed = False

        transport.set_listener(self)

    # ── Introspection ───────────────────────────────────────────────

    @property
    def status(self) -> PlaybackStatus:
        return self._status

    @property
    def current(self) -> TrackDescriptor | None:
        return self._current

    @property
    def queue(self) -> tuple[TrackDescriptor, ...]:
        return tuple(self._queue)

    @property
    def playlists(self) -> dict[str, PlaylistDescriptor]:
        return dict(self._playlists)

    @property
    def armed_timer(self) -> InactivityKind | None:
        if self._timer is None or self._timer.done():
            return None
        return self._timer_kind

    @property
    def is_closed(self) -> bool:
        return self._closed

    def set_notifier(self, notifier: NotificationSink | None) -> None:
        """Route future notifications to the surface that issued the latest command."""
        self._notifier = notifier

    @contextmanager
    def expanding(self) -> Iterator[None]:
        """Mark a playlist or track lookup in progress for this session.

        The idle timer stays disarmed while any lookup is pending.
        """
        self._pending_expansions += 1
        if self._timer_kind is InactivityKind.IDLE:
            self._disarm_timer()
        try:
            yield
        finally:
            self._pending_expansions -= 1
            if self._pending_expansions == 0 and not self._closed:
                self._serializer.submit_nowait(self._refresh_timers)

    # ── Commands ────────────────────────────────────────────────────

    async def enqueue(self, resolved: ResolvedReference) -> EnqueueResult | None:
        """Append resolved tracks; returns None if the session already closed."""
        return await self._serializer.submit(partial(self._enqueue, resolved))

    async def pause(self) -> bool:
        return await self._serializer.submit(self._pause)

    async def resume(self) -> bool:
        return await self._serializer.submit(self._resume)

    async def stop(self) -> bool:
        return await self._serializer.submit(self._stop)

    async def skip(self, scope: SkipScope = SkipScope.TRACK) -> SkipResult | None:
        return await self._serializer.submit(partial(self._skip, scope))

    async def snapshot(self) -> SessionSnapshot:
        return await self._serializer.submit(self._snapshot)

    async def leave(self) -> bool:
        return await self._serializer.submit(partial(self._close_action, SessionCloseReason.LEFT))

    async def close(self, reason: SessionCloseReason = SessionCloseReason.DESTROYED) -> None:
        """Tear the session down immediately, without waiting for queued commands."""
        await self._close(reason)

    # ── Command bodies (run inside the serializer) ─────────────────

    async def _enqueue(self, resolved: ResolvedReference) -> EnqueueResult | None:
        if self._closed:
            return None

        if resolved.playlist is not None:
            self._playlists[resolved.playlist.playlist_id] = resolved.playlist
        position = len(self._queue) + 1
        self._queue.extend(resolved.tracks)
        logger.info(LogTemplates.SESSION_ENQUEUED, len(resolved.tracks), self.group_id, len(self._queue))

        await self._reconcile()

        if self._current is resolved.first:
            position = 0
        else:
            position = next(
                (i for i, track in enumerate(self._queue, start=1) if track is resolved.first),
                position,
            )
        return EnqueueResult(resolved=resolved, position=position, queue_length=len(self._queue))

    async def _pause(self) -> bool:
        if self._closed or not self._status.can_transition_to(PlaybackStatus.PAUSED):
            return False
        self._transport.pause()
        self._status = PlaybackStatus.PAUSED
        logger.info(LogTemplates.PLAYBACK_PAUSED, self.group_id)
        self._apply_timers()
        return True

    async def _resume(self) -> bool:
        if self._closed or self._status is not PlaybackStatus.PAUSED:
            return False
        self._transport.resume()
        self._status = PlaybackStatus.PLAYING
        logger.info(LogTemplates.PLAYBACK_RESUMED, self.group_id)
        self._apply_timers()
        return True

    async def _stop(self) -> bool:
        if self._closed:
            return False
        self._queue.clear()
        self._current = None
        self._status = PlaybackStatus.IDLE
        self._cancel_prefetch()
        self._transport.stop()
        logger.info(LogTemplates.PLAYBACK_STOPPED, self.group_id)
        await self._reconcile()
        return True

    async def _skip(self, scope: SkipScope) -> SkipResult | None:
        if self._closed or self._current is None:
            return None

        skipped = self._current
        playlist = self._playlists.get(skipped.playlist_id) if skipped.playlist_id else None
        applied = SkipScope.TRACK
        dropped = 0
        if scope is SkipScope.GROUP and skipped.playlist_id is not None:
            applied = SkipScope.GROUP
            kept = [track for track in self._queue if track.playlist_id != skipped.playlist_id]
            dropped = len(self._queue) - len(kept)
            self._queue = deque(kept)

        self._current = None
        self._status = PlaybackStatus.IDLE
        self._transport.stop()
        logger.info(LogTemplates.TRACK_SKIPPED, skipped.title, self.group_id, applied, dropped)

        await self._reconcile()
        return SkipResult(
            skipped=skipped,
            scope=applied,
            dropped=dropped,
            playlist=playlist,
            next_track=self._current,
        )

    async def _snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            status=self._status,
            current=self._current,
            upcoming=list(self._queue),
            playlists=list(self._playlists.values()),
        )

    async def _close_action(self, reason: SessionCloseReason) -> bool:
        if self._closed:
            return False
        await self._close(reason)
        return True

    async def _refresh_timers(self) -> None:
        if not self._closed:
            self._apply_timers()

    # ── Reconciliation ──────────────────────────────────────────────

    async def _reconcile(self) -> None:
        self._prune_playlists()
        while (
            not self._closed
            and self._status is PlaybackStatus.IDLE
            and self._queue
            and self._transport.is_ready
        ):
            track = self._queue.popleft()
            self._current = track
            if await self._start(track):
                break
            if self._current is track:
                self._current = None
        self._prune_playlists()
        self._apply_timers()

    async def _start(self, track: TrackDescriptor) -> bool:
        """Resolve, transcode, and play ``track``; False if it had to be dropped."""
        try:
            await self._await_prefetch(track)
            if not track.is_resolved:
                await self._resolver.resolve_stream_address(track)
        except ResolutionError as exc:
            logger.warning(LogTemplates.TRACK_DROPPED, track.title, self.group_id, exc.message)
            await self._notify(DiscordUIMessages.PLAYER_ERROR.format(error=exc.message))
            return False

        if self._closed:
            return False

        try:
            stream = self._transcoder.open_stream(track)
            self._transport.play(stream)
        except PlaybackFailureError as exc:
            logger.warning(LogTemplates.TRACK_DROPPED, track.title, self.group_id, exc.message)
            await self._notify(DiscordUIMessages.PLAYER_ERROR.format(error=exc.message))
            return False

        self._status = PlaybackStatus.PLAYING
        logger.info(LogTemplates.PLAYBACK_STARTED, track.title, self.group_id)
        self._start_prefetch()
        await self._notify(self._now_playing_message(track))
        return True

    def _prune_playlists(self) -> None:
        live = {track.playlist_id for track in self._queue if track.playlist_id}
        if self._current is not None and self._current.playlist_id:
            live.add(self._current.playlist_id)
        for playlist_id in [pid for pid in self._playlists if pid not in live]:
            del self._playlists[playlist_id]
            logger.debug(LogTemplates.PLAYLIST_PRUNED, playlist_id, self.group_id)

    def _now_playing_message(self, track: TrackDescriptor) -> str:
        playlist = self._playlists.get(track.playlist_id) if track.playlist_id else None
        if playlist is not None:
            return DiscordUIMessages.NOW_PLAYING_PLAYLIST.format(
                playlist_title=playlist.title,
                count=playlist.item_count,
                duration=playlist.display_duration,
                index=track.playlist_index,
                title=track.title,
            )
        return DiscordUIMessages.NOW_PLAYING.format(
            title=track.title, duration=track.display_duration, url=track.reference
        )

    # ── Prefetch ────────────────────────────────────────────────────

    def _start_prefetch(self) -> None:
        head = self._queue[0] if self._queue else None
        if head is None or head.is_resolved:
            return
        if head is self._prefetch_target and self._prefetch is not None and not self._prefetch.done():
            return
        self._cancel_prefetch()
        self._prefetch_target = head
        self._prefetch = asyncio.create_task(
            self._prefetch_stream(head), name=f"session-{self.group_id}-prefetch"
        )

    async def _prefetch_stream(self, track: TrackDescriptor) -> None:
        logger.debug(LogTemplates.PREFETCH_STARTED, track.title, self.group_id)
        try:
            await self._resolver.resolve_stream_address(track)
        except ResolutionError as exc:
            # Retried when the track reaches the head of the queue.
            logger.debug(LogTemplates.PREFETCH_FAILED, track.title, self.group_id, exc.message)

    async def _await_prefetch(self, track: TrackDescriptor) -> None:
        if track is not self._prefetch_target or self._prefetch is None:
            return
        if not self._prefetch.done():
            await asyncio.wait({self._prefetch})
        self._prefetch = None
        self._prefetch_target = None

    def _cancel_prefetch(self) -> None:
        if self._prefetch is not None and not self._prefetch.done():
            self._prefetch.cancel()
        self._prefetch = None
        self._prefetch_target = None

    # ── Inactivity timers ───────────────────────────────────────────

    def _apply_timers(self) -> None:
        if self._closed:
            return
        if self._status is PlaybackStatus.PLAYING:
            self._disarm_timer()
        elif self._status is PlaybackStatus.PAUSED:
            self._arm_timer(InactivityKind.PAUSE)
        elif not self._queue and self._current is None and self._pending_expansions == 0:
            self._arm_timer(InactivityKind.IDLE)
        else:
            self._disarm_timer()

    def _arm_timer(self, kind: InactivityKind) -> None:
        if self.armed_timer is kind:
            return
        self._disarm_timer()
        timeout = self._timeouts[kind]
        self._timer_kind = kind
        self._timer = asyncio.create_task(
            self._run_timer(kind, timeout), name=f"session-{self.group_id}-{kind}-timer"
        )
        logger.debug(LogTemplates.TIMER_ARMED, kind, timeout, self.group_id)

    def _disarm_timer(self) -> None:
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
            logger.debug(LogTemplates.TIMER_DISARMED, self._timer_kind, self.group_id)
        self._timer = None
        self._timer_kind = None

    async def _run_timer(self, kind: InactivityKind, timeout: float) -> None:
        await asyncio.sleep(timeout)
        # Cancelling this task while the expiry is still queued drops the expiry.
        await self._serializer.submit(partial(self._expire, kind))

    async def _expire(self, kind: InactivityKind) -> None:
        if self._closed or self._timer_kind is not kind:
            return
        logger.info(LogTemplates.TIMER_FIRED, kind, self.group_id)
        minutes = f"{self._timeouts[kind] / 60:g}"
        await self._notify(DiscordUIMessages.INACTIVITY_DISCONNECT.format(state=kind.value, minutes=minutes))
        await self._close(SessionCloseReason.for_inactivity(kind))

    # ── Transport events ────────────────────────────────────────────

    def on_status_change(self, status: TransportStatus) -> None:
        if not self._closed:
            self._serializer.submit_nowait(partial(self._handle_transport_status, status))

    def on_playback_error(self, error: Exception) -> None:
        if not self._closed:
            self._serializer.submit_nowait(partial(self._handle_playback_error, error))

    def on_connection_lost(self) -> None:
        if not self._closed and self._close_task is None:
            self._close_task = asyncio.get_running_loop().create_task(
                self._close(SessionCloseReason.DISCONNECTED)
            )

    async def _handle_transport_status(self, status: TransportStatus) -> None:
        if self._closed:
            return
        if status is TransportStatus.IDLE:
            if self._transport.status is not TransportStatus.IDLE:
                # A newer track already started.
                return
            if self._current is not None:
                logger.debug(LogTemplates.TRACK_ENDED, self.group_id)
            self._current = None
            self._status = PlaybackStatus.IDLE
            await self._reconcile()
        elif status is TransportStatus.PAUSED:
            self._apply_timers()
        elif status.is_transient:
            # Buffering and auto-pause only clear timers; playback state is unchanged.
            self._disarm_timer()
        elif self._current is not None:
            self._disarm_timer()

    async def _handle_playback_error(self, error: Exception) -> None:
        if self._closed:
            return
        logger.warning(LogTemplates.PLAYBACK_ERROR, self.group_id, error)
        await self._notify(DiscordUIMessages.PLAYER_ERROR.format(error=error))
        self._transport.stop()

    # ── Teardown ────────────────────────────────────────────────────

    async def _close(self, reason: SessionCloseReason) -> None:
        if self._closed:
            return
        self._closed = True
        self._disarm_timer()
        self._cancel_prefetch()
        self._queue.clear()
        self._current = None
        self._playlists.clear()
        self._status = PlaybackStatus.IDLE

        self._transport.set_listener(None)
        try:
            await self._transport.close()
        except Exception:
            logger.exception(LogTemplates.SESSION_CLOSE_ERROR, self.group_id)

        logger.info(LogTemplates.SESSION_CLOSED, self.group_id, reason)
        if self._on_closed is not None:
            self._on_closed(self)

    async def _notify(self, message: str) -> None:
        if self._notifier is None:
            return
        try:
            await self._notifier(message)
        except Exception:
            logger.warning(LogTemplates.SESSION_NOTIFY_FAILED, self.group_id, exc_info=True)
