"""Per-session FIFO executor for mutating commands."""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from ...domain.shared.messages import LogTemplates

logger = logging.getLogger(__name__)

T = TypeVar("T")

Action = Callable[[], Awaitable[Any]]


class CommandSerializer:
    """Runs submitted actions one at a time, in submission order.

    Actions are drained by a single background task that exists only while
    there is work. A failing action is logged and reported to its submitter;
    the remaining actions still run. Cancelling a submitter before its
    action starts removes the action from the queue.
    """

    def __init__(self, name: str = "serializer") -> None:
        self._name = name
        self._pending: deque[tuple[Action, asyncio.Future[Any] | None]] = deque()
        self._drainer: asyncio.Task[None] | None = None

    @property
    def is_draining(self) -> bool:
        return self._drainer is not None and not self._drainer.done()

    def __len__(self) -> int:
        return len(self._pending)

    async def submit(self, action: Callable[[], Awaitable[T]]) -> T:
        """Queue ``action`` and wait for its result."""
        fut: asyncio.Future[T] = asyncio.get_running_loop().create_future()
        self._pending.append((action, fut))
        self._ensure_draining()
        return await fut

    def submit_nowait(self, action: Action) -> None:
        """Queue ``action`` without waiting; failures are only logged."""
        self._pending.append((action, None))
        self._ensure_draining()

    def _ensure_draining(self) -> None:
        if not self.is_draining:
            self._drainer = asyncio.get_running_loop().create_task(
                self._drain(), name=f"{self._name}-drain"
            )

    async def _drain(self) -> None:
        while self._pending:
            action, fut = self._pending.popleft()
            if fut is not None and fut.done():
                # Submitter went away before the action started.
                continue
            try:
                result = await action()
            except asyncio.CancelledError:
                if fut is not None:
                    fut.cancel()
                raise
            except Exception as exc:
                logger.exception(LogTemplates.COMMAND_FAILED)
                if fut is not None and not fut.done():
                    fut.set_exception(exc)
            else:
                if fut is not None and not fut.done():
                    fut.set_result(result)
