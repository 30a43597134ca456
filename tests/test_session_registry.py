"""
Unit Tests for SessionRegistry

Tests for:
- Atomic per-guild creation under concurrent callers
- Registry left unchanged when the transport cannot be opened
- Removal when a session closes
- Shutdown closing every live session
"""

import asyncio
from functools import partial

import pytest

from conftest import FakeTransport, make_single
from discord_audio_bot.application.services.playback_session import PlaybackSession
from discord_audio_bot.application.services.session_registry import SessionRegistry
from discord_audio_bot.domain.shared.exceptions import TransportUnavailableError


@pytest.fixture
def registry(resolver, transcoder):
    return SessionRegistry(partial(PlaybackSession, resolver=resolver, transcoder=transcoder))


class CountingFactory:
    def __init__(self, *, delay: float = 0.0, error: Exception | None = None) -> None:
        self.calls = 0
        self.delay = delay
        self.error = error
        self.transports: list[FakeTransport] = []

    async def __call__(self) -> FakeTransport:
        self.calls += 1
        await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        transport = FakeTransport()
        self.transports.append(transport)
        return transport


class TestGetOrCreate:
    """Tests for session creation."""

    @pytest.mark.asyncio
    async def test_creates_and_registers(self, registry):
        factory = CountingFactory()

        session = await registry.get_or_create(1, factory)

        assert session is not None
        assert registry.get(1) is session
        assert 1 in registry
        assert len(registry) == 1

    @pytest.mark.asyncio
    async def test_concurrent_callers_share_one_transport(self, registry):
        """Two plays racing on a new guild should open exactly one transport."""
        factory = CountingFactory(delay=0.01)

        first, second = await asyncio.gather(
            registry.get_or_create(1, factory),
            registry.get_or_create(1, factory),
        )

        assert first is second
        assert factory.calls == 1

    @pytest.mark.asyncio
    async def test_existing_session_reused(self, registry):
        factory = CountingFactory()
        first = await registry.get_or_create(1, factory)

        again = await registry.get_or_create(1, factory)

        assert again is first
        assert factory.calls == 1

    @pytest.mark.asyncio
    async def test_latest_notifier_wins(self, registry, notifier):
        factory = CountingFactory()
        session = await registry.get_or_create(1, factory)

        await registry.get_or_create(1, factory, notifier)
        await session.enqueue(make_single("A"))

        assert notifier.messages

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error", [TransportUnavailableError(99), RuntimeError("voice gateway down")]
    )
    async def test_transport_failure_leaves_registry_unchanged(self, registry, error):
        factory = CountingFactory(error=error)

        session = await registry.get_or_create(1, factory)

        assert session is None
        assert registry.get(1) is None
        assert len(registry) == 0

    @pytest.mark.asyncio
    async def test_failure_can_be_retried(self, registry):
        await registry.get_or_create(1, CountingFactory(error=TransportUnavailableError(1)))

        session = await registry.get_or_create(1, CountingFactory())

        assert session is not None

    @pytest.mark.asyncio
    async def test_guilds_are_independent(self, registry):
        factory = CountingFactory()

        a = await registry.get_or_create(1, factory)
        b = await registry.get_or_create(2, factory)

        assert a is not b
        assert factory.calls == 2


class TestLifecycle:
    """Tests for removal and shutdown."""

    @pytest.mark.asyncio
    async def test_closed_session_removed(self, registry):
        session = await registry.get_or_create(1, CountingFactory())

        await session.leave()

        assert registry.get(1) is None
        assert 1 not in registry

    @pytest.mark.asyncio
    async def test_new_session_after_close(self, registry):
        factory = CountingFactory()
        old = await registry.get_or_create(1, factory)
        await old.leave()

        new = await registry.get_or_create(1, factory)

        assert new is not old
        assert factory.calls == 2

    @pytest.mark.asyncio
    async def test_remove_ignores_mismatched_session(self, registry):
        session = await registry.get_or_create(1, CountingFactory())
        other = await registry.get_or_create(2, CountingFactory())

        registry.remove(1, other)

        assert registry.get(1) is session

    @pytest.mark.asyncio
    async def test_close_all(self, registry):
        factory = CountingFactory()
        sessions = [await registry.get_or_create(gid, factory) for gid in (1, 2, 3)]

        await registry.close_all()

        assert len(registry) == 0
        assert all(s.is_closed for s in sessions)
        assert all(t.closed for t in factory.transports)
