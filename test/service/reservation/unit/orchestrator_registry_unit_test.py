from unittest.mock import AsyncMock, MagicMock

import pytest

from lodgetix.platform.realtime.in_memory_realtime_client import InMemoryRealtimeClient
from lodgetix.service.reservation.driven_adapter.storage.in_memory_client_storage_impl import (
    InMemoryClientStorageImpl,
)
from lodgetix.service.reservation.driving_adapter.orchestrator_registry import (
    OrchestratorRegistry,
)


@pytest.fixture
def storage_factory() -> MagicMock:
    return MagicMock(side_effect=lambda client_id: InMemoryClientStorageImpl())


class MonotonicClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def monotonic_clock() -> MonotonicClock:
    return MonotonicClock()


@pytest.fixture
def realtime() -> InMemoryRealtimeClient:
    return InMemoryRealtimeClient()


@pytest.fixture
def registry(
    rpc_gateway: AsyncMock,
    session_gateway: AsyncMock,
    storage_factory: MagicMock,
    realtime: InMemoryRealtimeClient,
    monotonic_clock: MonotonicClock,
) -> OrchestratorRegistry:
    return OrchestratorRegistry(
        rpc_gateway=rpc_gateway,
        realtime_client=realtime,
        session_gateway_factory=lambda: session_gateway,
        client_storage_factory=storage_factory,
        idle_timeout_seconds=600,
        clock=monotonic_clock,
    )


def hub_channel_count(realtime: InMemoryRealtimeClient) -> int:
    return sum(len(members) for members in realtime.hub.channels.values())


@pytest.mark.unit
class TestOrchestratorRegistry:
    def test_one_orchestrator_per_client(self, registry: OrchestratorRegistry, storage_factory):
        first = registry.get_or_create('client-a')
        again = registry.get_or_create('client-a')
        other = registry.get_or_create('client-b')

        assert first is again
        assert first is not other
        assert first.client_id == 'client-a'
        assert len(registry) == 2
        assert [c.kwargs['client_id'] for c in storage_factory.call_args_list] == [
            'client-a',
            'client-b',
        ]

    def test_clients_have_separate_broadcasters(self, registry: OrchestratorRegistry):
        first = registry.get_or_create('client-a')
        other = registry.get_or_create('client-b')

        assert first.broadcaster is not other.broadcaster
        assert first.rpc_gateway is other.rpc_gateway

    @pytest.mark.asyncio
    async def test_dispose_removes_client(self, registry: OrchestratorRegistry):
        orchestrator = registry.get_or_create('client-a')
        await orchestrator.init('E1')

        assert await registry.dispose('client-a') is True
        assert await registry.dispose('client-a') is False

        assert 'client-a' not in registry
        assert orchestrator.disposed is True
        assert orchestrator.active_channel_names() == []

    @pytest.mark.asyncio
    async def test_disposed_orchestrator_is_replaced(self, registry: OrchestratorRegistry):
        orchestrator = registry.get_or_create('client-a')
        await orchestrator.dispose()

        replacement = registry.get_or_create('client-a')

        assert replacement is not orchestrator
        assert replacement.disposed is False

    @pytest.mark.asyncio
    async def test_dispose_all(self, registry: OrchestratorRegistry):
        orchestrators = [registry.get_or_create(c) for c in ('client-a', 'client-b')]

        await registry.dispose_all()

        assert len(registry) == 0
        assert all(o.disposed for o in orchestrators)


@pytest.mark.unit
class TestIdleEviction:
    @pytest.mark.asyncio
    async def test_idle_clients_are_disposed(
        self, registry: OrchestratorRegistry, monotonic_clock: MonotonicClock
    ):
        stale = registry.get_or_create('client-a')
        monotonic_clock.advance(500)
        recent = registry.get_or_create('client-b')
        monotonic_clock.advance(200)

        disposed = await registry.dispose_idle()

        assert disposed == ['client-a']
        assert stale.disposed is True
        assert 'client-a' not in registry
        assert 'client-b' in registry
        assert recent.disposed is False

    @pytest.mark.asyncio
    async def test_request_refreshes_last_use(
        self, registry: OrchestratorRegistry, monotonic_clock: MonotonicClock
    ):
        orchestrator = registry.get_or_create('client-a')
        monotonic_clock.advance(500)
        assert registry.get_or_create('client-a') is orchestrator
        monotonic_clock.advance(500)

        assert await registry.dispose_idle() == []
        assert orchestrator.disposed is False

    @pytest.mark.asyncio
    async def test_open_stream_keeps_client_alive(
        self, registry: OrchestratorRegistry, monotonic_clock: MonotonicClock
    ):
        orchestrator = registry.get_or_create('client-a')
        stream = await orchestrator.broadcaster.subscribe(topic='ticket-presence-update')
        monotonic_clock.advance(3600)

        assert await registry.dispose_idle() == []

        # Idle time restarts once the stream closes
        await orchestrator.broadcaster.unsubscribe(topic='ticket-presence-update', stream=stream)
        monotonic_clock.advance(599)
        assert await registry.dispose_idle() == []
        monotonic_clock.advance(1)
        assert await registry.dispose_idle() == ['client-a']

    @pytest.mark.asyncio
    async def test_abandoned_clients_release_their_channels(
        self,
        registry: OrchestratorRegistry,
        realtime: InMemoryRealtimeClient,
        monotonic_clock: MonotonicClock,
    ):
        for i in range(50):
            await registry.get_or_create(f'client-{i}').init('E1')
        assert len(registry) == 50
        assert hub_channel_count(realtime) == 100

        monotonic_clock.advance(601)
        disposed = await registry.dispose_idle()

        assert len(disposed) == 50
        assert len(registry) == 0
        assert hub_channel_count(realtime) == 0
        assert realtime.hub.presence.get('presence-tickets-E1', {}) == {}

    @pytest.mark.asyncio
    async def test_client_returning_after_eviction_gets_fresh_orchestrator(
        self, registry: OrchestratorRegistry, monotonic_clock: MonotonicClock
    ):
        evicted = registry.get_or_create('client-a')
        monotonic_clock.advance(601)
        await registry.dispose_idle()

        fresh = registry.get_or_create('client-a')

        assert fresh is not evicted
        assert fresh.disposed is False
