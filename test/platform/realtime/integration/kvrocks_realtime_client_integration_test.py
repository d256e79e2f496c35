"""
Integration tests for KvrocksRealtimeClient

Presence state, stale entry expiry and broadcast fan-out against real
Kvrocks. Two clients on the same channel stand in for two processes.
"""

import time
from typing import Any

import anyio
import pytest

from lodgetix.platform.realtime.i_realtime_client import PresenceEvent
from lodgetix.platform.realtime.kvrocks_realtime_client import (
    KvrocksRealtimeChannel,
    KvrocksRealtimeClient,
    encode_presence_entry,
)
from lodgetix.platform.state.kvrocks_client import KvrocksClient


pytestmark = [pytest.mark.integration, pytest.mark.asyncio]

CHANNEL = 'presence-tickets-E1'


@pytest.fixture
def realtime(kvrocks: KvrocksClient) -> KvrocksRealtimeClient:
    return KvrocksRealtimeClient(kvrocks=kvrocks)


class TestKvrocksPresence:
    async def test_presence_state_lists_tracked_clients(self, realtime: KvrocksRealtimeClient):
        first = realtime.channel(CHANNEL, presence_key='client-a')
        second = realtime.channel(CHANNEL, presence_key='client-b')
        await first.subscribe()
        await second.subscribe()

        await first.track({'isReserving': True, 'ticketDefinitionId': 'T1'})
        await second.track({'isReserving': False})

        state = await first.presence_state()
        assert state == {
            'client-a': [{'isReserving': True, 'ticketDefinitionId': 'T1'}],
            'client-b': [{'isReserving': False}],
        }

        await second.unsubscribe()
        assert set(await first.presence_state()) == {'client-a'}
        await first.unsubscribe()

    async def test_presence_hash_has_ttl(
        self, realtime: KvrocksRealtimeClient, kvrocks: KvrocksClient
    ):
        channel = realtime.channel(CHANNEL, presence_key='client-a')
        await channel.subscribe()
        await channel.track({'isReserving': False})

        ttl = await kvrocks.get_client().ttl(channel.presence_hash)

        assert 0 < ttl <= 90
        await channel.unsubscribe()

    async def test_entry_of_crashed_process_is_dropped(
        self, realtime: KvrocksRealtimeClient, kvrocks: KvrocksClient
    ):
        # Given: client-dead was tracked by a process that never untracked
        live = realtime.channel(CHANNEL, presence_key='client-live')
        await live.subscribe()
        redis = kvrocks.get_client()
        await redis.hset(
            live.presence_hash,
            'client-dead',
            encode_presence_entry({'isReserving': True}, last_seen=time.time() - 3600),
        )

        # When: the live client keeps tracking
        await live.track({'isReserving': False})
        state = await live.presence_state()

        # Then
        assert set(state) == {'client-live'}
        assert await redis.hexists(live.presence_hash, 'client-dead') == 0
        await live.unsubscribe()

    async def test_heartbeat_keeps_idle_client_present(self, kvrocks: KvrocksClient):
        clock_offset = {'seconds': 0.0}

        def clock() -> float:
            return time.time() + clock_offset['seconds']

        channel = KvrocksRealtimeChannel(
            CHANNEL,
            presence_key='client-idle',
            kvrocks=kvrocks,
            row_change_feed=None,
            presence_ttl_seconds=90,
            heartbeat_seconds=0.05,
            clock=clock,
        )
        await channel.subscribe()
        await channel.track({'isReserving': False})

        # Two hours pass without another track call
        clock_offset['seconds'] = 7200
        await anyio.sleep(0.2)

        assert set(await channel.presence_state()) == {'client-idle'}
        await channel.unsubscribe()

    async def test_join_reaches_other_process(self, realtime: KvrocksRealtimeClient):
        observer = realtime.channel(CHANNEL, presence_key='client-a')
        joined = anyio.Event()
        observer.on_presence(PresenceEvent.JOIN, joined.set)
        await observer.subscribe()

        other = realtime.channel(CHANNEL, presence_key='client-b')
        await other.subscribe()
        await other.track({'isReserving': False})

        with anyio.fail_after(5):
            await joined.wait()

        await other.unsubscribe()
        await observer.unsubscribe()


class TestKvrocksBroadcast:
    async def test_broadcast_skips_sender(self, realtime: KvrocksRealtimeClient):
        received: list[dict[str, Any]] = []
        delivered = anyio.Event()

        def on_status(payload: dict[str, Any]) -> None:
            received.append(payload)
            delivered.set()

        sender = realtime.channel('system-tickets-E1')
        sender_received: list[dict[str, Any]] = []
        sender.on_broadcast('ticket-system-status', sender_received.append)
        listener = realtime.channel('system-tickets-E1')
        listener.on_broadcast('ticket-system-status', on_status)
        await sender.subscribe()
        await listener.subscribe()

        await sender.send_broadcast('ticket-system-status', {'type': 'maintenance'})

        with anyio.fail_after(5):
            await delivered.wait()
        assert received == [{'type': 'maintenance'}]
        assert sender_received == []

        await listener.unsubscribe()
        await sender.unsubscribe()
