import asyncio
from unittest.mock import AsyncMock, MagicMock

import orjson
import pytest

from lodgetix.platform.realtime.base_channel import ChannelState
from lodgetix.platform.realtime.kvrocks_realtime_client import (
    KvrocksRealtimeChannel,
    decode_presence_entry,
    encode_presence_entry,
)


NOW = 1_735_689_600.0
TTL = 90


class WallClock:
    def __init__(self, now: float = NOW) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def redis() -> AsyncMock:
    client = AsyncMock()
    client.hgetall.return_value = {}
    return client


@pytest.fixture
def wall_clock() -> WallClock:
    return WallClock()


def make_channel(
    redis: AsyncMock, wall_clock: WallClock, *, heartbeat_seconds: float = 30.0
) -> KvrocksRealtimeChannel:
    kvrocks = MagicMock()
    kvrocks.get_client.return_value = redis
    return KvrocksRealtimeChannel(
        'presence-tickets-E1',
        presence_key='client-1',
        kvrocks=kvrocks,
        row_change_feed=None,
        presence_ttl_seconds=TTL,
        heartbeat_seconds=heartbeat_seconds,
        clock=wall_clock,
    )


@pytest.mark.unit
class TestPresenceEntryCodec:
    def test_fresh_entry_returns_state(self):
        raw = encode_presence_entry({'isReserving': True}, last_seen=NOW - 10)

        assert decode_presence_entry(raw, now=NOW, ttl_seconds=TTL) == {'isReserving': True}

    def test_entry_not_seen_within_ttl_is_stale(self):
        raw = encode_presence_entry({'isReserving': True}, last_seen=NOW - TTL - 1)

        assert decode_presence_entry(raw, now=NOW, ttl_seconds=TTL) is None

    @pytest.mark.parametrize(
        'raw',
        [
            b'not json',
            orjson.dumps({'isReserving': True}),
            orjson.dumps({'state': 'x', 'lastSeen': NOW}),
            orjson.dumps({'state': {}, 'lastSeen': 'yesterday'}),
        ],
    )
    def test_corrupt_or_unstamped_entry_is_rejected(self, raw: bytes):
        assert decode_presence_entry(raw, now=NOW, ttl_seconds=TTL) is None


@pytest.mark.unit
class TestKvrocksPresence:
    @pytest.mark.asyncio
    async def test_track_stores_state_with_last_seen(
        self, redis: AsyncMock, wall_clock: WallClock
    ):
        channel = make_channel(redis, wall_clock)

        await channel.track({'clientId': 'client-1', 'isReserving': False})

        key, field, value = redis.hset.await_args.args
        assert key == channel.presence_hash
        assert field == 'client-1'
        assert orjson.loads(value) == {
            'state': {'clientId': 'client-1', 'isReserving': False},
            'lastSeen': NOW,
        }
        redis.expire.assert_awaited_with(channel.presence_hash, TTL)
        redis.publish.assert_awaited_once()

        channel.state = ChannelState.JOINED
        await channel.unsubscribe()

    @pytest.mark.asyncio
    async def test_presence_state_drops_entries_of_crashed_clients(
        self, redis: AsyncMock, wall_clock: WallClock
    ):
        # Given: client-2 stopped heartbeating long ago while client-3 keeps tracking
        redis.hgetall.return_value = {
            'client-2': encode_presence_entry({'isReserving': True}, last_seen=NOW - 3600),
            'client-3': encode_presence_entry({'isReserving': False}, last_seen=NOW - 5),
            'client-4': b'{broken',
        }
        channel = make_channel(redis, wall_clock)

        # When
        state = await channel.presence_state()

        # Then
        assert state == {'client-3': [{'isReserving': False}]}
        redis.hdel.assert_awaited_once_with(channel.presence_hash, 'client-2', 'client-4')

    @pytest.mark.asyncio
    async def test_presence_state_without_stale_entries_deletes_nothing(
        self, redis: AsyncMock, wall_clock: WallClock
    ):
        redis.hgetall.return_value = {
            b'client-3': encode_presence_entry({'isReserving': False}, last_seen=NOW),
        }
        channel = make_channel(redis, wall_clock)

        assert await channel.presence_state() == {'client-3': [{'isReserving': False}]}
        redis.hdel.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_heartbeat_refreshes_last_seen_until_unsubscribe(
        self, redis: AsyncMock, wall_clock: WallClock
    ):
        channel = make_channel(redis, wall_clock, heartbeat_seconds=0.01)
        await channel.track({'isReserving': False})
        channel.state = ChannelState.JOINED

        wall_clock.now = NOW + 60
        await asyncio.sleep(0.05)

        _, _, value = redis.hset.await_args.args
        assert orjson.loads(value)['lastSeen'] == NOW + 60

        await channel.unsubscribe()
        writes = redis.hset.await_count
        await asyncio.sleep(0.05)

        assert redis.hset.await_count == writes
        redis.hdel.assert_awaited_once_with(channel.presence_hash, 'client-1')
