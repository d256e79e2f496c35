"""
Kvrocks-backed realtime channels.

- Presence: hash `presence:{channel}` (field = presence key, value = JSON with the
  tracked state and its `lastSeen` epoch seconds). A tracking channel re-writes
  its entry every PRESENCE_HEARTBEAT_SECONDS; readers drop (and delete) entries
  not seen for PRESENCE_TTL_SECONDS, so entries of crashed processes age out.
- Presence/broadcast events: pub/sub on `realtime:{channel}`, one reader task
  per subscribed channel.
- Row changes: delivered by the shared PostgresChangeFeed.
"""

import asyncio
import time
from typing import Any, Callable

import orjson
from redis.asyncio import Redis as AsyncRedis
from redis.asyncio.client import PubSub
from redis.exceptions import RedisError
import uuid_utils

from lodgetix.platform.config.core_setting import settings
from lodgetix.platform.exception.exceptions import RealtimeChannelError
from lodgetix.platform.logging.loguru_io import Logger
from lodgetix.platform.realtime.base_channel import BaseRealtimeChannel, ChannelState
from lodgetix.platform.realtime.i_realtime_client import PresenceEvent
from lodgetix.platform.realtime.postgres_change_feed import PostgresChangeFeed
from lodgetix.platform.state.kvrocks_client import KvrocksClient, kvrocks_client, prefixed_key


def encode_presence_entry(payload: dict[str, Any], *, last_seen: float) -> bytes:
    return orjson.dumps({'state': payload, 'lastSeen': last_seen})


def decode_presence_entry(
    raw: str | bytes, *, now: float, ttl_seconds: float
) -> dict[str, Any] | None:
    """The tracked state, or None when the entry is corrupt or older than `ttl_seconds`"""
    try:
        entry = orjson.loads(raw)
        last_seen = float(entry['lastSeen'])
        state = entry['state']
    except (orjson.JSONDecodeError, KeyError, TypeError, ValueError):
        return None
    if not isinstance(state, dict) or now - last_seen > ttl_seconds:
        return None
    return state


class MessageKind:
    PRESENCE = 'presence'
    BROADCAST = 'broadcast'


class KvrocksRealtimeChannel(BaseRealtimeChannel):
    def __init__(
        self,
        name: str,
        *,
        presence_key: str | None,
        kvrocks: KvrocksClient,
        row_change_feed: PostgresChangeFeed | None,
        presence_ttl_seconds: float | None = None,
        heartbeat_seconds: float | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        super().__init__(name, presence_key=presence_key)
        self._kvrocks = kvrocks
        self._row_change_feed = row_change_feed
        self._presence_ttl = presence_ttl_seconds or settings.PRESENCE_TTL_SECONDS
        self._heartbeat_interval = heartbeat_seconds or settings.PRESENCE_HEARTBEAT_SECONDS
        self._clock = clock
        self._heartbeat: asyncio.Task[None] | None = None
        self._tracked_payload: dict[str, Any] = {}
        self._sender_id = str(uuid_utils.uuid4())
        self._pubsub_client: AsyncRedis | None = None
        self._pubsub: PubSub | None = None
        self._reader: asyncio.Task[None] | None = None
        self._tracked = False

    @property
    def pubsub_channel(self) -> str:
        return prefixed_key(f'realtime:{self.name}')

    @property
    def presence_hash(self) -> str:
        return prefixed_key(f'presence:{self.name}')

    async def _publish(self, kind: str, event: str, payload: dict[str, Any] | None = None) -> None:
        message = {
            'kind': kind,
            'event': event,
            'payload': payload or {},
            'sender': self._sender_id,
        }
        await self._kvrocks.get_client().publish(self.pubsub_channel, orjson.dumps(message))

    async def subscribe(self) -> None:
        if self.state == ChannelState.JOINED:
            return
        if self.has_row_bindings and self._row_change_feed is None:
            raise RealtimeChannelError(f'Channel {self.name} needs a row change feed')

        self.state = ChannelState.JOINING
        try:
            self._pubsub_client = await self._kvrocks.create_pubsub_client()
            self._pubsub = self._pubsub_client.pubsub()
            await self._pubsub.subscribe(self.pubsub_channel)
        except (RedisError, OSError) as e:
            await self._close_pubsub()
            self.state = ChannelState.CLOSED
            raise RealtimeChannelError(f'Failed to subscribe to {self.name}: {e}') from e

        self._reader = asyncio.create_task(self._read_loop(self._pubsub))
        if self._row_change_feed is not None and self.has_row_bindings:
            self._row_change_feed.register(self)
        self.state = ChannelState.JOINED
        Logger.base.info(f'📡 [KVROCKS] Subscribed to channel: {self.name}')

        await self.dispatch_presence(PresenceEvent.SYNC)

    async def _read_loop(self, pubsub: PubSub) -> None:
        try:
            async for message in pubsub.listen():
                if message.get('type') != 'message':
                    continue
                try:
                    data = orjson.loads(message['data'])
                except orjson.JSONDecodeError as e:
                    Logger.base.error(f'❌ [KVROCKS] Failed to decode message on {self.name}: {e}')
                    continue
                await self._handle_message(data)
        except asyncio.CancelledError:
            raise
        except (RedisError, OSError) as e:
            Logger.base.error(f'❌ [KVROCKS] Reader for {self.name} stopped: {e}')

    async def _handle_message(self, data: dict[str, Any]) -> None:
        kind = data.get('kind')
        event = data.get('event', '')
        if kind == MessageKind.PRESENCE:
            try:
                presence_event = PresenceEvent(event)
            except ValueError:
                return
            await self.dispatch_presence(presence_event)
            if presence_event != PresenceEvent.SYNC:
                await self.dispatch_presence(PresenceEvent.SYNC)
        elif kind == MessageKind.BROADCAST and data.get('sender') != self._sender_id:
            await self.dispatch_broadcast(event, data.get('payload') or {})

    async def _write_presence(self, key: str) -> None:
        redis = self._kvrocks.get_client()
        await redis.hset(
            self.presence_hash,
            key,
            encode_presence_entry(self._tracked_payload, last_seen=self._clock()),
        )
        # Backstop for the whole hash once every tracking process is gone
        await redis.expire(self.presence_hash, int(self._presence_ttl))

    async def _heartbeat_loop(self, key: str) -> None:
        while True:
            await asyncio.sleep(self._heartbeat_interval)
            try:
                await self._write_presence(key)
            except (RedisError, OSError) as e:
                Logger.base.warning(f'⚠️ [KVROCKS] Heartbeat on {self.name} failed: {e}')

    async def track(self, payload: dict[str, Any]) -> None:
        key = self._require_presence_key()
        self._tracked_payload = dict(payload)
        await self._write_presence(key)
        self._tracked = True
        if self._heartbeat is None or self._heartbeat.done():
            self._heartbeat = asyncio.create_task(self._heartbeat_loop(key))
        await self._publish(MessageKind.PRESENCE, PresenceEvent.JOIN, {'key': key})

    async def presence_state(self) -> dict[str, list[dict[str, Any]]]:
        redis = self._kvrocks.get_client()
        raw: dict[Any, Any] = await redis.hgetall(self.presence_hash)
        now = self._clock()
        state: dict[str, list[dict[str, Any]]] = {}
        stale: list[Any] = []
        for key, value in raw.items():
            entry = decode_presence_entry(value, now=now, ttl_seconds=self._presence_ttl)
            if entry is None:
                stale.append(key)
                continue
            state[key.decode() if isinstance(key, bytes) else str(key)] = [entry]
        if stale:
            Logger.base.info(f'🧹 [KVROCKS] Dropping {len(stale)} stale presence entries')
            await redis.hdel(self.presence_hash, *stale)
        return state

    async def send_broadcast(self, event: str, payload: dict[str, Any]) -> None:
        await self._publish(MessageKind.BROADCAST, event, payload)

    async def _close_pubsub(self) -> None:
        if self._pubsub is not None:
            try:
                await self._pubsub.unsubscribe(self.pubsub_channel)
                await self._pubsub.aclose()
            except (RedisError, OSError) as e:
                Logger.base.warning(f'⚠️ [KVROCKS] Error closing pubsub for {self.name}: {e}')
            self._pubsub = None
        if self._pubsub_client is not None:
            await self._pubsub_client.aclose()
            self._pubsub_client = None

    async def unsubscribe(self) -> None:
        if self.state == ChannelState.CLOSED:
            return
        self.state = ChannelState.CLOSED

        if self._row_change_feed is not None:
            self._row_change_feed.unregister(self)

        if self._heartbeat is not None:
            self._heartbeat.cancel()
            try:
                await self._heartbeat
            except asyncio.CancelledError:
                pass
            self._heartbeat = None

        if self._tracked and self.presence_key:
            self._tracked = False
            try:
                await self._kvrocks.get_client().hdel(self.presence_hash, self.presence_key)
                await self._publish(
                    MessageKind.PRESENCE, PresenceEvent.LEAVE, {'key': self.presence_key}
                )
            except (RedisError, OSError) as e:
                Logger.base.warning(f'⚠️ [KVROCKS] Untrack failed on {self.name}: {e}')

        if self._reader is not None:
            self._reader.cancel()
            try:
                await self._reader
            except asyncio.CancelledError:
                pass
            self._reader = None

        await self._close_pubsub()
        Logger.base.info(f'📡 [KVROCKS] Unsubscribed from channel: {self.name}')


class KvrocksRealtimeClient:
    def __init__(
        self,
        *,
        row_change_feed: PostgresChangeFeed | None = None,
        kvrocks: KvrocksClient | None = None,
    ) -> None:
        self._row_change_feed = row_change_feed
        self._kvrocks = kvrocks or kvrocks_client

    def channel(self, name: str, *, presence_key: str | None = None) -> KvrocksRealtimeChannel:
        return KvrocksRealtimeChannel(
            name,
            presence_key=presence_key,
            kvrocks=self._kvrocks,
            row_change_feed=self._row_change_feed,
        )

    async def remove_channel(  # type: ignore[override]
        self, channel: KvrocksRealtimeChannel
    ) -> None:
        await channel.unsubscribe()
