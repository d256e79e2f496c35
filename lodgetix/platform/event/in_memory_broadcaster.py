"""
In-memory Event Broadcaster Implementation

Each orchestrator owns one broadcaster; subscribers are grouped by topic
(`ticket-presence-update`, `ticket-system-status`).
"""

from typing import Dict, List

from anyio import BrokenResourceError, WouldBlock, create_memory_object_stream
from anyio.streams.memory import MemoryObjectReceiveStream, MemoryObjectSendStream

from lodgetix.platform.config.core_setting import settings
from lodgetix.platform.logging.loguru_io import Logger


class InMemoryEventBroadcasterImpl:
    """
    In-memory pub/sub on anyio memory object streams

    Memory Management:
    - Stream max buffer: PRESENCE_STREAM_BUFFER_SIZE events
    - Drop policy: drop for the slow subscriber (send_nowait raises WouldBlock)
    - Cleanup: empty topic lists are removed on unsubscribe
    """

    def __init__(self, *, max_buffer_size: int | None = None) -> None:
        self._max_buffer_size = max_buffer_size or settings.PRESENCE_STREAM_BUFFER_SIZE
        self._subscribers: Dict[
            str, List[tuple[MemoryObjectSendStream[dict], MemoryObjectReceiveStream[dict]]]
        ] = {}

    def subscriber_count(self, *, topic: str) -> int:
        return len(self._subscribers.get(topic, []))

    async def subscribe(self, *, topic: str) -> MemoryObjectReceiveStream[dict]:
        send_stream, receive_stream = create_memory_object_stream[dict](
            max_buffer_size=self._max_buffer_size
        )
        self._subscribers.setdefault(topic, []).append((send_stream, receive_stream))

        Logger.base.debug(
            f'📡 [BROADCASTER] Subscribed to {topic} '
            f'(total subscribers: {len(self._subscribers[topic])})'
        )
        return receive_stream

    async def broadcast(self, *, topic: str, event_data: dict) -> None:
        subscribers = self._subscribers.get(topic)
        if not subscribers:
            Logger.base.debug(f'📡 [BROADCASTER] No subscribers for {topic}')
            return

        delivered = 0
        dropped = 0
        for send_stream, _ in subscribers:
            try:
                send_stream.send_nowait(event_data)
                delivered += 1
            except WouldBlock:
                dropped += 1
                Logger.base.warning(f'⚠️ [BROADCASTER] Stream full, dropping {topic}')
            except BrokenResourceError:
                # Receiver closed without unsubscribing
                dropped += 1

        Logger.base.debug(
            f'📡 [BROADCASTER] Broadcast to {topic}: delivered={delivered}, dropped={dropped}'
        )

    async def unsubscribe(self, *, topic: str, stream: MemoryObjectReceiveStream[dict]) -> None:
        subscribers = self._subscribers.get(topic)
        if subscribers is None:
            return

        for i, (send_stream, receive_stream) in enumerate(subscribers):
            if receive_stream is stream:
                await send_stream.aclose()
                await receive_stream.aclose()
                subscribers.pop(i)
                Logger.base.debug(
                    f'📡 [BROADCASTER] Unsubscribed from {topic} (remaining: {len(subscribers)})'
                )
                break

        if not subscribers:
            del self._subscribers[topic]

    async def close(self) -> None:
        # Only the send side is closed so consumers drain what is buffered
        for subscribers in self._subscribers.values():
            for send_stream, _ in subscribers:
                await send_stream.aclose()
        self._subscribers.clear()
