"""
In-memory Event Broadcaster Interface

Explicit observable used to fan out notifications (presence summaries,
system status messages) from a reservation orchestrator to its consumers,
typically SSE endpoints running in the same process.
"""

from typing import Protocol

from anyio.streams.memory import MemoryObjectReceiveStream


class IInMemoryEventBroadcaster(Protocol):
    def subscriber_count(self, *, topic: str) -> int: ...

    async def subscribe(self, *, topic: str) -> MemoryObjectReceiveStream[dict]:
        """
        Register a new subscriber for a topic

        Returns:
            MemoryObjectReceiveStream that will receive event dictionaries
        """
        ...

    async def broadcast(self, *, topic: str, event_data: dict) -> None:
        """
        Deliver an event to every subscriber of a topic

        Note:
            - Silently ignores topics without subscribers
            - Drops the event for a subscriber whose buffer is full
        """
        ...

    async def unsubscribe(self, *, topic: str, stream: MemoryObjectReceiveStream[dict]) -> None:
        """
        Remove a subscriber and close its streams (safe for unknown streams)
        """
        ...

    async def close(self) -> None:
        """Close every subscriber stream; iterating consumers finish normally"""
        ...
