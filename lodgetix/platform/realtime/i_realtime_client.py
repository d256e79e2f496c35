"""
Realtime Channel Interface

Three kinds of traffic share one channel abstraction:
- presence: per-client state keyed by a presence key, with sync/join/leave events
- broadcast: named fire-and-forget messages between clients of the channel
- row changes: INSERT/UPDATE/DELETE notifications for a table, narrowed by a filter

Handlers may be plain functions or coroutine functions.
"""

from enum import StrEnum
from typing import Any, Awaitable, Callable, Protocol, Self

import attrs


class PresenceEvent(StrEnum):
    SYNC = 'sync'
    JOIN = 'join'
    LEAVE = 'leave'


class RowChangeEvent(StrEnum):
    ALL = '*'
    INSERT = 'INSERT'
    UPDATE = 'UPDATE'
    DELETE = 'DELETE'


@attrs.define(frozen=True)
class RowChange:
    schema: str
    table: str
    event_type: RowChangeEvent
    new: dict[str, Any] = attrs.field(factory=dict)
    old: dict[str, Any] = attrs.field(factory=dict)

    @property
    def record(self) -> dict[str, Any]:
        """Row image the change is about (the old image for deletes)"""
        return self.old if self.event_type == RowChangeEvent.DELETE else self.new


@attrs.define(frozen=True)
class RowChangeBinding:
    event: RowChangeEvent
    schema: str
    table: str
    filter: str
    handler: 'RowChangeHandler'


PresenceHandler = Callable[[], Awaitable[None] | None]
BroadcastHandler = Callable[[dict[str, Any]], Awaitable[None] | None]
RowChangeHandler = Callable[[RowChange], Awaitable[None] | None]


class IRealtimeChannel(Protocol):
    name: str

    def on_presence(self, event: PresenceEvent, handler: PresenceHandler) -> Self: ...

    def on_broadcast(self, event: str, handler: BroadcastHandler) -> Self: ...

    def on_row_change(
        self,
        *,
        event: RowChangeEvent,
        schema: str,
        table: str,
        filter: str,
        handler: RowChangeHandler,
    ) -> Self: ...

    async def subscribe(self) -> None:
        """
        Join the channel. Returns once the channel is live.

        Raises:
            RealtimeChannelError: the backend refused or dropped the subscription
        """
        ...

    async def track(self, payload: dict[str, Any]) -> None:
        """Publish (or replace) this client's presence state"""
        ...

    async def presence_state(self) -> dict[str, list[dict[str, Any]]]:
        """Current presence entries grouped by presence key"""
        ...

    async def send_broadcast(self, event: str, payload: dict[str, Any]) -> None: ...

    async def unsubscribe(self) -> None:
        """Leave the channel; untracks presence. Safe to call twice."""
        ...


class IRealtimeClient(Protocol):
    def channel(self, name: str, *, presence_key: str | None = None) -> IRealtimeChannel: ...

    async def remove_channel(self, channel: IRealtimeChannel) -> None: ...
