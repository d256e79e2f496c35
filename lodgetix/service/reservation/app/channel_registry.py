"""
Active Channel Registry

Realtime channels opened by one orchestrator, keyed by channel name. Row-change
channels are reference-counted: every subscriber adds a listener to the shared
entry and the channel is only torn down when the last listener leaves.
"""

from enum import StrEnum
import itertools
from typing import Any, Awaitable, Callable, Dict, Iterator, List, Optional

import anyio
import attrs

from lodgetix.platform.realtime.i_realtime_client import IRealtimeChannel


class ChannelKind(StrEnum):
    PRESENCE = 'presence'
    SYSTEM = 'system'
    AVAILABILITY = 'availability'
    TICKET = 'ticket'


_listener_ids = itertools.count(1)


@attrs.define(eq=False)
class ChannelEntry:
    channel: IRealtimeChannel
    kind: ChannelKind
    listeners: Dict[int, Callable[..., Any]] = attrs.field(factory=dict)
    ready: anyio.Event = attrs.field(factory=anyio.Event)
    joined: bool = False

    @property
    def name(self) -> str:
        return self.channel.name

    def add_listener(self, listener: Callable[..., Any]) -> int:
        token = next(_listener_ids)
        self.listeners[token] = listener
        return token

    def remove_listener(self, token: int) -> int:
        """Returns the number of listeners left"""
        self.listeners.pop(token, None)
        return len(self.listeners)

    def mark_ready(self, *, joined: bool) -> None:
        self.joined = joined
        self.ready.set()


class ChannelRegistry:
    def __init__(self) -> None:
        self._entries: Dict[str, ChannelEntry] = {}

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))

    def get(self, name: str) -> Optional[ChannelEntry]:
        return self._entries.get(name)

    def register(self, entry: ChannelEntry) -> None:
        self._entries[entry.name] = entry

    def pop(self, name: str) -> Optional[ChannelEntry]:
        return self._entries.pop(name, None)

    def names(self) -> List[str]:
        return sorted(self._entries)

    def listener_count(self) -> int:
        return sum(len(entry.listeners) for entry in self._entries.values())

    def drain(self) -> List[ChannelEntry]:
        entries = list(self._entries.values())
        self._entries.clear()
        return entries


class Subscription:
    """
    Handle returned by the subscribe operations.

    `unsubscribe()` is idempotent. A subscription whose channel never joined is
    returned inactive and unsubscribing it does nothing.
    """

    def __init__(
        self, channel_name: str, release: Optional[Callable[[], Awaitable[None]]] = None
    ) -> None:
        self.channel_name = channel_name
        self._release = release

    def __repr__(self) -> str:
        return f'<Subscription {self.channel_name} active={self.active}>'

    @classmethod
    def inactive(cls, channel_name: str) -> 'Subscription':
        return cls(channel_name)

    @property
    def active(self) -> bool:
        return self._release is not None

    async def unsubscribe(self) -> None:
        release, self._release = self._release, None
        if release is not None:
            await release()
