"""
Single-process realtime backend.

All channels created from clients that share one `InMemoryRealtimeHub` see
each other's presence and broadcasts. Row changes are injected with
`emit_row_change`.
"""

from collections import defaultdict
from typing import Any

from lodgetix.platform.logging.loguru_io import Logger
from lodgetix.platform.realtime.base_channel import BaseRealtimeChannel, ChannelState
from lodgetix.platform.realtime.i_realtime_client import PresenceEvent, RowChange


class InMemoryRealtimeHub:
    def __init__(self) -> None:
        self.presence: dict[str, dict[str, list[dict[str, Any]]]] = defaultdict(dict)
        self.channels: dict[str, list['InMemoryRealtimeChannel']] = defaultdict(list)

    def members(self, name: str) -> list['InMemoryRealtimeChannel']:
        return list(self.channels.get(name, []))

    async def emit_row_change(self, change: RowChange) -> None:
        for channels in list(self.channels.values()):
            for channel in list(channels):
                await channel.dispatch_row_change(change)


class InMemoryRealtimeChannel(BaseRealtimeChannel):
    def __init__(
        self, name: str, *, hub: InMemoryRealtimeHub, presence_key: str | None = None
    ) -> None:
        super().__init__(name, presence_key=presence_key)
        self._hub = hub
        self._tracked = False

    async def subscribe(self) -> None:
        if self.state == ChannelState.JOINED:
            return
        self._hub.channels[self.name].append(self)
        self.state = ChannelState.JOINED
        await self.dispatch_presence(PresenceEvent.SYNC)

    async def _notify_members(self, event: PresenceEvent) -> None:
        for member in self._hub.members(self.name):
            await member.dispatch_presence(event)
            await member.dispatch_presence(PresenceEvent.SYNC)

    async def track(self, payload: dict[str, Any]) -> None:
        key = self._require_presence_key()
        self._hub.presence[self.name][key] = [dict(payload)]
        self._tracked = True
        await self._notify_members(PresenceEvent.JOIN)

    async def presence_state(self) -> dict[str, list[dict[str, Any]]]:
        state = self._hub.presence.get(self.name, {})
        return {key: [dict(entry) for entry in entries] for key, entries in state.items()}

    async def send_broadcast(self, event: str, payload: dict[str, Any]) -> None:
        for member in self._hub.members(self.name):
            if member is not self:
                await member.dispatch_broadcast(event, payload)

    async def unsubscribe(self) -> None:
        if self.state == ChannelState.CLOSED:
            return
        self.state = ChannelState.CLOSED
        members = self._hub.channels.get(self.name, [])
        if self in members:
            members.remove(self)
        if not members:
            self._hub.channels.pop(self.name, None)

        if self._tracked and self.presence_key:
            self._tracked = False
            self._hub.presence.get(self.name, {}).pop(self.presence_key, None)
            if not self._hub.presence.get(self.name):
                self._hub.presence.pop(self.name, None)
            await self._notify_members(PresenceEvent.LEAVE)


class InMemoryRealtimeClient:
    def __init__(self, hub: InMemoryRealtimeHub | None = None) -> None:
        self.hub = hub or InMemoryRealtimeHub()

    def channel(self, name: str, *, presence_key: str | None = None) -> InMemoryRealtimeChannel:
        return InMemoryRealtimeChannel(name, hub=self.hub, presence_key=presence_key)

    async def remove_channel(  # type: ignore[override]
        self, channel: InMemoryRealtimeChannel
    ) -> None:
        await channel.unsubscribe()
        Logger.base.debug(f'📡 [REALTIME] Removed channel {channel.name}')

    async def emit_row_change(self, change: RowChange) -> None:
        await self.hub.emit_row_change(change)
