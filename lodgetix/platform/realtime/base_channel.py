from collections import defaultdict
from enum import StrEnum
import inspect
from typing import Any, Callable, Self

from lodgetix.platform.logging.loguru_io import Logger
from lodgetix.platform.realtime.i_realtime_client import (
    BroadcastHandler,
    PresenceEvent,
    PresenceHandler,
    RowChange,
    RowChangeBinding,
    RowChangeEvent,
    RowChangeHandler,
)
from lodgetix.platform.realtime.row_change_filter import RowChangeFilter


class ChannelState(StrEnum):
    CLOSED = 'closed'
    JOINING = 'joining'
    JOINED = 'joined'


async def invoke_handler(handler: Callable[..., Any], *args: Any) -> None:
    """Call a sync or async handler; a failing handler never breaks the channel"""
    try:
        result = handler(*args)
        if inspect.isawaitable(result):
            await result
    except Exception as e:
        name = getattr(handler, '__qualname__', handler)
        Logger.base.exception(f'❌ [REALTIME] Handler {name} failed: {e}')


class BaseRealtimeChannel:
    """Handler bookkeeping and dispatch shared by the channel implementations"""

    def __init__(self, name: str, *, presence_key: str | None = None) -> None:
        self.name = name
        self.presence_key = presence_key
        self.state = ChannelState.CLOSED
        self._presence_handlers: dict[PresenceEvent, list[PresenceHandler]] = defaultdict(list)
        self._broadcast_handlers: dict[str, list[BroadcastHandler]] = defaultdict(list)
        self._row_bindings: list[tuple[RowChangeBinding, RowChangeFilter]] = []

    def __repr__(self) -> str:
        return f'<{type(self).__name__} {self.name} state={self.state}>'

    @property
    def has_row_bindings(self) -> bool:
        return bool(self._row_bindings)

    def on_presence(self, event: PresenceEvent, handler: PresenceHandler) -> Self:
        self._presence_handlers[PresenceEvent(event)].append(handler)
        return self

    def on_broadcast(self, event: str, handler: BroadcastHandler) -> Self:
        self._broadcast_handlers[event].append(handler)
        return self

    def on_row_change(
        self,
        *,
        event: RowChangeEvent,
        schema: str,
        table: str,
        filter: str,
        handler: RowChangeHandler,
    ) -> Self:
        binding = RowChangeBinding(
            event=RowChangeEvent(event), schema=schema, table=table, filter=filter, handler=handler
        )
        self._row_bindings.append((binding, RowChangeFilter.parse(filter)))
        return self

    def _require_presence_key(self) -> str:
        if not self.presence_key:
            raise ValueError(f'Channel {self.name} was created without a presence key')
        return self.presence_key

    async def dispatch_presence(self, event: PresenceEvent) -> None:
        for handler in list(self._presence_handlers.get(event, [])):
            await invoke_handler(handler)

    async def dispatch_broadcast(self, event: str, payload: dict[str, Any]) -> None:
        for handler in list(self._broadcast_handlers.get(event, [])):
            await invoke_handler(handler, payload)

    async def dispatch_row_change(self, change: RowChange) -> None:
        if self.state != ChannelState.JOINED:
            return
        for binding, row_filter in list(self._row_bindings):
            if binding.schema != change.schema or binding.table != change.table:
                continue
            if binding.event != RowChangeEvent.ALL and binding.event != change.event_type:
                continue
            if not row_filter.matches(change.record):
                continue
            await invoke_handler(binding.handler, change)
