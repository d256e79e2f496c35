"""
PostgreSQL row-change feed.

A dedicated asyncpg connection LISTENs on ROW_CHANGE_NOTIFY_CHANNEL. Table
triggers publish one JSON document per change:

    {"schema": "public", "table": "tickets", "type": "UPDATE",
     "record": {...}, "old_record": {...}}

Every notification is fanned out to the channels registered with the feed;
each channel applies its own table/event/filter bindings.
"""

import asyncio
from pathlib import Path
import re
from typing import TYPE_CHECKING, Any

import anyio
import asyncpg
import orjson

from lodgetix.platform.config.core_setting import settings
from lodgetix.platform.database.asyncpg_setting import asyncpg_dsn
from lodgetix.platform.logging.loguru_io import Logger
from lodgetix.platform.realtime.i_realtime_client import RowChange, RowChangeEvent

if TYPE_CHECKING:
    from lodgetix.platform.realtime.base_channel import BaseRealtimeChannel


WATCHED_TABLES = ('tickets',)
TRIGGER_NAME = 'lodgetix_row_change'
_NOTIFY_FUNCTION_SQL = Path(__file__).parent / 'sql' / 'row_change_notify.sql'
_IDENTIFIER = re.compile(r'^[a-z_][a-z0-9_]*$')


def parse_row_change(payload: str | bytes) -> RowChange | None:
    try:
        data: dict[str, Any] = orjson.loads(payload)
        return RowChange(
            schema=data.get('schema') or 'public',
            table=data['table'],
            event_type=RowChangeEvent(str(data['type']).upper()),
            new=data.get('record') or {},
            old=data.get('old_record') or {},
        )
    except (orjson.JSONDecodeError, KeyError, ValueError, TypeError) as e:
        Logger.base.warning(f'⚠️ [ROW-CHANGE] Ignoring malformed notification: {e}')
        return None


class PostgresChangeFeed:
    def __init__(
        self,
        *,
        notify_channel: str | None = None,
        reconnect_delay: float | None = None,
    ) -> None:
        self._notify_channel = notify_channel or settings.ROW_CHANGE_NOTIFY_CHANNEL
        if not _IDENTIFIER.match(self._notify_channel):
            raise ValueError(f'Invalid notify channel name: {self._notify_channel}')
        self._reconnect_delay = (
            reconnect_delay
            if reconnect_delay is not None
            else settings.ROW_CHANGE_RECONNECT_DELAY_SECONDS
        )
        self._channels: list['BaseRealtimeChannel'] = []
        self._pending: set[asyncio.Task[None]] = set()
        self._runner: asyncio.Task[None] | None = None

    def register(self, channel: 'BaseRealtimeChannel') -> None:
        if channel not in self._channels:
            self._channels.append(channel)

    def unregister(self, channel: 'BaseRealtimeChannel') -> None:
        if channel in self._channels:
            self._channels.remove(channel)

    async def dispatch(self, change: RowChange) -> None:
        for channel in list(self._channels):
            await channel.dispatch_row_change(change)

    def _on_notify(
        self, _connection: asyncpg.Connection, _pid: int, _channel: str, payload: str
    ) -> None:
        change = parse_row_change(payload)
        if change is None:
            return
        task = asyncio.create_task(self.dispatch(change))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _install_triggers(self, connection: asyncpg.Connection) -> None:
        """Create the notify function and one trigger per watched table (idempotent)"""
        try:
            async with connection.transaction():
                await connection.execute(_NOTIFY_FUNCTION_SQL.read_text())
                for table in WATCHED_TABLES:
                    qualified = f'public.{table}'
                    if await connection.fetchval('SELECT to_regclass($1)', qualified) is None:
                        Logger.base.warning(f'⚠️ [ROW-CHANGE] Table {qualified} not found')
                        continue
                    await connection.execute(
                        f'DROP TRIGGER IF EXISTS {TRIGGER_NAME} ON {qualified}'
                    )
                    await connection.execute(
                        f'CREATE TRIGGER {TRIGGER_NAME} '
                        f'AFTER INSERT OR UPDATE OR DELETE ON {qualified} FOR EACH ROW '
                        f"EXECUTE FUNCTION lodgetix_notify_row_change('{self._notify_channel}')"
                    )
        except asyncpg.InsufficientPrivilegeError:
            Logger.base.warning('⚠️ [ROW-CHANGE] Cannot install triggers, using existing ones')

    async def start(self) -> None:
        if self._runner is None or self._runner.done():
            self._runner = asyncio.create_task(self._listen_forever())

    async def _listen_forever(self) -> None:
        while True:
            connection: asyncpg.Connection | None = None
            try:
                connection = await asyncpg.connect(asyncpg_dsn())
                closed = anyio.Event()
                connection.add_termination_listener(lambda _conn: closed.set())
                await self._install_triggers(connection)
                await connection.add_listener(self._notify_channel, self._on_notify)
                Logger.base.info(f'🐘 [ROW-CHANGE] Listening on {self._notify_channel}')
                await closed.wait()
                Logger.base.warning('⚠️ [ROW-CHANGE] Listener connection closed, reconnecting')
            except asyncio.CancelledError:
                raise
            except Exception as e:
                Logger.base.error(f'❌ [ROW-CHANGE] Listener error: {e}')
            finally:
                if connection is not None and not connection.is_closed():
                    await connection.close()
            await anyio.sleep(self._reconnect_delay)

    async def stop(self) -> None:
        if self._runner is not None:
            self._runner.cancel()
            try:
                await self._runner
            except asyncio.CancelledError:
                pass
            self._runner = None
        for task in list(self._pending):
            task.cancel()
        self._channels.clear()
