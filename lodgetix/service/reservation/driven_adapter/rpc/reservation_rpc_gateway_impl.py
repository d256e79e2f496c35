"""
Reservation RPC Gateway Implementation

Calls the reservation stored procedures over the shared asyncpg pool using
PostgreSQL named-argument notation, so the wire parameter names
(`p_event_id`, `p_quantity`, ...) stay exactly those of the functions.
"""

from datetime import datetime, timezone
from typing import Any, List

import asyncpg
import orjson

from lodgetix.platform.database.asyncpg_setting import get_asyncpg_pool
from lodgetix.platform.exception.exceptions import BackendRpcError
from lodgetix.platform.logging.loguru_io import Logger
from lodgetix.service.reservation.app.dto import ReservedTicketRow, TicketAvailability
from lodgetix.service.reservation.app.interface import IReservationRpcGateway


_BACKEND_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError)


def to_iso(value: Any) -> str:
    """Timestamps as ISO-8601 with a `Z` suffix for UTC"""
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc).isoformat().replace('+00:00', 'Z')
    return '' if value is None else str(value)


def _backend_error(procedure: str, error: Exception) -> BackendRpcError:
    message = getattr(error, 'message', None) or str(error) or type(error).__name__
    Logger.base.warning(f'⚠️ [RPC] {procedure} failed: {message}')
    return BackendRpcError(message)


class ReservationRpcGatewayImpl(IReservationRpcGateway):
    async def reserve_tickets(
        self,
        *,
        event_id: str,
        ticket_definition_id: str,
        quantity: int,
        reservation_minutes: int,
    ) -> List[ReservedTicketRow]:
        try:
            pool = await get_asyncpg_pool()
            async with pool.acquire() as conn:
                rows = await conn.fetch(
                    """
                    SELECT ticket_id, reservation_id, expires_at
                    FROM reserve_tickets(
                        p_event_id => $1,
                        p_ticket_definition_id => $2,
                        p_quantity => $3,
                        p_reservation_minutes => $4
                    )
                    """,
                    event_id,
                    ticket_definition_id,
                    quantity,
                    reservation_minutes,
                )
        except _BACKEND_ERRORS as e:
            raise _backend_error('reserve_tickets', e) from e

        Logger.base.debug(f'🎫 [RPC] reserve_tickets returned {len(rows)} rows')
        return [
            ReservedTicketRow(
                ticket_id=str(row['ticket_id']),
                reservation_id=str(row['reservation_id']),
                expires_at=to_iso(row['expires_at']),
            )
            for row in rows
        ]

    async def complete_reservation(self, *, reservation_id: str, attendee_id: str) -> List[str]:
        try:
            pool = await get_asyncpg_pool()
            async with pool.acquire() as conn:
                ticket_ids = await conn.fetchval(
                    'SELECT complete_reservation(p_reservation_id => $1, p_attendee_id => $2)',
                    reservation_id,
                    attendee_id,
                )
        except _BACKEND_ERRORS as e:
            raise _backend_error('complete_reservation', e) from e

        return [str(ticket_id) for ticket_id in ticket_ids or []]

    async def get_ticket_availability(
        self, *, event_id: str, ticket_definition_id: str
    ) -> TicketAvailability:
        try:
            pool = await get_asyncpg_pool()
            async with pool.acquire() as conn:
                raw = await conn.fetchval(
                    """
                    SELECT get_ticket_availability(
                        p_event_id => $1,
                        p_ticket_definition_id => $2
                    )
                    """,
                    event_id,
                    ticket_definition_id,
                )
        except _BACKEND_ERRORS as e:
            raise _backend_error('get_ticket_availability', e) from e

        # json/jsonb arrive as text without a registered codec
        if isinstance(raw, (str, bytes)):
            try:
                raw = orjson.loads(raw)
            except orjson.JSONDecodeError as e:
                raise BackendRpcError(f'Malformed availability payload: {e}') from e
        return TicketAvailability.from_payload(raw)

    async def is_ticket_high_demand(
        self, *, event_id: str, ticket_definition_id: str, threshold_percent: int
    ) -> bool:
        try:
            pool = await get_asyncpg_pool()
            async with pool.acquire() as conn:
                high_demand = await conn.fetchval(
                    """
                    SELECT is_ticket_high_demand(
                        p_event_id => $1,
                        p_ticket_definition_id => $2,
                        p_threshold_percent => $3
                    )
                    """,
                    event_id,
                    ticket_definition_id,
                    threshold_percent,
                )
        except _BACKEND_ERRORS as e:
            raise _backend_error('is_ticket_high_demand', e) from e

        return bool(high_demand)
