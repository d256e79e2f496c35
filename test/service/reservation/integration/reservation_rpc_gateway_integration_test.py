"""
Integration tests for ReservationRpcGatewayImpl

The stored procedures are replaced by stand-ins in a scratch schema that
comes first on the pool's search_path. The tests cover the call syntax,
the argument binding and the result decoding against a real server.
"""

from collections.abc import AsyncGenerator

import asyncpg
import pytest
import pytest_asyncio

from lodgetix.platform.database.asyncpg_setting import asyncpg_dsn
from lodgetix.platform.exception.exceptions import BackendRpcError
from lodgetix.service.reservation.app.dto import ReservedTicketRow, TicketAvailability
from lodgetix.service.reservation.driven_adapter.rpc import reservation_rpc_gateway_impl
from lodgetix.service.reservation.driven_adapter.rpc.reservation_rpc_gateway_impl import (
    ReservationRpcGatewayImpl,
)


pytestmark = [pytest.mark.integration, pytest.mark.asyncio]

SCHEMA = 'lodgetix_rpc_test'

STAND_IN_FUNCTIONS = f"""
CREATE SCHEMA IF NOT EXISTS {SCHEMA};

CREATE OR REPLACE FUNCTION {SCHEMA}.reserve_tickets(
    p_event_id text,
    p_ticket_definition_id text,
    p_quantity integer,
    p_reservation_minutes integer
)
RETURNS TABLE (ticket_id text, reservation_id text, expires_at timestamptz)
LANGUAGE plpgsql AS $$
BEGIN
    IF p_quantity > 5 THEN
        RAISE EXCEPTION 'Not enough tickets available';
    END IF;
    RETURN QUERY
    SELECT
        p_ticket_definition_id || '-' || n,
        'R-' || p_event_id,
        timestamptz '2025-01-01 00:00:00+00' + make_interval(mins => p_reservation_minutes)
    FROM generate_series(1, p_quantity) AS n;
END
$$;

CREATE OR REPLACE FUNCTION {SCHEMA}.complete_reservation(
    p_reservation_id text,
    p_attendee_id text
)
RETURNS text[]
LANGUAGE sql AS $$
    SELECT CASE
        WHEN p_reservation_id = 'unknown' THEN NULL
        ELSE ARRAY[p_reservation_id || '-1', p_reservation_id || '-2']
    END
$$;

CREATE OR REPLACE FUNCTION {SCHEMA}.get_ticket_availability(
    p_event_id text,
    p_ticket_definition_id text
)
RETURNS json
LANGUAGE sql AS $$
    SELECT json_build_object('available', 8, 'reserved', 1, 'sold', 3)
$$;

CREATE OR REPLACE FUNCTION {SCHEMA}.is_ticket_high_demand(
    p_event_id text,
    p_ticket_definition_id text,
    p_threshold_percent integer
)
RETURNS boolean
LANGUAGE sql AS $$
    SELECT p_threshold_percent <= 50
$$;
"""


@pytest_asyncio.fixture
async def gateway(
    pg_connection: asyncpg.Connection, monkeypatch: pytest.MonkeyPatch
) -> AsyncGenerator[ReservationRpcGatewayImpl, None]:
    await pg_connection.execute(STAND_IN_FUNCTIONS)
    pool = await asyncpg.create_pool(
        asyncpg_dsn(),
        min_size=1,
        max_size=2,
        server_settings={'search_path': f'{SCHEMA},public'},
    )

    async def scratch_schema_pool() -> asyncpg.Pool:
        return pool

    monkeypatch.setattr(reservation_rpc_gateway_impl, 'get_asyncpg_pool', scratch_schema_pool)
    yield ReservationRpcGatewayImpl()

    await pool.close()
    await pg_connection.execute(f'DROP SCHEMA IF EXISTS {SCHEMA} CASCADE')


class TestReservationRpcGateway:
    async def test_reserve_tickets_returns_one_row_per_ticket(
        self, gateway: ReservationRpcGatewayImpl
    ):
        rows = await gateway.reserve_tickets(
            event_id='E1', ticket_definition_id='T1', quantity=2, reservation_minutes=15
        )

        assert rows == [
            ReservedTicketRow('T1-1', 'R-E1', '2025-01-01T00:15:00Z'),
            ReservedTicketRow('T1-2', 'R-E1', '2025-01-01T00:15:00Z'),
        ]

    async def test_raised_exception_message_is_kept(self, gateway: ReservationRpcGatewayImpl):
        with pytest.raises(BackendRpcError, match='^Not enough tickets available$'):
            await gateway.reserve_tickets(
                event_id='E1', ticket_definition_id='T1', quantity=6, reservation_minutes=15
            )

    async def test_complete_reservation(self, gateway: ReservationRpcGatewayImpl):
        assert await gateway.complete_reservation(reservation_id='R1', attendee_id='A1') == [
            'R1-1',
            'R1-2',
        ]
        assert await gateway.complete_reservation(reservation_id='unknown', attendee_id='A1') == []

    async def test_json_availability_is_decoded(self, gateway: ReservationRpcGatewayImpl):
        availability = await gateway.get_ticket_availability(
            event_id='E1', ticket_definition_id='T1'
        )

        assert availability == TicketAvailability(available=8, reserved=1, sold=3)

    async def test_high_demand_threshold_is_passed(self, gateway: ReservationRpcGatewayImpl):
        assert (
            await gateway.is_ticket_high_demand(
                event_id='E1', ticket_definition_id='T1', threshold_percent=40
            )
            is True
        )
        assert (
            await gateway.is_ticket_high_demand(
                event_id='E1', ticket_definition_id='T1', threshold_percent=80
            )
            is False
        )
