"""
BDD scenarios for ticket reservation

The orchestrator runs against in-memory client storage and a mocked RPC
gateway. pytest-bdd steps are synchronous, so coroutines run on a loop owned
by the scenario.
"""

import asyncio
from collections.abc import Coroutine, Generator
from typing import Any, TypeVar
from unittest.mock import AsyncMock

import orjson
import pytest
from pytest_bdd import given, parsers, scenarios, then, when

from lodgetix.platform.exception.exceptions import BackendRpcError
from lodgetix.service.reservation.app.dto import Reservation, ReservedTicketRow
from lodgetix.service.reservation.app.reservation_cache import ReservationCache
from lodgetix.service.reservation.app.reservation_orchestrator import ReservationOrchestrator


pytestmark = pytest.mark.unit

scenarios('reservation.feature')


@pytest.fixture
def loop() -> Generator[asyncio.AbstractEventLoop, None, None]:
    event_loop = asyncio.new_event_loop()
    yield event_loop
    event_loop.close()


@pytest.fixture
def context() -> dict[str, Any]:
    return {}


T = TypeVar('T')


def _run(loop: asyncio.AbstractEventLoop, coro: Coroutine[Any, Any, T]) -> T:
    return loop.run_until_complete(coro)


# =============================================================================
# Given
# =============================================================================
@given(
    parsers.parse(
        'the backend holds tickets "{ticket_ids}" under reservation "{reservation_id}" '
        'until "{expires_at}"'
    )
)
def backend_holds_tickets(
    rpc_gateway: AsyncMock, ticket_ids: str, reservation_id: str, expires_at: str
) -> None:
    rpc_gateway.reserve_tickets.return_value = [
        ReservedTicketRow(ticket_id=t, reservation_id=reservation_id, expires_at=expires_at)
        for t in ticket_ids.split(',')
    ]


@given(parsers.parse('the client storage holds a reservation expiring at {expiry_ms:d}'))
def storage_holds_reservation(storage, expiry_ms: int) -> None:
    reservation = Reservation(
        ticket_id='ticket-1',
        reservation_id='R1',
        expires_at='2023-11-14T22:13:20Z',
        event_id='E1',
        ticket_definition_id='T1',
    )
    storage.items[ReservationCache.RESERVATION_STORAGE_KEY] = orjson.dumps(
        reservation.to_payload()
    ).decode()
    storage.items[ReservationCache.RESERVATION_STORAGE_EXPIRY] = str(expiry_ms)


@given(parsers.parse('the clock reads {now_ms:d}'))
def clock_reads(clock, now_ms: int) -> None:
    clock.now = now_ms


@given(parsers.parse('completing reservations fails with "{message}"'))
def completion_fails(rpc_gateway: AsyncMock, message: str) -> None:
    rpc_gateway.complete_reservation.side_effect = BackendRpcError(message)


# =============================================================================
# When
# =============================================================================
@given(
    parsers.re(
        r'the client reserves (?P<quantity>-?\d+) tickets of "(?P<ticket_definition_id>[^"]*)" '
        r'for event "(?P<event_id>[^"]*)"'
    )
)
@when(
    parsers.re(
        r'the client reserves (?P<quantity>-?\d+) tickets of "(?P<ticket_definition_id>[^"]*)" '
        r'for event "(?P<event_id>[^"]*)"'
    )
)
def client_reserves(
    loop,
    orchestrator: ReservationOrchestrator,
    context: dict[str, Any],
    quantity: str,
    ticket_definition_id: str,
    event_id: str,
) -> None:
    context['result'] = _run(
        loop,
        orchestrator.reserve_tickets(
            event_id=event_id, ticket_definition_id=ticket_definition_id, quantity=int(quantity)
        ),
    )


@when('the client reads the cached reservation')
def client_reads_cache(loop, orchestrator: ReservationOrchestrator, context: dict[str, Any]):
    context['stored'] = _run(loop, orchestrator.get_stored_reservation())


@when(
    parsers.parse('the client completes reservation "{reservation_id}" for attendee "{attendee}"')
)
def client_completes(
    loop,
    orchestrator: ReservationOrchestrator,
    context: dict[str, Any],
    reservation_id: str,
    attendee: str,
) -> None:
    context['result'] = _run(
        loop, orchestrator.complete_reservation(reservation_id=reservation_id, attendee_id=attendee)
    )


# =============================================================================
# Then
# =============================================================================
@then(
    parsers.parse(
        'the reservation succeeds with {count:d} tickets sharing reservation "{reservation_id}"'
    )
)
def reservation_succeeds(context: dict[str, Any], count: int, reservation_id: str) -> None:
    result = context['result']
    assert result.success is True
    assert len(result.data) == count
    assert {r.reservation_id for r in result.data} == {reservation_id}
    assert len({r.expires_at for r in result.data}) == 1


@then(parsers.parse('the reservation fails with "{message}"'))
def reservation_fails(context: dict[str, Any], message: str) -> None:
    result = context['result']
    assert result.success is False
    assert result.error == message


@then(
    parsers.parse(
        'the cached reservation is ticket "{ticket_id}" of reservation "{reservation_id}"'
    )
)
def cached_reservation_is(
    loop, orchestrator: ReservationOrchestrator, ticket_id: str, reservation_id: str
) -> None:
    stored = _run(loop, orchestrator.get_stored_reservation())
    assert stored is not None
    assert stored.ticket_id == ticket_id
    assert stored.reservation_id == reservation_id


@then('no cached reservation is returned')
def no_cached_reservation(context: dict[str, Any]) -> None:
    assert context['stored'] is None


@then('the client storage is empty')
def storage_is_empty(storage) -> None:
    assert storage.items == {}


@then(parsers.parse('the backend was asked to reserve for event "{event_id}"'))
def backend_asked_for_event(rpc_gateway: AsyncMock, event_id: str) -> None:
    assert rpc_gateway.reserve_tickets.await_args.kwargs['event_id'] == event_id


@then('the backend was not asked to reserve')
def backend_not_called(rpc_gateway: AsyncMock) -> None:
    rpc_gateway.reserve_tickets.assert_not_awaited()
