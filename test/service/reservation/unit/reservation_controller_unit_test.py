"""
HTTP tests for the reservation routes

The app is built without a lifespan; the orchestrator registry dependency is
overridden with one backed by in-memory adapters and mocked gateways.
"""

from collections.abc import AsyncIterator, Generator
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock

from fastapi import FastAPI
from fastapi.testclient import TestClient
import pytest

from lodgetix.platform.app_factory import create_app
from lodgetix.platform.exception.exceptions import BackendRpcError
from lodgetix.platform.realtime.in_memory_realtime_client import InMemoryRealtimeClient
from lodgetix.service.reservation.app.dto import ReservedTicketRow
from lodgetix.service.reservation.driven_adapter.storage.in_memory_client_storage_impl import (
    InMemoryClientStorageImpl,
)
from lodgetix.service.reservation.driving_adapter.http_controller.client_dependency import (
    get_orchestrator_registry,
)
from lodgetix.service.reservation.driving_adapter.orchestrator_registry import (
    OrchestratorRegistry,
)


HEADERS = {'X-Client-Id': 'client-1'}
FAR_FUTURE = '2099-01-01T00:15:00Z'


@asynccontextmanager
async def _no_lifespan(app: FastAPI) -> AsyncIterator[None]:
    yield


@pytest.fixture
def registry(rpc_gateway: AsyncMock, session_gateway: AsyncMock) -> OrchestratorRegistry:
    return OrchestratorRegistry(
        rpc_gateway=rpc_gateway,
        realtime_client=InMemoryRealtimeClient(),
        session_gateway_factory=lambda: session_gateway,
        client_storage_factory=lambda client_id: InMemoryClientStorageImpl(),
    )


@pytest.fixture
def client(registry: OrchestratorRegistry) -> Generator[TestClient, None, None]:
    app = create_app(lifespan=_no_lifespan, title_suffix=' (Test)')
    app.dependency_overrides[get_orchestrator_registry] = lambda: registry
    with TestClient(app) as test_client:
        yield test_client


@pytest.mark.unit
class TestReserveEndpoint:
    def test_reserve_created(self, client: TestClient, rpc_gateway: AsyncMock):
        rpc_gateway.reserve_tickets.return_value = [
            ReservedTicketRow(ticket_id='ticket-1', reservation_id='R1', expires_at=FAR_FUTURE)
        ]

        response = client.post(
            '/api/reservation',
            json={'event_id': 'E1', 'ticket_definition_id': 'T1', 'quantity': 1},
            headers=HEADERS,
        )

        assert response.status_code == 201
        body = response.json()
        assert body['success'] is True
        assert body['data'][0]['reservation_id'] == 'R1'
        assert body['data'][0]['event_id'] == 'E1'

        stored = client.get('/api/reservation/stored', headers=HEADERS).json()
        assert stored['reservation']['ticket_id'] == 'ticket-1'

    def test_invalid_quantity_is_bad_request(self, client: TestClient, rpc_gateway: AsyncMock):
        response = client.post(
            '/api/reservation',
            json={'event_id': 'E1', 'ticket_definition_id': 'T1', 'quantity': 0},
            headers=HEADERS,
        )

        assert response.status_code == 400
        assert response.json()['error_kind'] == 'validation'
        rpc_gateway.reserve_tickets.assert_not_awaited()

    def test_backend_error_is_conflict(self, client: TestClient, rpc_gateway: AsyncMock):
        rpc_gateway.reserve_tickets.side_effect = BackendRpcError('Not enough tickets available')

        response = client.post(
            '/api/reservation',
            json={'event_id': 'E1', 'ticket_definition_id': 'T1', 'quantity': 5},
            headers=HEADERS,
        )

        assert response.status_code == 409
        assert response.json()['error'] == 'Not enough tickets available'

    def test_missing_client_id_is_rejected(self, client: TestClient):
        response = client.post(
            '/api/reservation', json={'ticket_definition_id': 'T1', 'quantity': 1}
        )

        assert response.status_code == 400

    def test_malformed_client_id_is_rejected(self, client: TestClient):
        response = client.get('/api/reservation/stored', headers={'X-Client-Id': 'a b'})

        assert response.status_code == 400


@pytest.mark.unit
class TestClientStorageEndpoints:
    def test_nothing_stored(self, client: TestClient):
        assert client.get('/api/reservation/stored', headers=HEADERS).json() == {
            'reservation': None
        }

    def test_registration_type_round_trip(self, client: TestClient):
        stored = client.put(
            '/api/reservation/registration-type',
            json={'registration_type': 'lodge'},
            headers=HEADERS,
        )
        read = client.get('/api/reservation/registration-type', headers=HEADERS)
        other_client = client.get(
            '/api/reservation/registration-type', headers={'X-Client-Id': 'client-2'}
        )

        assert stored.json() == {'outcome': 'ok'}
        assert read.json() == {'registration_type': 'lodge'}
        assert other_client.json() == {'registration_type': None}

    def test_unknown_registration_type(self, client: TestClient):
        response = client.put(
            '/api/reservation/registration-type',
            json={'registration_type': 'tourist'},
            headers=HEADERS,
        )

        assert response.status_code == 400


@pytest.mark.unit
class TestAvailabilityEndpoints:
    def test_counts(self, client: TestClient):
        response = client.get(
            '/api/reservation/availability',
            params={'event_id': 'E1', 'ticket_definition_id': 'T1'},
            headers=HEADERS,
        )

        assert response.status_code == 200
        assert response.json() == {'available': 10, 'reserved': 2, 'sold': 3}

    def test_high_demand(self, client: TestClient, rpc_gateway: AsyncMock):
        rpc_gateway.is_ticket_high_demand.return_value = True

        response = client.get(
            '/api/reservation/availability/high-demand',
            params={'event_id': 'E1', 'ticket_definition_id': 'T1', 'threshold_percent': 50},
            headers=HEADERS,
        )

        assert response.json()['high_demand'] is True


@pytest.mark.unit
class TestRealtimeEndpoints:
    def test_init_then_cleanup(self, client: TestClient, registry: OrchestratorRegistry):
        opened = client.post('/api/reservation/events/E1/realtime', headers=HEADERS)
        closed = client.delete('/api/reservation/realtime', headers=HEADERS)

        assert opened.json() == {
            'client_id': 'client-1',
            'event_id': 'E1',
            'channels': ['presence-tickets-E1', 'system-tickets-E1'],
        }
        assert closed.json()['channels'] == []

    def test_dispose_client_session(self, client: TestClient, registry: OrchestratorRegistry):
        client.post('/api/reservation/events/E1/realtime', headers=HEADERS)

        response = client.delete('/api/reservation/session', headers=HEADERS)

        assert response.status_code == 204
        assert 'client-1' not in registry
