from collections.abc import AsyncIterator, Generator
from contextlib import asynccontextmanager
from datetime import date, datetime, timedelta, timezone
from unittest.mock import AsyncMock

from fastapi import FastAPI
from fastapi.testclient import TestClient
import pytest

from lodgetix.platform.app_factory import create_app
from lodgetix.platform.realtime.in_memory_realtime_client import InMemoryRealtimeClient
from lodgetix.service.catalog.app.dto import AdminEventListItem
from lodgetix.service.catalog.app.interface.i_attendee_query_repo import IAttendeeQueryRepo
from lodgetix.service.catalog.app.interface.i_customer_query_repo import ICustomerQueryRepo
from lodgetix.service.catalog.app.interface.i_event_query_repo import IEventQueryRepo
from lodgetix.service.catalog.app.interface.i_lodge_query_repo import ILodgeQueryRepo
from lodgetix.service.catalog.app.query.get_attendee_use_case import GetAttendeeUseCase
from lodgetix.service.catalog.app.query.get_customer_use_case import GetCustomerUseCase
from lodgetix.service.catalog.app.query.get_event_use_case import GetEventUseCase
from lodgetix.service.catalog.app.query.list_admin_events_use_case import ListAdminEventsUseCase
from lodgetix.service.catalog.app.query.list_events_use_case import ListEventsUseCase
from lodgetix.service.catalog.app.query.list_lodges_use_case import ListLodgesUseCase
from lodgetix.service.catalog.domain.entity.customer_entity import CustomerEntity
from lodgetix.service.catalog.domain.entity.event_day_entity import EventDayEntity
from lodgetix.service.catalog.domain.entity.event_entity import EventEntity
from lodgetix.service.catalog.domain.entity.lodge_entity import GrandLodgeEntity
from lodgetix.service.reservation.app.dto import AuthUser
from lodgetix.service.reservation.driven_adapter.auth.jwt_auth import JwtAuth
from lodgetix.service.reservation.driven_adapter.storage.in_memory_client_storage_impl import (
    InMemoryClientStorageImpl,
)
from lodgetix.service.reservation.driving_adapter.http_controller.client_dependency import (
    get_jwt_auth,
    get_orchestrator_registry,
)
from lodgetix.service.reservation.driving_adapter.orchestrator_registry import (
    OrchestratorRegistry,
)


AEST = timezone(timedelta(hours=10))
HEADERS = {'X-Client-Id': 'client-1'}
SERVICE_ROLE_HEADERS = {'X-Service-Role-Key': 'test-service-role-key'}


def auth_headers(user_id: str = 'user-1') -> dict[str, str]:
    token, _ = JwtAuth().create_jwt_token(AuthUser(id=user_id, is_anonymous=True))
    return {**HEADERS, 'Authorization': f'Bearer {token}'}


@asynccontextmanager
async def _no_lifespan(app: FastAPI) -> AsyncIterator[None]:
    yield


@pytest.fixture
def event_query_repo() -> AsyncMock:
    return AsyncMock(spec=IEventQueryRepo)


@pytest.fixture
def customer_query_repo() -> AsyncMock:
    return AsyncMock(spec=ICustomerQueryRepo)


@pytest.fixture
def attendee_query_repo() -> AsyncMock:
    return AsyncMock(spec=IAttendeeQueryRepo)


@pytest.fixture
def lodge_query_repo() -> AsyncMock:
    return AsyncMock(spec=ILodgeQueryRepo)


@pytest.fixture
def client(
    event_query_repo: AsyncMock,
    customer_query_repo: AsyncMock,
    attendee_query_repo: AsyncMock,
    lodge_query_repo: AsyncMock,
    rpc_gateway: AsyncMock,
    session_gateway: AsyncMock,
) -> Generator[TestClient, None, None]:
    registry = OrchestratorRegistry(
        rpc_gateway=rpc_gateway,
        realtime_client=InMemoryRealtimeClient(),
        session_gateway_factory=lambda: session_gateway,
        client_storage_factory=lambda client_id: InMemoryClientStorageImpl(),
    )
    app = create_app(lifespan=_no_lifespan)
    app.dependency_overrides.update(
        {
            get_orchestrator_registry: lambda: registry,
            get_jwt_auth: JwtAuth,
            ListEventsUseCase.depends: lambda: ListEventsUseCase(event_query_repo),
            GetEventUseCase.depends: lambda: GetEventUseCase(event_query_repo),
            ListAdminEventsUseCase.depends: lambda: ListAdminEventsUseCase(event_query_repo),
            GetCustomerUseCase.depends: lambda: GetCustomerUseCase(customer_query_repo),
            GetAttendeeUseCase.depends: lambda: GetAttendeeUseCase(
                attendee_query_repo=attendee_query_repo, customer_query_repo=customer_query_repo
            ),
            ListLodgesUseCase.depends: lambda: ListLodgesUseCase(lodge_query_repo),
        }
    )
    with TestClient(app) as test_client:
        yield test_client


@pytest.mark.unit
class TestEventEndpoints:
    def test_list_events_with_display_fields(self, client: TestClient, event_query_repo):
        event_query_repo.list_child_events.return_value = (
            [
                EventEntity(
                    id='E1',
                    title='Grand Installation',
                    slug='grand-installation',
                    event_start=datetime(2025, 4, 27, 18, 0, tzinfo=AEST),
                )
            ],
            1,
        )

        response = client.get('/api/event', params={'page': 1, 'limit': 9})

        assert response.status_code == 200
        body = response.json()
        assert body['total_count'] == 1
        assert body['events'][0]['day'] == 'Sunday, 27 April 25'
        assert body['events'][0]['time'] == '06:00 PM'

    def test_page_zero_is_rejected(self, client: TestClient, event_query_repo):
        response = client.get('/api/event', params={'page': 0})

        assert response.status_code == 400
        event_query_repo.list_child_events.assert_not_awaited()

    def test_unknown_slug_is_not_found(self, client: TestClient, event_query_repo):
        event_query_repo.get_by_slug.return_value = None

        response = client.get('/api/event/missing')

        assert response.status_code == 404
        assert response.json() == {'detail': 'Event not found: missing'}


@pytest.mark.unit
class TestCustomerEndpoints:
    def test_my_customer(self, client: TestClient, customer_query_repo):
        customer_query_repo.get_by_user_id.return_value = CustomerEntity(
            id='C1', user_id='user-1', email='ann@example.org'
        )

        response = client.get('/api/customer/me', headers=auth_headers())

        assert response.status_code == 200
        assert response.json()['id'] == 'C1'
        customer_query_repo.get_by_user_id.assert_awaited_once_with(user_id='user-1')

    def test_no_session_is_unauthorized(self, client: TestClient, session_gateway):
        session_gateway.get_session.return_value = None

        response = client.get('/api/customer/me', headers=auth_headers())

        assert response.status_code == 401
        assert response.json() == {'detail': 'Not authenticated'}

    def test_client_id_alone_is_unauthorized(self, client: TestClient, customer_query_repo):
        response = client.get('/api/customer/me', headers=HEADERS)

        assert response.status_code == 401
        assert response.json() == {'detail': 'Not authenticated'}
        customer_query_repo.get_by_user_id.assert_not_awaited()

    def test_token_of_another_user_is_rejected(self, client: TestClient, customer_query_repo):
        # Given: the caller knows client-1's id but holds a token for someone else
        response = client.get('/api/customer/me', headers=auth_headers(user_id='user-2'))

        assert response.status_code == 401
        assert response.json() == {'detail': 'Token does not match the client session'}
        customer_query_repo.get_by_user_id.assert_not_awaited()

    def test_tampered_token_is_rejected(self, client: TestClient):
        headers = auth_headers()
        headers['Authorization'] += 'x'

        response = client.get('/api/customer/me', headers=headers)

        assert response.status_code == 401
        assert response.json() == {'detail': 'Invalid token'}

    def test_token_cookie_is_accepted(self, client: TestClient, customer_query_repo):
        customer_query_repo.get_by_user_id.return_value = CustomerEntity(
            id='C1', user_id='user-1', email='ann@example.org'
        )
        token = auth_headers()['Authorization'].removeprefix('Bearer ')
        client.cookies.set('lodgetix_access_token', token)

        response = client.get('/api/customer/me', headers=HEADERS)

        assert response.status_code == 200


@pytest.mark.unit
class TestAdminEventEndpoints:
    def test_service_role_key_is_required(self, client: TestClient, event_query_repo):
        response = client.get('/api/admin/event')

        assert response.status_code == 403
        event_query_repo.list_admin_events.assert_not_awaited()

    def test_wrong_service_role_key(self, client: TestClient):
        response = client.get('/api/admin/event', headers={'X-Service-Role-Key': 'guess'})

        assert response.status_code == 403

    def test_list_with_service_role(self, client: TestClient, event_query_repo):
        event_query_repo.list_admin_events.return_value = (
            [
                AdminEventListItem.from_event(
                    EventEntity(id='E1', title='Grand Installation', slug='gi'), None
                )
            ],
            1,
        )

        response = client.get(
            '/api/admin/event', params={'page': 2, 'limit': 5}, headers=SERVICE_ROLE_HEADERS
        )

        assert response.status_code == 200
        body = response.json()
        assert body['count'] == 1
        assert body['data'][0]['location'] == 'No location'
        assert body['data'][0]['status'] == 'draft'
        assert event_query_repo.list_admin_events.await_args.kwargs['offset'] == 5


@pytest.mark.unit
class TestEventDayEndpoints:
    def test_days_are_not_taken_for_a_slug(self, client: TestClient, event_query_repo):
        event_query_repo.list_event_days.return_value = [
            EventDayEntity(id='D1', date=date(2025, 4, 25), name='Friday', day_number=1)
        ]

        response = client.get('/api/event/days')

        assert response.status_code == 200
        assert response.json()[0]['date'] == '2025-04-25'
        event_query_repo.get_by_slug.assert_not_awaited()


@pytest.mark.unit
class TestAttendeeEndpoints:
    def test_my_customer_id(self, client: TestClient, customer_query_repo):
        customer_query_repo.get_by_user_id.return_value = CustomerEntity(
            id='C1', user_id='user-1', email='ann@example.org'
        )

        response = client.get('/api/customer/me/id', headers=auth_headers())

        assert response.status_code == 200
        assert response.json() == {'customer_id': 'C1'}

    def test_missing_mason_is_not_found(
        self, client: TestClient, customer_query_repo, attendee_query_repo
    ):
        customer_query_repo.get_by_user_id.return_value = CustomerEntity(
            id='C1', user_id='user-1', email='ann@example.org'
        )
        attendee_query_repo.get_mason_by_customer_id.return_value = None

        response = client.get('/api/attendee/mason', headers=auth_headers())

        assert response.status_code == 404
        assert response.json() == {'detail': 'Mason not found'}

    def test_mason_requires_a_signed_in_user(self, client: TestClient, attendee_query_repo):
        response = client.get('/api/attendee/mason', headers=HEADERS)

        assert response.status_code == 401
        attendee_query_repo.get_mason_by_customer_id.assert_not_awaited()


@pytest.mark.unit
class TestLodgeEndpoints:
    def test_grand_lodges_by_country(self, client: TestClient, lodge_query_repo):
        lodge_query_repo.list_grand_lodges.return_value = [
            GrandLodgeEntity(id='GL1', name='United Grand Lodge of NSW & ACT')
        ]

        response = client.get('/api/lodge/grand-lodges', params={'country_code': 'AUS'})

        assert response.status_code == 200
        assert response.json()[0]['id'] == 'GL1'
        lodge_query_repo.list_grand_lodges.assert_awaited_once_with(country_code='AUS')
