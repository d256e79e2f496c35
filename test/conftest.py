"""
Test Configuration and Fixtures

Unit tests run without PostgreSQL or Kvrocks: ports are replaced by
`AsyncMock`s or by the in-memory adapters (client storage, realtime hub).

Integration tests (`integration` marker) get real connections from the
`kvrocks`, `pg_connection` and `pg_session_factory` fixtures. Each test owns
its connections (pytest-asyncio runs one event loop per test) and is skipped
when the service is not reachable.
"""

# =============================================================================
# CRITICAL: Environment setup MUST happen before any other imports
# Settings are read once at import time.
# =============================================================================
import asyncio
import os
from pathlib import Path


def _early_setup_test_environment() -> None:
    worker_id = os.environ.get('PYTEST_XDIST_WORKER', 'master')
    if worker_id == 'master':
        os.environ['POSTGRES_DB'] = 'lodgetix_test_db'
        os.environ['KVROCKS_KEY_PREFIX'] = 'test_'
    else:
        os.environ['POSTGRES_DB'] = f'lodgetix_test_db_{worker_id}'
        os.environ['KVROCKS_KEY_PREFIX'] = f'test_{worker_id}_'

    test_log_dir = Path(__file__).parent / 'test_log'
    test_log_dir.mkdir(exist_ok=True)
    os.environ['TEST_LOG_DIR'] = str(test_log_dir)

    os.environ.setdefault('DEBUG', 'false')
    os.environ.setdefault('AUTH_SERVICE_ROLE_KEY', 'test-service-role-key')
    os.environ.setdefault('RESERVATION_OPERATION_TIMEOUT_SECONDS', '2')


_early_setup_test_environment()

from collections.abc import AsyncGenerator, Callable, Generator  # noqa: E402
from datetime import datetime, timezone  # noqa: E402
from unittest.mock import AsyncMock  # noqa: E402

import asyncpg  # noqa: E402
import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from redis.exceptions import RedisError  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from lodgetix.platform.config.core_setting import settings  # noqa: E402
from lodgetix.platform.database.asyncpg_setting import asyncpg_dsn  # noqa: E402

from lodgetix.platform.event.in_memory_broadcaster import (  # noqa: E402
    InMemoryEventBroadcasterImpl,
)
from lodgetix.platform.realtime.in_memory_realtime_client import (  # noqa: E402
    InMemoryRealtimeClient,
)
from lodgetix.platform.state.kvrocks_client import KvrocksClient  # noqa: E402
from lodgetix.service.reservation.app.dto import (  # noqa: E402
    AuthSession,
    AuthUser,
    TicketAvailability,
)
from lodgetix.service.reservation.app.interface import (  # noqa: E402
    IClientStorage,
    IReservationRpcGateway,
    ISessionGateway,
)
from lodgetix.service.reservation.app.reservation_cache import ReservationCache  # noqa: E402
from lodgetix.service.reservation.app.reservation_orchestrator import (  # noqa: E402
    ReservationOrchestrator,
)
from lodgetix.service.reservation.app.session_bootstrap import SessionBootstrap  # noqa: E402
from lodgetix.service.reservation.driven_adapter.storage import (  # noqa: E402
    in_memory_client_storage_impl,
)


# 2025-01-01T00:00:00Z
NOW_MS = 1735689600000
CLIENT_ID = 'client-1'


class FixedClock:
    def __init__(self, now: int = NOW_MS) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now


def make_auth_session(*, user_id: str = 'user-1', is_anonymous: bool = True) -> AuthSession:
    return AuthSession(
        access_token='token',
        user=AuthUser(id=user_id, is_anonymous=is_anonymous),
        expires_at=datetime(2030, 1, 1, tzinfo=timezone.utc),
    )


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def storage() -> in_memory_client_storage_impl.InMemoryClientStorageImpl:
    return in_memory_client_storage_impl.InMemoryClientStorageImpl()


@pytest.fixture
def reservation_cache(storage: IClientStorage, clock: FixedClock) -> ReservationCache:
    return ReservationCache(storage=storage, clock=clock)


@pytest.fixture
def rpc_gateway() -> AsyncMock:
    gateway = AsyncMock(spec=IReservationRpcGateway)
    gateway.reserve_tickets.return_value = []
    gateway.complete_reservation.return_value = []
    gateway.get_ticket_availability.return_value = TicketAvailability(
        available=10, reserved=2, sold=3
    )
    gateway.is_ticket_high_demand.return_value = False
    return gateway


@pytest.fixture
def session_gateway() -> AsyncMock:
    gateway = AsyncMock(spec=ISessionGateway)
    gateway.get_session.return_value = make_auth_session()
    gateway.sign_in_anonymously.return_value = make_auth_session()
    return gateway


@pytest.fixture
def realtime_client() -> InMemoryRealtimeClient:
    return InMemoryRealtimeClient()


@pytest.fixture
def broadcaster() -> InMemoryEventBroadcasterImpl:
    return InMemoryEventBroadcasterImpl(max_buffer_size=10)


@pytest.fixture
def orchestrator(
    rpc_gateway: AsyncMock,
    session_gateway: AsyncMock,
    realtime_client: InMemoryRealtimeClient,
    reservation_cache: ReservationCache,
    broadcaster: InMemoryEventBroadcasterImpl,
    clock: FixedClock,
) -> Generator[ReservationOrchestrator, None, None]:
    yield ReservationOrchestrator(
        rpc_gateway=rpc_gateway,
        session_bootstrap=SessionBootstrap(session_gateway=session_gateway),
        realtime_client=realtime_client,
        reservation_cache=reservation_cache,
        broadcaster=broadcaster,
        client_id=CLIENT_ID,
        clock=clock,
    )


@pytest.fixture
def auth_session_factory() -> Callable[..., AuthSession]:
    return make_auth_session


# =============================================================================
# Integration Fixtures
# =============================================================================
_PG_UNREACHABLE = (OSError, asyncio.TimeoutError, asyncpg.PostgresError)


async def _delete_prefixed_keys(client: KvrocksClient) -> None:
    redis = client.get_client()
    keys = await redis.keys(f'{settings.KVROCKS_KEY_PREFIX}*')
    if keys:
        await redis.delete(*keys)


@pytest_asyncio.fixture
async def kvrocks() -> AsyncGenerator[KvrocksClient, None]:
    client = KvrocksClient()
    try:
        await client.initialize()
    except (RedisError, OSError) as e:
        pytest.skip(f'Kvrocks not reachable: {e}')

    await _delete_prefixed_keys(client)
    yield client
    await _delete_prefixed_keys(client)
    await client.disconnect()


async def _ensure_test_database() -> None:
    try:
        connection = await asyncpg.connect(asyncpg_dsn(), timeout=5)
    except asyncpg.InvalidCatalogNameError:
        admin = await asyncpg.connect(asyncpg_dsn().rsplit('/', 1)[0] + '/postgres', timeout=5)
        try:
            await admin.execute(f'CREATE DATABASE "{settings.POSTGRES_DB}"')
        except asyncpg.DuplicateDatabaseError:
            pass
        finally:
            await admin.close()
        return
    await connection.close()


@pytest_asyncio.fixture
async def pg_connection() -> AsyncGenerator[asyncpg.Connection, None]:
    try:
        await _ensure_test_database()
        connection = await asyncpg.connect(asyncpg_dsn(), timeout=5)
    except _PG_UNREACHABLE as e:
        pytest.skip(f'PostgreSQL not reachable: {e}')

    yield connection
    await connection.close()


@pytest_asyncio.fixture
async def pg_session_factory(
    pg_connection: asyncpg.Connection,
) -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """ORM sessions on the test database; tests create the tables they need"""
    engine = create_async_engine(settings.DATABASE_URL_ASYNC)
    yield async_sessionmaker(engine, expire_on_commit=False)

    await engine.dispose()
