"""
https://python-dependency-injector.ets-labs.org/index.html
https://python-dependency-injector.ets-labs.org/examples/fastapi-sqlalchemy.html
"""

from dependency_injector import containers, providers

from lodgetix.platform.database.orm_db_setting import Database
from lodgetix.platform.realtime.kvrocks_realtime_client import KvrocksRealtimeClient
from lodgetix.platform.realtime.postgres_change_feed import PostgresChangeFeed
from lodgetix.service.catalog.driven_adapter.repo.attendee_command_repo_impl import (
    AttendeeCommandRepoImpl,
)
from lodgetix.service.catalog.driven_adapter.repo.attendee_query_repo_impl import (
    AttendeeQueryRepoImpl,
)
from lodgetix.service.catalog.driven_adapter.repo.customer_command_repo_impl import (
    CustomerCommandRepoImpl,
)
from lodgetix.service.catalog.driven_adapter.repo.customer_query_repo_impl import (
    CustomerQueryRepoImpl,
)
from lodgetix.service.catalog.driven_adapter.repo.event_query_repo_impl import EventQueryRepoImpl
from lodgetix.service.catalog.driven_adapter.repo.lodge_command_repo_impl import (
    LodgeCommandRepoImpl,
)
from lodgetix.service.catalog.driven_adapter.repo.lodge_query_repo_impl import LodgeQueryRepoImpl
from lodgetix.service.catalog.driven_adapter.repo.registration_command_repo_impl import (
    RegistrationCommandRepoImpl,
)
from lodgetix.service.catalog.driven_adapter.repo.registration_query_repo_impl import (
    RegistrationQueryRepoImpl,
)
from lodgetix.service.reservation.driven_adapter.auth.auth_session_gateway_impl import (
    AuthSessionGatewayImpl,
)
from lodgetix.service.reservation.driven_adapter.auth.jwt_auth import JwtAuth
from lodgetix.service.reservation.driven_adapter.auth.mock_email_sender import MockEmailSender
from lodgetix.service.reservation.driven_adapter.auth.otp_code_store_impl import OtpCodeStoreImpl
from lodgetix.service.reservation.driven_adapter.rpc.reservation_rpc_gateway_impl import (
    ReservationRpcGatewayImpl,
)
from lodgetix.service.reservation.driven_adapter.storage.kvrocks_client_storage_impl import (
    KvrocksClientStorageImpl,
)
from lodgetix.service.reservation.driving_adapter.orchestrator_registry import (
    OrchestratorRegistry,
)


class Container(containers.DeclarativeContainer):
    # Database
    database = providers.Singleton(Database)

    # Realtime (row changes from the PostgreSQL LISTEN feed, presence over Kvrocks)
    row_change_feed = providers.Singleton(PostgresChangeFeed)
    realtime_client = providers.Singleton(KvrocksRealtimeClient, row_change_feed=row_change_feed)

    # Reservation backend procedures
    rpc_gateway = providers.Singleton(ReservationRpcGatewayImpl)

    # Auth
    jwt_auth = providers.Singleton(JwtAuth)
    otp_store = providers.Singleton(OtpCodeStoreImpl)
    email_sender = providers.Singleton(MockEmailSender)
    session_gateway = providers.Factory(
        AuthSessionGatewayImpl,
        session_factory=database.provided.session,
        otp_store=otp_store,
        email_sender=email_sender,
        jwt_auth=jwt_auth,
    )

    # Per-client storage namespace (client_id supplied by the registry)
    client_storage = providers.Factory(KvrocksClientStorageImpl)

    # One orchestrator per browser client
    orchestrator_registry = providers.Singleton(
        OrchestratorRegistry,
        rpc_gateway=rpc_gateway,
        realtime_client=realtime_client,
        session_gateway_factory=session_gateway.provider,
        client_storage_factory=client_storage.provider,
    )

    # Repositories (stateless - use session_factory per-request)
    event_query_repo = providers.Singleton(
        EventQueryRepoImpl, session_factory=database.provided.session
    )
    customer_query_repo = providers.Singleton(
        CustomerQueryRepoImpl, session_factory=database.provided.session
    )
    customer_command_repo = providers.Singleton(
        CustomerCommandRepoImpl, session_factory=database.provided.session
    )
    registration_query_repo = providers.Singleton(
        RegistrationQueryRepoImpl, session_factory=database.provided.session
    )
    registration_command_repo = providers.Singleton(
        RegistrationCommandRepoImpl, session_factory=database.provided.session
    )
    attendee_query_repo = providers.Singleton(
        AttendeeQueryRepoImpl, session_factory=database.provided.session
    )
    attendee_command_repo = providers.Singleton(
        AttendeeCommandRepoImpl, session_factory=database.provided.session
    )
    lodge_query_repo = providers.Singleton(
        LodgeQueryRepoImpl, session_factory=database.provided.session
    )
    lodge_command_repo = providers.Singleton(
        LodgeCommandRepoImpl, session_factory=database.provided.session
    )


container = Container()
