from typing import Optional

from dependency_injector.wiring import Provide, inject
from fastapi import Cookie, Depends, Header
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import SecretStr

from lodgetix.platform.config.di import Container
from lodgetix.platform.exception.exceptions import AuthenticationError, ForbiddenError
from lodgetix.platform.logging.loguru_io import Logger
from lodgetix.service.reservation.app.dto import AuthUser
from lodgetix.service.reservation.app.reservation_orchestrator import ReservationOrchestrator
from lodgetix.service.reservation.driven_adapter.auth.jwt_auth import JwtAuth
from lodgetix.service.reservation.driven_adapter.auth.service_role import matches_service_role_key
from lodgetix.service.reservation.driving_adapter.orchestrator_registry import (
    OrchestratorRegistry,
)


CLIENT_ID_HEADER = 'X-Client-Id'
CLIENT_ID_PATTERN = r'^[A-Za-z0-9_-]{1,64}$'
SERVICE_ROLE_HEADER = 'X-Service-Role-Key'
ACCESS_TOKEN_COOKIE = 'lodgetix_access_token'

bearer_scheme = HTTPBearer(auto_error=False)


@inject
async def get_jwt_auth(jwt_auth: JwtAuth = Depends(Provide[Container.jwt_auth])) -> JwtAuth:
    return jwt_auth


@inject
async def get_orchestrator_registry(
    registry: OrchestratorRegistry = Depends(Provide[Container.orchestrator_registry]),
) -> OrchestratorRegistry:
    return registry


async def get_client_id(
    client_id: str = Header(..., alias=CLIENT_ID_HEADER, pattern=CLIENT_ID_PATTERN),
) -> str:
    return client_id


async def get_reservation_orchestrator(
    client_id: str = Depends(get_client_id),
    registry: OrchestratorRegistry = Depends(get_orchestrator_registry),
) -> ReservationOrchestrator:
    """Orchestrator of the calling client, created on first use"""
    return registry.get_or_create(client_id)


async def get_current_user(
    orchestrator: ReservationOrchestrator = Depends(get_reservation_orchestrator),
    jwt_auth: JwtAuth = Depends(get_jwt_auth),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    cookie_token: Optional[str] = Cookie(None, alias=ACCESS_TOKEN_COOKIE),
) -> AuthUser:
    """
    User of the calling client's session; anonymous users count.

    The access token issued by the session routes (Bearer header or cookie) must
    belong to the user of the `X-Client-Id` session.
    """
    token = credentials.credentials if credentials is not None else cookie_token
    token_user = jwt_auth.get_current_user_info_from_jwt(token)

    session = await orchestrator.session_bootstrap.get_session()
    if session is None:
        raise AuthenticationError('Not authenticated')
    if session.user.id != token_user.id:
        Logger.base.warning(
            f'🔒 [AUTH] Token of user {token_user.id} used by client {orchestrator.client_id}'
        )
        raise AuthenticationError('Token does not match the client session')
    return session.user


async def require_service_role(
    service_role_key: Optional[str] = Header(None, alias=SERVICE_ROLE_HEADER),
) -> None:
    if not matches_service_role_key(SecretStr(service_role_key) if service_role_key else None):
        raise ForbiddenError('Service role required')
