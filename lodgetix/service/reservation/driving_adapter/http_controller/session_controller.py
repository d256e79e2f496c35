from typing import Callable, Optional

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, Header, Response, status
from pydantic import EmailStr, SecretStr

from lodgetix.platform.config.core_setting import settings
from lodgetix.platform.config.di import Container
from lodgetix.platform.logging.loguru_io import Logger
from lodgetix.service.reservation.app.dto import SessionResult
from lodgetix.service.reservation.app.interface import ISessionGateway
from lodgetix.service.reservation.app.reservation_orchestrator import ReservationOrchestrator
from lodgetix.service.reservation.app.session_bootstrap import SessionBootstrap
from lodgetix.service.reservation.driving_adapter.http_controller.client_dependency import (
    ACCESS_TOKEN_COOKIE,
    SERVICE_ROLE_HEADER,
    get_reservation_orchestrator,
)
from lodgetix.service.reservation.driving_adapter.http_controller.schema.session_schema import (
    AuthUserResponse,
    ConvertAnonymousUserRequest,
    EmailRegisteredResponse,
    OneTimePasswordRequest,
    SessionResultResponse,
    VerifyOneTimePasswordRequest,
)


router = APIRouter()


async def _to_session_response(
    result: SessionResult, response: Response, orchestrator: ReservationOrchestrator
) -> SessionResultResponse:
    """Successful sign ins hand out the session's access token (body and cookie)"""
    if not result.success:
        response.status_code = status.HTTP_400_BAD_REQUEST
    user = None
    if result.user is not None:
        user = AuthUserResponse(
            id=result.user.id,
            email=result.user.email,
            is_anonymous=result.user.is_anonymous,
            user_metadata=result.user.user_metadata,
        )
    session = await orchestrator.session_bootstrap.get_session() if result.user else None
    if session is None:
        return SessionResultResponse(success=result.success, user=user, error=result.error)

    response.set_cookie(
        key=ACCESS_TOKEN_COOKIE,
        value=session.access_token,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        httponly=True,
        samesite='lax',
        secure=not settings.DEBUG,
    )
    return SessionResultResponse(
        success=result.success,
        user=user,
        error=result.error,
        access_token=session.access_token,
        expires_at=session.expires_at,
    )


@router.post('/anonymous', status_code=status.HTTP_201_CREATED)
@Logger.io
async def sign_in_anonymously(
    response: Response,
    orchestrator: ReservationOrchestrator = Depends(get_reservation_orchestrator),
) -> SessionResultResponse:
    result = await orchestrator.session_bootstrap.sign_in_anonymously()
    return await _to_session_response(result, response, orchestrator)


@router.post('/convert', status_code=status.HTTP_200_OK)
@Logger.io
async def convert_anonymous_user(
    request: ConvertAnonymousUserRequest,
    response: Response,
    orchestrator: ReservationOrchestrator = Depends(get_reservation_orchestrator),
) -> SessionResultResponse:
    result = await orchestrator.session_bootstrap.convert_anonymous_user(
        email=request.email,
        password=request.password.get_secret_value(),
        metadata=request.metadata,
    )
    return await _to_session_response(result, response, orchestrator)


@router.post('/otp', status_code=status.HTTP_202_ACCEPTED)
@Logger.io
async def send_one_time_password(
    request: OneTimePasswordRequest,
    response: Response,
    orchestrator: ReservationOrchestrator = Depends(get_reservation_orchestrator),
) -> SessionResultResponse:
    result = await orchestrator.session_bootstrap.send_one_time_password(email=request.email)
    return await _to_session_response(result, response, orchestrator)


@router.post('/otp/verify', status_code=status.HTTP_200_OK)
@Logger.io
async def verify_one_time_password(
    request: VerifyOneTimePasswordRequest,
    response: Response,
    orchestrator: ReservationOrchestrator = Depends(get_reservation_orchestrator),
) -> SessionResultResponse:
    result = await orchestrator.session_bootstrap.verify_one_time_password(
        email=request.email, token=request.token
    )
    return await _to_session_response(result, response, orchestrator)


@router.get('/email-registered', status_code=status.HTTP_200_OK)
@Logger.io
@inject
async def is_email_registered(
    email: EmailStr,
    service_role_key: Optional[str] = Header(None, alias=SERVICE_ROLE_HEADER),
    session_gateway_factory: Callable[..., ISessionGateway] = Depends(
        Provide[Container.session_gateway.provider]
    ),
) -> EmailRegisteredResponse:
    """
    Administrative lookup, answered with elevated credentials only.
    Without a valid service-role key the answer is always `registered: false`.
    """
    session_gateway = session_gateway_factory(
        service_role_key=SecretStr(service_role_key) if service_role_key else None
    )
    bootstrap = SessionBootstrap(session_gateway=session_gateway)
    registered = await bootstrap.is_email_registered(email=email)
    return EmailRegisteredResponse(email=email, registered=registered)
