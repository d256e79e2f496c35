"""
Auth Session Gateway Implementation

Backend auth over the `auth_user` table. Each instance holds the session of a
single client (one per orchestrator); sessions are signed JWTs and expire
after ACCESS_TOKEN_EXPIRE_MINUTES.
"""

from datetime import datetime, timezone
from typing import Any, AsyncContextManager, Callable, List, Optional

from pydantic import SecretStr
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
import uuid_utils

from lodgetix.platform.exception.exceptions import (
    AuthenticationError,
    ConflictError,
    ForbiddenError,
    SessionError,
)
from lodgetix.platform.logging.loguru_io import Logger
from lodgetix.service.reservation.app.dto import AuthSession, AuthUser
from lodgetix.service.reservation.app.interface import ISessionGateway
from lodgetix.service.reservation.driven_adapter.auth.bcrypt_password_hasher import (
    BcryptPasswordHasher,
)
from lodgetix.service.reservation.driven_adapter.auth.jwt_auth import JwtAuth
from lodgetix.service.reservation.driven_adapter.auth.mock_email_sender import MockEmailSender
from lodgetix.service.reservation.driven_adapter.auth.otp_code_store_impl import OtpCodeStoreImpl
from lodgetix.service.reservation.driven_adapter.auth.service_role import matches_service_role_key
from lodgetix.service.reservation.driven_adapter.model.auth_user_model import AuthUserModel


class AuthSessionGatewayImpl(ISessionGateway):
    def __init__(
        self,
        *,
        session_factory: Callable[..., AsyncContextManager[AsyncSession]],
        otp_store: OtpCodeStoreImpl,
        email_sender: MockEmailSender,
        service_role_key: Optional[SecretStr] = None,
        jwt_auth: Optional[JwtAuth] = None,
    ) -> None:
        self.session_factory = session_factory
        self.otp_store = otp_store
        self.email_sender = email_sender
        self.service_role_key = service_role_key
        self.password_hasher = BcryptPasswordHasher()
        self.jwt_auth = jwt_auth or JwtAuth()
        self._session: Optional[AuthSession] = None

    def _model_to_user(self, model: AuthUserModel) -> AuthUser:
        return AuthUser(
            id=model.id,
            email=model.email,
            is_anonymous=model.is_anonymous,
            user_metadata=dict(model.user_metadata or {}),
            created_at=model.created_at,
        )

    def _start_session(self, user: AuthUser) -> AuthSession:
        access_token, expires_at = self.jwt_auth.create_jwt_token(user)
        self._session = AuthSession(access_token=access_token, user=user, expires_at=expires_at)
        return self._session

    async def get_session(self) -> Optional[AuthSession]:
        if self._session is not None and self._session.expires_at <= datetime.now(timezone.utc):
            Logger.base.info(f'🔑 [AUTH] Session of user {self._session.user.id} expired')
            self._session = None
        return self._session

    async def sign_in_anonymously(self) -> AuthSession:
        try:
            async with self.session_factory() as session:
                model = AuthUserModel(
                    id=str(uuid_utils.uuid7()), is_anonymous=True, user_metadata={}
                )
                session.add(model)
                await session.commit()
                await session.refresh(model)
        except SQLAlchemyError as e:
            raise SessionError(f'Anonymous sign in failed: {e}') from e

        Logger.base.info(f'🔑 [AUTH] Anonymous user {model.id} signed in')
        return self._start_session(self._model_to_user(model))

    async def update_user(
        self, *, email: str, password: str, metadata: Optional[dict[str, Any]] = None
    ) -> AuthUser:
        current = await self.get_session()
        if current is None:
            raise SessionError('Auth session missing')

        try:
            async with self.session_factory() as session:
                taken = await session.execute(
                    select(AuthUserModel.id).where(
                        AuthUserModel.email == email, AuthUserModel.id != current.user.id
                    )
                )
                if taken.scalar_one_or_none() is not None:
                    raise ConflictError(
                        'A user with this email address has already been registered'
                    )

                model = await session.get(AuthUserModel, current.user.id)
                if model is None:
                    raise SessionError('User not found')

                model.email = email
                model.hashed_password = self.password_hasher.hash_password(
                    plain_password=SecretStr(password)
                )
                model.is_anonymous = False
                model.user_metadata = {**(model.user_metadata or {}), **(metadata or {})}
                await session.commit()
                await session.refresh(model)
        except SQLAlchemyError as e:
            raise SessionError(f'Updating user failed: {e}') from e

        user = self._model_to_user(model)
        self._start_session(user)
        return user

    async def sign_in_with_otp(self, *, email: str, redirect_to: str) -> None:
        code = await self.otp_store.issue(email=email)
        await self.email_sender.send_one_time_password(
            email=email, code=code, redirect_to=redirect_to
        )

    async def verify_otp(self, *, email: str, token: str) -> AuthSession:
        if not await self.otp_store.consume(email=email, code=token):
            raise AuthenticationError('Token has expired or is invalid')

        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    select(AuthUserModel).where(AuthUserModel.email == email)
                )
                model = result.scalar_one_or_none()
                if model is None:
                    model = AuthUserModel(
                        id=str(uuid_utils.uuid7()),
                        email=email,
                        is_anonymous=False,
                        user_metadata={},
                    )
                    session.add(model)
                    await session.commit()
                    await session.refresh(model)
        except SQLAlchemyError as e:
            raise SessionError(f'One-time passcode sign in failed: {e}') from e

        return self._start_session(self._model_to_user(model))

    def _has_service_role(self) -> bool:
        return matches_service_role_key(self.service_role_key)

    async def list_users_by_email(self, *, email: str) -> List[AuthUser]:
        if not self._has_service_role():
            raise ForbiddenError('User not allowed')

        async with self.session_factory() as session:
            result = await session.execute(
                select(AuthUserModel).where(AuthUserModel.email == email)
            )
            return [self._model_to_user(model) for model in result.scalars().all()]
