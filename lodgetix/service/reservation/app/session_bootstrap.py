"""
Session Bootstrap

Guarantees a reservation attempt always has a backend session to attach to,
creating an anonymous one on demand, and wraps the remaining auth flows
(credential upgrade, one-time passcode, admin email lookup) in result objects.
"""

from typing import Any, Optional

import anyio

from lodgetix.platform.config.core_setting import settings
from lodgetix.platform.exception.exceptions import CustomBaseError, ForbiddenError, SessionError
from lodgetix.platform.logging.loguru_io import Logger
from lodgetix.service.reservation.app.dto import AuthSession, AuthUser, SessionResult
from lodgetix.service.reservation.app.interface import ISessionGateway


UNKNOWN_ERROR = 'Unknown error occurred'
TIMED_OUT_ERROR = 'Auth request timed out'


class SessionBootstrap:
    def __init__(
        self, *, session_gateway: ISessionGateway, timeout_seconds: Optional[float] = None
    ) -> None:
        self.session_gateway = session_gateway
        self.timeout_seconds = timeout_seconds or settings.RESERVATION_OPERATION_TIMEOUT_SECONDS

    async def get_session(self) -> Optional[AuthSession]:
        """
        Raises:
            TimeoutError: the auth backend did not answer in time
        """
        with anyio.fail_after(self.timeout_seconds):
            return await self.session_gateway.get_session()

    async def ensure_session(self) -> AuthUser:
        """
        Return the current user, signing in anonymously when there is no session

        Raises:
            SessionError: anonymous sign in failed
            TimeoutError: the auth backend did not answer in time
        """
        session = await self.get_session()
        if session is not None:
            return session.user

        Logger.base.info('🔑 [SESSION] No session, signing in anonymously')
        session = await self._sign_in_anonymously()
        return session.user

    async def _sign_in_anonymously(self) -> AuthSession:
        with anyio.fail_after(self.timeout_seconds):
            try:
                return await self.session_gateway.sign_in_anonymously()
            except CustomBaseError:
                raise
            except Exception as e:
                raise SessionError(str(e) or UNKNOWN_ERROR) from e

    @Logger.io
    async def sign_in_anonymously(self) -> SessionResult:
        try:
            session = await self._sign_in_anonymously()
            return SessionResult.ok(session.user)
        except TimeoutError:
            return SessionResult.failed(TIMED_OUT_ERROR)
        except CustomBaseError as e:
            Logger.base.warning(f'⚠️ [SESSION] Anonymous sign in failed: {e.message}')
            return SessionResult.failed(e.message)

    @Logger.io
    async def convert_anonymous_user(
        self, *, email: str, password: str, metadata: Optional[dict[str, Any]] = None
    ) -> SessionResult:
        """Attach email/password credentials to the current anonymous user"""
        try:
            session = await self.get_session()
            if session is None or not session.user.is_anonymous:
                return SessionResult.failed('User is not anonymous')

            with anyio.fail_after(self.timeout_seconds):
                user = await self.session_gateway.update_user(
                    email=email, password=password, metadata=metadata or {}
                )
            Logger.base.info(f'✅ [SESSION] Converted anonymous user {user.id}')
            return SessionResult.ok(user)
        except TimeoutError:
            return SessionResult.failed(TIMED_OUT_ERROR)
        except CustomBaseError as e:
            return SessionResult.failed(e.message)
        except Exception as e:
            Logger.base.exception(f'❌ [SESSION] Error converting anonymous user: {e}')
            return SessionResult.failed(str(e) or UNKNOWN_ERROR)

    @Logger.io
    async def send_one_time_password(self, *, email: str) -> SessionResult:
        try:
            with anyio.fail_after(self.timeout_seconds):
                await self.session_gateway.sign_in_with_otp(
                    email=email, redirect_to=settings.OTP_REDIRECT_URL
                )
            return SessionResult.ok()
        except TimeoutError:
            return SessionResult.failed(TIMED_OUT_ERROR)
        except CustomBaseError as e:
            return SessionResult.failed(e.message)
        except Exception as e:
            Logger.base.exception(f'❌ [SESSION] Error sending one-time password: {e}')
            return SessionResult.failed(str(e) or UNKNOWN_ERROR)

    @Logger.io
    async def verify_one_time_password(self, *, email: str, token: str) -> SessionResult:
        try:
            with anyio.fail_after(self.timeout_seconds):
                session = await self.session_gateway.verify_otp(email=email, token=token)
            return SessionResult.ok(session.user)
        except TimeoutError:
            return SessionResult.failed(TIMED_OUT_ERROR)
        except CustomBaseError as e:
            return SessionResult.failed(e.message)
        except Exception as e:
            Logger.base.exception(f'❌ [SESSION] Error verifying one-time password: {e}')
            return SessionResult.failed(str(e) or UNKNOWN_ERROR)

    async def is_email_registered(self, *, email: str) -> bool:
        """
        Administrative lookup. Only works when the gateway holds the service-role
        key; every failure (including the missing key) answers False.
        """
        try:
            with anyio.fail_after(self.timeout_seconds):
                users = await self.session_gateway.list_users_by_email(email=email)
            return len(users) > 0
        except ForbiddenError as e:
            Logger.base.warning(f'🚫 [SESSION] Email lookup refused: {e.message}')
            return False
        except TimeoutError:
            Logger.base.warning('⏰ [SESSION] Email lookup timed out')
            return False
        except Exception as e:
            Logger.base.error(f'❌ [SESSION] Error checking email: {e}')
            return False
