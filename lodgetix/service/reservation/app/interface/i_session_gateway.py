"""
Session Gateway Interface

Auth calls the session bootstrap needs. One gateway instance holds the
session of one browser client.
"""

from abc import ABC, abstractmethod
from typing import Any, List, Optional

from lodgetix.service.reservation.app.dto import AuthSession, AuthUser


class ISessionGateway(ABC):
    @abstractmethod
    async def get_session(self) -> Optional[AuthSession]:
        """Current session, or None when the client never signed in (or it expired)"""
        pass

    @abstractmethod
    async def sign_in_anonymously(self) -> AuthSession:
        """
        Raises:
            SessionError: the anonymous user could not be created
        """
        pass

    @abstractmethod
    async def update_user(
        self, *, email: str, password: str, metadata: Optional[dict[str, Any]] = None
    ) -> AuthUser:
        """
        Attach credentials to the signed-in user

        Raises:
            SessionError: no session
            ConflictError: email already taken
        """
        pass

    @abstractmethod
    async def sign_in_with_otp(self, *, email: str, redirect_to: str) -> None:
        """Send a one-time passcode to the email address"""
        pass

    @abstractmethod
    async def verify_otp(self, *, email: str, token: str) -> AuthSession:
        """
        Raises:
            AuthenticationError: wrong or expired passcode
        """
        pass

    @abstractmethod
    async def list_users_by_email(self, *, email: str) -> List[AuthUser]:
        """
        Administrative lookup

        Raises:
            ForbiddenError: the gateway does not hold the service-role key
        """
        pass
