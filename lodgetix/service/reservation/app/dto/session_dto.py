from datetime import datetime
from typing import Any, Optional

import attrs


@attrs.define
class AuthUser:
    id: str
    is_anonymous: bool
    email: Optional[str] = None
    user_metadata: dict[str, Any] = attrs.field(factory=dict)
    created_at: Optional[datetime] = None


@attrs.define
class AuthSession:
    access_token: str = attrs.field(repr=False)
    user: AuthUser
    expires_at: datetime


@attrs.define
class SessionResult:
    success: bool
    user: Optional[AuthUser] = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, user: Optional[AuthUser] = None) -> 'SessionResult':
        return cls(success=True, user=user)

    @classmethod
    def failed(cls, error: str) -> 'SessionResult':
        return cls(success=False, error=error)
