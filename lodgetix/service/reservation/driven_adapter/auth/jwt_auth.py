from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

import jwt

from lodgetix.platform.config.core_setting import settings
from lodgetix.platform.exception.exceptions import AuthenticationError
from lodgetix.service.reservation.app.dto import AuthUser


class JwtAuth:
    def __init__(self) -> None:
        self.secret = settings.SECRET_KEY.get_secret_value()
        self.algorithm = settings.ALGORITHM
        self.token_expire_minutes = settings.ACCESS_TOKEN_EXPIRE_MINUTES

    def create_jwt_token(self, user: AuthUser) -> tuple[str, datetime]:
        """Returns the signed token and its expiry"""
        now = datetime.now(timezone.utc)
        expires_at = now + timedelta(minutes=self.token_expire_minutes)
        payload = {
            'sub': user.id,
            'exp': expires_at,
            'iat': now,
            'email': user.email,
            'is_anonymous': user.is_anonymous,
            'role': 'authenticated',
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm), expires_at

    def decode_jwt_token(self, token: str) -> Dict:
        try:
            return jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except jwt.PyJWTError as e:
            raise AuthenticationError('Invalid token') from e

    def get_current_user_info_from_jwt(self, token: Optional[str]) -> AuthUser:
        if not token:
            raise AuthenticationError('Not authenticated')

        payload = self.decode_jwt_token(token)

        user_id = payload.get('sub')
        is_anonymous = payload.get('is_anonymous')
        if not user_id or not isinstance(is_anonymous, bool):
            raise AuthenticationError('Invalid token')

        # Rebuilt from the token claims (no DB query)
        return AuthUser(id=str(user_id), is_anonymous=is_anonymous, email=payload.get('email'))
