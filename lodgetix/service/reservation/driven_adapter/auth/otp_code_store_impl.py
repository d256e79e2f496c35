"""
One-time passcode store in Kvrocks.

Key format: otp:{email}, value is the code, TTL OTP_EXPIRE_SECONDS.
A code can be consumed once; issuing a new code replaces the old one.
"""

import hmac
import secrets
import string

from redis.exceptions import RedisError

from lodgetix.platform.config.core_setting import settings
from lodgetix.platform.exception.exceptions import SessionError
from lodgetix.platform.state.kvrocks_client import kvrocks_client, prefixed_key


def _key(email: str) -> str:
    return prefixed_key(f'otp:{email.strip().lower()}')


class OtpCodeStoreImpl:
    def __init__(self, *, length: int | None = None, ttl_seconds: int | None = None) -> None:
        self.length = length or settings.OTP_LENGTH
        self.ttl_seconds = ttl_seconds or settings.OTP_EXPIRE_SECONDS

    async def issue(self, *, email: str) -> str:
        code = ''.join(secrets.choice(string.digits) for _ in range(self.length))
        try:
            await kvrocks_client.get_client().set(_key(email), code, ex=self.ttl_seconds)
        except (RedisError, OSError) as e:
            raise SessionError(f'One-time passcode store unavailable: {e}') from e
        return code

    async def consume(self, *, email: str, code: str) -> bool:
        """True when the code matches; a matching code is deleted"""
        client = kvrocks_client.get_client()
        try:
            stored = await client.get(_key(email))
            if stored is None:
                return False
            if isinstance(stored, bytes):
                stored = stored.decode()
            if not hmac.compare_digest(stored, code):
                return False
            await client.delete(_key(email))
        except (RedisError, OSError) as e:
            raise SessionError(f'One-time passcode store unavailable: {e}') from e
        return True
