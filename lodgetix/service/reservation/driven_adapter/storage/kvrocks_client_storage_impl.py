from typing import Optional

from redis.exceptions import RedisError

from lodgetix.platform.config.core_setting import settings
from lodgetix.platform.exception.exceptions import StorageUnavailableError
from lodgetix.platform.state.kvrocks_client import KvrocksClient, kvrocks_client, prefixed_key
from lodgetix.service.reservation.app.interface import IClientStorage


class KvrocksClientStorageImpl(IClientStorage):
    """
    Per-client key/value namespace in Kvrocks.

    Key format: client_storage:{client_id}:{key}
    Every write refreshes the entry TTL (CLIENT_STORAGE_TTL_SECONDS) so
    abandoned sessions clean themselves up.
    """

    def __init__(
        self,
        *,
        client_id: str,
        ttl_seconds: Optional[int] = None,
        kvrocks: Optional[KvrocksClient] = None,
    ) -> None:
        self.client_id = client_id
        self.ttl_seconds = ttl_seconds or settings.CLIENT_STORAGE_TTL_SECONDS
        self._kvrocks = kvrocks or kvrocks_client

    def _key(self, key: str) -> str:
        return prefixed_key(f'client_storage:{self.client_id}:{key}')

    async def get_item(self, key: str) -> Optional[str]:
        try:
            value = await self._kvrocks.get_client().get(self._key(key))
        except (RedisError, OSError, RuntimeError) as e:
            raise StorageUnavailableError(f'Client storage unavailable: {e}') from e
        if isinstance(value, bytes):
            return value.decode()
        return value

    async def set_item(self, key: str, value: str) -> None:
        try:
            await self._kvrocks.get_client().set(self._key(key), value, ex=self.ttl_seconds)
        except (RedisError, OSError, RuntimeError) as e:
            raise StorageUnavailableError(f'Client storage unavailable: {e}') from e

    async def remove_item(self, key: str) -> None:
        try:
            await self._kvrocks.get_client().delete(self._key(key))
        except (RedisError, OSError, RuntimeError) as e:
            raise StorageUnavailableError(f'Client storage unavailable: {e}') from e
