"""
Local Reservation Cache

Keeps the client's most recent reservation across page reloads so the
checkout can resume without another round-trip to the backend. Expiry is
lazy: it is only checked when the reservation is read.

Storage problems never reach the caller. Writes report a `StorageOutcome`,
reads degrade to a cache miss.
"""

from datetime import datetime, timezone
import time
from typing import Callable, Optional

import anyio
import orjson

from lodgetix.platform.config.core_setting import settings
from lodgetix.platform.exception.exceptions import StorageUnavailableError
from lodgetix.platform.logging.loguru_io import Logger
from lodgetix.platform.metrics.reservation_metrics import metrics
from lodgetix.service.reservation.app.dto import Reservation, StorageOutcome
from lodgetix.service.reservation.app.interface import IClientStorage


Clock = Callable[[], int]


def epoch_ms() -> int:
    return int(time.time() * 1000)


def parse_expiry_ms(expires_at: str) -> int:
    """
    ISO-8601 timestamp to epoch milliseconds (naive timestamps are UTC)

    Raises:
        ValueError: not an ISO-8601 timestamp
    """
    expiry = datetime.fromisoformat(expires_at)
    if expiry.tzinfo is None:
        expiry = expiry.replace(tzinfo=timezone.utc)
    return int(expiry.timestamp() * 1000)


class ReservationCache:
    RESERVATION_STORAGE_KEY = 'lodgetix_reservation_data'
    RESERVATION_STORAGE_EXPIRY = 'lodgetix_reservation_expiry'
    REGISTRATION_TYPE_KEY = 'lodgetix_registration_type'

    def __init__(
        self,
        *,
        storage: IClientStorage,
        clock: Clock = epoch_ms,
        timeout_seconds: Optional[float] = None,
    ) -> None:
        self.storage = storage
        self.clock = clock
        self.timeout_seconds = timeout_seconds or settings.RESERVATION_OPERATION_TIMEOUT_SECONDS

    def _storage_failed(self, operation: str, outcome: StorageOutcome, error: Exception) -> None:
        reason = str(error) or type(error).__name__
        Logger.base.warning(f'⚠️ [CACHE] {operation} failed ({outcome}): {reason}')
        metrics.record_storage_failure(operation=operation, outcome=outcome)

    # ========== Reservation ==========

    async def store_reservation_data(self, reservation: Reservation) -> StorageOutcome:
        try:
            expiry = parse_expiry_ms(reservation.expires_at)
        except ValueError as e:
            self._storage_failed('store_reservation', StorageOutcome.CORRUPT, e)
            return StorageOutcome.CORRUPT

        try:
            with anyio.fail_after(self.timeout_seconds):
                await self.storage.set_item(
                    self.RESERVATION_STORAGE_KEY, orjson.dumps(reservation.to_payload()).decode()
                )
                await self.storage.set_item(self.RESERVATION_STORAGE_EXPIRY, str(expiry))
        except (StorageUnavailableError, TimeoutError) as e:
            self._storage_failed('store_reservation', StorageOutcome.STORAGE_UNAVAILABLE, e)
            return StorageOutcome.STORAGE_UNAVAILABLE

        Logger.base.debug(
            f'💾 [CACHE] Stored reservation {reservation.reservation_id} (expires {expiry})'
        )
        return StorageOutcome.OK

    async def get_stored_reservation(self) -> Optional[Reservation]:
        """The cached reservation, or None when absent, unreadable or expired (expired is purged)"""
        try:
            with anyio.fail_after(self.timeout_seconds):
                stored_data = await self.storage.get_item(self.RESERVATION_STORAGE_KEY)
                expiry_timestamp = await self.storage.get_item(self.RESERVATION_STORAGE_EXPIRY)
        except (StorageUnavailableError, TimeoutError) as e:
            self._storage_failed('get_reservation', StorageOutcome.STORAGE_UNAVAILABLE, e)
            return None

        if not stored_data or not expiry_timestamp:
            return None

        try:
            expiry = int(expiry_timestamp)
        except ValueError as e:
            self._storage_failed('get_reservation', StorageOutcome.CORRUPT, e)
            return None

        if self.clock() >= expiry:
            Logger.base.info('⏰ [CACHE] Stored reservation expired, purging')
            await self.clear_stored_reservation()
            return None

        try:
            return Reservation.from_payload(orjson.loads(stored_data))
        except (ValueError, KeyError, TypeError) as e:
            self._storage_failed('get_reservation', StorageOutcome.CORRUPT, e)
            return None

    async def clear_stored_reservation(self) -> StorageOutcome:
        try:
            with anyio.fail_after(self.timeout_seconds):
                await self.storage.remove_item(self.RESERVATION_STORAGE_KEY)
                await self.storage.remove_item(self.RESERVATION_STORAGE_EXPIRY)
        except (StorageUnavailableError, TimeoutError) as e:
            self._storage_failed('clear_reservation', StorageOutcome.STORAGE_UNAVAILABLE, e)
            return StorageOutcome.STORAGE_UNAVAILABLE
        return StorageOutcome.OK

    # ========== Registration Type ==========

    async def store_registration_type(self, registration_type: str) -> StorageOutcome:
        try:
            with anyio.fail_after(self.timeout_seconds):
                await self.storage.set_item(self.REGISTRATION_TYPE_KEY, str(registration_type))
        except (StorageUnavailableError, TimeoutError) as e:
            self._storage_failed('store_registration_type', StorageOutcome.STORAGE_UNAVAILABLE, e)
            return StorageOutcome.STORAGE_UNAVAILABLE
        return StorageOutcome.OK

    async def get_stored_registration_type(self) -> Optional[str]:
        try:
            with anyio.fail_after(self.timeout_seconds):
                return await self.storage.get_item(self.REGISTRATION_TYPE_KEY)
        except (StorageUnavailableError, TimeoutError) as e:
            self._storage_failed('get_registration_type', StorageOutcome.STORAGE_UNAVAILABLE, e)
            return None
