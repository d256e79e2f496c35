"""
Unit tests for ReservationCache

Expiry is lazy: a reservation is only purged when it is read past its expiry.
Storage failures must never reach the caller.
"""

from unittest.mock import AsyncMock

import orjson
import pytest

from lodgetix.platform.exception.exceptions import StorageUnavailableError
from lodgetix.service.reservation.app.dto import Reservation, StorageOutcome
from lodgetix.service.reservation.app.interface import IClientStorage
from lodgetix.service.reservation.app.reservation_cache import ReservationCache, parse_expiry_ms


DATA_KEY = ReservationCache.RESERVATION_STORAGE_KEY
EXPIRY_KEY = ReservationCache.RESERVATION_STORAGE_EXPIRY


def _reservation(expires_at: str = '2025-01-01T00:15:00Z') -> Reservation:
    return Reservation(
        ticket_id='ticket-1',
        reservation_id='R1',
        expires_at=expires_at,
        event_id='E1',
        ticket_definition_id='T1',
    )


def _unavailable_storage() -> AsyncMock:
    storage = AsyncMock(spec=IClientStorage)
    storage.get_item.side_effect = StorageUnavailableError('Client storage unavailable')
    storage.set_item.side_effect = StorageUnavailableError('Client storage unavailable')
    storage.remove_item.side_effect = StorageUnavailableError('Client storage unavailable')
    return storage


@pytest.mark.unit
class TestParseExpiry:
    def test_zulu_timestamp(self):
        assert parse_expiry_ms('2025-01-01T00:15:00Z') == 1735690500000

    def test_naive_timestamp_is_utc(self):
        assert parse_expiry_ms('2025-01-01T00:15:00') == 1735690500000

    def test_offset_timestamp(self):
        assert parse_expiry_ms('2025-01-01T10:15:00+10:00') == 1735690500000

    def test_garbage_raises(self):
        with pytest.raises(ValueError):
            parse_expiry_ms('in fifteen minutes')


@pytest.mark.unit
class TestStoredReservation:
    @pytest.mark.asyncio
    async def test_store_writes_payload_and_expiry(self, reservation_cache, storage):
        outcome = await reservation_cache.store_reservation_data(_reservation())

        assert outcome == StorageOutcome.OK
        assert orjson.loads(storage.items[DATA_KEY]) == {
            'ticketId': 'ticket-1',
            'reservationId': 'R1',
            'expiresAt': '2025-01-01T00:15:00Z',
            'eventId': 'E1',
            'ticketDefinitionId': 'T1',
        }
        assert storage.items[EXPIRY_KEY] == '1735690500000'

    @pytest.mark.asyncio
    async def test_read_before_expiry_returns_reservation(self, reservation_cache):
        await reservation_cache.store_reservation_data(_reservation())

        assert await reservation_cache.get_stored_reservation() == _reservation()

    @pytest.mark.asyncio
    async def test_read_after_expiry_purges_both_keys(self, reservation_cache, storage, clock):
        # Given
        storage.items[DATA_KEY] = orjson.dumps(_reservation().to_payload()).decode()
        storage.items[EXPIRY_KEY] = '1700000000000'
        clock.now = 1700000001000

        # When
        reservation = await reservation_cache.get_stored_reservation()

        # Then
        assert reservation is None
        assert DATA_KEY not in storage.items
        assert EXPIRY_KEY not in storage.items

    @pytest.mark.asyncio
    async def test_read_exactly_at_expiry_is_expired(self, reservation_cache, storage, clock):
        storage.items[DATA_KEY] = orjson.dumps(_reservation().to_payload()).decode()
        storage.items[EXPIRY_KEY] = '1700000000000'
        clock.now = 1700000000000

        assert await reservation_cache.get_stored_reservation() is None
        assert storage.items == {}

    @pytest.mark.asyncio
    async def test_missing_expiry_key_is_a_miss(self, reservation_cache, storage):
        storage.items[DATA_KEY] = orjson.dumps(_reservation().to_payload()).decode()

        assert await reservation_cache.get_stored_reservation() is None

    @pytest.mark.asyncio
    async def test_corrupt_payload_is_a_miss(self, reservation_cache, storage):
        storage.items[DATA_KEY] = '{not json'
        storage.items[EXPIRY_KEY] = '9999999999999'

        assert await reservation_cache.get_stored_reservation() is None

    @pytest.mark.asyncio
    async def test_corrupt_expiry_is_a_miss(self, reservation_cache, storage):
        storage.items[DATA_KEY] = orjson.dumps(_reservation().to_payload()).decode()
        storage.items[EXPIRY_KEY] = 'soon'

        assert await reservation_cache.get_stored_reservation() is None

    @pytest.mark.asyncio
    async def test_unparsable_expires_at_is_not_stored(self, reservation_cache, storage):
        outcome = await reservation_cache.store_reservation_data(_reservation(expires_at='never'))

        assert outcome == StorageOutcome.CORRUPT
        assert storage.items == {}

    @pytest.mark.asyncio
    async def test_clear_removes_both_keys(self, reservation_cache, storage):
        await reservation_cache.store_reservation_data(_reservation())

        assert await reservation_cache.clear_stored_reservation() == StorageOutcome.OK
        assert storage.items == {}


@pytest.mark.unit
class TestStorageUnavailable:
    @pytest.fixture
    def cache(self, clock) -> ReservationCache:
        return ReservationCache(storage=_unavailable_storage(), clock=clock)

    @pytest.mark.asyncio
    async def test_store_reports_unavailable(self, cache: ReservationCache):
        outcome = await cache.store_reservation_data(_reservation())

        assert outcome == StorageOutcome.STORAGE_UNAVAILABLE

    @pytest.mark.asyncio
    async def test_read_is_a_miss(self, cache: ReservationCache):
        assert await cache.get_stored_reservation() is None
        assert await cache.get_stored_registration_type() is None

    @pytest.mark.asyncio
    async def test_clear_and_registration_type_report_unavailable(self, cache: ReservationCache):
        assert await cache.clear_stored_reservation() == StorageOutcome.STORAGE_UNAVAILABLE
        assert await cache.store_registration_type('lodge') == StorageOutcome.STORAGE_UNAVAILABLE


@pytest.mark.unit
class TestRegistrationType:
    @pytest.mark.asyncio
    async def test_round_trip(self, reservation_cache):
        assert await reservation_cache.get_stored_registration_type() is None

        assert await reservation_cache.store_registration_type('delegation') == StorageOutcome.OK
        assert await reservation_cache.get_stored_registration_type() == 'delegation'

    @pytest.mark.asyncio
    async def test_independent_of_reservation_keys(self, reservation_cache, storage):
        await reservation_cache.store_registration_type('individual')
        await reservation_cache.store_reservation_data(_reservation())

        await reservation_cache.clear_stored_reservation()

        assert storage.items == {ReservationCache.REGISTRATION_TYPE_KEY: 'individual'}
