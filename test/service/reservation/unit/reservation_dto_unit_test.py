from typing import Any

import pytest

from lodgetix.service.reservation.app.dto import TicketAvailability


@pytest.mark.unit
class TestTicketAvailabilityFromPayload:
    def test_numeric_counters(self):
        availability = TicketAvailability.from_payload(
            {'available': 40, 'reserved': 5, 'sold': 55}
        )

        assert availability == TicketAvailability(available=40, reserved=5, sold=55)

    @pytest.mark.parametrize(
        ('payload', 'expected'),
        [
            ({'available': None, 'reserved': 2, 'sold': 3}, TicketAvailability(0, 2, 3)),
            ({'reserved': 2}, TicketAvailability(0, 2, 0)),
            ({'available': 'lots', 'reserved': '4', 'sold': 1.9}, TicketAvailability(0, 4, 1)),
            ({'available': True, 'reserved': [], 'sold': {}}, TicketAvailability(0, 0, 0)),
            ({'available': -3, 'reserved': 1, 'sold': 0}, TicketAvailability(0, 1, 0)),
        ],
    )
    def test_missing_null_or_non_numeric_counters_read_as_zero(
        self, payload: dict[str, Any], expected: TicketAvailability
    ):
        assert TicketAvailability.from_payload(payload) == expected

    @pytest.mark.parametrize('payload', [None, [], 'available', 7])
    def test_non_object_payload_is_zero(self, payload: Any):
        assert TicketAvailability.from_payload(payload) == TicketAvailability.zero()
