from datetime import datetime, timedelta, timezone

import pytest

from lodgetix.service.catalog.domain.entity.event_entity import EventEntity
from lodgetix.service.catalog.domain.entity.ticket_definition_entity import (
    TicketDefinitionEntity,
)
from lodgetix.service.catalog.domain.event_display import (
    format_day,
    format_event_for_display,
    format_ticket_definition_for_display,
    parse_time_for_database,
    parse_timestamp,
)


AEST = timezone(timedelta(hours=10))


@pytest.mark.unit
class TestFormatEventForDisplay:
    def test_start_and_end_are_formatted(self):
        event = EventEntity(
            id='E1',
            title='Grand Installation',
            event_start=datetime(2025, 4, 27, 18, 0, tzinfo=AEST),
            event_end=datetime(2025, 4, 27, 21, 0, tzinfo=AEST),
            image_url='https://cdn.example.org/e1.jpg',
        )

        display = format_event_for_display(event)

        assert display.day == 'Sunday, 27 April 25'
        assert display.date == '27-04-2025'
        assert display.time == '06:00 PM'
        assert display.until == '09:00 PM'
        assert display.image_src == 'https://cdn.example.org/e1.jpg'
        assert display.event is event

    def test_timestamp_keeps_its_own_offset(self):
        # 23:30 on the 26th UTC is already the 27th in Sydney
        moment = parse_timestamp('2025-04-27T09:30:00+10:00')

        assert format_day(moment) == 'Sunday, 27 April 25'

    def test_missing_timestamps_leave_fields_empty(self):
        display = format_event_for_display(EventEntity(id='E1', title='TBA'))

        assert display.day is None
        assert display.date is None
        assert display.time is None
        assert display.until is None

    def test_invalid_timestamp_leaves_fields_empty(self):
        event = EventEntity(id='E1', title='TBA', event_start='next tuesday')

        display = format_event_for_display(event)

        assert display.day is None
        assert display.time is None


@pytest.mark.unit
class TestParseTimestamp:
    @pytest.mark.parametrize('value', [None, '', 'not a date'])
    def test_unusable_values(self, value):
        assert parse_timestamp(value) is None

    def test_iso_string(self):
        assert parse_timestamp('2025-04-27T18:00:00Z') == datetime(
            2025, 4, 27, 18, 0, tzinfo=timezone.utc
        )


@pytest.mark.unit
class TestTicketDefinitionDisplay:
    def test_price_has_two_decimals(self):
        definition = TicketDefinitionEntity(id='T1', event_id='E1', name='Standard', price=50)

        assert format_ticket_definition_for_display(definition).formatted_price == '$50.00'

    def test_missing_price(self):
        definition = TicketDefinitionEntity(id='T1', event_id='E1', name='Comp')

        assert format_ticket_definition_for_display(definition).formatted_price is None


@pytest.mark.unit
class TestParseTimeForDatabase:
    def test_range(self):
        assert parse_time_for_database('18:00 - 21:00') == {
            'start_time': '18:00',
            'end_time': '21:00',
        }

    def test_single_time(self):
        assert parse_time_for_database('18:00') == {'start_time': '18:00'}

    @pytest.mark.parametrize('value', [None, '', '18:00 - 19:00 - 20:00', '18:00 -'])
    def test_unparsable(self, value):
        assert parse_time_for_database(value) == {}
