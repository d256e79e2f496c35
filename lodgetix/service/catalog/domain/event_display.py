"""
Event Display Formatting

Derives the human-readable fields shown on event cards and detail pages.
Timestamps are rendered in the offset they carry; a missing or unparsable
timestamp leaves the derived fields empty.
"""

from datetime import datetime
import re
from typing import Dict, Optional, Union

import attrs

from lodgetix.platform.logging.loguru_io import Logger
from lodgetix.service.catalog.domain.entity.event_entity import EventEntity
from lodgetix.service.catalog.domain.entity.ticket_definition_entity import (
    TicketDefinitionEntity,
)


Timestamp = Union[datetime, str, None]

_TIME_RANGE_SEPARATOR = re.compile(r'\s*-\s*')


@attrs.define(frozen=True)
class EventDisplay:
    event: EventEntity
    day: Optional[str] = None  # Sunday, 27 April 25
    date: Optional[str] = None  # 27-04-2025
    time: Optional[str] = None  # 06:00 PM
    until: Optional[str] = None  # 09:00 PM
    image_src: Optional[str] = None


@attrs.define(frozen=True)
class TicketDefinitionDisplay:
    definition: TicketDefinitionEntity
    formatted_price: Optional[str] = None


def parse_timestamp(value: Timestamp) -> Optional[datetime]:
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(value)
    except (TypeError, ValueError):
        return None


def format_day(moment: datetime) -> str:
    return f'{moment:%A}, {moment.day} {moment:%B %y}'


def format_clock(moment: datetime) -> str:
    return moment.strftime('%I:%M %p')


def format_event_for_display(event: EventEntity) -> EventDisplay:
    day = date = time = until = None

    start = parse_timestamp(event.event_start)
    if start is not None:
        day = format_day(start)
        date = start.strftime('%d-%m-%Y')
        time = format_clock(start)
    elif event.event_start:
        Logger.base.warning(f'⚠️ [FORMAT] Invalid event_start for event {event.id}')

    end = parse_timestamp(event.event_end)
    if end is not None:
        until = format_clock(end)
    elif event.event_end:
        Logger.base.warning(f'⚠️ [FORMAT] Invalid event_end for event {event.id}')

    return EventDisplay(
        event=event, day=day, date=date, time=time, until=until, image_src=event.image_url
    )


def format_ticket_definition_for_display(
    definition: TicketDefinitionEntity,
) -> TicketDefinitionDisplay:
    formatted_price = f'${definition.price:.2f}' if definition.price is not None else None
    return TicketDefinitionDisplay(definition=definition, formatted_price=formatted_price)


def parse_time_for_database(time_string: Optional[str]) -> Dict[str, str]:
    """
    Split "18:00" or "18:00 - 21:00" into `start_time` / `end_time`.
    Anything else yields an empty dict.
    """
    if not time_string:
        return {}

    parts = _TIME_RANGE_SEPARATOR.split(time_string.strip())
    if len(parts) == 1 and parts[0]:
        return {'start_time': parts[0]}
    if len(parts) == 2 and parts[0] and parts[1]:
        return {'start_time': parts[0], 'end_time': parts[1]}

    Logger.base.warning(f'⚠️ [FORMAT] Could not parse time string: "{time_string}"')
    return {}
