from datetime import datetime
from typing import List, Optional

import attrs

from lodgetix.service.catalog.domain.entity.event_entity import EventEntity
from lodgetix.service.catalog.domain.enum.event_status import EventStatus
from lodgetix.service.catalog.domain.event_display import EventDisplay


@attrs.define(frozen=True)
class EventPage:
    events: List[EventDisplay]
    total_count: int


@attrs.define(frozen=True)
class EventCapacity:
    total_capacity: int = 0
    confirmed_count: int = 0


@attrs.define(frozen=True)
class AdminEventFilter:
    search: Optional[str] = None
    status: Optional[EventStatus] = None
    type: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


@attrs.define(frozen=True)
class AdminEventListItem:
    id: str
    title: str
    slug: str
    event_start: Optional[datetime]
    event_end: Optional[datetime]
    location: str
    capacity: int
    registered: int
    status: str
    type: str

    @classmethod
    def from_event(
        cls, event: EventEntity, capacity: Optional[EventCapacity]
    ) -> 'AdminEventListItem':
        capacity = capacity or EventCapacity()
        return cls(
            id=event.id,
            title=event.title,
            slug=event.slug,
            event_start=event.event_start,
            event_end=event.event_end,
            location=event.location or 'No location',
            capacity=capacity.total_capacity,
            registered=capacity.confirmed_count,
            status=str(event.status or EventStatus.DRAFT),
            type=event.type or 'Other',
        )


@attrs.define(frozen=True)
class AdminTicketType:
    id: str
    name: str
    price: Optional[float]
    available_quantity: int
    sold_quantity: int


@attrs.define(frozen=True)
class AdminEventDetail:
    summary: AdminEventListItem
    description: str
    featured_image_url: str
    important_information: str
    inclusions: str
    parent_event_id: Optional[str]
    ticket_types: List[AdminTicketType]
    child_events: List[AdminEventListItem]
