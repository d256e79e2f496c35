from datetime import datetime
from typing import Optional

import attrs

from lodgetix.service.catalog.domain.enum.event_status import EventStatus


@attrs.define
class EventEntity:
    """
    Row of the `events` table. Top-level events have no `parent_event_id`;
    the bookable sessions of a top-level event are its child events.
    """

    id: str
    title: str
    slug: str = ''
    description: Optional[str] = None
    event_start: Optional[datetime] = None
    event_end: Optional[datetime] = None
    location: Optional[str] = None
    type: Optional[str] = None
    price: Optional[float] = None
    max_attendees: Optional[int] = None
    image_url: Optional[str] = None
    featured: bool = False
    is_multi_day: bool = False
    is_purchasable_individually: bool = True
    parent_event_id: Optional[str] = None
    display_scope_id: Optional[str] = None
    status: EventStatus = EventStatus.DRAFT
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    event_includes: Optional[str] = None
    important_information: Optional[str] = None
    featured_image_url: Optional[str] = None
    inclusions: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def is_parent(self) -> bool:
        return self.parent_event_id is None
