from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel


class EventResponse(BaseModel):
    id: str
    slug: str
    title: str
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
    event_includes: Optional[str] = None
    important_information: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    created_at: Optional[datetime] = None
    # Display fields
    day: Optional[str] = None
    date: Optional[str] = None
    time: Optional[str] = None
    until: Optional[str] = None
    image_src: Optional[str] = None

    class Config:
        json_schema_extra = {
            'example': {
                'id': '8f1c5a5e-2b7d-4a3e-9c1f-5d6e7f8a9b0c',
                'slug': 'grand-installation-2025',
                'title': 'Grand Installation',
                'event_start': '2025-04-27T18:00:00+10:00',
                'event_end': '2025-04-27T21:00:00+10:00',
                'location': 'Sydney Masonic Centre',
                'type': 'Ceremony',
                'day': 'Sunday, 27 April 25',
                'date': '27-04-2025',
                'time': '06:00 PM',
                'until': '09:00 PM',
            }
        }


class EventListResponse(BaseModel):
    events: List[EventResponse]
    total_count: int


class TicketDefinitionResponse(BaseModel):
    id: str
    event_id: str
    name: str
    price: Optional[float] = None
    description: Optional[str] = None
    available_quantity: int
    sold_quantity: int
    formatted_price: Optional[str] = None


class AdminEventListItemResponse(BaseModel):
    id: str
    title: str
    slug: str
    event_start: Optional[datetime] = None
    event_end: Optional[datetime] = None
    location: str
    capacity: int
    registered: int
    status: str
    type: str


class AdminEventListResponse(BaseModel):
    data: List[AdminEventListItemResponse]
    count: int


class AdminTicketTypeResponse(BaseModel):
    id: str
    name: str
    price: Optional[float] = None
    available_quantity: int
    sold_quantity: int


class AdminEventDetailResponse(AdminEventListItemResponse):
    description: str
    featured_image_url: str
    important_information: str
    inclusions: str
    parent_event_id: Optional[str] = None
    ticket_types: List[AdminTicketTypeResponse]
    child_events: List[AdminEventListItemResponse]


class EventDayResponse(BaseModel):
    id: str
    date: date
    name: str
    day_number: Optional[int] = None
    featured_events_summary: Optional[str] = None
