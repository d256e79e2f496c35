from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from lodgetix.service.catalog.domain.enum.attendee_type import AttendeeType
from lodgetix.service.catalog.driving_adapter.http_controller.schema.attendee_schema import (
    GuestResponse,
    MasonResponse,
)
from lodgetix.service.catalog.driving_adapter.http_controller.schema.customer_schema import (
    CustomerResponse,
)
from lodgetix.service.catalog.driving_adapter.http_controller.schema.event_schema import (
    EventResponse,
)


class RegistrationCreateRequest(BaseModel):
    registration_type: str = Field(..., min_length=1)
    parent_event_id: str = Field(..., min_length=1)
    customer_id: str = Field(..., min_length=1)


class RegistrationCreatedResponse(BaseModel):
    registration_id: str


class RegistrationResponse(BaseModel):
    id: str
    registration_type: str
    parent_event_id: str
    customer_id: str
    payment_status: str
    total_price_paid: Optional[float] = None
    agree_to_terms: bool
    created_at: Optional[datetime] = None


class AttendeeTicketResponse(BaseModel):
    ticket_definition_id: str
    event_ids: List[str]


class LoadedMasonResponse(BaseModel):
    mason: MasonResponse
    is_primary: bool
    ticket: Optional[AttendeeTicketResponse] = None


class LoadedGuestResponse(BaseModel):
    guest: GuestResponse
    ticket: Optional[AttendeeTicketResponse] = None


class AttendeeOrderResponse(BaseModel):
    attendee_id: str
    attendee_type: AttendeeType


class RegistrationLoadResponse(BaseModel):
    registration: RegistrationResponse
    customer: Optional[CustomerResponse] = None
    event: Optional[EventResponse] = None
    masons: List[LoadedMasonResponse] = []
    guests: List[LoadedGuestResponse] = []
    lady_partners: List[LoadedGuestResponse] = []
    guest_partners: List[LoadedGuestResponse] = []
    attendee_add_order: List[AttendeeOrderResponse] = []
