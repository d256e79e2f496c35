from datetime import datetime
from typing import List, Optional

import attrs

from lodgetix.service.catalog.domain.entity.attendee_entity import GuestEntity, MasonEntity
from lodgetix.service.catalog.domain.entity.customer_entity import CustomerEntity
from lodgetix.service.catalog.domain.entity.event_entity import EventEntity
from lodgetix.service.catalog.domain.entity.registration_entity import RegistrationEntity
from lodgetix.service.catalog.domain.enum.attendee_type import AttendeeType


@attrs.define(frozen=True)
class TicketAssignment:
    """One `tickets` row assigned to an attendee"""

    attendee_id: str
    ticket_definition_id: Optional[str]
    event_id: str


@attrs.define(frozen=True)
class AttendeeTicket:
    """The ticket an attendee holds and the events it admits to"""

    ticket_definition_id: str
    event_ids: List[str]

    @classmethod
    def from_assignments(cls, assignments: List[TicketAssignment]) -> Optional['AttendeeTicket']:
        # The first assigned row names the ticket definition
        if not assignments or not assignments[0].ticket_definition_id:
            return None
        return cls(
            ticket_definition_id=assignments[0].ticket_definition_id,
            event_ids=[a.event_id for a in assignments],
        )


@attrs.define(frozen=True)
class LoadedMason:
    mason: MasonEntity
    is_primary: bool
    ticket: Optional[AttendeeTicket] = None


@attrs.define(frozen=True)
class LoadedGuest:
    guest: GuestEntity
    ticket: Optional[AttendeeTicket] = None


@attrs.define(frozen=True)
class AttendeeOrderItem:
    attendee_id: str
    attendee_type: AttendeeType
    created_at: Optional[datetime] = None


@attrs.define(frozen=True)
class RegistrationLoadData:
    """Everything needed to reopen a registration for editing"""

    registration: RegistrationEntity
    customer: Optional[CustomerEntity] = None
    event: Optional[EventEntity] = None
    masons: List[LoadedMason] = attrs.field(factory=list)
    guests: List[LoadedGuest] = attrs.field(factory=list)
    lady_partners: List[LoadedGuest] = attrs.field(factory=list)
    guest_partners: List[LoadedGuest] = attrs.field(factory=list)
    attendee_add_order: List[AttendeeOrderItem] = attrs.field(factory=list)
