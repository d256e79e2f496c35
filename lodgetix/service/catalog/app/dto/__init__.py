"""Catalog Application DTOs"""

from lodgetix.service.catalog.app.dto.event_dto import (
    AdminEventDetail,
    AdminEventFilter,
    AdminEventListItem,
    AdminTicketType,
    EventCapacity,
    EventPage,
)
from lodgetix.service.catalog.app.dto.registration_load_dto import (
    AttendeeOrderItem,
    AttendeeTicket,
    LoadedGuest,
    LoadedMason,
    RegistrationLoadData,
    TicketAssignment,
)

__all__ = [
    'AdminEventDetail',
    'AdminEventFilter',
    'AdminEventListItem',
    'AdminTicketType',
    'AttendeeOrderItem',
    'AttendeeTicket',
    'EventCapacity',
    'EventPage',
    'LoadedGuest',
    'LoadedMason',
    'RegistrationLoadData',
    'TicketAssignment',
]
