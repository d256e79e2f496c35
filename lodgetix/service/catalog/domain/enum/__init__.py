"""Catalog Domain Enums"""

from lodgetix.service.catalog.domain.enum.attendee_type import AttendeeType
from lodgetix.service.catalog.domain.enum.event_status import EventStatus
from lodgetix.service.catalog.domain.enum.guest_type import GuestType
from lodgetix.service.catalog.domain.enum.payment_status import PaymentStatus

__all__ = ['AttendeeType', 'EventStatus', 'GuestType', 'PaymentStatus']
