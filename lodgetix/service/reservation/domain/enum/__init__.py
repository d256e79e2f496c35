"""Reservation Domain Enums"""

from lodgetix.service.reservation.domain.enum.registration_type import RegistrationType
from lodgetix.service.reservation.domain.enum.system_status_type import SystemStatusType
from lodgetix.service.reservation.domain.enum.ticket_status import TicketStatus

__all__ = ['RegistrationType', 'SystemStatusType', 'TicketStatus']
