"""Reservation Application DTOs"""

from lodgetix.service.reservation.app.dto.presence_dto import (
    NotificationTopic,
    PresenceEntry,
    PresenceSummary,
    SystemStatusMessage,
)
from lodgetix.service.reservation.app.dto.reservation_dto import (
    Reservation,
    ReservationErrorKind,
    ReservationResult,
    ReservedTicketRow,
    TicketAvailability,
)
from lodgetix.service.reservation.app.dto.session_dto import AuthSession, AuthUser, SessionResult
from lodgetix.service.reservation.app.dto.storage_dto import StorageOutcome


__all__ = [
    'AuthSession',
    'AuthUser',
    'NotificationTopic',
    'PresenceEntry',
    'PresenceSummary',
    'Reservation',
    'ReservationErrorKind',
    'ReservationResult',
    'ReservedTicketRow',
    'SessionResult',
    'StorageOutcome',
    'SystemStatusMessage',
    'TicketAvailability',
]
