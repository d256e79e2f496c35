"""
Reservation DTOs

Results of the reservation orchestrator never carry exceptions: every
failure is a `ReservationResult` with a message and an error kind.
"""

from enum import StrEnum
from typing import Any, Optional

import attrs


class ReservationErrorKind(StrEnum):
    VALIDATION = 'validation'
    BACKEND = 'backend'
    SESSION = 'session'
    TIMED_OUT = 'timed_out'
    UNEXPECTED = 'unexpected'


@attrs.define(frozen=True)
class ReservedTicketRow:
    """One row returned by the `reserve_tickets` stored procedure"""

    ticket_id: str
    reservation_id: str
    expires_at: str


@attrs.define(frozen=True)
class Reservation:
    """A temporary hold on one ticket; all holds of one call share reservation_id"""

    ticket_id: str
    reservation_id: str
    expires_at: str  # ISO-8601, invalid at/after this instant
    event_id: str
    ticket_definition_id: str

    def to_payload(self) -> dict[str, str]:
        return {
            'ticketId': self.ticket_id,
            'reservationId': self.reservation_id,
            'expiresAt': self.expires_at,
            'eventId': self.event_id,
            'ticketDefinitionId': self.ticket_definition_id,
        }

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> 'Reservation':
        """
        Raises:
            KeyError: a required key is missing
        """
        return cls(
            ticket_id=str(payload['ticketId']),
            reservation_id=str(payload['reservationId']),
            expires_at=str(payload.get('expiresAt') or ''),
            event_id=str(payload.get('eventId') or ''),
            ticket_definition_id=str(payload.get('ticketDefinitionId') or ''),
        )


@attrs.define
class ReservationResult:
    success: bool
    data: list[Reservation] = attrs.field(factory=list)
    error: Optional[str] = None
    error_kind: Optional[ReservationErrorKind] = None

    @classmethod
    def success_result(cls, data: list[Reservation]) -> 'ReservationResult':
        return cls(success=True, data=data)

    @classmethod
    def failure_result(cls, error: str, error_kind: ReservationErrorKind) -> 'ReservationResult':
        return cls(success=False, error=error, error_kind=error_kind)


def _count(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    try:
        return max(int(value), 0)
    except (TypeError, ValueError):
        return 0


@attrs.define(frozen=True)
class TicketAvailability:
    available: int = 0
    reserved: int = 0
    sold: int = 0

    @classmethod
    def zero(cls) -> 'TicketAvailability':
        return cls()

    @classmethod
    def from_payload(cls, payload: Any) -> 'TicketAvailability':
        """Missing or non-numeric counters read as 0"""
        if not isinstance(payload, dict):
            return cls.zero()
        return cls(
            available=_count(payload.get('available')),
            reserved=_count(payload.get('reserved')),
            sold=_count(payload.get('sold')),
        )

    def to_payload(self) -> dict[str, int]:
        return {'available': self.available, 'reserved': self.reserved, 'sold': self.sold}
