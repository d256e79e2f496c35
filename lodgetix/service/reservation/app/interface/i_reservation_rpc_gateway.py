"""
Reservation RPC Gateway Interface

Thin boundary over the backend stored procedures. Locking, expiry and
inventory accounting happen server-side; callers treat every call as an
atomic black box.
"""

from abc import ABC, abstractmethod
from typing import List

from lodgetix.service.reservation.app.dto import ReservedTicketRow, TicketAvailability


class IReservationRpcGateway(ABC):
    @abstractmethod
    async def reserve_tickets(
        self,
        *,
        event_id: str,
        ticket_definition_id: str,
        quantity: int,
        reservation_minutes: int,
    ) -> List[ReservedTicketRow]:
        """
        Call `reserve_tickets`

        Returns:
            One row per held ticket: ticket_id, reservation_id, expires_at (ISO-8601)

        Raises:
            BackendRpcError: the procedure failed (e.g. not enough inventory)
        """
        pass

    @abstractmethod
    async def complete_reservation(self, *, reservation_id: str, attendee_id: str) -> List[str]:
        """
        Call `complete_reservation`

        Returns:
            Ids of the tickets now assigned to the attendee

        Raises:
            BackendRpcError: the procedure failed
        """
        pass

    @abstractmethod
    async def get_ticket_availability(
        self, *, event_id: str, ticket_definition_id: str
    ) -> TicketAvailability:
        """
        Raises:
            BackendRpcError: the procedure failed
        """
        pass

    @abstractmethod
    async def is_ticket_high_demand(
        self, *, event_id: str, ticket_definition_id: str, threshold_percent: int
    ) -> bool:
        """
        Raises:
            BackendRpcError: the procedure failed
        """
        pass
