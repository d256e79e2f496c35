from abc import ABC, abstractmethod
from typing import List, Optional

from lodgetix.service.catalog.app.dto import TicketAssignment
from lodgetix.service.catalog.domain.entity.attendee_entity import GuestEntity, MasonEntity


class IAttendeeQueryRepo(ABC):
    @abstractmethod
    async def get_mason_by_customer_id(self, *, customer_id: str) -> Optional[MasonEntity]:
        """The customer's mason record with its lodge name and number"""
        pass

    @abstractmethod
    async def get_mason(self, *, mason_id: str) -> Optional[MasonEntity]:
        pass

    @abstractmethod
    async def get_guest(self, *, guest_id: str) -> Optional[GuestEntity]:
        pass

    @abstractmethod
    async def get_partner_for_mason(self, *, mason_id: str) -> Optional[GuestEntity]:
        pass

    @abstractmethod
    async def list_guests_for_registration(self, *, registration_id: str) -> List[GuestEntity]:
        """Standard guests only; partners are found through their mason or guest"""
        pass

    @abstractmethod
    async def list_partners_of(
        self, *, mason_ids: List[str], guest_ids: List[str]
    ) -> List[GuestEntity]:
        pass

    @abstractmethod
    async def list_ticket_assignments(self, *, attendee_ids: List[str]) -> List[TicketAssignment]:
        pass
