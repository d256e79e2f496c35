from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from lodgetix.service.catalog.domain.entity.attendee_entity import GuestEntity, MasonEntity


class IAttendeeCommandRepo(ABC):
    @abstractmethod
    async def create_mason(self, *, mason: MasonEntity) -> MasonEntity:
        pass

    @abstractmethod
    async def update_mason(
        self, *, customer_id: str, changes: Dict[str, Any]
    ) -> Optional[MasonEntity]:
        """None when the customer has no mason record"""
        pass

    @abstractmethod
    async def create_guest(self, *, guest: GuestEntity) -> GuestEntity:
        pass

    @abstractmethod
    async def update_guest(self, *, guest_id: str, guest: GuestEntity) -> Optional[GuestEntity]:
        """Overwrite every detail column of the guest; None when it does not exist"""
        pass

    @abstractmethod
    async def delete_guest(self, *, guest_id: str) -> bool:
        pass
