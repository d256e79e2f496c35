from abc import ABC, abstractmethod
from typing import List, Optional

from lodgetix.service.catalog.domain.entity.lodge_entity import GrandLodgeEntity, LodgeEntity


class ILodgeQueryRepo(ABC):
    @abstractmethod
    async def list_grand_lodges(
        self, *, country_code: Optional[str] = None
    ) -> List[GrandLodgeEntity]:
        """Grand lodges ordered by name, optionally of one ISO3 country"""
        pass

    @abstractmethod
    async def list_lodges_by_number(self, *, grand_lodge_id: str, number: str) -> List[LodgeEntity]:
        pass

    @abstractmethod
    async def search_lodges(
        self, *, grand_lodge_id: str, search_term: Optional[str] = None
    ) -> List[LodgeEntity]:
        """
        Lodges of a grand lodge whose name, display name, district or meeting
        place contains `search_term` (case-insensitive), or whose number does
        when the term starts with a digit. All lodges when there is no term.
        Ordered by display name, then name.
        """
        pass
