from abc import ABC, abstractmethod

from lodgetix.service.catalog.domain.entity.lodge_entity import LodgeEntity


class ILodgeCommandRepo(ABC):
    @abstractmethod
    async def create(self, *, lodge: LodgeEntity) -> LodgeEntity:
        pass
