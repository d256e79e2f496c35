from abc import ABC, abstractmethod
from typing import Optional

from lodgetix.service.catalog.domain.entity.registration_entity import RegistrationEntity


class IRegistrationQueryRepo(ABC):
    @abstractmethod
    async def get_by_id(self, *, registration_id: str) -> Optional[RegistrationEntity]:
        pass
