from abc import ABC, abstractmethod

from lodgetix.service.catalog.domain.entity.registration_entity import RegistrationEntity


class IRegistrationCommandRepo(ABC):
    @abstractmethod
    async def create(self, *, registration: RegistrationEntity) -> RegistrationEntity:
        pass
