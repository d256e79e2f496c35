from abc import ABC, abstractmethod
from typing import Optional

from lodgetix.service.catalog.domain.entity.customer_entity import CustomerEntity


class ICustomerQueryRepo(ABC):
    @abstractmethod
    async def get_by_user_id(self, *, user_id: str) -> Optional[CustomerEntity]:
        pass

    @abstractmethod
    async def get_by_id(self, *, customer_id: str) -> Optional[CustomerEntity]:
        pass
