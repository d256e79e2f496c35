from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from lodgetix.service.catalog.domain.entity.customer_entity import CustomerEntity


class ICustomerCommandRepo(ABC):
    @abstractmethod
    async def create(self, *, customer: CustomerEntity) -> CustomerEntity:
        pass

    @abstractmethod
    async def update(
        self, *, customer_id: str, changes: Dict[str, Any]
    ) -> Optional[CustomerEntity]:
        """Apply column changes; None when the customer does not exist"""
        pass
