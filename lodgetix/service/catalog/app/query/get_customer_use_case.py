from typing import Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from lodgetix.platform.config.di import Container
from lodgetix.platform.exception.exceptions import NotFoundError
from lodgetix.platform.logging.loguru_io import Logger
from lodgetix.service.catalog.app.interface.i_customer_query_repo import ICustomerQueryRepo
from lodgetix.service.catalog.domain.entity.customer_entity import CustomerEntity


class GetCustomerUseCase:
    def __init__(self, customer_query_repo: ICustomerQueryRepo) -> None:
        self.customer_query_repo = customer_query_repo

    @classmethod
    @inject
    def depends(
        cls,
        customer_query_repo: ICustomerQueryRepo = Depends(Provide[Container.customer_query_repo]),
    ) -> Self:
        return cls(customer_query_repo=customer_query_repo)

    @Logger.io
    async def get_for_user(self, *, user_id: str) -> CustomerEntity:
        customer = await self.customer_query_repo.get_by_user_id(user_id=user_id)
        if customer is None:
            Logger.base.info(f'👤 [CUSTOMER] No customer record for user {user_id}')
            raise NotFoundError('Customer not found')

        return customer

    @Logger.io
    async def get_customer_id_for_user(self, *, user_id: str) -> Optional[str]:
        """None when the user has not created a customer record yet"""
        if not user_id:
            return None
        customer = await self.customer_query_repo.get_by_user_id(user_id=user_id)
        return customer.id if customer else None
