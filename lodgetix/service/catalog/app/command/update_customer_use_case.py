from typing import Any, Dict, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from lodgetix.platform.config.di import Container
from lodgetix.platform.exception.exceptions import ForbiddenError, NotFoundError
from lodgetix.platform.logging.loguru_io import Logger
from lodgetix.service.catalog.app.interface.i_customer_command_repo import ICustomerCommandRepo
from lodgetix.service.catalog.app.interface.i_customer_query_repo import ICustomerQueryRepo
from lodgetix.service.catalog.domain.entity.customer_entity import (
    CUSTOMER_IMMUTABLE_FIELDS,
    CustomerEntity,
)


class UpdateCustomerUseCase:
    def __init__(
        self,
        *,
        customer_query_repo: ICustomerQueryRepo,
        customer_command_repo: ICustomerCommandRepo,
    ) -> None:
        self.customer_query_repo = customer_query_repo
        self.customer_command_repo = customer_command_repo

    @classmethod
    @inject
    def depends(
        cls,
        customer_query_repo: ICustomerQueryRepo = Depends(Provide[Container.customer_query_repo]),
        customer_command_repo: ICustomerCommandRepo = Depends(
            Provide[Container.customer_command_repo]
        ),
    ) -> Self:
        return cls(
            customer_query_repo=customer_query_repo, customer_command_repo=customer_command_repo
        )

    @Logger.io
    async def update(
        self, *, customer_id: str, user_id: str, changes: Dict[str, Any]
    ) -> CustomerEntity:
        """
        Update a profile owned by `user_id`. `id`, `user_id` and `created_at`
        are never updated; `updated_at` always is.

        Raises:
            NotFoundError: no such customer
            ForbiddenError: the customer belongs to another user
        """
        existing = await self.customer_query_repo.get_by_id(customer_id=customer_id)
        if existing is None:
            raise NotFoundError(f'Customer not found: {customer_id}')
        if existing.user_id != user_id:
            raise ForbiddenError('Customer belongs to another user')

        allowed = {k: v for k, v in changes.items() if k not in CUSTOMER_IMMUTABLE_FIELDS}
        customer = await self.customer_command_repo.update(
            customer_id=customer_id, changes=allowed
        )
        if customer is None:
            raise NotFoundError(f'Customer not found: {customer_id}')

        return customer
