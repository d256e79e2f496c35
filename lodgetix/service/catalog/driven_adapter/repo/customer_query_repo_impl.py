from typing import AsyncContextManager, Callable, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from lodgetix.platform.logging.loguru_io import Logger
from lodgetix.service.catalog.app.interface.i_customer_query_repo import ICustomerQueryRepo
from lodgetix.service.catalog.domain.entity.customer_entity import CustomerEntity
from lodgetix.service.catalog.driven_adapter.model.customer_model import CustomerModel
from lodgetix.service.catalog.driven_adapter.repo.customer_command_repo_impl import (
    customer_model_to_entity,
)


class CustomerQueryRepoImpl(ICustomerQueryRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]) -> None:
        self.session_factory = session_factory

    @Logger.io
    async def get_by_user_id(self, *, user_id: str) -> Optional[CustomerEntity]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(CustomerModel).where(CustomerModel.user_id == user_id).limit(1)
            )
            customer_model = result.scalar_one_or_none()
            return customer_model_to_entity(customer_model) if customer_model else None

    @Logger.io
    async def get_by_id(self, *, customer_id: str) -> Optional[CustomerEntity]:
        async with self.session_factory() as session:
            customer_model = await session.get(CustomerModel, customer_id)
            return customer_model_to_entity(customer_model) if customer_model else None
