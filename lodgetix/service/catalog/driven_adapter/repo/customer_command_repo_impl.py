from datetime import datetime, timezone
from typing import Any, AsyncContextManager, Callable, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession
import uuid_utils

from lodgetix.platform.logging.loguru_io import Logger
from lodgetix.service.catalog.app.interface.i_customer_command_repo import ICustomerCommandRepo
from lodgetix.service.catalog.domain.entity.customer_entity import (
    CUSTOMER_IMMUTABLE_FIELDS,
    CustomerEntity,
)
from lodgetix.service.catalog.driven_adapter.model.customer_model import CustomerModel


PROFILE_COLUMNS = (
    'email',
    'first_name',
    'last_name',
    'phone',
    'business_name',
    'address_line1',
    'address_line2',
    'city',
    'state',
    'postal_code',
    'country',
)


def customer_model_to_entity(customer_model: CustomerModel) -> CustomerEntity:
    return CustomerEntity(
        id=customer_model.id,
        user_id=customer_model.user_id,
        email=customer_model.email,
        first_name=customer_model.first_name,
        last_name=customer_model.last_name,
        phone=customer_model.phone,
        business_name=customer_model.business_name,
        address_line1=customer_model.address_line1,
        address_line2=customer_model.address_line2,
        city=customer_model.city,
        state=customer_model.state,
        postal_code=customer_model.postal_code,
        country=customer_model.country,
        created_at=customer_model.created_at,
        updated_at=customer_model.updated_at,
    )


class CustomerCommandRepoImpl(ICustomerCommandRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]) -> None:
        self.session_factory = session_factory

    @Logger.io
    async def create(self, *, customer: CustomerEntity) -> CustomerEntity:
        async with self.session_factory() as session:
            customer_model = CustomerModel(
                id=str(uuid_utils.uuid7()),
                user_id=customer.user_id,
                **{column: getattr(customer, column) for column in PROFILE_COLUMNS},
            )
            session.add(customer_model)
            await session.commit()
            await session.refresh(customer_model)
            return customer_model_to_entity(customer_model)

    @Logger.io
    async def update(
        self, *, customer_id: str, changes: Dict[str, Any]
    ) -> Optional[CustomerEntity]:
        async with self.session_factory() as session:
            customer_model = await session.get(CustomerModel, customer_id)
            if customer_model is None:
                return None

            for column, value in changes.items():
                if column in PROFILE_COLUMNS and column not in CUSTOMER_IMMUTABLE_FIELDS:
                    setattr(customer_model, column, value)
            customer_model.updated_at = datetime.now(timezone.utc)

            await session.commit()
            await session.refresh(customer_model)
            return customer_model_to_entity(customer_model)
