from typing import Any, Dict, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from lodgetix.platform.config.di import Container
from lodgetix.platform.exception.exceptions import DomainError
from lodgetix.platform.logging.loguru_io import Logger
from lodgetix.service.catalog.app.interface.i_customer_command_repo import ICustomerCommandRepo
from lodgetix.service.catalog.domain.entity.customer_entity import (
    CUSTOMER_IMMUTABLE_FIELDS,
    CustomerEntity,
)


class CreateCustomerUseCase:
    def __init__(self, customer_command_repo: ICustomerCommandRepo) -> None:
        self.customer_command_repo = customer_command_repo
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        customer_command_repo: ICustomerCommandRepo = Depends(
            Provide[Container.customer_command_repo]
        ),
    ) -> Self:
        return cls(customer_command_repo=customer_command_repo)

    @Logger.io
    async def create(self, *, user_id: str, profile: Dict[str, Any]) -> CustomerEntity:
        """
        Create the customer profile of an auth user.

        Raises:
            DomainError: the user id or the email is missing
        """
        with self.tracer.start_as_current_span(
            'use_case.create_customer', attributes={'user.id': user_id}
        ):
            if not user_id:
                raise DomainError('User ID is required')
            if not profile.get('email'):
                raise DomainError('Email is required')

            fields = {k: v for k, v in profile.items() if k not in CUSTOMER_IMMUTABLE_FIELDS}
            customer = await self.customer_command_repo.create(
                customer=CustomerEntity(user_id=user_id, **fields)
            )

            Logger.base.info(f'✅ [CUSTOMER] Created customer {customer.id} for user {user_id}')
            return customer
