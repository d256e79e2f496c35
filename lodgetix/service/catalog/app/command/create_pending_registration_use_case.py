from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from lodgetix.platform.config.di import Container
from lodgetix.platform.exception.exceptions import DomainError
from lodgetix.platform.logging.loguru_io import Logger
from lodgetix.service.catalog.app.interface.i_registration_command_repo import (
    IRegistrationCommandRepo,
)
from lodgetix.service.catalog.domain.entity.registration_entity import RegistrationEntity
from lodgetix.service.catalog.domain.enum.payment_status import PaymentStatus


class CreatePendingRegistrationUseCase:
    """
    Opens a registration before checkout. Terms agreement, the paid total and
    the payment intent are filled in later by the payment flow.
    """

    def __init__(self, registration_command_repo: IRegistrationCommandRepo) -> None:
        self.registration_command_repo = registration_command_repo
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        registration_command_repo: IRegistrationCommandRepo = Depends(
            Provide[Container.registration_command_repo]
        ),
    ) -> Self:
        return cls(registration_command_repo=registration_command_repo)

    @Logger.io
    async def create(
        self, *, registration_type: str, parent_event_id: str, customer_id: str
    ) -> str:
        with self.tracer.start_as_current_span(
            'use_case.create_pending_registration',
            attributes={'event.id': parent_event_id or '', 'customer.id': customer_id or ''},
        ):
            try:
                registration = RegistrationEntity(
                    registration_type=registration_type,
                    parent_event_id=parent_event_id,
                    customer_id=customer_id,
                    payment_status=PaymentStatus.PENDING,
                )
            except ValueError as e:
                raise DomainError('Missing required fields') from e

            created = await self.registration_command_repo.create(registration=registration)
            if not created.id:
                raise DomainError('Failed to retrieve ID after insert')

            Logger.base.info(f'📝 [REGISTRATION] Pending registration created: {created.id}')
            return created.id
