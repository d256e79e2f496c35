from typing import AsyncContextManager, Callable

from sqlalchemy.ext.asyncio import AsyncSession
import uuid_utils

from lodgetix.platform.logging.loguru_io import Logger
from lodgetix.service.catalog.app.interface.i_registration_command_repo import (
    IRegistrationCommandRepo,
)
from lodgetix.service.catalog.domain.entity.registration_entity import RegistrationEntity
from lodgetix.service.catalog.driven_adapter.model.registration_model import RegistrationModel
from lodgetix.service.catalog.driven_adapter.repo.registration_query_repo_impl import (
    registration_model_to_entity,
)


class RegistrationCommandRepoImpl(IRegistrationCommandRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]) -> None:
        self.session_factory = session_factory

    @Logger.io
    async def create(self, *, registration: RegistrationEntity) -> RegistrationEntity:
        async with self.session_factory() as session:
            registration_model = RegistrationModel(
                id=str(uuid_utils.uuid7()),
                customer_id=registration.customer_id,
                parent_event_id=registration.parent_event_id,
                registration_type=registration.registration_type,
                payment_status=registration.payment_status,
                agree_to_terms=registration.agree_to_terms,
            )
            session.add(registration_model)
            await session.commit()
            await session.refresh(registration_model)
            return registration_model_to_entity(registration_model)
