from typing import AsyncContextManager, Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from lodgetix.platform.logging.loguru_io import Logger
from lodgetix.service.catalog.app.interface.i_registration_query_repo import (
    IRegistrationQueryRepo,
)
from lodgetix.service.catalog.domain.entity.registration_entity import RegistrationEntity
from lodgetix.service.catalog.domain.enum.payment_status import PaymentStatus
from lodgetix.service.catalog.driven_adapter.model.registration_model import RegistrationModel


def registration_model_to_entity(registration_model: RegistrationModel) -> RegistrationEntity:
    return RegistrationEntity(
        id=registration_model.id,
        registration_type=registration_model.registration_type,
        parent_event_id=registration_model.parent_event_id,
        customer_id=registration_model.customer_id,
        payment_status=PaymentStatus(registration_model.payment_status),
        total_price_paid=registration_model.total_price_paid,
        agree_to_terms=registration_model.agree_to_terms,
        stripe_payment_intent_id=registration_model.stripe_payment_intent_id,
        created_at=registration_model.created_at,
    )


class RegistrationQueryRepoImpl(IRegistrationQueryRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]) -> None:
        self.session_factory = session_factory

    @Logger.io
    async def get_by_id(self, *, registration_id: str) -> Optional[RegistrationEntity]:
        async with self.session_factory() as session:
            registration_model = await session.get(RegistrationModel, registration_id)
            return registration_model_to_entity(registration_model) if registration_model else None
