from typing import Any, AsyncContextManager, Callable, Dict, Optional

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession
import uuid_utils

from lodgetix.platform.logging.loguru_io import Logger
from lodgetix.service.catalog.app.interface.i_attendee_command_repo import IAttendeeCommandRepo
from lodgetix.service.catalog.domain.entity.attendee_entity import (
    MASON_DETAIL_FIELDS,
    GuestEntity,
    MasonEntity,
)
from lodgetix.service.catalog.driven_adapter.model.guest_model import GuestModel
from lodgetix.service.catalog.driven_adapter.model.mason_model import MasonModel
from lodgetix.service.catalog.driven_adapter.repo.attendee_query_repo_impl import (
    guest_model_to_entity,
    mason_model_to_entity,
    select_mason_by_customer_id,
)


GUEST_DETAIL_COLUMNS = (
    'guest_type',
    'title',
    'first_name',
    'last_name',
    'email',
    'phone',
    'dietary_requirements',
    'special_needs',
    'partner_relationship',
    'contact_preference',
    'contact_confirmed',
    'related_mason_id',
    'related_guest_id',
    'customer_id',
    'registration_id',
)


class AttendeeCommandRepoImpl(IAttendeeCommandRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]) -> None:
        self.session_factory = session_factory

    @Logger.io
    async def create_mason(self, *, mason: MasonEntity) -> MasonEntity:
        async with self.session_factory() as session:
            session.add(
                MasonModel(
                    id=str(uuid_utils.uuid7()),
                    customer_id=mason.customer_id,
                    **{column: getattr(mason, column) for column in MASON_DETAIL_FIELDS},
                )
            )
            await session.commit()
            # Reload so the lodge relationship is populated
            mason_model = await select_mason_by_customer_id(session, mason.customer_id)
            return mason_model_to_entity(mason_model)

    @Logger.io
    async def update_mason(
        self, *, customer_id: str, changes: Dict[str, Any]
    ) -> Optional[MasonEntity]:
        async with self.session_factory() as session:
            mason_model = await select_mason_by_customer_id(session, customer_id)
            if mason_model is None:
                return None

            for column, value in changes.items():
                if column in MASON_DETAIL_FIELDS:
                    setattr(mason_model, column, value)

            await session.commit()
            mason_model = await select_mason_by_customer_id(session, customer_id)
            return mason_model_to_entity(mason_model)

    @Logger.io
    async def create_guest(self, *, guest: GuestEntity) -> GuestEntity:
        async with self.session_factory() as session:
            guest_model = GuestModel(
                id=str(uuid_utils.uuid7()),
                **{column: getattr(guest, column) for column in GUEST_DETAIL_COLUMNS},
            )
            session.add(guest_model)
            await session.commit()
            await session.refresh(guest_model)
            return guest_model_to_entity(guest_model)

    @Logger.io
    async def update_guest(self, *, guest_id: str, guest: GuestEntity) -> Optional[GuestEntity]:
        async with self.session_factory() as session:
            guest_model = await session.get(GuestModel, guest_id)
            if guest_model is None:
                return None

            for column in GUEST_DETAIL_COLUMNS:
                setattr(guest_model, column, getattr(guest, column))

            await session.commit()
            await session.refresh(guest_model)
            return guest_model_to_entity(guest_model)

    @Logger.io
    async def delete_guest(self, *, guest_id: str) -> bool:
        async with self.session_factory() as session:
            result = await session.execute(delete(GuestModel).where(GuestModel.id == guest_id))
            await session.commit()
            return result.rowcount > 0
