from typing import AsyncContextManager, Callable, List, Optional

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from lodgetix.platform.logging.loguru_io import Logger
from lodgetix.service.catalog.app.dto import TicketAssignment
from lodgetix.service.catalog.app.interface.i_attendee_query_repo import IAttendeeQueryRepo
from lodgetix.service.catalog.domain.entity.attendee_entity import GuestEntity, MasonEntity
from lodgetix.service.catalog.domain.enum.guest_type import GuestType
from lodgetix.service.catalog.driven_adapter.model.guest_model import GuestModel
from lodgetix.service.catalog.driven_adapter.model.mason_model import MasonModel
from lodgetix.service.catalog.driven_adapter.model.ticket_model import TicketModel


def mason_model_to_entity(mason_model: MasonModel) -> MasonEntity:
    lodge = mason_model.lodge
    return MasonEntity(
        id=mason_model.id,
        customer_id=mason_model.customer_id,
        title=mason_model.title,
        first_name=mason_model.first_name,
        last_name=mason_model.last_name,
        email=mason_model.email,
        phone=mason_model.phone,
        dietary_requirements=mason_model.dietary_requirements,
        special_needs=mason_model.special_needs,
        rank=mason_model.rank,
        grand_rank=mason_model.grand_rank,
        grand_officer=mason_model.grand_officer,
        grand_office=mason_model.grand_office,
        grand_office_other=mason_model.grand_office_other,
        grand_lodge_id=mason_model.grand_lodge_id,
        lodge_id=mason_model.lodge_id,
        lodge_name=lodge.name if lodge else None,
        lodge_number=lodge.number if lodge else None,
        created_at=mason_model.created_at,
    )


def guest_model_to_entity(guest_model: GuestModel) -> GuestEntity:
    return GuestEntity(
        id=guest_model.id,
        guest_type=GuestType(guest_model.guest_type),
        title=guest_model.title,
        first_name=guest_model.first_name,
        last_name=guest_model.last_name,
        email=guest_model.email,
        phone=guest_model.phone,
        dietary_requirements=guest_model.dietary_requirements,
        special_needs=guest_model.special_needs,
        partner_relationship=guest_model.partner_relationship,
        contact_preference=guest_model.contact_preference,
        contact_confirmed=bool(guest_model.contact_confirmed),
        related_mason_id=guest_model.related_mason_id,
        related_guest_id=guest_model.related_guest_id,
        customer_id=guest_model.customer_id,
        registration_id=guest_model.registration_id,
        created_at=guest_model.created_at,
    )


async def select_mason_by_customer_id(
    session: AsyncSession, customer_id: str
) -> Optional[MasonModel]:
    result = await session.execute(
        select(MasonModel)
        .where(MasonModel.customer_id == customer_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


class AttendeeQueryRepoImpl(IAttendeeQueryRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]) -> None:
        self.session_factory = session_factory

    @Logger.io
    async def get_mason_by_customer_id(self, *, customer_id: str) -> Optional[MasonEntity]:
        async with self.session_factory() as session:
            mason_model = await select_mason_by_customer_id(session, customer_id)
            return mason_model_to_entity(mason_model) if mason_model else None

    @Logger.io
    async def get_mason(self, *, mason_id: str) -> Optional[MasonEntity]:
        async with self.session_factory() as session:
            mason_model = await session.get(MasonModel, mason_id)
            return mason_model_to_entity(mason_model) if mason_model else None

    @Logger.io
    async def get_guest(self, *, guest_id: str) -> Optional[GuestEntity]:
        async with self.session_factory() as session:
            guest_model = await session.get(GuestModel, guest_id)
            return guest_model_to_entity(guest_model) if guest_model else None

    @Logger.io
    async def get_partner_for_mason(self, *, mason_id: str) -> Optional[GuestEntity]:
        query = (
            select(GuestModel)
            .where(
                GuestModel.related_mason_id == mason_id,
                GuestModel.guest_type == GuestType.PARTNER,
            )
            .order_by(GuestModel.created_at.asc())
            .limit(1)
        )
        async with self.session_factory() as session:
            result = await session.execute(query)
            guest_model = result.scalar_one_or_none()
            return guest_model_to_entity(guest_model) if guest_model else None

    @Logger.io
    async def list_guests_for_registration(self, *, registration_id: str) -> List[GuestEntity]:
        query = (
            select(GuestModel)
            .where(
                GuestModel.registration_id == registration_id,
                GuestModel.guest_type == GuestType.GUEST,
            )
            .order_by(GuestModel.created_at.asc())
        )
        async with self.session_factory() as session:
            result = await session.execute(query)
            return [guest_model_to_entity(m) for m in result.scalars().all()]

    @Logger.io
    async def list_partners_of(
        self, *, mason_ids: List[str], guest_ids: List[str]
    ) -> List[GuestEntity]:
        if not mason_ids and not guest_ids:
            return []

        query = (
            select(GuestModel)
            .where(
                GuestModel.guest_type == GuestType.PARTNER,
                or_(
                    GuestModel.related_mason_id.in_(mason_ids),
                    GuestModel.related_guest_id.in_(guest_ids),
                ),
            )
            .order_by(GuestModel.created_at.asc())
        )
        async with self.session_factory() as session:
            result = await session.execute(query)
            return [guest_model_to_entity(m) for m in result.scalars().all()]

    @Logger.io
    async def list_ticket_assignments(self, *, attendee_ids: List[str]) -> List[TicketAssignment]:
        if not attendee_ids:
            return []

        query = (
            select(TicketModel)
            .where(TicketModel.attendee_id.in_(attendee_ids))
            .order_by(TicketModel.ticket_id.asc())
        )
        async with self.session_factory() as session:
            result = await session.execute(query)
            return [
                TicketAssignment(
                    attendee_id=m.attendee_id,
                    ticket_definition_id=m.ticket_definition_id,
                    event_id=m.event_id,
                )
                for m in result.scalars().all()
            ]
