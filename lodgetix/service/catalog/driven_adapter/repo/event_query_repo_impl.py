from datetime import date, datetime, time, timedelta
from typing import AsyncContextManager, Callable, List, Optional, Tuple

from sqlalchemy import Select, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from lodgetix.platform.logging.loguru_io import Logger
from lodgetix.service.catalog.app.dto import (
    AdminEventDetail,
    AdminEventFilter,
    AdminEventListItem,
    AdminTicketType,
    EventCapacity,
)
from lodgetix.service.catalog.app.interface.i_event_query_repo import IEventQueryRepo
from lodgetix.service.catalog.domain.entity.event_day_entity import EventDayEntity
from lodgetix.service.catalog.domain.entity.event_entity import EventEntity
from lodgetix.service.catalog.domain.entity.ticket_definition_entity import (
    TicketDefinitionEntity,
)
from lodgetix.service.catalog.domain.enum.event_status import EventStatus
from lodgetix.service.catalog.driven_adapter.model.display_scope_model import DisplayScopeModel
from lodgetix.service.catalog.driven_adapter.model.event_day_model import EventDayModel
from lodgetix.service.catalog.driven_adapter.model.event_model import EventModel
from lodgetix.service.catalog.driven_adapter.model.ticket_definition_model import (
    TicketDefinitionModel,
)


class EventQueryRepoImpl(IEventQueryRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]) -> None:
        self.session_factory = session_factory

    async def _count(self, session: AsyncSession, query: Select) -> int:
        result = await session.execute(select(func.count()).select_from(query.subquery()))
        return result.scalar_one()

    @Logger.io
    async def list_child_events(
        self, *, offset: int, limit: int, event_type: Optional[str] = None
    ) -> Tuple[List[EventEntity], int]:
        query = select(EventModel).where(EventModel.parent_event_id.is_not(None))
        if event_type:
            query = query.where(EventModel.type == event_type)

        async with self.session_factory() as session:
            total = await self._count(session, query)
            result = await session.execute(
                query.order_by(EventModel.event_start.asc()).offset(offset).limit(limit)
            )
            return [self._model_to_entity(m) for m in result.scalars().all()], total

    @Logger.io
    async def get_display_scope_id(self, *, scope_name: str) -> Optional[str]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(DisplayScopeModel.id).where(DisplayScopeModel.name == scope_name)
            )
            return result.scalar_one_or_none()

    @Logger.io
    async def list_featured_events(self, *, display_scope_id: str, limit: int) -> List[EventEntity]:
        query = (
            select(EventModel)
            .where(
                EventModel.parent_event_id.is_not(None),
                EventModel.featured.is_(True),
                EventModel.display_scope_id == display_scope_id,
            )
            .order_by(EventModel.event_start.asc())
            .limit(limit)
        )
        async with self.session_factory() as session:
            result = await session.execute(query)
            return [self._model_to_entity(m) for m in result.scalars().all()]

    @Logger.io
    async def list_events_by_type(
        self, *, event_type: str, display_scope_id: str
    ) -> List[EventEntity]:
        query = (
            select(EventModel)
            .where(
                EventModel.parent_event_id.is_not(None),
                EventModel.type == event_type,
                EventModel.display_scope_id == display_scope_id,
            )
            .order_by(EventModel.event_start.asc())
        )
        async with self.session_factory() as session:
            result = await session.execute(query)
            return [self._model_to_entity(m) for m in result.scalars().all()]

    @Logger.io
    async def get_by_id(self, *, event_id: str) -> Optional[EventEntity]:
        async with self.session_factory() as session:
            event_model = await session.get(EventModel, event_id)
            return self._model_to_entity(event_model) if event_model else None

    @Logger.io
    async def get_by_slug(self, *, slug: str) -> Optional[EventEntity]:
        async with self.session_factory() as session:
            result = await session.execute(select(EventModel).where(EventModel.slug == slug))
            event_model = result.scalar_one_or_none()
            return self._model_to_entity(event_model) if event_model else None

    @Logger.io
    async def list_events_of_parent(self, *, parent_event_id: str) -> List[EventEntity]:
        query = (
            select(EventModel)
            .where(EventModel.parent_event_id == parent_event_id)
            .order_by(EventModel.event_start.asc())
        )
        async with self.session_factory() as session:
            result = await session.execute(query)
            return [self._model_to_entity(m) for m in result.scalars().all()]

    @Logger.io
    async def list_top_level_events_on(
        self, *, event_date: date, exclude_event_id: str, limit: int
    ) -> List[EventEntity]:
        day_start = datetime.combine(event_date, time.min)
        query = (
            select(EventModel)
            .where(
                EventModel.event_start >= day_start,
                EventModel.event_start < day_start + timedelta(days=1),
                EventModel.id != exclude_event_id,
                EventModel.parent_event_id.is_(None),
            )
            .order_by(EventModel.event_start.asc())
            .limit(limit)
        )
        async with self.session_factory() as session:
            result = await session.execute(query)
            return [self._model_to_entity(m) for m in result.scalars().all()]

    @Logger.io
    async def get_parent_event(self) -> Optional[EventEntity]:
        query = (
            select(EventModel)
            .where(EventModel.parent_event_id.is_(None))
            .order_by(EventModel.event_start.asc())
            .limit(1)
        )
        async with self.session_factory() as session:
            result = await session.execute(query)
            event_model = result.scalar_one_or_none()
            return self._model_to_entity(event_model) if event_model else None

    @Logger.io
    async def list_ticket_definitions(self, *, event_id: str) -> List[TicketDefinitionEntity]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(TicketDefinitionModel)
                .where(TicketDefinitionModel.event_id == event_id)
                .order_by(TicketDefinitionModel.name.asc())
            )
            return [self._ticket_definition_to_entity(m) for m in result.scalars().all()]

    @Logger.io
    async def list_admin_events(
        self, *, offset: int, limit: int, event_filter: AdminEventFilter
    ) -> Tuple[List[AdminEventListItem], int]:
        query = select(EventModel)
        if event_filter.search:
            pattern = f'%{event_filter.search}%'
            query = query.where(
                or_(EventModel.title.ilike(pattern), EventModel.description.ilike(pattern))
            )
        if event_filter.status:
            query = query.where(EventModel.status == event_filter.status)
        if event_filter.type:
            query = query.where(EventModel.type == event_filter.type)
        if event_filter.start_date:
            query = query.where(EventModel.event_start >= event_filter.start_date)
        if event_filter.end_date:
            query = query.where(EventModel.event_end <= event_filter.end_date)

        async with self.session_factory() as session:
            total = await self._count(session, query)
            result = await session.execute(
                query.order_by(EventModel.event_start.asc()).offset(offset).limit(limit)
            )
            return [self._model_to_admin_item(m) for m in result.scalars().all()], total

    @Logger.io
    async def list_event_days(self) -> List[EventDayEntity]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(EventDayModel).order_by(EventDayModel.event_date.asc())
            )
            return [
                EventDayEntity(
                    id=m.id,
                    date=m.event_date,
                    name=m.name,
                    day_number=m.day_number,
                    featured_events_summary=m.featured_events_summary,
                )
                for m in result.scalars().all()
            ]

    @Logger.io
    async def get_admin_event(self, *, event_id: str) -> Optional[AdminEventDetail]:
        async with self.session_factory() as session:
            result = await session.execute(select(EventModel).where(EventModel.id == event_id))
            event_model = result.scalar_one_or_none()
            if event_model is None:
                return None

            ticket_result = await session.execute(
                select(TicketDefinitionModel).where(TicketDefinitionModel.event_id == event_id)
            )
            child_result = await session.execute(
                select(EventModel).where(EventModel.parent_event_id == event_id)
            )

            return AdminEventDetail(
                summary=self._model_to_admin_item(event_model),
                description=event_model.description or '',
                featured_image_url=event_model.featured_image_url or '',
                important_information=event_model.important_information or '',
                inclusions=event_model.inclusions or '',
                parent_event_id=event_model.parent_event_id,
                ticket_types=[
                    AdminTicketType(
                        id=ticket.id,
                        name=ticket.name,
                        price=ticket.price,
                        available_quantity=ticket.available_quantity or 0,
                        sold_quantity=ticket.sold_quantity or 0,
                    )
                    for ticket in ticket_result.scalars().all()
                ],
                child_events=[
                    self._model_to_admin_item(child) for child in child_result.scalars().all()
                ],
            )

    def _model_to_admin_item(self, event_model: EventModel) -> AdminEventListItem:
        capacity = None
        if event_model.capacity is not None:
            capacity = EventCapacity(
                total_capacity=event_model.capacity.total_capacity or 0,
                confirmed_count=event_model.capacity.confirmed_count or 0,
            )
        return AdminEventListItem.from_event(self._model_to_entity(event_model), capacity)

    def _model_to_entity(self, event_model: EventModel) -> EventEntity:
        try:
            status = EventStatus(event_model.status)
        except ValueError:
            status = EventStatus.DRAFT
        return EventEntity(
            id=event_model.id,
            title=event_model.title,
            slug=event_model.slug or '',
            description=event_model.description,
            event_start=event_model.event_start,
            event_end=event_model.event_end,
            location=event_model.location,
            type=event_model.type,
            price=event_model.price,
            max_attendees=event_model.max_attendees,
            image_url=event_model.image_url,
            featured=event_model.featured,
            is_multi_day=event_model.is_multi_day,
            is_purchasable_individually=event_model.is_purchasable_individually,
            parent_event_id=event_model.parent_event_id,
            display_scope_id=event_model.display_scope_id,
            status=status,
            latitude=event_model.latitude,
            longitude=event_model.longitude,
            event_includes=event_model.event_includes,
            important_information=event_model.important_information,
            featured_image_url=event_model.featured_image_url,
            inclusions=event_model.inclusions,
            created_at=event_model.created_at,
        )

    def _ticket_definition_to_entity(self, model: TicketDefinitionModel) -> TicketDefinitionEntity:
        return TicketDefinitionEntity(
            id=model.id,
            event_id=model.event_id,
            name=model.name,
            price=model.price,
            description=model.description,
            is_active=model.is_active,
            available_quantity=model.available_quantity or 0,
            sold_quantity=model.sold_quantity or 0,
        )
