from datetime import date
from typing import List, Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from lodgetix.platform.config.di import Container
from lodgetix.platform.exception.exceptions import DomainError
from lodgetix.platform.logging.loguru_io import Logger
from lodgetix.service.catalog.app.dto import EventPage
from lodgetix.service.catalog.app.interface.i_event_query_repo import IEventQueryRepo
from lodgetix.service.catalog.domain.entity.event_day_entity import EventDayEntity
from lodgetix.service.catalog.domain.event_display import EventDisplay, format_event_for_display


ANONYMOUS_SCOPE = 'anonymous'


class ListEventsUseCase:
    def __init__(self, event_query_repo: IEventQueryRepo) -> None:
        self.event_query_repo = event_query_repo

    @classmethod
    @inject
    def depends(
        cls,
        event_query_repo: IEventQueryRepo = Depends(Provide[Container.event_query_repo]),
    ) -> Self:
        return cls(event_query_repo=event_query_repo)

    @Logger.io
    async def list_events(
        self, *, page: int = 1, limit: int = 9, filter_type: Optional[str] = None
    ) -> EventPage:
        """Child events ordered by start time, one page at a time"""
        if page < 1 or limit < 1:
            raise DomainError('Page and limit must be positive')

        events, total_count = await self.event_query_repo.list_child_events(
            offset=(page - 1) * limit, limit=limit, event_type=filter_type
        )
        Logger.base.info(f'📋 [LIST_EVENTS] Page {page}: {len(events)} of {total_count} events')
        return EventPage(
            events=[format_event_for_display(event) for event in events], total_count=total_count
        )

    @Logger.io
    async def list_featured_events(self, *, limit: int = 3) -> List[EventDisplay]:
        scope_id = await self.event_query_repo.get_display_scope_id(scope_name=ANONYMOUS_SCOPE)
        if scope_id is None:
            Logger.base.warning(f'⚠️ [LIST_EVENTS] Scope "{ANONYMOUS_SCOPE}" not found')
            return []

        events = await self.event_query_repo.list_featured_events(
            display_scope_id=scope_id, limit=limit
        )
        return [format_event_for_display(event) for event in events]

    @Logger.io
    async def list_events_by_type(
        self, *, event_type: str, scope_name: str = ANONYMOUS_SCOPE
    ) -> List[EventDisplay]:
        scope_id = await self.event_query_repo.get_display_scope_id(scope_name=scope_name)
        if scope_id is None:
            Logger.base.warning(f'⚠️ [LIST_EVENTS] Display scope "{scope_name}" not found')
            return []

        events = await self.event_query_repo.list_events_by_type(
            event_type=event_type, display_scope_id=scope_id
        )
        return [format_event_for_display(event) for event in events]

    @Logger.io
    async def list_child_events(self, *, parent_event_id: str) -> List[EventDisplay]:
        if not parent_event_id:
            raise DomainError('Parent event ID is required')

        events = await self.event_query_repo.list_events_of_parent(parent_event_id=parent_event_id)
        return [format_event_for_display(event) for event in events]

    @Logger.io
    async def list_related_events(
        self, *, event_id: str, event_date: date, limit: int = 3
    ) -> List[EventDisplay]:
        """Other top-level events starting on the same calendar day"""
        if not event_id:
            raise DomainError('Event ID is required')

        events = await self.event_query_repo.list_top_level_events_on(
            event_date=event_date, exclude_event_id=event_id, limit=limit
        )
        return [format_event_for_display(event) for event in events]

    @Logger.io
    async def list_event_days(self) -> List[EventDayEntity]:
        return await self.event_query_repo.list_event_days()
