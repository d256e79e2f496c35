from typing import List, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from lodgetix.platform.config.di import Container
from lodgetix.platform.exception.exceptions import NotFoundError
from lodgetix.platform.logging.loguru_io import Logger
from lodgetix.service.catalog.app.interface.i_event_query_repo import IEventQueryRepo
from lodgetix.service.catalog.domain.event_display import (
    EventDisplay,
    TicketDefinitionDisplay,
    format_event_for_display,
    format_ticket_definition_for_display,
)


class GetEventUseCase:
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
    async def get_by_slug(self, *, slug: str) -> EventDisplay:
        Logger.base.info(f'🎫 [GET_EVENT] Loading event {slug}')

        event = await self.event_query_repo.get_by_slug(slug=slug)
        if event is None:
            raise NotFoundError(f'Event not found: {slug}')

        return format_event_for_display(event)

    @Logger.io
    async def get_parent_event(self) -> EventDisplay:
        event = await self.event_query_repo.get_parent_event()
        if event is None:
            raise NotFoundError('Parent event not found')

        return format_event_for_display(event)

    @Logger.io
    async def list_ticket_definitions(self, *, event_id: str) -> List[TicketDefinitionDisplay]:
        """Active ticket definitions of an event, with display prices"""
        definitions = await self.event_query_repo.list_ticket_definitions(event_id=event_id)
        return [
            format_ticket_definition_for_display(definition)
            for definition in definitions
            if definition.is_active
        ]
