from typing import List, Self, Tuple

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from lodgetix.platform.config.di import Container
from lodgetix.platform.exception.exceptions import DomainError, NotFoundError
from lodgetix.platform.logging.loguru_io import Logger
from lodgetix.service.catalog.app.dto import AdminEventDetail, AdminEventFilter, AdminEventListItem
from lodgetix.service.catalog.app.interface.i_event_query_repo import IEventQueryRepo


class ListAdminEventsUseCase:
    """Back-office event listing with capacity and registration counts"""

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
        self, *, page: int = 1, limit: int = 10, event_filter: AdminEventFilter = AdminEventFilter()
    ) -> Tuple[List[AdminEventListItem], int]:
        if page < 1 or limit < 1:
            raise DomainError('Page and limit must be positive')

        return await self.event_query_repo.list_admin_events(
            offset=(page - 1) * limit, limit=limit, event_filter=event_filter
        )

    @Logger.io
    async def get_by_id(self, *, event_id: str) -> AdminEventDetail:
        detail = await self.event_query_repo.get_admin_event(event_id=event_id)
        if detail is None:
            raise NotFoundError(f'Event not found: {event_id}')

        return detail
