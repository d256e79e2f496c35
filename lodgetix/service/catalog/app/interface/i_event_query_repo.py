from abc import ABC, abstractmethod
from datetime import date
from typing import List, Optional, Tuple

from lodgetix.service.catalog.app.dto import AdminEventDetail, AdminEventFilter, AdminEventListItem
from lodgetix.service.catalog.domain.entity.event_day_entity import EventDayEntity
from lodgetix.service.catalog.domain.entity.event_entity import EventEntity
from lodgetix.service.catalog.domain.entity.ticket_definition_entity import (
    TicketDefinitionEntity,
)


class IEventQueryRepo(ABC):
    @abstractmethod
    async def list_child_events(
        self, *, offset: int, limit: int, event_type: Optional[str] = None
    ) -> Tuple[List[EventEntity], int]:
        """Child events ordered by start, one page, plus the total match count"""
        pass

    @abstractmethod
    async def get_display_scope_id(self, *, scope_name: str) -> Optional[str]:
        pass

    @abstractmethod
    async def list_featured_events(self, *, display_scope_id: str, limit: int) -> List[EventEntity]:
        pass

    @abstractmethod
    async def list_events_by_type(
        self, *, event_type: str, display_scope_id: str
    ) -> List[EventEntity]:
        pass

    @abstractmethod
    async def get_by_id(self, *, event_id: str) -> Optional[EventEntity]:
        pass

    @abstractmethod
    async def get_by_slug(self, *, slug: str) -> Optional[EventEntity]:
        pass

    @abstractmethod
    async def list_events_of_parent(self, *, parent_event_id: str) -> List[EventEntity]:
        pass

    @abstractmethod
    async def list_top_level_events_on(
        self, *, event_date: date, exclude_event_id: str, limit: int
    ) -> List[EventEntity]:
        pass

    @abstractmethod
    async def get_parent_event(self) -> Optional[EventEntity]:
        pass

    @abstractmethod
    async def list_ticket_definitions(self, *, event_id: str) -> List[TicketDefinitionEntity]:
        pass

    @abstractmethod
    async def list_admin_events(
        self, *, offset: int, limit: int, event_filter: AdminEventFilter
    ) -> Tuple[List[AdminEventListItem], int]:
        pass

    @abstractmethod
    async def list_event_days(self) -> List[EventDayEntity]:
        """Days of the programme ordered by date"""
        pass

    @abstractmethod
    async def get_admin_event(self, *, event_id: str) -> Optional[AdminEventDetail]:
        pass
