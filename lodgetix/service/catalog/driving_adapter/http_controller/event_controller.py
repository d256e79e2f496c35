from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from lodgetix.platform.logging.loguru_io import Logger
from lodgetix.service.catalog.app.query.get_event_use_case import GetEventUseCase
from lodgetix.service.catalog.app.query.list_events_use_case import ListEventsUseCase
from lodgetix.service.catalog.domain.event_display import EventDisplay
from lodgetix.service.catalog.driving_adapter.http_controller.schema.event_schema import (
    EventDayResponse,
    EventListResponse,
    EventResponse,
    TicketDefinitionResponse,
)


router = APIRouter()


def to_event_response(display: EventDisplay) -> EventResponse:
    event = display.event
    return EventResponse(
        id=event.id,
        slug=event.slug,
        title=event.title,
        description=event.description,
        event_start=event.event_start,
        event_end=event.event_end,
        location=event.location,
        type=event.type,
        price=event.price,
        max_attendees=event.max_attendees,
        image_url=event.image_url,
        featured=event.featured,
        is_multi_day=event.is_multi_day,
        is_purchasable_individually=event.is_purchasable_individually,
        parent_event_id=event.parent_event_id,
        event_includes=event.event_includes,
        important_information=event.important_information,
        latitude=event.latitude,
        longitude=event.longitude,
        created_at=event.created_at,
        day=display.day,
        date=display.date,
        time=display.time,
        until=display.until,
        image_src=display.image_src,
    )


@router.get('', status_code=status.HTTP_200_OK)
@Logger.io
async def list_events(
    page: int = Query(1, ge=1),
    limit: int = Query(9, ge=1, le=100),
    type: Optional[str] = None,
    use_case: ListEventsUseCase = Depends(ListEventsUseCase.depends),
) -> EventListResponse:
    event_page = await use_case.list_events(page=page, limit=limit, filter_type=type)
    return EventListResponse(
        events=[to_event_response(e) for e in event_page.events],
        total_count=event_page.total_count,
    )


@router.get('/featured', status_code=status.HTTP_200_OK)
@Logger.io
async def list_featured_events(
    limit: int = Query(3, ge=1, le=50),
    use_case: ListEventsUseCase = Depends(ListEventsUseCase.depends),
) -> List[EventResponse]:
    events = await use_case.list_featured_events(limit=limit)
    return [to_event_response(e) for e in events]


@router.get('/parent', status_code=status.HTTP_200_OK)
@Logger.io
async def get_parent_event(
    use_case: GetEventUseCase = Depends(GetEventUseCase.depends),
) -> EventResponse:
    return to_event_response(await use_case.get_parent_event())


@router.get('/by-type/{event_type}', status_code=status.HTTP_200_OK)
@Logger.io
async def list_events_by_type(
    event_type: str,
    scope_name: str = 'anonymous',
    use_case: ListEventsUseCase = Depends(ListEventsUseCase.depends),
) -> List[EventResponse]:
    events = await use_case.list_events_by_type(event_type=event_type, scope_name=scope_name)
    return [to_event_response(e) for e in events]


@router.get('/days', status_code=status.HTTP_200_OK)
@Logger.io
async def list_event_days(
    use_case: ListEventsUseCase = Depends(ListEventsUseCase.depends),
) -> List[EventDayResponse]:
    days = await use_case.list_event_days()
    return [
        EventDayResponse(
            id=d.id,
            date=d.date,
            name=d.name,
            day_number=d.day_number,
            featured_events_summary=d.featured_events_summary,
        )
        for d in days
    ]


@router.get('/{slug}', status_code=status.HTTP_200_OK)
@Logger.io
async def get_event_by_slug(
    slug: str,
    use_case: GetEventUseCase = Depends(GetEventUseCase.depends),
) -> EventResponse:
    return to_event_response(await use_case.get_by_slug(slug=slug))


@router.get('/{parent_event_id}/children', status_code=status.HTTP_200_OK)
@Logger.io
async def list_child_events(
    parent_event_id: str,
    use_case: ListEventsUseCase = Depends(ListEventsUseCase.depends),
) -> List[EventResponse]:
    events = await use_case.list_child_events(parent_event_id=parent_event_id)
    return [to_event_response(e) for e in events]


@router.get('/{event_id}/related', status_code=status.HTTP_200_OK)
@Logger.io
async def list_related_events(
    event_id: str,
    event_date: date,
    limit: int = Query(3, ge=1, le=50),
    use_case: ListEventsUseCase = Depends(ListEventsUseCase.depends),
) -> List[EventResponse]:
    events = await use_case.list_related_events(
        event_id=event_id, event_date=event_date, limit=limit
    )
    return [to_event_response(e) for e in events]


@router.get('/{event_id}/ticket-definitions', status_code=status.HTTP_200_OK)
@Logger.io
async def list_ticket_definitions(
    event_id: str,
    use_case: GetEventUseCase = Depends(GetEventUseCase.depends),
) -> List[TicketDefinitionResponse]:
    definitions = await use_case.list_ticket_definitions(event_id=event_id)
    return [
        TicketDefinitionResponse(
            id=d.definition.id,
            event_id=d.definition.event_id,
            name=d.definition.name,
            price=d.definition.price,
            description=d.definition.description,
            available_quantity=d.definition.available_quantity,
            sold_quantity=d.definition.sold_quantity,
            formatted_price=d.formatted_price,
        )
        for d in definitions
    ]
