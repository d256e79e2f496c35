from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from lodgetix.platform.logging.loguru_io import Logger
from lodgetix.service.catalog.app.dto import AdminEventFilter, AdminEventListItem
from lodgetix.service.catalog.app.query.list_admin_events_use_case import ListAdminEventsUseCase
from lodgetix.service.catalog.domain.enum.event_status import EventStatus
from lodgetix.service.catalog.driving_adapter.http_controller.schema.event_schema import (
    AdminEventDetailResponse,
    AdminEventListItemResponse,
    AdminEventListResponse,
    AdminTicketTypeResponse,
)
from lodgetix.service.reservation.driving_adapter.http_controller.client_dependency import (
    require_service_role,
)


router = APIRouter(dependencies=[Depends(require_service_role)])


def _to_item_response(item: AdminEventListItem) -> AdminEventListItemResponse:
    return AdminEventListItemResponse(
        id=item.id,
        title=item.title,
        slug=item.slug,
        event_start=item.event_start,
        event_end=item.event_end,
        location=item.location,
        capacity=item.capacity,
        registered=item.registered,
        status=item.status,
        type=item.type,
    )


@router.get('', status_code=status.HTTP_200_OK)
@Logger.io
async def list_admin_events(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: Optional[str] = None,
    event_status: Optional[EventStatus] = Query(None, alias='status'),
    type: Optional[str] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    use_case: ListAdminEventsUseCase = Depends(ListAdminEventsUseCase.depends),
) -> AdminEventListResponse:
    items, count = await use_case.list_events(
        page=page,
        limit=limit,
        event_filter=AdminEventFilter(
            search=search,
            status=event_status,
            type=type,
            start_date=start_date,
            end_date=end_date,
        ),
    )
    return AdminEventListResponse(data=[_to_item_response(i) for i in items], count=count)


@router.get('/{event_id}', status_code=status.HTTP_200_OK)
@Logger.io
async def get_admin_event(
    event_id: str,
    use_case: ListAdminEventsUseCase = Depends(ListAdminEventsUseCase.depends),
) -> AdminEventDetailResponse:
    detail = await use_case.get_by_id(event_id=event_id)
    return AdminEventDetailResponse(
        **_to_item_response(detail.summary).model_dump(),
        description=detail.description,
        featured_image_url=detail.featured_image_url,
        important_information=detail.important_information,
        inclusions=detail.inclusions,
        parent_event_id=detail.parent_event_id,
        ticket_types=[
            AdminTicketTypeResponse(
                id=t.id,
                name=t.name,
                price=t.price,
                available_quantity=t.available_quantity,
                sold_quantity=t.sold_quantity,
            )
            for t in detail.ticket_types
        ],
        child_events=[_to_item_response(c) for c in detail.child_events],
    )
