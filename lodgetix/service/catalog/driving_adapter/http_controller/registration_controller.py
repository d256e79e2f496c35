from typing import List, Optional

from fastapi import APIRouter, Depends, status

from lodgetix.platform.logging.loguru_io import Logger
from lodgetix.service.catalog.app.command.create_pending_registration_use_case import (
    CreatePendingRegistrationUseCase,
)
from lodgetix.service.catalog.app.dto import AttendeeTicket, LoadedGuest
from lodgetix.service.catalog.app.query.get_registration_use_case import GetRegistrationUseCase
from lodgetix.service.catalog.app.query.load_registration_use_case import (
    LoadRegistrationUseCase,
)
from lodgetix.service.catalog.domain.entity.registration_entity import RegistrationEntity
from lodgetix.service.catalog.domain.event_display import format_event_for_display
from lodgetix.service.catalog.driving_adapter.http_controller.customer_controller import (
    to_customer_response,
)
from lodgetix.service.catalog.driving_adapter.http_controller.event_controller import (
    to_event_response,
)
from lodgetix.service.catalog.driving_adapter.http_controller.schema.attendee_schema import (
    GuestResponse,
    MasonResponse,
)
from lodgetix.service.catalog.driving_adapter.http_controller.schema.registration_schema import (
    AttendeeOrderResponse,
    AttendeeTicketResponse,
    LoadedGuestResponse,
    LoadedMasonResponse,
    RegistrationCreateRequest,
    RegistrationCreatedResponse,
    RegistrationLoadResponse,
    RegistrationResponse,
)
from lodgetix.service.reservation.app.dto import AuthUser
from lodgetix.service.reservation.driving_adapter.http_controller.client_dependency import (
    get_current_user,
)


router = APIRouter()


def _to_registration_response(
    registration: RegistrationEntity, registration_id: str
) -> RegistrationResponse:
    return RegistrationResponse(
        id=registration.id or registration_id,
        registration_type=registration.registration_type,
        parent_event_id=registration.parent_event_id,
        customer_id=registration.customer_id,
        payment_status=str(registration.payment_status),
        total_price_paid=registration.total_price_paid,
        agree_to_terms=registration.agree_to_terms,
        created_at=registration.created_at,
    )


def _to_ticket_response(ticket: Optional[AttendeeTicket]) -> Optional[AttendeeTicketResponse]:
    if ticket is None:
        return None
    return AttendeeTicketResponse(
        ticket_definition_id=ticket.ticket_definition_id, event_ids=list(ticket.event_ids)
    )


def _to_loaded_guest_response(loaded: LoadedGuest) -> LoadedGuestResponse:
    return LoadedGuestResponse(
        guest=GuestResponse.model_validate(loaded.guest),
        ticket=_to_ticket_response(loaded.ticket),
    )


@router.post('', status_code=status.HTTP_201_CREATED)
@Logger.io
async def create_pending_registration(
    request: RegistrationCreateRequest,
    use_case: CreatePendingRegistrationUseCase = Depends(CreatePendingRegistrationUseCase.depends),
) -> RegistrationCreatedResponse:
    registration_id = await use_case.create(
        registration_type=request.registration_type,
        parent_event_id=request.parent_event_id,
        customer_id=request.customer_id,
    )
    return RegistrationCreatedResponse(registration_id=registration_id)


@router.get('/{registration_id}', status_code=status.HTTP_200_OK)
@Logger.io
async def get_registration(
    registration_id: str,
    use_case: GetRegistrationUseCase = Depends(GetRegistrationUseCase.depends),
) -> RegistrationResponse:
    registration = await use_case.get_by_id(registration_id=registration_id)
    return _to_registration_response(registration, registration_id)


@router.get('/{registration_id}/guests', status_code=status.HTTP_200_OK)
@Logger.io
async def list_registration_guests(
    registration_id: str,
    current_user: AuthUser = Depends(get_current_user),
    use_case: LoadRegistrationUseCase = Depends(LoadRegistrationUseCase.depends),
) -> List[GuestResponse]:
    guests = await use_case.list_guests(registration_id=registration_id, user_id=current_user.id)
    return [GuestResponse.model_validate(g) for g in guests]


@router.get('/{registration_id}/load', status_code=status.HTTP_200_OK)
@Logger.io
async def load_registration(
    registration_id: str,
    current_user: AuthUser = Depends(get_current_user),
    use_case: LoadRegistrationUseCase = Depends(LoadRegistrationUseCase.depends),
) -> RegistrationLoadResponse:
    data = await use_case.load(registration_id=registration_id, user_id=current_user.id)
    return RegistrationLoadResponse(
        registration=_to_registration_response(data.registration, registration_id),
        customer=to_customer_response(data.customer) if data.customer else None,
        event=to_event_response(format_event_for_display(data.event)) if data.event else None,
        masons=[
            LoadedMasonResponse(
                mason=MasonResponse.model_validate(m.mason),
                is_primary=m.is_primary,
                ticket=_to_ticket_response(m.ticket),
            )
            for m in data.masons
        ],
        guests=[_to_loaded_guest_response(g) for g in data.guests],
        lady_partners=[_to_loaded_guest_response(p) for p in data.lady_partners],
        guest_partners=[_to_loaded_guest_response(p) for p in data.guest_partners],
        attendee_add_order=[
            AttendeeOrderResponse(attendee_id=item.attendee_id, attendee_type=item.attendee_type)
            for item in data.attendee_add_order
        ],
    )
