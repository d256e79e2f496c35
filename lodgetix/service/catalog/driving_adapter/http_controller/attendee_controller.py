from fastapi import APIRouter, Depends, status

from lodgetix.platform.exception.exceptions import NotFoundError
from lodgetix.platform.logging.loguru_io import Logger
from lodgetix.service.catalog.app.command.save_attendee_use_case import SaveAttendeeUseCase
from lodgetix.service.catalog.app.query.get_attendee_use_case import GetAttendeeUseCase
from lodgetix.service.catalog.domain.entity.attendee_entity import GuestEntity
from lodgetix.service.catalog.domain.enum.guest_type import GuestType
from lodgetix.service.catalog.driving_adapter.http_controller.schema.attendee_schema import (
    GuestDetailsRequest,
    GuestRequest,
    GuestResponse,
    MasonDetailsRequest,
    MasonResponse,
    PartnerRequest,
)
from lodgetix.service.reservation.app.dto import AuthUser
from lodgetix.service.reservation.driving_adapter.http_controller.client_dependency import (
    get_current_user,
)


router = APIRouter()


def _to_guest_entity(request: GuestDetailsRequest, guest_type: GuestType) -> GuestEntity:
    return GuestEntity(
        guest_type=guest_type,
        title=request.title,
        first_name=request.first_name,
        last_name=request.last_name,
        email=request.email,
        phone=request.phone,
        dietary_requirements=request.dietary_requirements,
        special_needs=request.special_needs,
        partner_relationship=getattr(request, 'partner_relationship', None),
        contact_preference=request.contact_preference,
        contact_confirmed=request.contact_confirmed,
        registration_id=getattr(request, 'registration_id', None),
    )


@router.get('/mason', status_code=status.HTTP_200_OK)
@Logger.io
async def get_my_mason(
    current_user: AuthUser = Depends(get_current_user),
    use_case: GetAttendeeUseCase = Depends(GetAttendeeUseCase.depends),
) -> MasonResponse:
    mason = await use_case.get_mason_for_user(user_id=current_user.id)
    return MasonResponse.model_validate(mason)


@router.put('/mason', status_code=status.HTTP_200_OK)
@Logger.io
async def save_my_mason(
    request: MasonDetailsRequest,
    current_user: AuthUser = Depends(get_current_user),
    use_case: SaveAttendeeUseCase = Depends(SaveAttendeeUseCase.depends),
) -> MasonResponse:
    mason = await use_case.save_mason(
        user_id=current_user.id, details=request.model_dump(exclude_unset=True)
    )
    return MasonResponse.model_validate(mason)


@router.get('/mason/{mason_id}/partner', status_code=status.HTTP_200_OK)
@Logger.io
async def get_partner(
    mason_id: str,
    current_user: AuthUser = Depends(get_current_user),
    use_case: GetAttendeeUseCase = Depends(GetAttendeeUseCase.depends),
) -> GuestResponse:
    partner = await use_case.get_partner_for_mason(mason_id=mason_id, user_id=current_user.id)
    if partner is None:
        raise NotFoundError(f'Partner not found for mason: {mason_id}')
    return GuestResponse.model_validate(partner)


@router.put('/mason/{mason_id}/partner', status_code=status.HTTP_200_OK)
@Logger.io
async def save_partner(
    mason_id: str,
    request: PartnerRequest,
    current_user: AuthUser = Depends(get_current_user),
    use_case: SaveAttendeeUseCase = Depends(SaveAttendeeUseCase.depends),
) -> GuestResponse:
    partner = await use_case.save_partner(
        user_id=current_user.id,
        mason_id=mason_id,
        partner=_to_guest_entity(request, GuestType.PARTNER),
        guest_id=request.guest_id,
    )
    return GuestResponse.model_validate(partner)


@router.post('/guest', status_code=status.HTTP_201_CREATED)
@Logger.io
async def create_guest(
    request: GuestRequest,
    current_user: AuthUser = Depends(get_current_user),
    use_case: SaveAttendeeUseCase = Depends(SaveAttendeeUseCase.depends),
) -> GuestResponse:
    guest = await use_case.save_guest(
        user_id=current_user.id, guest=_to_guest_entity(request, GuestType.GUEST)
    )
    return GuestResponse.model_validate(guest)


@router.put('/guest/{guest_id}', status_code=status.HTTP_200_OK)
@Logger.io
async def update_guest(
    guest_id: str,
    request: GuestRequest,
    current_user: AuthUser = Depends(get_current_user),
    use_case: SaveAttendeeUseCase = Depends(SaveAttendeeUseCase.depends),
) -> GuestResponse:
    guest = await use_case.save_guest(
        user_id=current_user.id,
        guest=_to_guest_entity(request, GuestType.GUEST),
        guest_id=guest_id,
    )
    return GuestResponse.model_validate(guest)


@router.delete('/guest/{guest_id}', status_code=status.HTTP_204_NO_CONTENT)
@Logger.io
async def delete_guest(
    guest_id: str,
    current_user: AuthUser = Depends(get_current_user),
    use_case: SaveAttendeeUseCase = Depends(SaveAttendeeUseCase.depends),
) -> None:
    await use_case.delete_guest(user_id=current_user.id, guest_id=guest_id)
