from typing import List, Optional

from fastapi import APIRouter, Depends, status

from lodgetix.platform.logging.loguru_io import Logger
from lodgetix.service.catalog.app.command.create_lodge_use_case import CreateLodgeUseCase
from lodgetix.service.catalog.app.query.list_lodges_use_case import ListLodgesUseCase
from lodgetix.service.catalog.driving_adapter.http_controller.schema.lodge_schema import (
    GrandLodgeResponse,
    LodgeCreateRequest,
    LodgeResponse,
)
from lodgetix.service.reservation.app.dto import AuthUser
from lodgetix.service.reservation.driving_adapter.http_controller.client_dependency import (
    get_current_user,
)


router = APIRouter()


@router.get('/grand-lodges', status_code=status.HTTP_200_OK)
@Logger.io
async def list_grand_lodges(
    country_code: Optional[str] = None,
    use_case: ListLodgesUseCase = Depends(ListLodgesUseCase.depends),
) -> List[GrandLodgeResponse]:
    grand_lodges = await use_case.list_grand_lodges(country_code=country_code)
    return [GrandLodgeResponse.model_validate(g) for g in grand_lodges]


@router.get('/grand-lodges/{grand_lodge_id}/lodges', status_code=status.HTTP_200_OK)
@Logger.io
async def list_lodges(
    grand_lodge_id: str,
    search: Optional[str] = None,
    use_case: ListLodgesUseCase = Depends(ListLodgesUseCase.depends),
) -> List[LodgeResponse]:
    lodges = await use_case.list_lodges(grand_lodge_id=grand_lodge_id, search_term=search)
    return [LodgeResponse.model_validate(lodge) for lodge in lodges]


@router.post('', status_code=status.HTTP_201_CREATED)
@Logger.io
async def create_lodge(
    request: LodgeCreateRequest,
    current_user: AuthUser = Depends(get_current_user),
    use_case: CreateLodgeUseCase = Depends(CreateLodgeUseCase.depends),
) -> LodgeResponse:
    lodge = await use_case.create(**request.model_dump())
    return LodgeResponse.model_validate(lodge)
