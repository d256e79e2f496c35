from typing import Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from lodgetix.platform.config.di import Container
from lodgetix.platform.exception.exceptions import DomainError
from lodgetix.platform.logging.loguru_io import Logger
from lodgetix.service.catalog.app.interface.i_lodge_command_repo import ILodgeCommandRepo
from lodgetix.service.catalog.domain.entity.lodge_entity import LodgeEntity, lodge_display_name


class CreateLodgeUseCase:
    def __init__(self, lodge_command_repo: ILodgeCommandRepo) -> None:
        self.lodge_command_repo = lodge_command_repo

    @classmethod
    @inject
    def depends(
        cls,
        lodge_command_repo: ILodgeCommandRepo = Depends(Provide[Container.lodge_command_repo]),
    ) -> Self:
        return cls(lodge_command_repo=lodge_command_repo)

    @Logger.io
    async def create(
        self,
        *,
        grand_lodge_id: str,
        name: str,
        number: Optional[str] = None,
        district: Optional[str] = None,
        meeting_place: Optional[str] = None,
        area_type: Optional[str] = None,
    ) -> LodgeEntity:
        """The display name is always derived from name and number"""
        if not grand_lodge_id:
            raise DomainError('Grand lodge is required')
        if not name or not name.strip():
            raise DomainError('Lodge name is required')

        name = name.strip()
        number = number.strip() if number else None
        lodge = await self.lodge_command_repo.create(
            lodge=LodgeEntity(
                grand_lodge_id=grand_lodge_id,
                name=name,
                number=number,
                display_name=lodge_display_name(name, number),
                district=district,
                meeting_place=meeting_place,
                area_type=area_type,
            )
        )
        Logger.base.info(f'🏛️ [LODGE] Created {lodge.display_name} ({lodge.id})')
        return lodge
