from typing import List, Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from lodgetix.platform.config.di import Container
from lodgetix.platform.logging.loguru_io import Logger
from lodgetix.service.catalog.app.interface.i_lodge_query_repo import ILodgeQueryRepo
from lodgetix.service.catalog.domain.entity.lodge_entity import (
    GrandLodgeEntity,
    LodgeEntity,
    is_lodge_number,
)


class ListLodgesUseCase:
    def __init__(self, lodge_query_repo: ILodgeQueryRepo) -> None:
        self.lodge_query_repo = lodge_query_repo

    @classmethod
    @inject
    def depends(
        cls,
        lodge_query_repo: ILodgeQueryRepo = Depends(Provide[Container.lodge_query_repo]),
    ) -> Self:
        return cls(lodge_query_repo=lodge_query_repo)

    @Logger.io
    async def list_grand_lodges(
        self, *, country_code: Optional[str] = None
    ) -> List[GrandLodgeEntity]:
        return await self.lodge_query_repo.list_grand_lodges(country_code=country_code)

    @Logger.io
    async def list_lodges(
        self, *, grand_lodge_id: str, search_term: Optional[str] = None
    ) -> List[LodgeEntity]:
        """
        A purely numeric term is tried as an exact lodge number first; when no
        lodge carries that number the term falls back to the text search.
        """
        if not grand_lodge_id:
            Logger.base.warning('⚠️ [LODGE] Lodge lookup without a grand lodge')
            return []

        if is_lodge_number(search_term):
            number = search_term.strip()
            lodges = await self.lodge_query_repo.list_lodges_by_number(
                grand_lodge_id=grand_lodge_id, number=number
            )
            if lodges:
                return sorted(lodges, key=lambda lodge: lodge.display_name or lodge.name)

        return await self.lodge_query_repo.search_lodges(
            grand_lodge_id=grand_lodge_id, search_term=search_term
        )
