from typing import AsyncContextManager, Callable, List, Optional

from sqlalchemy import String, cast, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from lodgetix.platform.logging.loguru_io import Logger
from lodgetix.service.catalog.app.interface.i_lodge_query_repo import ILodgeQueryRepo
from lodgetix.service.catalog.domain.entity.lodge_entity import GrandLodgeEntity, LodgeEntity
from lodgetix.service.catalog.driven_adapter.model.grand_lodge_model import GrandLodgeModel
from lodgetix.service.catalog.driven_adapter.model.lodge_model import LodgeModel


def lodge_model_to_entity(lodge_model: LodgeModel) -> LodgeEntity:
    return LodgeEntity(
        id=lodge_model.id,
        grand_lodge_id=lodge_model.grand_lodge_id,
        name=lodge_model.name or '',
        number=lodge_model.number or '',
        display_name=lodge_model.display_name or '',
        district=lodge_model.district or '',
        meeting_place=lodge_model.meeting_place or '',
        area_type=lodge_model.area_type,
        created_at=lodge_model.created_at,
    )


def _grand_lodge_model_to_entity(model: GrandLodgeModel) -> GrandLodgeEntity:
    return GrandLodgeEntity(
        id=model.id,
        name=model.name,
        country=model.country,
        country_code_iso3=model.country_code_iso3,
        abbreviation=model.abbreviation,
        created_at=model.created_at,
    )


class LodgeQueryRepoImpl(ILodgeQueryRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]) -> None:
        self.session_factory = session_factory

    @Logger.io
    async def list_grand_lodges(
        self, *, country_code: Optional[str] = None
    ) -> List[GrandLodgeEntity]:
        query = select(GrandLodgeModel)
        if country_code:
            query = query.where(GrandLodgeModel.country_code_iso3 == country_code)

        async with self.session_factory() as session:
            result = await session.execute(query.order_by(GrandLodgeModel.name.asc()))
            return [_grand_lodge_model_to_entity(m) for m in result.scalars().all()]

    @Logger.io
    async def list_lodges_by_number(self, *, grand_lodge_id: str, number: str) -> List[LodgeEntity]:
        query = select(LodgeModel).where(
            LodgeModel.grand_lodge_id == grand_lodge_id, LodgeModel.number == number
        )
        async with self.session_factory() as session:
            result = await session.execute(query)
            return [lodge_model_to_entity(m) for m in result.scalars().all()]

    @Logger.io
    async def search_lodges(
        self, *, grand_lodge_id: str, search_term: Optional[str] = None
    ) -> List[LodgeEntity]:
        query = select(LodgeModel).where(LodgeModel.grand_lodge_id == grand_lodge_id)

        term = (search_term or '').strip()
        if term:
            pattern = f'%{term}%'
            conditions = [
                LodgeModel.name.ilike(pattern),
                LodgeModel.display_name.ilike(pattern),
                LodgeModel.district.ilike(pattern),
                LodgeModel.meeting_place.ilike(pattern),
            ]
            if term[0].isdigit():
                conditions.append(cast(LodgeModel.number, String).ilike(pattern))
            query = query.where(or_(*conditions))

        query = query.order_by(
            LodgeModel.display_name.asc().nulls_last(), LodgeModel.name.asc()
        )
        async with self.session_factory() as session:
            result = await session.execute(query)
            return [lodge_model_to_entity(m) for m in result.scalars().all()]
