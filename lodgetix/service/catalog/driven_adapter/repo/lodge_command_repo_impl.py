from typing import AsyncContextManager, Callable

from sqlalchemy.ext.asyncio import AsyncSession
import uuid_utils

from lodgetix.platform.logging.loguru_io import Logger
from lodgetix.service.catalog.app.interface.i_lodge_command_repo import ILodgeCommandRepo
from lodgetix.service.catalog.domain.entity.lodge_entity import LodgeEntity
from lodgetix.service.catalog.driven_adapter.model.lodge_model import LodgeModel
from lodgetix.service.catalog.driven_adapter.repo.lodge_query_repo_impl import (
    lodge_model_to_entity,
)


class LodgeCommandRepoImpl(ILodgeCommandRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]) -> None:
        self.session_factory = session_factory

    @Logger.io
    async def create(self, *, lodge: LodgeEntity) -> LodgeEntity:
        async with self.session_factory() as session:
            lodge_model = LodgeModel(
                id=str(uuid_utils.uuid7()),
                grand_lodge_id=lodge.grand_lodge_id,
                name=lodge.name,
                number=lodge.number,
                display_name=lodge.display_name,
                district=lodge.district,
                meeting_place=lodge.meeting_place,
                area_type=lodge.area_type,
            )
            session.add(lodge_model)
            await session.commit()
            await session.refresh(lodge_model)
            return lodge_model_to_entity(lodge_model)
