from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from lodgetix.platform.config.di import Container
from lodgetix.platform.exception.exceptions import NotFoundError
from lodgetix.platform.logging.loguru_io import Logger
from lodgetix.service.catalog.app.interface.i_registration_query_repo import (
    IRegistrationQueryRepo,
)
from lodgetix.service.catalog.domain.entity.registration_entity import RegistrationEntity


class GetRegistrationUseCase:
    def __init__(self, registration_query_repo: IRegistrationQueryRepo) -> None:
        self.registration_query_repo = registration_query_repo

    @classmethod
    @inject
    def depends(
        cls,
        registration_query_repo: IRegistrationQueryRepo = Depends(
            Provide[Container.registration_query_repo]
        ),
    ) -> Self:
        return cls(registration_query_repo=registration_query_repo)

    @Logger.io
    async def get_by_id(self, *, registration_id: str) -> RegistrationEntity:
        registration = await self.registration_query_repo.get_by_id(
            registration_id=registration_id
        )
        if registration is None:
            raise NotFoundError(f'Registration not found: {registration_id}')

        return registration
