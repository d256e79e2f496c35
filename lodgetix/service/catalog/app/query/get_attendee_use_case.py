from typing import Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from lodgetix.platform.config.di import Container
from lodgetix.platform.exception.exceptions import NotFoundError
from lodgetix.platform.logging.loguru_io import Logger
from lodgetix.service.catalog.app.attendee_ownership import AttendeeOwnership
from lodgetix.service.catalog.app.interface.i_attendee_query_repo import IAttendeeQueryRepo
from lodgetix.service.catalog.app.interface.i_customer_query_repo import ICustomerQueryRepo
from lodgetix.service.catalog.domain.entity.attendee_entity import GuestEntity, MasonEntity


class GetAttendeeUseCase:
    def __init__(
        self,
        *,
        attendee_query_repo: IAttendeeQueryRepo,
        customer_query_repo: ICustomerQueryRepo,
    ) -> None:
        self.attendee_query_repo = attendee_query_repo
        self.ownership = AttendeeOwnership(
            customer_query_repo=customer_query_repo, attendee_query_repo=attendee_query_repo
        )

    @classmethod
    @inject
    def depends(
        cls,
        attendee_query_repo: IAttendeeQueryRepo = Depends(Provide[Container.attendee_query_repo]),
        customer_query_repo: ICustomerQueryRepo = Depends(Provide[Container.customer_query_repo]),
    ) -> Self:
        return cls(attendee_query_repo=attendee_query_repo, customer_query_repo=customer_query_repo)

    @Logger.io
    async def get_mason_for_user(self, *, user_id: str) -> MasonEntity:
        customer_id = await self.ownership.customer_id_of(user_id)
        mason = await self.attendee_query_repo.get_mason_by_customer_id(customer_id=customer_id)
        if mason is None:
            Logger.base.info(f'🧑 [ATTENDEE] No mason record for customer {customer_id}')
            raise NotFoundError('Mason not found')

        return mason

    @Logger.io
    async def get_partner_for_mason(self, *, mason_id: str, user_id: str) -> Optional[GuestEntity]:
        customer_id = await self.ownership.customer_id_of(user_id)
        await self.ownership.owned_mason(mason_id=mason_id, customer_id=customer_id)
        return await self.attendee_query_repo.get_partner_for_mason(mason_id=mason_id)

