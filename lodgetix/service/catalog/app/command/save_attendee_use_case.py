from typing import Any, Dict, Optional, Self

import attrs
from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from lodgetix.platform.config.di import Container
from lodgetix.platform.exception.exceptions import ForbiddenError, NotFoundError
from lodgetix.platform.logging.loguru_io import Logger
from lodgetix.service.catalog.app.attendee_ownership import AttendeeOwnership
from lodgetix.service.catalog.app.interface.i_attendee_command_repo import IAttendeeCommandRepo
from lodgetix.service.catalog.app.interface.i_attendee_query_repo import IAttendeeQueryRepo
from lodgetix.service.catalog.app.interface.i_customer_query_repo import ICustomerQueryRepo
from lodgetix.service.catalog.domain.entity.attendee_entity import (
    MASON_DETAIL_FIELDS,
    GuestEntity,
    MasonEntity,
)
from lodgetix.service.catalog.domain.enum.guest_type import GuestType


class SaveAttendeeUseCase:
    """
    Create-or-update of the attendee records entered during registration.
    Every write is scoped to the customer of the signed-in user.
    """

    def __init__(
        self,
        *,
        attendee_query_repo: IAttendeeQueryRepo,
        attendee_command_repo: IAttendeeCommandRepo,
        customer_query_repo: ICustomerQueryRepo,
    ) -> None:
        self.attendee_query_repo = attendee_query_repo
        self.attendee_command_repo = attendee_command_repo
        self.ownership = AttendeeOwnership(
            customer_query_repo=customer_query_repo, attendee_query_repo=attendee_query_repo
        )

    @classmethod
    @inject
    def depends(
        cls,
        attendee_query_repo: IAttendeeQueryRepo = Depends(Provide[Container.attendee_query_repo]),
        attendee_command_repo: IAttendeeCommandRepo = Depends(
            Provide[Container.attendee_command_repo]
        ),
        customer_query_repo: ICustomerQueryRepo = Depends(Provide[Container.customer_query_repo]),
    ) -> Self:
        return cls(
            attendee_query_repo=attendee_query_repo,
            attendee_command_repo=attendee_command_repo,
            customer_query_repo=customer_query_repo,
        )

    @Logger.io
    async def save_mason(self, *, user_id: str, details: Dict[str, Any]) -> MasonEntity:
        """Updates the customer's mason record, creating it on first save"""
        customer_id = await self.ownership.customer_id_of(user_id)
        details = {k: v for k, v in details.items() if k in MASON_DETAIL_FIELDS}

        existing = await self.attendee_query_repo.get_mason_by_customer_id(
            customer_id=customer_id
        )
        if existing is None:
            mason = await self.attendee_command_repo.create_mason(
                mason=MasonEntity(customer_id=customer_id, **details)
            )
            Logger.base.info(f'🧑 [ATTENDEE] Mason {mason.id} created for {customer_id}')
            return mason

        mason = await self.attendee_command_repo.update_mason(
            customer_id=customer_id, changes=details
        )
        if mason is None:
            raise NotFoundError('Mason not found')

        Logger.base.info(f'🧑 [ATTENDEE] Mason {mason.id} updated for {customer_id}')
        return mason

    @Logger.io
    async def save_partner(
        self,
        *,
        user_id: str,
        mason_id: str,
        partner: GuestEntity,
        guest_id: Optional[str] = None,
    ) -> GuestEntity:
        """
        Save the partner of a mason. Without `guest_id` the mason's existing
        partner is updated, so a mason never gets a second partner record.
        """
        customer_id = await self.ownership.customer_id_of(user_id)
        await self.ownership.owned_mason(mason_id=mason_id, customer_id=customer_id)
        partner = attrs.evolve(
            partner,
            guest_type=GuestType.PARTNER,
            related_mason_id=mason_id,
            related_guest_id=None,
            customer_id=None,
            registration_id=None,
        )

        if guest_id:
            existing = await self.ownership.owned_guest(guest_id=guest_id, customer_id=customer_id)
            if existing.related_mason_id != mason_id:
                raise ForbiddenError('Guest is not the partner of this mason')
        else:
            existing = await self.attendee_query_repo.get_partner_for_mason(mason_id=mason_id)

        if existing is None:
            saved = await self.attendee_command_repo.create_guest(guest=partner)
            Logger.base.info(f'🧑 [ATTENDEE] Partner {saved.id} created for mason {mason_id}')
            return saved

        saved = await self.attendee_command_repo.update_guest(guest_id=existing.id, guest=partner)
        if saved is None:
            raise NotFoundError(f'Guest not found: {existing.id}')
        return saved

    @Logger.io
    async def save_guest(
        self, *, user_id: str, guest: GuestEntity, guest_id: Optional[str] = None
    ) -> GuestEntity:
        customer_id = await self.ownership.customer_id_of(user_id)
        guest = attrs.evolve(
            guest,
            guest_type=GuestType.GUEST,
            related_mason_id=None,
            related_guest_id=None,
            customer_id=customer_id,
        )

        if not guest_id:
            saved = await self.attendee_command_repo.create_guest(guest=guest)
            Logger.base.info(f'🧑 [ATTENDEE] Guest {saved.id} created for {customer_id}')
            return saved

        await self.ownership.owned_guest(guest_id=guest_id, customer_id=customer_id)
        saved = await self.attendee_command_repo.update_guest(guest_id=guest_id, guest=guest)
        if saved is None:
            raise NotFoundError(f'Guest not found: {guest_id}')
        return saved

    @Logger.io
    async def delete_guest(self, *, user_id: str, guest_id: str) -> None:
        customer_id = await self.ownership.customer_id_of(user_id)
        await self.ownership.owned_guest(guest_id=guest_id, customer_id=customer_id)

        if not await self.attendee_command_repo.delete_guest(guest_id=guest_id):
            raise NotFoundError(f'Guest not found: {guest_id}')
        Logger.base.info(f'🗑️ [ATTENDEE] Guest {guest_id} deleted')
