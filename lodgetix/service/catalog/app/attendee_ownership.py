"""
Attendee Ownership

Attendee records belong to the customer of the signed-in user: the mason
through `customer_id`, standard guests through `customer_id`, and partners
through the mason or guest they are related to.
"""

from lodgetix.platform.exception.exceptions import ForbiddenError, NotFoundError
from lodgetix.service.catalog.app.interface.i_attendee_query_repo import IAttendeeQueryRepo
from lodgetix.service.catalog.app.interface.i_customer_query_repo import ICustomerQueryRepo
from lodgetix.service.catalog.domain.entity.attendee_entity import GuestEntity, MasonEntity


class AttendeeOwnership:
    def __init__(
        self,
        *,
        customer_query_repo: ICustomerQueryRepo,
        attendee_query_repo: IAttendeeQueryRepo,
    ) -> None:
        self.customer_query_repo = customer_query_repo
        self.attendee_query_repo = attendee_query_repo

    async def customer_id_of(self, user_id: str) -> str:
        customer = await self.customer_query_repo.get_by_user_id(user_id=user_id)
        if customer is None or not customer.id:
            raise NotFoundError('Customer not found')
        return customer.id

    async def owned_mason(self, *, mason_id: str, customer_id: str) -> MasonEntity:
        mason = await self.attendee_query_repo.get_mason(mason_id=mason_id)
        if mason is None:
            raise NotFoundError(f'Mason not found: {mason_id}')
        if mason.customer_id != customer_id:
            raise ForbiddenError('Mason belongs to another customer')
        return mason

    async def owned_guest(self, *, guest_id: str, customer_id: str) -> GuestEntity:
        guest = await self.attendee_query_repo.get_guest(guest_id=guest_id)
        if guest is None:
            raise NotFoundError(f'Guest not found: {guest_id}')

        if guest.customer_id == customer_id:
            return guest
        if guest.related_mason_id:
            mason = await self.attendee_query_repo.get_mason(mason_id=guest.related_mason_id)
            if mason is not None and mason.customer_id == customer_id:
                return guest
        if guest.related_guest_id:
            related = await self.attendee_query_repo.get_guest(guest_id=guest.related_guest_id)
            if related is not None and related.customer_id == customer_id:
                return guest

        raise ForbiddenError('Guest belongs to another customer')
