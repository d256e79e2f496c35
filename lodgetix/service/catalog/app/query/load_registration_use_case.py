"""
Load Registration Use Case

Gathers a registration with its customer, event and attendees so the
registration form can be reopened for editing. Attendees are the customer's
mason, the registration's guests and the partners of both, each with the
ticket assigned to it.
"""

from collections import defaultdict
from datetime import datetime, timezone
from typing import Dict, List, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from lodgetix.platform.config.di import Container
from lodgetix.platform.exception.exceptions import ForbiddenError, NotFoundError
from lodgetix.platform.logging.loguru_io import Logger
from lodgetix.service.catalog.app.dto import (
    AttendeeOrderItem,
    AttendeeTicket,
    LoadedGuest,
    LoadedMason,
    RegistrationLoadData,
    TicketAssignment,
)
from lodgetix.service.catalog.app.interface.i_attendee_query_repo import IAttendeeQueryRepo
from lodgetix.service.catalog.app.interface.i_customer_query_repo import ICustomerQueryRepo
from lodgetix.service.catalog.app.interface.i_event_query_repo import IEventQueryRepo
from lodgetix.service.catalog.app.interface.i_registration_query_repo import (
    IRegistrationQueryRepo,
)
from lodgetix.service.catalog.domain.entity.attendee_entity import GuestEntity
from lodgetix.service.catalog.domain.entity.customer_entity import CustomerEntity
from lodgetix.service.catalog.domain.entity.registration_entity import RegistrationEntity
from lodgetix.service.catalog.domain.enum.attendee_type import AttendeeType


_UNDATED = datetime.max.replace(tzinfo=timezone.utc)


class LoadRegistrationUseCase:
    def __init__(
        self,
        *,
        registration_query_repo: IRegistrationQueryRepo,
        customer_query_repo: ICustomerQueryRepo,
        event_query_repo: IEventQueryRepo,
        attendee_query_repo: IAttendeeQueryRepo,
    ) -> None:
        self.registration_query_repo = registration_query_repo
        self.customer_query_repo = customer_query_repo
        self.event_query_repo = event_query_repo
        self.attendee_query_repo = attendee_query_repo

    @classmethod
    @inject
    def depends(
        cls,
        registration_query_repo: IRegistrationQueryRepo = Depends(
            Provide[Container.registration_query_repo]
        ),
        customer_query_repo: ICustomerQueryRepo = Depends(Provide[Container.customer_query_repo]),
        event_query_repo: IEventQueryRepo = Depends(Provide[Container.event_query_repo]),
        attendee_query_repo: IAttendeeQueryRepo = Depends(Provide[Container.attendee_query_repo]),
    ) -> Self:
        return cls(
            registration_query_repo=registration_query_repo,
            customer_query_repo=customer_query_repo,
            event_query_repo=event_query_repo,
            attendee_query_repo=attendee_query_repo,
        )

    async def _owned_registration(
        self, *, registration_id: str, user_id: str
    ) -> tuple[RegistrationEntity, CustomerEntity]:
        registration = await self.registration_query_repo.get_by_id(
            registration_id=registration_id
        )
        if registration is None:
            raise NotFoundError(f'Registration not found: {registration_id}')

        customer = await self.customer_query_repo.get_by_id(customer_id=registration.customer_id)
        if customer is None or customer.user_id != user_id:
            raise ForbiddenError('Registration belongs to another user')
        return registration, customer

    @Logger.io
    async def list_guests(self, *, registration_id: str, user_id: str) -> List[GuestEntity]:
        await self._owned_registration(registration_id=registration_id, user_id=user_id)
        return await self.attendee_query_repo.list_guests_for_registration(
            registration_id=registration_id
        )

    @Logger.io
    async def load(self, *, registration_id: str, user_id: str) -> RegistrationLoadData:
        registration, customer = await self._owned_registration(
            registration_id=registration_id, user_id=user_id
        )

        event = await self.event_query_repo.get_by_id(event_id=registration.parent_event_id)
        if event is None:
            Logger.base.warning(
                f'⚠️ [REGISTRATION] Event {registration.parent_event_id} of '
                f'registration {registration_id} not found'
            )

        mason = await self.attendee_query_repo.get_mason_by_customer_id(customer_id=customer.id)
        guests = await self.attendee_query_repo.list_guests_for_registration(
            registration_id=registration_id
        )
        partners = await self.attendee_query_repo.list_partners_of(
            mason_ids=[mason.id] if mason else [],
            guest_ids=[g.id for g in guests],
        )
        lady_partners = [p for p in partners if p.related_mason_id]
        guest_partners = [p for p in partners if not p.related_mason_id]

        attendee_ids = [mason.id] if mason else []
        attendee_ids += [g.id for g in (*guests, *partners)]
        tickets = self._tickets_by_attendee(
            await self.attendee_query_repo.list_ticket_assignments(attendee_ids=attendee_ids)
        )

        order = [
            AttendeeOrderItem(g.id, attendee_type, g.created_at)
            for attendee_type, group in (
                (AttendeeType.GUEST, guests),
                (AttendeeType.LADY_PARTNER, lady_partners),
                (AttendeeType.GUEST_PARTNER, guest_partners),
            )
            for g in group
        ]
        if mason:
            order.append(AttendeeOrderItem(mason.id, AttendeeType.MASON, mason.created_at))
        order.sort(key=lambda item: item.created_at or _UNDATED)

        Logger.base.info(
            f'📝 [REGISTRATION] Loaded {registration_id} with {len(order)} attendees'
        )
        return RegistrationLoadData(
            registration=registration,
            customer=customer,
            event=event,
            masons=[LoadedMason(mason, is_primary=True, ticket=tickets.get(mason.id))]
            if mason
            else [],
            guests=[LoadedGuest(g, tickets.get(g.id)) for g in guests],
            lady_partners=[LoadedGuest(p, tickets.get(p.id)) for p in lady_partners],
            guest_partners=[LoadedGuest(p, tickets.get(p.id)) for p in guest_partners],
            attendee_add_order=order,
        )

    @staticmethod
    def _tickets_by_attendee(
        assignments: List[TicketAssignment],
    ) -> Dict[str, AttendeeTicket]:
        grouped: Dict[str, List[TicketAssignment]] = defaultdict(list)
        for assignment in assignments:
            grouped[assignment.attendee_id].append(assignment)

        tickets = {}
        for attendee_id, rows in grouped.items():
            ticket = AttendeeTicket.from_assignments(rows)
            if ticket is not None:
                tickets[attendee_id] = ticket
        return tickets
