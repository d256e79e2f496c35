from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest

from lodgetix.platform.exception.exceptions import DomainError, ForbiddenError, NotFoundError
from lodgetix.service.catalog.app.command.create_lodge_use_case import CreateLodgeUseCase
from lodgetix.service.catalog.app.command.save_attendee_use_case import SaveAttendeeUseCase
from lodgetix.service.catalog.app.dto import TicketAssignment
from lodgetix.service.catalog.app.interface.i_attendee_command_repo import IAttendeeCommandRepo
from lodgetix.service.catalog.app.interface.i_attendee_query_repo import IAttendeeQueryRepo
from lodgetix.service.catalog.app.interface.i_customer_query_repo import ICustomerQueryRepo
from lodgetix.service.catalog.app.interface.i_event_query_repo import IEventQueryRepo
from lodgetix.service.catalog.app.interface.i_lodge_command_repo import ILodgeCommandRepo
from lodgetix.service.catalog.app.interface.i_lodge_query_repo import ILodgeQueryRepo
from lodgetix.service.catalog.app.interface.i_registration_query_repo import (
    IRegistrationQueryRepo,
)
from lodgetix.service.catalog.app.query.get_attendee_use_case import GetAttendeeUseCase
from lodgetix.service.catalog.app.query.list_lodges_use_case import ListLodgesUseCase
from lodgetix.service.catalog.app.query.load_registration_use_case import (
    LoadRegistrationUseCase,
)
from lodgetix.service.catalog.domain.entity.attendee_entity import (
    GuestEntity,
    MasonEntity,
    normalize_contact_preference,
)
from lodgetix.service.catalog.domain.entity.customer_entity import CustomerEntity
from lodgetix.service.catalog.domain.entity.event_entity import EventEntity
from lodgetix.service.catalog.domain.entity.lodge_entity import LodgeEntity, lodge_display_name
from lodgetix.service.catalog.domain.entity.registration_entity import RegistrationEntity
from lodgetix.service.catalog.domain.enum.attendee_type import AttendeeType
from lodgetix.service.catalog.domain.enum.guest_type import GuestType


def _at(day: int) -> datetime:
    return datetime(2025, 1, day, tzinfo=timezone.utc)


@pytest.fixture
def customer_query_repo() -> AsyncMock:
    repo = AsyncMock(spec=ICustomerQueryRepo)
    repo.get_by_user_id.return_value = CustomerEntity(
        id='C1', user_id='user-1', email='ann@example.org'
    )
    return repo


@pytest.fixture
def attendee_query_repo() -> AsyncMock:
    return AsyncMock(spec=IAttendeeQueryRepo)


@pytest.fixture
def attendee_command_repo() -> AsyncMock:
    repo = AsyncMock(spec=IAttendeeCommandRepo)
    repo.create_guest.side_effect = lambda *, guest: GuestEntity(
        **{**_fields(guest), 'id': 'G-new'}
    )
    repo.update_guest.side_effect = lambda *, guest_id, guest: GuestEntity(
        **{**_fields(guest), 'id': guest_id}
    )
    return repo


def _fields(guest: GuestEntity) -> dict:
    return {
        'guest_type': guest.guest_type,
        'first_name': guest.first_name,
        'contact_preference': guest.contact_preference,
        'related_mason_id': guest.related_mason_id,
        'customer_id': guest.customer_id,
        'registration_id': guest.registration_id,
    }


@pytest.fixture
def save_use_case(attendee_query_repo, attendee_command_repo, customer_query_repo):
    return SaveAttendeeUseCase(
        attendee_query_repo=attendee_query_repo,
        attendee_command_repo=attendee_command_repo,
        customer_query_repo=customer_query_repo,
    )


@pytest.mark.unit
class TestContactPreference:
    @pytest.mark.parametrize(
        'value,expected',
        [
            ('Directly', 'directly'),
            (' PrimaryAttendee ', 'primaryattendee'),
            ('Please Select', None),
            ('   ', None),
            (None, None),
        ],
    )
    def test_normalize(self, value, expected):
        assert normalize_contact_preference(value) == expected

    def test_guest_entity_normalizes_on_construction(self):
        guest = GuestEntity(guest_type=GuestType.GUEST, contact_preference='Please Select')

        assert guest.contact_preference is None


@pytest.mark.unit
class TestSaveMason:
    @pytest.mark.asyncio
    async def test_first_save_creates_the_mason(
        self, save_use_case, attendee_query_repo, attendee_command_repo
    ):
        attendee_query_repo.get_mason_by_customer_id.return_value = None
        attendee_command_repo.create_mason.side_effect = lambda *, mason: mason

        mason = await save_use_case.save_mason(
            user_id='user-1',
            details={'first_name': 'John', 'rank': 'MM', 'customer_id': 'C-other'},
        )

        assert mason.customer_id == 'C1'
        assert mason.first_name == 'John'
        attendee_command_repo.update_mason.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_later_save_updates_only_detail_fields(
        self, save_use_case, attendee_query_repo, attendee_command_repo
    ):
        attendee_query_repo.get_mason_by_customer_id.return_value = MasonEntity(
            customer_id='C1', id='M1'
        )
        attendee_command_repo.update_mason.return_value = MasonEntity(
            customer_id='C1', id='M1', rank='MM'
        )

        await save_use_case.save_mason(
            user_id='user-1', details={'rank': 'MM', 'customer_id': 'C-other'}
        )

        attendee_command_repo.update_mason.assert_awaited_once_with(
            customer_id='C1', changes={'rank': 'MM'}
        )
        attendee_command_repo.create_mason.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_user_without_customer_is_not_found(self, save_use_case, customer_query_repo):
        customer_query_repo.get_by_user_id.return_value = None

        with pytest.raises(NotFoundError, match='Customer not found'):
            await save_use_case.save_mason(user_id='user-1', details={})


@pytest.mark.unit
class TestSavePartner:
    @pytest.mark.asyncio
    async def test_existing_partner_is_updated_not_duplicated(
        self, save_use_case, attendee_query_repo, attendee_command_repo
    ):
        attendee_query_repo.get_mason.return_value = MasonEntity(customer_id='C1', id='M1')
        attendee_query_repo.get_partner_for_mason.return_value = GuestEntity(
            guest_type=GuestType.PARTNER, related_mason_id='M1', id='P1'
        )

        partner = await save_use_case.save_partner(
            user_id='user-1',
            mason_id='M1',
            partner=GuestEntity(
                guest_type=GuestType.GUEST, first_name='Jane', customer_id='C1'
            ),
        )

        assert partner.id == 'P1'
        assert partner.guest_type == GuestType.PARTNER
        assert partner.related_mason_id == 'M1'
        assert partner.customer_id is None
        attendee_command_repo.create_guest.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_first_partner_is_created(
        self, save_use_case, attendee_query_repo, attendee_command_repo
    ):
        attendee_query_repo.get_mason.return_value = MasonEntity(customer_id='C1', id='M1')
        attendee_query_repo.get_partner_for_mason.return_value = None

        partner = await save_use_case.save_partner(
            user_id='user-1',
            mason_id='M1',
            partner=GuestEntity(guest_type=GuestType.PARTNER, first_name='Jane'),
        )

        assert partner.id == 'G-new'
        attendee_command_repo.update_guest.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_partner_of_another_mason_is_forbidden(
        self, save_use_case, attendee_query_repo, attendee_command_repo
    ):
        attendee_query_repo.get_mason.return_value = MasonEntity(customer_id='C1', id='M1')
        attendee_query_repo.get_guest.return_value = GuestEntity(
            guest_type=GuestType.GUEST, customer_id='C1', id='G2'
        )

        with pytest.raises(ForbiddenError, match='not the partner of this mason'):
            await save_use_case.save_partner(
                user_id='user-1',
                mason_id='M1',
                partner=GuestEntity(guest_type=GuestType.PARTNER),
                guest_id='G2',
            )
        attendee_command_repo.update_guest.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_mason_of_another_customer_is_forbidden(
        self, save_use_case, attendee_query_repo
    ):
        attendee_query_repo.get_mason.return_value = MasonEntity(customer_id='C2', id='M9')

        with pytest.raises(ForbiddenError):
            await save_use_case.save_partner(
                user_id='user-1',
                mason_id='M9',
                partner=GuestEntity(guest_type=GuestType.PARTNER),
            )


@pytest.mark.unit
class TestSaveGuest:
    @pytest.mark.asyncio
    async def test_new_guest_belongs_to_the_callers_customer(
        self, save_use_case, attendee_command_repo
    ):
        guest = await save_use_case.save_guest(
            user_id='user-1',
            guest=GuestEntity(
                guest_type=GuestType.PARTNER,
                customer_id='C-other',
                related_mason_id='M9',
                registration_id='R1',
            ),
        )

        assert guest.guest_type == GuestType.GUEST
        assert guest.customer_id == 'C1'
        assert guest.related_mason_id is None
        assert guest.registration_id == 'R1'

    @pytest.mark.asyncio
    async def test_update_checks_ownership_first(
        self, save_use_case, attendee_query_repo, attendee_command_repo
    ):
        attendee_query_repo.get_guest.return_value = GuestEntity(
            guest_type=GuestType.GUEST, customer_id='C2', id='G9'
        )

        with pytest.raises(ForbiddenError, match='Guest belongs to another customer'):
            await save_use_case.save_guest(
                user_id='user-1', guest=GuestEntity(guest_type=GuestType.GUEST), guest_id='G9'
            )
        attendee_command_repo.update_guest.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_partner_of_own_mason_can_be_deleted(
        self, save_use_case, attendee_query_repo, attendee_command_repo
    ):
        attendee_query_repo.get_guest.return_value = GuestEntity(
            guest_type=GuestType.PARTNER, related_mason_id='M1', id='P1'
        )
        attendee_query_repo.get_mason.return_value = MasonEntity(customer_id='C1', id='M1')
        attendee_command_repo.delete_guest.return_value = True

        await save_use_case.delete_guest(user_id='user-1', guest_id='P1')

        attendee_command_repo.delete_guest.assert_awaited_once_with(guest_id='P1')

    @pytest.mark.asyncio
    async def test_delete_of_missing_guest_is_not_found(
        self, save_use_case, attendee_query_repo
    ):
        attendee_query_repo.get_guest.return_value = None

        with pytest.raises(NotFoundError):
            await save_use_case.delete_guest(user_id='user-1', guest_id='G404')


@pytest.mark.unit
class TestGetAttendee:
    @pytest.mark.asyncio
    async def test_missing_mason_is_not_found(self, attendee_query_repo, customer_query_repo):
        attendee_query_repo.get_mason_by_customer_id.return_value = None
        use_case = GetAttendeeUseCase(
            attendee_query_repo=attendee_query_repo, customer_query_repo=customer_query_repo
        )

        with pytest.raises(NotFoundError, match='Mason not found'):
            await use_case.get_mason_for_user(user_id='user-1')


@pytest.mark.unit
class TestLodges:
    @pytest.mark.asyncio
    async def test_number_matches_exactly_first(self):
        repo = AsyncMock(spec=ILodgeQueryRepo)
        repo.list_lodges_by_number.return_value = [
            LodgeEntity(grand_lodge_id='GL1', name='Zetland', display_name='Zetland No. 12'),
            LodgeEntity(grand_lodge_id='GL1', name='Alpha', display_name='Alpha No. 12'),
        ]

        lodges = await ListLodgesUseCase(repo).list_lodges(grand_lodge_id='GL1', search_term='12')

        assert [lodge.name for lodge in lodges] == ['Alpha', 'Zetland']
        repo.list_lodges_by_number.assert_awaited_once_with(grand_lodge_id='GL1', number='12')
        repo.search_lodges.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_number_without_match_falls_back_to_search(self):
        repo = AsyncMock(spec=ILodgeQueryRepo)
        repo.list_lodges_by_number.return_value = []
        repo.search_lodges.return_value = []

        await ListLodgesUseCase(repo).list_lodges(grand_lodge_id='GL1', search_term='12')

        repo.search_lodges.assert_awaited_once_with(grand_lodge_id='GL1', search_term='12')

    @pytest.mark.asyncio
    async def test_no_grand_lodge_returns_nothing(self):
        repo = AsyncMock(spec=ILodgeQueryRepo)

        assert await ListLodgesUseCase(repo).list_lodges(grand_lodge_id='') == []
        repo.search_lodges.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_create_derives_display_name(self):
        repo = AsyncMock(spec=ILodgeCommandRepo)
        repo.create.side_effect = lambda *, lodge: lodge

        lodge = await CreateLodgeUseCase(repo).create(
            grand_lodge_id='GL1', name=' Lodge Antiquity ', number=' 1 '
        )

        assert lodge.display_name == 'Lodge Antiquity No. 1'

    @pytest.mark.asyncio
    async def test_create_without_grand_lodge_is_rejected(self):
        repo = AsyncMock(spec=ILodgeCommandRepo)

        with pytest.raises(DomainError, match='Grand lodge is required'):
            await CreateLodgeUseCase(repo).create(grand_lodge_id='', name='Lodge Antiquity')
        repo.create.assert_not_awaited()

    def test_display_name_without_number(self):
        assert lodge_display_name('Lodge Antiquity', None) == 'Lodge Antiquity'


@pytest.mark.unit
class TestLoadRegistration:
    @pytest.fixture
    def registration_query_repo(self) -> AsyncMock:
        repo = AsyncMock(spec=IRegistrationQueryRepo)
        repo.get_by_id.return_value = RegistrationEntity(
            registration_type='individuals', parent_event_id='E1', customer_id='C1', id='R1'
        )
        return repo

    @pytest.fixture
    def load_use_case(
        self, registration_query_repo, customer_query_repo, attendee_query_repo
    ) -> LoadRegistrationUseCase:
        customer_query_repo.get_by_id.return_value = CustomerEntity(
            id='C1', user_id='user-1', email='ann@example.org'
        )
        event_query_repo = AsyncMock(spec=IEventQueryRepo)
        event_query_repo.get_by_id.return_value = EventEntity(id='E1', title='GI', slug='gi')
        return LoadRegistrationUseCase(
            registration_query_repo=registration_query_repo,
            customer_query_repo=customer_query_repo,
            event_query_repo=event_query_repo,
            attendee_query_repo=attendee_query_repo,
        )

    @pytest.mark.asyncio
    async def test_attendees_are_grouped_and_ordered(self, load_use_case, attendee_query_repo):
        attendee_query_repo.get_mason_by_customer_id.return_value = MasonEntity(
            customer_id='C1', id='M1', created_at=_at(2)
        )
        attendee_query_repo.list_guests_for_registration.return_value = [
            GuestEntity(guest_type=GuestType.GUEST, id='G1', created_at=_at(1))
        ]
        attendee_query_repo.list_partners_of.return_value = [
            GuestEntity(guest_type=GuestType.PARTNER, related_mason_id='M1', id='P1'),
            GuestEntity(
                guest_type=GuestType.PARTNER, related_guest_id='G1', id='P2', created_at=_at(3)
            ),
        ]
        attendee_query_repo.list_ticket_assignments.return_value = [
            TicketAssignment('M1', 'TD1', 'E2'),
            TicketAssignment('M1', 'TD1', 'E3'),
            TicketAssignment('G1', None, 'E2'),
        ]

        data = await load_use_case.load(registration_id='R1', user_id='user-1')

        assert data.event.id == 'E1'
        assert data.masons[0].is_primary
        assert data.masons[0].ticket.ticket_definition_id == 'TD1'
        assert data.masons[0].ticket.event_ids == ['E2', 'E3']
        assert data.guests[0].ticket is None
        assert [p.guest.id for p in data.lady_partners] == ['P1']
        assert [p.guest.id for p in data.guest_partners] == ['P2']
        assert [(i.attendee_id, i.attendee_type) for i in data.attendee_add_order] == [
            ('G1', AttendeeType.GUEST),
            ('M1', AttendeeType.MASON),
            ('P2', AttendeeType.GUEST_PARTNER),
            ('P1', AttendeeType.LADY_PARTNER),
        ]
        attendee_query_repo.list_partners_of.assert_awaited_once_with(
            mason_ids=['M1'], guest_ids=['G1']
        )

    @pytest.mark.asyncio
    async def test_registration_of_another_user_is_forbidden(
        self, load_use_case, customer_query_repo, attendee_query_repo
    ):
        customer_query_repo.get_by_id.return_value = CustomerEntity(
            id='C1', user_id='user-2', email='bob@example.org'
        )

        with pytest.raises(ForbiddenError, match='Registration belongs to another user'):
            await load_use_case.load(registration_id='R1', user_id='user-1')
        attendee_query_repo.get_mason_by_customer_id.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_registration_is_not_found(
        self, load_use_case, registration_query_repo
    ):
        registration_query_repo.get_by_id.return_value = None

        with pytest.raises(NotFoundError):
            await load_use_case.list_guests(registration_id='R404', user_id='user-1')
