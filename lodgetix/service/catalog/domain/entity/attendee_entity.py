from datetime import datetime
from typing import Optional

import attrs

from lodgetix.service.catalog.domain.enum.guest_type import GuestType


# Placeholder option of the contact preference dropdown
CONTACT_PREFERENCE_UNSET = 'Please Select'


def normalize_contact_preference(value: Optional[str]) -> Optional[str]:
    """`Directly` -> `directly`; the unselected placeholder and blanks become None"""
    if value is None or not value.strip() or value == CONTACT_PREFERENCE_UNSET:
        return None
    return value.strip().lower()


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value if value.strip() else None


@attrs.define
class MasonEntity:
    """Masonic details of the customer who registers"""

    customer_id: str
    title: Optional[str] = attrs.field(default=None, converter=_blank_to_none)
    first_name: Optional[str] = attrs.field(default=None, converter=_blank_to_none)
    last_name: Optional[str] = attrs.field(default=None, converter=_blank_to_none)
    email: Optional[str] = attrs.field(default=None, converter=_blank_to_none)
    phone: Optional[str] = attrs.field(default=None, converter=_blank_to_none)
    dietary_requirements: Optional[str] = attrs.field(default=None, converter=_blank_to_none)
    special_needs: Optional[str] = attrs.field(default=None, converter=_blank_to_none)
    rank: Optional[str] = None
    grand_rank: Optional[str] = None
    grand_officer: Optional[str] = None
    grand_office: Optional[str] = None
    grand_office_other: Optional[str] = None
    grand_lodge_id: Optional[str] = None
    lodge_id: Optional[str] = None
    lodge_name: Optional[str] = None
    lodge_number: Optional[str] = None
    id: Optional[str] = None
    created_at: Optional[datetime] = None


# Columns a mason save may write; `customer_id` is fixed by the owner
MASON_DETAIL_FIELDS = (
    'title',
    'first_name',
    'last_name',
    'email',
    'phone',
    'dietary_requirements',
    'special_needs',
    'rank',
    'grand_rank',
    'grand_officer',
    'grand_office',
    'grand_office_other',
    'grand_lodge_id',
    'lodge_id',
)


@attrs.define
class GuestEntity:
    """
    A non-mason attendee. Partners hang off a mason (`related_mason_id`) or
    another guest (`related_guest_id`); standard guests belong to a
    registration.
    """

    guest_type: GuestType
    title: Optional[str] = attrs.field(default=None, converter=_blank_to_none)
    first_name: Optional[str] = attrs.field(default=None, converter=_blank_to_none)
    last_name: Optional[str] = attrs.field(default=None, converter=_blank_to_none)
    email: Optional[str] = attrs.field(default=None, converter=_blank_to_none)
    phone: Optional[str] = attrs.field(default=None, converter=_blank_to_none)
    dietary_requirements: Optional[str] = attrs.field(default=None, converter=_blank_to_none)
    special_needs: Optional[str] = attrs.field(default=None, converter=_blank_to_none)
    partner_relationship: Optional[str] = attrs.field(default=None, converter=_blank_to_none)
    contact_preference: Optional[str] = attrs.field(
        default=None, converter=normalize_contact_preference
    )
    contact_confirmed: bool = False
    related_mason_id: Optional[str] = None
    related_guest_id: Optional[str] = None
    customer_id: Optional[str] = None
    registration_id: Optional[str] = None
    id: Optional[str] = None
    created_at: Optional[datetime] = None
