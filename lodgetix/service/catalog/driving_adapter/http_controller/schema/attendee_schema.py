from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from lodgetix.service.catalog.domain.enum.guest_type import GuestType


class AttendeeContactFields(BaseModel):
    title: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    dietary_requirements: Optional[str] = None
    special_needs: Optional[str] = None


class MasonDetailsRequest(AttendeeContactFields):
    rank: Optional[str] = None
    grand_rank: Optional[str] = None
    grand_officer: Optional[str] = None
    grand_office: Optional[str] = None
    grand_office_other: Optional[str] = None
    grand_lodge_id: Optional[str] = None
    lodge_id: Optional[str] = None

    class Config:
        json_schema_extra = {
            'example': {
                'title': 'W Bro',
                'first_name': 'John',
                'last_name': 'Smith',
                'rank': 'MM',
                'lodge_id': '0196a4f1-7a3c-7d2e-9b1a-3f5c2d8e4a10',
            }
        }


class MasonResponse(MasonDetailsRequest):
    id: str
    customer_id: str
    lodge_name: Optional[str] = None
    lodge_number: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class GuestDetailsRequest(AttendeeContactFields):
    # `Please Select` (the unselected dropdown) is stored as no preference
    contact_preference: Optional[str] = None
    contact_confirmed: bool = False


class PartnerRequest(GuestDetailsRequest):
    partner_relationship: Optional[str] = None
    # Partner record to update; the mason's current partner when omitted
    guest_id: Optional[str] = None

    class Config:
        json_schema_extra = {
            'example': {
                'title': 'Mrs',
                'first_name': 'Jane',
                'last_name': 'Smith',
                'partner_relationship': 'Wife',
                'contact_preference': 'Directly',
                'email': 'jane@example.org',
            }
        }


class GuestRequest(GuestDetailsRequest):
    registration_id: Optional[str] = None


class GuestResponse(GuestDetailsRequest):
    id: str
    guest_type: GuestType
    partner_relationship: Optional[str] = None
    related_mason_id: Optional[str] = None
    related_guest_id: Optional[str] = None
    customer_id: Optional[str] = None
    registration_id: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
