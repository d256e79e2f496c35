from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr


class CustomerProfileFields(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    business_name: Optional[str] = None
    address_line1: Optional[str] = None
    address_line2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None


class CustomerCreateRequest(CustomerProfileFields):
    email: EmailStr

    class Config:
        json_schema_extra = {
            'example': {
                'email': 'brother@lodge.org',
                'first_name': 'John',
                'last_name': 'Smith',
                'phone': '0400 000 000',
                'city': 'Sydney',
                'country': 'Australia',
            }
        }


class CustomerUpdateRequest(CustomerProfileFields):
    email: Optional[EmailStr] = None


class CustomerResponse(CustomerProfileFields):
    id: str
    user_id: str
    email: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CustomerIdResponse(BaseModel):
    customer_id: Optional[str] = None
