from datetime import datetime
from typing import Optional

import attrs


@attrs.define
class CustomerEntity:
    """Billing profile linked to an auth user"""

    user_id: str
    email: str
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
    id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# Columns a profile update may never touch
CUSTOMER_IMMUTABLE_FIELDS = frozenset({'id', 'user_id', 'created_at'})
