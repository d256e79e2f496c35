from datetime import datetime
from typing import Optional

import attrs

from lodgetix.service.catalog.domain.enum.payment_status import PaymentStatus


def _validate_required(instance: object, attribute: attrs.Attribute, value: str) -> None:
    if not value or not value.strip():
        raise ValueError(f'Registration {attribute.name} cannot be empty')


@attrs.define
class RegistrationEntity:
    registration_type: str = attrs.field(validator=_validate_required)
    parent_event_id: str = attrs.field(validator=_validate_required)
    customer_id: str = attrs.field(validator=_validate_required)
    payment_status: PaymentStatus = PaymentStatus.PENDING
    total_price_paid: Optional[float] = None
    agree_to_terms: bool = False
    stripe_payment_intent_id: Optional[str] = None
    id: Optional[str] = None
    created_at: Optional[datetime] = None
