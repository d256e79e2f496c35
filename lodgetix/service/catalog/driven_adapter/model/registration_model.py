from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, Float, ForeignKey, String, func
from sqlalchemy.orm import Mapped, mapped_column

from lodgetix.platform.database.orm_db_setting import Base


class RegistrationModel(Base):
    __tablename__ = 'registrations'

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    customer_id: Mapped[str] = mapped_column(
        String(36), ForeignKey('customers.id'), index=True, nullable=False
    )
    parent_event_id: Mapped[str] = mapped_column(
        String(36), ForeignKey('events.id'), index=True, nullable=False
    )
    registration_type: Mapped[str] = mapped_column(String(32), nullable=False)
    payment_status: Mapped[str] = mapped_column(String(20), default='pending', nullable=False)
    total_price_paid: Mapped[Optional[float]] = mapped_column(Float)
    agree_to_terms: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    stripe_payment_intent_id: Mapped[Optional[str]] = mapped_column(String(255))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
