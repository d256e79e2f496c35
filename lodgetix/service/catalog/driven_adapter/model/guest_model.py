from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, String, func
from sqlalchemy.orm import Mapped, mapped_column

from lodgetix.platform.database.orm_db_setting import Base


class GuestModel(Base):
    __tablename__ = 'guests'

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    guest_type: Mapped[str] = mapped_column(String(16), index=True, nullable=False)
    title: Mapped[Optional[str]] = mapped_column(String(64))
    first_name: Mapped[Optional[str]] = mapped_column(String(255))
    last_name: Mapped[Optional[str]] = mapped_column(String(255))
    email: Mapped[Optional[str]] = mapped_column(String(255))
    phone: Mapped[Optional[str]] = mapped_column(String(64))
    dietary_requirements: Mapped[Optional[str]] = mapped_column(String(512))
    special_needs: Mapped[Optional[str]] = mapped_column(String(512))
    partner_relationship: Mapped[Optional[str]] = mapped_column(String(64))
    contact_preference: Mapped[Optional[str]] = mapped_column(String(64))
    contact_confirmed: Mapped[Optional[bool]] = mapped_column(Boolean, default=False)
    related_mason_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey('masons.id'), index=True
    )
    related_guest_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey('guests.id'), index=True
    )
    customer_id: Mapped[Optional[str]] = mapped_column(String(36), ForeignKey('customers.id'))
    registration_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey('registrations.id'), index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
