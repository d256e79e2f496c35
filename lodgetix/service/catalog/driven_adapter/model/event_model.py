from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, DateTime, Float, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lodgetix.platform.database.orm_db_setting import Base

if TYPE_CHECKING:
    from lodgetix.service.catalog.driven_adapter.model.event_capacity_model import (
        EventCapacityModel,
    )


class EventModel(Base):
    __tablename__ = 'events'

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    slug: Mapped[Optional[str]] = mapped_column(String(255), unique=True, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    event_start: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), index=True)
    event_end: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    location: Mapped[Optional[str]] = mapped_column(String(255))
    type: Mapped[Optional[str]] = mapped_column(String(64), index=True)
    price: Mapped[Optional[float]] = mapped_column(Float)
    max_attendees: Mapped[Optional[int]] = mapped_column('maxAttendees', Integer)
    image_url: Mapped[Optional[str]] = mapped_column('imageUrl', String(512))
    featured: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_multi_day: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_purchasable_individually: Mapped[bool] = mapped_column(
        Boolean, default=True, nullable=False
    )
    parent_event_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey('events.id'), index=True
    )
    display_scope_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey('display_scopes.id')
    )
    status: Mapped[str] = mapped_column(String(20), default='draft', nullable=False)
    latitude: Mapped[Optional[float]] = mapped_column(Float)
    longitude: Mapped[Optional[float]] = mapped_column(Float)
    event_includes: Mapped[Optional[str]] = mapped_column(Text)
    important_information: Mapped[Optional[str]] = mapped_column(Text)
    featured_image_url: Mapped[Optional[str]] = mapped_column(String(512))
    inclusions: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    # Relationships
    capacity: Mapped[Optional['EventCapacityModel']] = relationship(
        'EventCapacityModel', uselist=False, lazy='selectin'
    )
