from datetime import date, datetime
from typing import Optional

from sqlalchemy import Date, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from lodgetix.platform.database.orm_db_setting import Base


class EventDayModel(Base):
    __tablename__ = 'event_days'

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    event_id: Mapped[Optional[str]] = mapped_column(String(36), ForeignKey('events.id'))
    event_date: Mapped[date] = mapped_column('date', Date, index=True, nullable=False)
    day_number: Mapped[int] = mapped_column(Integer, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    featured_events_summary: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
