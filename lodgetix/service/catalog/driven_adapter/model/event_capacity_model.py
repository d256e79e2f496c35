from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from lodgetix.platform.database.orm_db_setting import Base


class EventCapacityModel(Base):
    __tablename__ = 'event_capacity'

    event_id: Mapped[str] = mapped_column(String(36), ForeignKey('events.id'), primary_key=True)
    total_capacity: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    confirmed_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    reserved_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    available_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
