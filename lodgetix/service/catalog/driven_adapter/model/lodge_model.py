from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, String, func
from sqlalchemy.orm import Mapped, mapped_column

from lodgetix.platform.database.orm_db_setting import Base


class LodgeModel(Base):
    __tablename__ = 'lodges'

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    grand_lodge_id: Mapped[str] = mapped_column(
        String(36), ForeignKey('grand_lodges.id'), index=True, nullable=False
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    number: Mapped[Optional[str]] = mapped_column(String(32))
    display_name: Mapped[Optional[str]] = mapped_column(String(255))
    district: Mapped[Optional[str]] = mapped_column(String(255))
    meeting_place: Mapped[Optional[str]] = mapped_column(String(255))
    area_type: Mapped[Optional[str]] = mapped_column(String(64))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
