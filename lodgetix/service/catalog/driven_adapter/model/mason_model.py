from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lodgetix.platform.database.orm_db_setting import Base
from lodgetix.service.catalog.driven_adapter.model.lodge_model import LodgeModel


class MasonModel(Base):
    __tablename__ = 'masons'

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    customer_id: Mapped[str] = mapped_column(
        String(36), ForeignKey('customers.id'), unique=True, index=True, nullable=False
    )
    title: Mapped[Optional[str]] = mapped_column(String(64))
    first_name: Mapped[Optional[str]] = mapped_column(String(255))
    last_name: Mapped[Optional[str]] = mapped_column(String(255))
    email: Mapped[Optional[str]] = mapped_column(String(255))
    phone: Mapped[Optional[str]] = mapped_column(String(64))
    dietary_requirements: Mapped[Optional[str]] = mapped_column(String(512))
    special_needs: Mapped[Optional[str]] = mapped_column(String(512))
    rank: Mapped[Optional[str]] = mapped_column(String(64))
    grand_rank: Mapped[Optional[str]] = mapped_column(String(64))
    grand_officer: Mapped[Optional[str]] = mapped_column(String(64))
    grand_office: Mapped[Optional[str]] = mapped_column(String(128))
    grand_office_other: Mapped[Optional[str]] = mapped_column(String(128))
    grand_lodge_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey('grand_lodges.id')
    )
    lodge_id: Mapped[Optional[str]] = mapped_column(String(36), ForeignKey('lodges.id'))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    # Relationships
    lodge: Mapped[Optional[LodgeModel]] = relationship(
        'LodgeModel', uselist=False, lazy='selectin'
    )
