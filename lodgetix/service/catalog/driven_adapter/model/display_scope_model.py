from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from lodgetix.platform.database.orm_db_setting import Base


class DisplayScopeModel(Base):
    __tablename__ = 'display_scopes'

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
