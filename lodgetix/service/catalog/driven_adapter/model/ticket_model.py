from typing import Optional

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from lodgetix.platform.database.orm_db_setting import Base


class TicketModel(Base):
    """
    Read-only view of the assignment columns of `tickets`. The table belongs to
    the reservation backend; its legacy columns have no underscores.
    """

    __tablename__ = 'tickets'

    ticket_id: Mapped[str] = mapped_column('ticketid', String(36), primary_key=True)
    event_id: Mapped[str] = mapped_column('eventid', String(36), nullable=False)
    ticket_definition_id: Mapped[Optional[str]] = mapped_column('ticketdefinitionid', String(36))
    attendee_id: Mapped[Optional[str]] = mapped_column('attendeeid', String(36), index=True)
    status: Mapped[Optional[str]] = mapped_column(String(20))
